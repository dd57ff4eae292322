import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from edutrack.core.constants import RelationshipType, UserRole
from edutrack.crud import profile as crud_profile
from edutrack.crud.relationship import parent_child_relationship as crud_relationship
from edutrack.crud.user import user as crud_user
from edutrack.utils import deps
from tests.helpers.asserts import api_call, assert_error
from tests.helpers.identity import FailingIdentityProvider

import main

USERS = "/api/users"


def student_payload(school_id: str, **overrides):
    payload = {
        "role": "STUDENT",
        "schoolId": school_id,
        "firstName": "Jane",
        "lastName": "Doe",
        "email": "jane@x.com",
    }
    payload.update(overrides)
    return payload


# Self-registration

def test_self_registration_creates_active_user_with_empty_profile(client: TestClient, db_session: Session, session_stub, identity_provider, school):
    session_stub.identity_id = "user_jane"

    body = api_call(client, "POST", USERS, json=student_payload(school.id), expected=201)

    assert body["user"]["isActive"] is True
    assert body["user"]["clerkId"] == "user_jane"
    assert body["user"]["role"] == "STUDENT"
    user = crud_user.get_by_clerk_id(db_session, clerk_id="user_jane")
    assert user.is_active is True
    profile = crud_profile.student_profile.get(db_session, id=user.id)
    assert profile is not None
    assert profile.grade is None
    assert profile.date_of_birth is None
    assert profile.student_id_number is None
    assert profile.emergency_contact is None
    assert profile.medical_info is None
    assert profile.address is None
    # School has no organization, so nothing is synced
    assert identity_provider.memberships == []
    assert identity_provider.metadata == {}


def test_self_registration_unknown_school_returns_404(client: TestClient, session_stub, count_rows):
    session_stub.identity_id = "user_jane"

    body = api_call(client, "POST", USERS, json=student_payload("missing-school"), expected=404)

    assert_error(body, "NOT_FOUND")
    assert body["error"]["message"] == "School not found"
    assert count_rows()["users"] == 0


def test_self_registration_syncs_identity_provider(client: TestClient, session_stub, identity_provider, school_factory):
    school = school_factory(name="Hillcrest", clerk_organization_id="org_hill")
    session_stub.identity_id = "user_sam"

    api_call(
        client, "POST", USERS,
        json=student_payload(school.id, email="sam@x.com", firstName="Sam", grade="7"),
        expected=201,
    )

    assert identity_provider.memberships == [("org_hill", "user_sam", "org:member")]
    metadata = identity_provider.metadata["user_sam"]
    assert metadata["role"] == "STUDENT"
    assert metadata["schoolId"] == school.id
    assert metadata["schoolName"] == "Hillcrest"
    assert metadata["organizationId"] == "org_hill"
    assert metadata["isActive"] is True
    assert metadata["grade"] == "7"
    assert "users:read" in metadata["permissions"]


def test_principal_self_registration_gets_admin_org_role(client: TestClient, session_stub, identity_provider, school_factory):
    school = school_factory(clerk_organization_id="org_admins")
    session_stub.identity_id = "user_boss"

    api_call(
        client, "POST", USERS,
        json=student_payload(school.id, role="PRINCIPAL", email="boss@x.com"),
        expected=201,
    )

    assert identity_provider.memberships == [("org_admins", "user_boss", "org:admin")]


def test_identity_provider_failure_does_not_block_registration(client: TestClient, db_session: Session, session_stub, school_factory):
    school = school_factory(clerk_organization_id="org_down")
    main.app.dependency_overrides[deps.get_identity_provider] = lambda: FailingIdentityProvider()
    session_stub.identity_id = "user_jane"

    api_call(client, "POST", USERS, json=student_payload(school.id), expected=201)

    user = crud_user.get_by_clerk_id(db_session, clerk_id="user_jane")
    assert user is not None
    assert crud_profile.student_profile.get(db_session, id=user.id) is not None


def test_self_registration_email_taken_by_other_identity_conflicts(client: TestClient, session_stub, user_factory, school, count_rows):
    user_factory(school, UserRole.STUDENT, email="jane@x.com", clerk_id="user_other")
    session_stub.identity_id = "user_jane"
    before = count_rows()

    body = api_call(client, "POST", USERS, json=student_payload(school.id), expected=400)

    assert_error(body, "CONFLICT")
    assert count_rows() == before


def test_registered_identity_cannot_register_again(client: TestClient, session_stub, school):
    session_stub.identity_id = "user_jane"
    api_call(client, "POST", USERS, json=student_payload(school.id), expected=201)

    # Now a known caller who is not a principal
    body = api_call(client, "POST", USERS, json=student_payload(school.id, email="jane2@x.com"), expected=403)
    assert_error(body, "FORBIDDEN")


def test_create_user_requires_session(client: TestClient, school):
    body = api_call(client, "POST", USERS, json=student_payload(school.id), expected=401)
    assert_error(body, "UNAUTHORIZED")


# Role dispatch

@pytest.mark.parametrize("role", ["STUDENT", "TEACHER", "PARENT", "PRINCIPAL"])
def test_profile_dispatch_writes_only_matching_table(client: TestClient, session_stub, school, count_rows, role):
    session_stub.identity_id = f"user_{role.lower()}"

    api_call(client, "POST", USERS, json=student_payload(school.id, role=role, email=f"{role.lower()}@x.com"), expected=201)

    counts = count_rows()
    expected_table = f"{role.lower()}_profiles"
    for table in ("student_profiles", "teacher_profiles", "parent_profiles", "principal_profiles"):
        assert counts[table] == (1 if table == expected_table else 0), counts


def test_teacher_profile_fields_are_persisted(client: TestClient, db_session: Session, session_stub, school):
    session_stub.identity_id = "user_teach"
    payload = student_payload(
        school.id,
        role="TEACHER",
        email="teach@x.com",
        department="Science",
        teacherProfile={"employeeId": "T-100", "hireDate": "2024-08-15", "qualifications": ""},
    )

    api_call(client, "POST", USERS, json=payload, expected=201)

    user = crud_user.get_by_clerk_id(db_session, clerk_id="user_teach")
    profile = crud_profile.teacher_profile.get(db_session, id=user.id)
    assert profile.department == "Science"
    assert profile.employee_id == "T-100"
    assert profile.hire_date.isoformat() == "2024-08-15"
    assert profile.qualifications is None


def test_principal_profile_fields_are_persisted(client: TestClient, db_session: Session, session_stub, school):
    session_stub.identity_id = "user_head"
    payload = student_payload(
        school.id,
        role="PRINCIPAL",
        email="head@x.com",
        principalProfile={"yearsOfExperience": 12, "salary": 85000.5, "administrativeArea": "North"},
    )

    api_call(client, "POST", USERS, json=payload, expected=201)

    user = crud_user.get_by_clerk_id(db_session, clerk_id="user_head")
    profile = crud_profile.principal_profile.get(db_session, id=user.id)
    assert profile.years_of_experience == 12
    assert profile.salary == pytest.approx(85000.5)
    assert profile.administrative_area == "North"
    assert profile.previous_school is None


# Validation

def test_validation_reports_every_issue(client: TestClient, session_stub, school, count_rows):
    session_stub.identity_id = "user_jane"
    payload = student_payload(school.id, role="JANITOR")
    del payload["email"]

    body = api_call(client, "POST", USERS, json=payload, expected=400)

    assert_error(body, "VALIDATION_ERROR")
    fields = {issue["field"] for issue in body["error"]["details"]["issues"]}
    assert {"role", "email"} <= fields
    assert count_rows()["users"] == 0


@pytest.mark.parametrize("overrides,field", [
    ({"email": "not-an-email"}, "email"),
    ({"firstName": "   "}, "firstName"),
    ({"schoolId": ""}, "schoolId"),
    ({"role": "ADMIN"}, "role"),
    ({"role": "PRINCIPAL", "principalProfile": {"yearsOfExperience": 0}}, "principalProfile.yearsOfExperience"),
    ({"role": "PRINCIPAL", "principalProfile": {"salary": -5}}, "principalProfile.salary"),
    ({"role": "PRINCIPAL", "principalProfile": {"salary": 10**10}}, "principalProfile.salary"),
])
def test_invalid_fields_are_rejected(client: TestClient, session_stub, school, overrides, field):
    session_stub.identity_id = "user_jane"

    body = api_call(client, "POST", USERS, json=student_payload(school.id, **overrides), expected=400)

    assert field in {issue["field"] for issue in body["error"]["details"]["issues"]}


@pytest.mark.parametrize("overrides", [
    {"teacherProfile": {"employeeId": "T-1"}},
    {"principalProfile": {"salary": 1000}},
    {"department": "Math"},
    {"role": "TEACHER", "grade": "5"},
])
def test_payload_not_matching_role_is_rejected(client: TestClient, session_stub, school, count_rows, overrides):
    session_stub.identity_id = "user_jane"

    body = api_call(client, "POST", USERS, json=student_payload(school.id, **overrides), expected=400)

    assert_error(body, "VALIDATION_ERROR")
    assert count_rows()["users"] == 0


# Principal-initiated provisioning

def test_principal_provisions_inactive_unclaimed_user(client: TestClient, db_session: Session, session_stub, identity_provider, school, principal):
    session_stub.identity_id = principal.clerk_id
    payload = student_payload(school.id, role="TEACHER", email="newteacher@x.com", department="Art")

    body = api_call(client, "POST", USERS, json=payload, expected=201)

    assert body["user"]["isActive"] is False
    assert body["user"]["clerkId"] is None
    user = crud_user.get_by_email(db_session, email="newteacher@x.com")
    assert user.school_id == school.id
    assert crud_profile.teacher_profile.get(db_session, id=user.id).department == "Art"
    assert identity_provider.memberships == []
    assert identity_provider.metadata == {}


def test_principal_cannot_provision_in_other_school(client: TestClient, session_stub, school_factory, principal, count_rows):
    other = school_factory(name="Other School")
    session_stub.identity_id = principal.clerk_id
    before = count_rows()

    body = api_call(client, "POST", USERS, json=student_payload(other.id, role="TEACHER", email="t@x.com"), expected=403)

    assert_error(body, "FORBIDDEN")
    assert count_rows() == before


def test_non_principal_cannot_provision(client: TestClient, session_stub, user_factory, school, count_rows):
    teacher = user_factory(school, UserRole.TEACHER, clerk_id="user_teacher")
    session_stub.identity_id = teacher.clerk_id
    before = count_rows()

    api_call(client, "POST", USERS, json=student_payload(school.id), expected=403)

    assert count_rows() == before


def test_principal_duplicate_email_conflicts_and_retry_fails_identically(client: TestClient, session_stub, user_factory, school, principal, count_rows):
    user_factory(school, UserRole.TEACHER, email="taken@x.com", clerk_id="user_taken")
    session_stub.identity_id = principal.clerk_id
    before = count_rows()
    payload = student_payload(school.id, role="TEACHER", email="taken@x.com")

    first = api_call(client, "POST", USERS, json=payload, expected=400)
    second = api_call(client, "POST", USERS, json=payload, expected=400)

    assert_error(first, "CONFLICT")
    assert first["error"]["message"] == second["error"]["message"]
    assert count_rows() == before


# Parent/child links

def test_parent_registration_links_existing_student(client: TestClient, db_session: Session, session_stub, user_factory, school):
    child = user_factory(school, UserRole.STUDENT, first_name="Kid", last_name="Doe")
    session_stub.identity_id = "user_parent"
    payload = student_payload(
        school.id,
        role="PARENT",
        email="parent@x.com",
        relationshipUserId=child.id,
        relationshipType="GUARDIAN",
    )

    api_call(client, "POST", USERS, json=payload, expected=201)

    parent = crud_user.get_by_clerk_id(db_session, clerk_id="user_parent")
    link = crud_relationship.get_pair(db_session, parent_id=parent.id, child_id=child.id)
    assert link is not None
    assert link.relationship_type == RelationshipType.GUARDIAN


def test_invalid_relationship_is_skipped(client: TestClient, session_stub, user_factory, school, count_rows):
    teacher = user_factory(school, UserRole.TEACHER)
    session_stub.identity_id = "user_parent"
    payload = student_payload(
        school.id,
        role="PARENT",
        email="parent@x.com",
        relationshipUserId=teacher.id,
        relationshipType="PARENT",
    )

    api_call(client, "POST", USERS, json=payload, expected=201)

    assert count_rows()["relationships"] == 0


# Listing

@pytest.fixture
def directory(user_factory, school_factory, school):
    caller = user_factory(school, UserRole.TEACHER, first_name="Tina", last_name="Teach", email="tina@s1.test", clerk_id="user_tina")
    user_factory(school, UserRole.TEACHER, first_name="John", last_name="Doe", email="john@s1.test")
    user_factory(school, UserRole.TEACHER, first_name="Ann", last_name="Doe", email="ann@s1.test")
    user_factory(school, UserRole.TEACHER, first_name="Zed", last_name="Smith", email="zed@DOE.org")
    user_factory(school, UserRole.TEACHER, first_name="Mary", last_name="Moe", email="mary@s1.test")
    user_factory(school, UserRole.TEACHER, first_name="Old", last_name="Doe", email="old@s1.test", is_active=False)
    user_factory(school, UserRole.STUDENT, first_name="Sam", last_name="Doe", email="sam@s1.test")
    other = school_factory(name="Elsewhere")
    user_factory(other, UserRole.TEACHER, first_name="Far", last_name="Doe", email="far@s2.test")
    return caller


def test_list_filters_by_role_and_search(client: TestClient, session_stub, school, directory):
    session_stub.identity_id = directory.clerk_id

    body = api_call(client, "GET", USERS, params={"role": "TEACHER", "search": "doe"})

    names = [(u["firstName"], u["lastName"]) for u in body["users"]]
    assert names == [("Ann", "Doe"), ("John", "Doe"), ("Zed", "Smith")]
    for listed in body["users"]:
        assert listed["isActive"] is True
        assert listed["school"] == {"id": school.id, "name": "Riverside High"}
        assert listed["teacherProfile"] is not None
        assert listed["studentProfile"] is None
        assert listed["parentProfile"] is None
        assert listed["principalProfile"] is None


def test_list_without_filters_returns_active_school_users(client: TestClient, session_stub, directory):
    session_stub.identity_id = directory.clerk_id

    body = api_call(client, "GET", USERS)

    emails = {u["email"] for u in body["users"]}
    assert "old@s1.test" not in emails
    assert "far@s2.test" not in emails
    assert {"tina@s1.test", "sam@s1.test"} <= emails
    assert len(body["users"]) == 6


@pytest.mark.parametrize("term", ["_", "%", "\\"])
def test_list_search_treats_wildcards_literally(client: TestClient, session_stub, directory, term):
    session_stub.identity_id = directory.clerk_id

    body = api_call(client, "GET", USERS, params={"search": term})

    assert body["users"] == []


def test_list_search_matches_literal_underscore(client: TestClient, session_stub, user_factory, school, directory):
    user_factory(school, UserRole.TEACHER, first_name="Liam", last_name="Obrien", email="o_brien@s1.test")
    session_stub.identity_id = directory.clerk_id

    assert [u["email"] for u in api_call(client, "GET", USERS, params={"search": "o_b"})["users"]] == ["o_brien@s1.test"]
    assert api_call(client, "GET", USERS, params={"search": "o%b"})["users"] == []


def test_list_uses_ordinal_ordering(client: TestClient, session_stub, user_factory, school, principal):
    user_factory(school, UserRole.STUDENT, first_name="a", last_name="baker")
    user_factory(school, UserRole.STUDENT, first_name="b", last_name="Adams")
    user_factory(school, UserRole.STUDENT, first_name="c", last_name="Zulu")
    session_stub.identity_id = principal.clerk_id

    body = api_call(client, "GET", USERS, params={"role": "STUDENT"})

    assert [u["lastName"] for u in body["users"]] == ["Adams", "Zulu", "baker"]


def test_list_forbidden_for_students(client: TestClient, session_stub, user_factory, school):
    student = user_factory(school, UserRole.STUDENT, clerk_id="user_student")
    session_stub.identity_id = student.clerk_id

    body = api_call(client, "GET", USERS, expected=403)
    assert_error(body, "FORBIDDEN")


def test_list_requires_session(client: TestClient):
    api_call(client, "GET", USERS, expected=401)


def test_list_unknown_caller_is_not_found(client: TestClient, session_stub):
    session_stub.identity_id = "user_nobody"
    api_call(client, "GET", USERS, expected=404)


# Current user

def test_read_me_includes_profile_and_permissions(client: TestClient, session_stub, user_factory, school):
    student = user_factory(school, UserRole.STUDENT, first_name="Jane", last_name="Doe", clerk_id="user_jane")
    session_stub.identity_id = student.clerk_id

    body = api_call(client, "GET", f"{USERS}/me")

    me = body["user"]
    assert me["fullName"] == "Jane Doe"
    assert me["school"]["id"] == school.id
    assert me["profile"]["studentId"] == student.id
    assert me["dashboardRoute"] == "/dashboard"
    assert "assignment_submissions:create" in me["permissions"]


def test_update_me_changes_names(client: TestClient, db_session: Session, session_stub, user_factory, school):
    user = user_factory(school, UserRole.PARENT, clerk_id="user_mum")
    session_stub.identity_id = user.clerk_id

    body = api_call(client, "PATCH", f"{USERS}/me", json={"firstName": "Maria", "avatar": "https://img.test/m.png"})

    assert body["user"]["firstName"] == "Maria"
    db_session.refresh(user)
    assert user.first_name == "Maria"
    assert user.avatar == "https://img.test/m.png"


def test_update_me_requires_a_field(client: TestClient, session_stub, user_factory, school):
    user = user_factory(school, UserRole.PARENT, clerk_id="user_mum")
    session_stub.identity_id = user.clerk_id

    api_call(client, "PATCH", f"{USERS}/me", json={}, expected=400)


@pytest.mark.parametrize("field", ["firstName", "lastName"])
def test_update_me_rejects_null_names(client: TestClient, db_session: Session, session_stub, user_factory, school, field):
    user = user_factory(school, UserRole.PARENT, first_name="Mia", last_name="Moss", clerk_id="user_mum")
    session_stub.identity_id = user.clerk_id

    body = api_call(
        client, "PATCH", f"{USERS}/me", json={field: None, "avatar": "https://img.test/a.png"}, expected=400
    )

    assert_error(body, "VALIDATION_ERROR")
    assert field in {issue["field"] for issue in body["error"]["details"]["issues"]}
    db_session.refresh(user)
    assert (user.first_name, user.last_name, user.avatar) == ("Mia", "Moss", None)


def test_update_me_can_clear_avatar(client: TestClient, db_session: Session, session_stub, user_factory, school):
    user = user_factory(school, UserRole.PARENT, clerk_id="user_mum")
    user.avatar = "https://img.test/old.png"
    db_session.commit()
    session_stub.identity_id = user.clerk_id

    api_call(client, "PATCH", f"{USERS}/me", json={"firstName": "Mia", "avatar": None})

    db_session.refresh(user)
    assert user.first_name == "Mia"
    assert user.avatar is None


# Search

def test_search_validates_query(client: TestClient, session_stub, school):
    session_stub.identity_id = "user_anyone"

    api_call(client, "GET", f"{USERS}/search", params={"role": "STUDENT", "search": "do"}, expected=400)
    api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "PRINCIPAL", "search": "do"}, expected=400)
    body = api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "STUDENT", "search": "d"})
    assert body == {"users": []}


def test_search_returns_formatted_matches(client: TestClient, session_stub, user_factory, school):
    kid = user_factory(school, UserRole.STUDENT, first_name="Kid", last_name="Doe", email="kid@s1.test")
    user_factory(school, UserRole.STUDENT, first_name="Gone", last_name="Doe", is_active=False)
    user_factory(school, UserRole.TEACHER, first_name="Teacher", last_name="Doe")
    session_stub.identity_id = "user_new_parent"

    body = api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "STUDENT", "search": "doe"})

    assert body["users"] == [{"id": kid.id, "name": "Kid Doe", "email": "kid@s1.test", "role": "STUDENT"}]


def test_search_caps_results(client: TestClient, session_stub, user_factory, school):
    for i in range(12):
        user_factory(school, UserRole.STUDENT, first_name=f"Pupil{i:02d}", last_name="Lee")
    session_stub.identity_id = "user_new_parent"

    body = api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "STUDENT", "search": "lee"})

    assert len(body["users"]) == 10


def test_search_treats_wildcards_literally(client: TestClient, session_stub, user_factory, school):
    user_factory(school, UserRole.STUDENT, first_name="Kid", last_name="Doe", email="kid@s1.test")
    session_stub.identity_id = "user_new_parent"

    body = api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "STUDENT", "search": "%_"})

    assert body == {"users": []}


def test_registered_user_searches_only_own_school(client: TestClient, session_stub, user_factory, school_factory, school):
    kid = user_factory(school, UserRole.STUDENT, first_name="Kid", last_name="Doe")
    other = school_factory(name="Far Away")
    user_factory(other, UserRole.STUDENT, first_name="Far", last_name="Doe")
    parent = user_factory(school, UserRole.PARENT, clerk_id="user_parent")
    session_stub.identity_id = parent.clerk_id

    own = api_call(client, "GET", f"{USERS}/search", params={"school": school.id, "role": "STUDENT", "search": "doe"})
    assert [u["id"] for u in own["users"]] == [kid.id]

    body = api_call(client, "GET", f"{USERS}/search", params={"school": other.id, "role": "STUDENT", "search": "doe"}, expected=403)
    assert_error(body, "FORBIDDEN")


# Status

def test_principal_deactivates_user_without_deleting(client: TestClient, db_session: Session, session_stub, user_factory, school, principal):
    teacher = user_factory(school, UserRole.TEACHER)
    session_stub.identity_id = principal.clerk_id

    body = api_call(client, "PATCH", f"{USERS}/{teacher.id}/status", json={"isActive": False})

    assert body["user"]["isActive"] is False
    db_session.refresh(teacher)
    assert teacher.is_active is False

    body = api_call(client, "PATCH", f"{USERS}/{teacher.id}/status", json={"isActive": True})
    assert body["user"]["isActive"] is True


def test_principal_cannot_deactivate_self(client: TestClient, session_stub, principal):
    session_stub.identity_id = principal.clerk_id

    api_call(client, "PATCH", f"{USERS}/{principal.id}/status", json={"isActive": False}, expected=400)


def test_status_change_is_school_scoped(client: TestClient, session_stub, user_factory, school_factory, principal):
    outsider = user_factory(school_factory(name="Far Away"), UserRole.TEACHER)
    session_stub.identity_id = principal.clerk_id

    api_call(client, "PATCH", f"{USERS}/{outsider.id}/status", json={"isActive": False}, expected=403)


def test_status_change_requires_principal(client: TestClient, session_stub, user_factory, school):
    teacher = user_factory(school, UserRole.TEACHER, clerk_id="user_teacher")
    student = user_factory(school, UserRole.STUDENT)
    session_stub.identity_id = teacher.clerk_id

    api_call(client, "PATCH", f"{USERS}/{student.id}/status", json={"isActive": False}, expected=403)
