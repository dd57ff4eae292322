from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from edutrack.core.constants import DASHBOARD_ROUTE, SEARCHABLE_ROLES, UserRole
from edutrack.core.exceptions import BadRequestError, ConflictError, ForbiddenError, NotFoundError
from edutrack.crud import profile as crud_profile
from edutrack.crud.profile import CRUDProfile
from edutrack.crud.relationship import parent_child_relationship as crud_relationship
from edutrack.crud.school import school as crud_school
from edutrack.crud.user import user as crud_user
from edutrack.models.relationship import ParentChildRelationship
from edutrack.models.school import School
from edutrack.models.user import User
from edutrack.schemas.profile import (
    ParentProfileIn, ParentProfileOut, PrincipalProfileIn, PrincipalProfileOut,
    StudentProfileIn, StudentProfileOut, TeacherProfileIn, TeacherProfileOut,
)
from edutrack.schemas.user import SchoolSummary, User as UserSchema, UserCreate, UserMe, UserMeUpdate, UserSearchResult
from edutrack.services.identity import IdentitySyncEvent, notify_identity_provider
from edutrack.utils.logger import mask_email, setup_logger
from edutrack.utils.permission import PermissionHelper as permission_helper

logger = setup_logger("user_service", "user_service.log")

SEARCH_MIN_LENGTH = 2
SEARCH_LIMIT = 10


def build_profile(user_in: UserCreate) -> Tuple[CRUDProfile, Dict[str, Any]]:
    """Pick the profile table for ``user_in.role`` and the row to insert into it.

    Every column of the profile is present in the returned data; unsupplied
    attributes are explicit ``None``.
    """
    match user_in.role:
        case UserRole.STUDENT:
            fields = (user_in.student_profile or StudentProfileIn()).model_dump()
            return crud_profile.student_profile, {**fields, "grade": user_in.grade}
        case UserRole.TEACHER:
            fields = (user_in.teacher_profile or TeacherProfileIn()).model_dump()
            return crud_profile.teacher_profile, {**fields, "department": user_in.department}
        case UserRole.PARENT:
            fields = (user_in.parent_profile or ParentProfileIn()).model_dump()
            return crud_profile.parent_profile, fields
        case UserRole.PRINCIPAL:
            fields = (user_in.principal_profile or PrincipalProfileIn()).model_dump()
            return crud_profile.principal_profile, fields
        case _:
            raise ValueError(f"No profile table for role {user_in.role}")


def profile_out(user: User):
    match user.role:
        case UserRole.STUDENT if user.student_profile:
            return StudentProfileOut.model_validate(user.student_profile)
        case UserRole.TEACHER if user.teacher_profile:
            return TeacherProfileOut.model_validate(user.teacher_profile)
        case UserRole.PARENT if user.parent_profile:
            return ParentProfileOut.model_validate(user.parent_profile)
        case UserRole.PRINCIPAL if user.principal_profile:
            return PrincipalProfileOut.model_validate(user.principal_profile)
        case _:
            return None


def identity_metadata(user: User, school: School, *, grade: Optional[str] = None, department: Optional[str] = None) -> Dict[str, Any]:
    metadata = {
        "role": user.role.value,
        "schoolId": school.id,
        "schoolName": school.name,
        "organizationId": school.clerk_organization_id,
        "permissions": permission_helper.permission_strings(user.role),
        "isActive": True,
    }
    if grade:
        metadata["grade"] = grade
    if department:
        metadata["department"] = department
    return metadata


class UserService:

    async def create_user(
        self, db: Session, *, identity_id: str, user_in: UserCreate, identity_provider
    ) -> User:
        """Provision a user and its role profile.

        A caller without a user row is registering themselves; a caller with one
        must be a principal creating an account inside their own school.
        """
        caller = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if caller is None:
            return await self._self_register(
                db, identity_id=identity_id, user_in=user_in, identity_provider=identity_provider
            )
        return self._provision_for_school(db, caller=caller, user_in=user_in)

    async def _self_register(
        self, db: Session, *, identity_id: str, user_in: UserCreate, identity_provider
    ) -> User:
        school = crud_school.get(db, id=user_in.school_id)
        if not school:
            raise NotFoundError("school")

        existing = crud_user.get_by_email(db, email=user_in.email)
        if existing and existing.clerk_id != identity_id:
            raise ConflictError("A user with this email already exists")
        if existing or crud_user.get_by_clerk_id(db, clerk_id=identity_id):
            raise ConflictError("User is already registered")

        user = self._insert_user_with_profile(db, user_in=user_in, clerk_id=identity_id, is_active=True)
        logger.info(f"Self-registered {user.role.value} {mask_email(user.email)} in school {school.id}")

        if school.clerk_organization_id:
            event = IdentitySyncEvent(
                user_id=identity_id,
                organization_id=school.clerk_organization_id,
                org_role=permission_helper.org_role_for(user.role).value,
                metadata=identity_metadata(
                    user, school, grade=user_in.grade, department=user_in.department
                ),
            )
            await notify_identity_provider(identity_provider, event)
        else:
            logger.info(f"School {school.id} has no organization; skipping identity sync for {user.id}")

        self._link_relationship(db, user=user, user_in=user_in)
        return user

    def _provision_for_school(self, db: Session, *, caller: User, user_in: UserCreate) -> User:
        permission_helper.require_principal_of_school(caller, user_in.school_id)

        school = crud_school.get(db, id=user_in.school_id)
        if not school:
            raise NotFoundError("school")

        if crud_user.get_by_email(db, email=user_in.email):
            raise ConflictError("A user with this email already exists")

        # Left unclaimed: no external identity and inactive until the owner signs up
        user = self._insert_user_with_profile(db, user_in=user_in, clerk_id=None, is_active=False)
        logger.info(
            f"Principal {caller.id} provisioned {user.role.value} {mask_email(user.email)} in school {school.id}"
        )

        self._link_relationship(db, user=user, user_in=user_in)
        return user

    def _insert_user_with_profile(
        self, db: Session, *, user_in: UserCreate, clerk_id: Optional[str], is_active: bool
    ) -> User:
        """Write the user row and its profile row in a single transaction."""
        profile_crud, profile_data = build_profile(user_in)
        try:
            user = crud_user.create(
                db,
                obj_in={
                    "clerk_id": clerk_id,
                    "email": user_in.email,
                    "first_name": user_in.first_name,
                    "last_name": user_in.last_name,
                    "role": user_in.role,
                    "school_id": user_in.school_id,
                    "is_active": is_active,
                },
                commit=False,
            )
            profile_crud.create_for_user(db, user_id=user.id, obj_in=profile_data, commit=False)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(f"Unique constraint hit while creating {mask_email(user_in.email)}: {exc.orig}")
            raise ConflictError("A user with this email or identity already exists")
        except Exception:
            db.rollback()
            raise
        db.refresh(user)
        return user

    def _link_relationship(
        self, db: Session, *, user: User, user_in: UserCreate
    ) -> Optional[ParentChildRelationship]:
        """Link a new parent or student to an existing counterpart in the same school."""
        if not (user_in.relationship_user_id and user_in.relationship_type):
            return None

        related = crud_user.get_active_in_school(
            db, user_id=user_in.relationship_user_id, school_id=user.school_id
        )
        if related is None:
            logger.warning(f"Relationship target {user_in.relationship_user_id} not found in school {user.school_id}")
            return None

        if user.role == UserRole.PARENT and related.role == UserRole.STUDENT:
            parent, child = user, related
        elif user.role == UserRole.STUDENT and related.role == UserRole.PARENT:
            parent, child = related, user
        else:
            logger.warning(f"Cannot link {user.role.value} {user.id} to {related.role.value} {related.id}")
            return None

        existing = crud_relationship.get_pair(db, parent_id=parent.id, child_id=child.id)
        if existing:
            return existing
        try:
            return crud_relationship.create(
                db,
                obj_in={
                    "parent_id": parent.id,
                    "child_id": child.id,
                    "relationship_type": user_in.relationship_type,
                },
            )
        except SQLAlchemyError as exc:
            db.rollback()
            logger.warning(f"Failed to link parent {parent.id} to child {child.id}: {exc}")
            return None

    def list_school_users(
        self, db: Session, *, identity_id: str, role: Optional[UserRole] = None, search: Optional[str] = None
    ) -> List[User]:
        caller = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if not caller:
            raise NotFoundError("user")
        permission_helper.require_directory_access(caller)

        search = search.strip() if search else None
        users = crud_user.list_for_school(db, school_id=caller.school_id, role=role, search=search or None)
        # Ordinal ordering regardless of database collation
        return sorted(users, key=lambda u: (u.last_name, u.first_name))

    def search_users(
        self,
        db: Session,
        *,
        identity_id: str,
        school_id: Optional[str],
        role: Optional[str],
        search: Optional[str],
    ) -> List[UserSearchResult]:
        """Name or email lookup inside one school.

        Identities without an account yet (e.g. a parent mid sign-up) may search any
        school; registered users only their own.
        """
        if not school_id:
            raise BadRequestError("School ID is required")
        caller = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if caller and not permission_helper.belongs_to_school(caller, school_id):
            raise ForbiddenError("You can only search users of your own school")
        if role not in {r.value for r in SEARCHABLE_ROLES}:
            raise BadRequestError("Valid role is required")
        if not search or len(search.strip()) < SEARCH_MIN_LENGTH:
            return []

        users = crud_user.search(
            db, school_id=school_id, role=UserRole(role), term=search.strip(), limit=SEARCH_LIMIT
        )
        return [
            UserSearchResult(id=u.id, name=u.full_name, email=u.email, role=u.role)
            for u in users
        ]

    def get_me(self, db: Session, *, identity_id: str) -> UserMe:
        user = crud_user.get_with_relations(db, clerk_id=identity_id)
        if not user:
            raise NotFoundError("user")
        return UserMe(
            **UserSchema.model_validate(user).model_dump(),
            full_name=user.full_name,
            school=SchoolSummary.model_validate(user.school),
            profile=profile_out(user),
            permissions=permission_helper.permission_strings(user.role),
            dashboard_route=DASHBOARD_ROUTE,
        )

    def update_me(self, db: Session, *, identity_id: str, update_in: UserMeUpdate) -> UserMe:
        user = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if not user:
            raise NotFoundError("user")
        crud_user.update(db, db_obj=user, obj_in=update_in.model_dump(exclude_unset=True))
        return self.get_me(db, identity_id=identity_id)

    def set_user_status(
        self, db: Session, *, identity_id: str, user_id: str, is_active: bool
    ) -> User:
        """Soft (de)activation by a principal of the user's school."""
        caller = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if not caller:
            raise NotFoundError("user")
        if not permission_helper.is_principal(caller):
            raise ForbiddenError("Only principals can change account status")

        target = crud_user.get(db, id=user_id)
        if not target:
            raise NotFoundError("user")
        if not permission_helper.belongs_to_school(caller, target.school_id):
            raise ForbiddenError("Principals can only manage users of their own school")
        if target.id == caller.id and not is_active:
            raise BadRequestError("You cannot deactivate your own account")

        updated = crud_user.set_active(db, user=target, is_active=is_active)
        logger.info(f"Principal {caller.id} set user {target.id} active={is_active}")
        return updated


user_service = UserService()
