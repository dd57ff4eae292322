from datetime import datetime
from typing import Any, List, Optional, Union
from pydantic import ConfigDict, EmailStr, field_validator, model_validator
from pydantic.alias_generators import to_camel

from edutrack.core.constants import PROVISIONABLE_ROLES, RelationshipType, UserRole
from edutrack.schemas.profile import (
    ParentProfileIn, ParentProfileOut, PrincipalProfileIn, PrincipalProfileOut,
    StudentProfileIn, StudentProfileOut, TeacherProfileIn, TeacherProfileOut,
)
from edutrack.schemas.response import CamelModel

PROFILE_FIELD_BY_ROLE = {
    UserRole.STUDENT: "student_profile",
    UserRole.TEACHER: "teacher_profile",
    UserRole.PARENT: "parent_profile",
    UserRole.PRINCIPAL: "principal_profile",
}

class UserCreate(CamelModel):
    """Payload for provisioning a user together with its role profile.

    At most one nested profile may be supplied and it must match ``role``;
    ``grade`` only applies to students and ``department`` only to teachers.
    """
    role: UserRole
    school_id: str
    first_name: str
    last_name: str
    email: EmailStr
    grade: Optional[str] = None
    department: Optional[str] = None
    relationship_user_id: Optional[str] = None
    relationship_type: Optional[RelationshipType] = None
    student_profile: Optional[StudentProfileIn] = None
    teacher_profile: Optional[TeacherProfileIn] = None
    parent_profile: Optional[ParentProfileIn] = None
    principal_profile: Optional[PrincipalProfileIn] = None

    @field_validator("role")
    @classmethod
    def role_is_provisionable(cls, v):
        if v not in PROVISIONABLE_ROLES:
            raise ValueError("Role must be one of STUDENT, TEACHER, PARENT or PRINCIPAL")
        return v

    @field_validator("school_id", "first_name", "last_name")
    @classmethod
    def not_empty(cls, v):
        if not v or not v.strip():
            raise ValueError("Field cannot be empty")
        return v.strip()

    @field_validator("grade", "department", "relationship_user_id", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def profile_matches_role(self):
        expected = PROFILE_FIELD_BY_ROLE[self.role]
        for field in PROFILE_FIELD_BY_ROLE.values():
            if field != expected and getattr(self, field) is not None:
                raise ValueError(f"{to_camel(field)} is not allowed for role {self.role.value}")
        if self.grade is not None and self.role != UserRole.STUDENT:
            raise ValueError(f"grade is not allowed for role {self.role.value}")
        if self.department is not None and self.role != UserRole.TEACHER:
            raise ValueError(f"department is not allowed for role {self.role.value}")
        return self

class UserMeUpdate(CamelModel):
    """Fields a user may change on their own account."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar: Optional[str] = None

    @field_validator("first_name", "last_name")
    @classmethod
    def not_empty(cls, v):
        # Names are NOT NULL, so an explicit null is rejected too
        if v is None or not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @model_validator(mode='before')
    @classmethod
    def at_least_one_value(cls, data: Any):
        if isinstance(data, dict) and not any(v is not None for v in data.values()):
            raise ValueError("At least one field must be provided for update")
        return data

class UserStatusUpdate(CamelModel):
    is_active: bool


class SchoolSummary(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str

class User(CamelModel):
    """Main user schema for reading user data."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    clerk_id: Optional[str] = None
    email: str
    first_name: str
    last_name: str
    role: UserRole
    school_id: str
    avatar: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserListItem(User):
    """A listed user with its school and whichever profile matches its role."""
    school: SchoolSummary
    student_profile: Optional[StudentProfileOut] = None
    teacher_profile: Optional[TeacherProfileOut] = None
    parent_profile: Optional[ParentProfileOut] = None
    principal_profile: Optional[PrincipalProfileOut] = None

class UserMe(User):
    full_name: str
    school: SchoolSummary
    profile: Optional[Union[StudentProfileOut, TeacherProfileOut, ParentProfileOut, PrincipalProfileOut]] = None
    permissions: List[str]
    dashboard_route: str

class UserSearchResult(CamelModel):
    id: str
    name: str
    email: str
    role: UserRole

class UserResponse(CamelModel):
    user: User

class UserListResponse(CamelModel):
    users: List[UserListItem]

class UserMeResponse(CamelModel):
    user: UserMe

class UserSearchResponse(CamelModel):
    users: List[UserSearchResult]
