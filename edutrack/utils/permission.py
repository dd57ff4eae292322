from typing import List

from edutrack.core.constants import DIRECTORY_ROLES, ORG_ROLE_BY_USER_ROLE, OrgRole, ROLE_PERMISSIONS, UserRole
from edutrack.core.exceptions import ForbiddenError
from edutrack.models.user import User


class PermissionHelper:
    @staticmethod
    def is_principal(user: User) -> bool:
        return user.role == UserRole.PRINCIPAL

    @staticmethod
    def belongs_to_school(user: User, school_id: str) -> bool:
        return user.school_id == school_id

    @staticmethod
    def can_view_directory(user: User) -> bool:
        return user.role in DIRECTORY_ROLES

    @staticmethod
    def permission_strings(role: UserRole) -> List[str]:
        """Flatten the role's permission map into ``resource:action`` strings."""
        return [
            f"{resource.value}:{action.value}"
            for resource, actions in ROLE_PERMISSIONS.get(role, {}).items()
            for action in actions
        ]

    @staticmethod
    def org_role_for(role: UserRole) -> OrgRole:
        return ORG_ROLE_BY_USER_ROLE.get(role, OrgRole.MEMBER)

    @staticmethod
    def require_principal_of_school(user: User, school_id: str):
        if not PermissionHelper.is_principal(user):
            raise ForbiddenError("Only principals can perform this action")
        if not PermissionHelper.belongs_to_school(user, school_id):
            raise ForbiddenError("Principals can only manage their own school")

    @staticmethod
    def require_directory_access(user: User):
        if not PermissionHelper.can_view_directory(user):
            raise ForbiddenError("Only teachers and principals can list school users")
