import re
import time
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from edutrack.core.constants import OrgRole, UserRole
from edutrack.core.exceptions import ConflictError, ForbiddenError, InternalError, NotFoundError
from edutrack.crud import profile as crud_profile
from edutrack.crud.school import school as crud_school
from edutrack.crud.user import user as crud_user
from edutrack.models.school import School
from edutrack.models.user import User
from edutrack.schemas.school import School as SchoolSchema, SchoolDetail, SchoolListItem, SchoolSetup, SchoolUpdate
from edutrack.services.identity import IdentitySyncEvent, notify_identity_provider
from edutrack.services.user import identity_metadata
from edutrack.utils.logger import mask_email, setup_logger
from edutrack.utils.permission import PermissionHelper as permission_helper

logger = setup_logger("school_service", "school_service.log")

SLUG_MAX_LENGTH = 50


def organization_slug(name: str) -> str:
    """Lowercase, hyphen separated slug for the school's organization."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")[:SLUG_MAX_LENGTH]
    return slug or f"school-{int(time.time() * 1000)}"


class SchoolService:

    def list_schools(self, db: Session, *, search: Optional[str] = None) -> List[SchoolListItem]:
        rows = crud_school.list_registrable(db, search=search.strip() if search else None)
        return [
            SchoolListItem(
                id=school.id,
                name=school.name,
                city=school.city,
                state=school.state,
                country=school.country,
                user_count=user_count,
            )
            for school, user_count in rows
        ]

    def get_school(self, db: Session, *, school_id: str) -> SchoolDetail:
        school = crud_school.get(db, id=school_id)
        if not school:
            raise NotFoundError("school")
        return self._detail(db, school)

    def update_school(
        self, db: Session, *, identity_id: str, school_id: str, school_in: SchoolUpdate
    ) -> SchoolDetail:
        caller = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if not caller:
            raise NotFoundError("user")
        school = crud_school.get(db, id=school_id)
        if not school:
            raise NotFoundError("school")
        permission_helper.require_principal_of_school(caller, school.id)

        school = crud_school.update(
            db, db_obj=school, obj_in=school_in.model_dump(mode="json", exclude_unset=True)
        )
        logger.info(f"Principal {caller.id} updated school {school.id}")
        return self._detail(db, school)

    async def setup_school(
        self, db: Session, *, identity_id: str, school_in: SchoolSetup, identity_provider
    ) -> Tuple[School, User]:
        """Create a school, its organization and its principal for a signed-in identity."""
        existing = crud_user.get_by_clerk_id(db, clerk_id=identity_id)
        if existing and existing.role == UserRole.PRINCIPAL:
            raise ConflictError(
                f"You are already the principal of {existing.school.name}. Each principal can only manage one school."
            )
        if existing:
            raise ForbiddenError("Only principals can create schools. Please contact your administrator.")

        try:
            email = await identity_provider.get_primary_email(identity_id)
        except Exception as exc:
            logger.error(f"Failed to fetch email for identity {identity_id}: {exc}")
            email = None
        if not email:
            raise InternalError("Could not determine the email address for this account")
        if crud_user.get_by_email(db, email=email):
            raise ConflictError(f"The email {email} is already registered to another user")

        organization_id = await self._create_organization(
            identity_provider, name=school_in.name, created_by=identity_id
        )

        try:
            school = crud_school.create(
                db,
                obj_in={**school_in.model_dump(mode="json"), "clerk_organization_id": organization_id},
                commit=False,
            )
            principal = crud_user.create(
                db,
                obj_in={
                    "clerk_id": identity_id,
                    "email": email,
                    "first_name": "",
                    "last_name": "",
                    "role": UserRole.PRINCIPAL,
                    "school_id": school.id,
                    "is_active": True,
                },
                commit=False,
            )
            crud_profile.principal_profile.create_for_user(db, user_id=principal.id, obj_in={}, commit=False)
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            logger.warning(f"Unique constraint hit while setting up school {school_in.name}: {exc.orig}")
            raise ConflictError("A record with this information already exists")
        except Exception:
            db.rollback()
            raise
        db.refresh(school)
        db.refresh(principal)
        logger.info(f"Created school {school.id} with principal {mask_email(email)}")

        if organization_id:
            event = IdentitySyncEvent(
                user_id=identity_id,
                organization_id=organization_id,
                org_role=OrgRole.ADMIN.value,
                metadata=identity_metadata(principal, school),
            )
            await notify_identity_provider(identity_provider, event)

        return school, principal

    async def _create_organization(self, identity_provider, *, name: str, created_by: str) -> Optional[str]:
        """Create the school's organization, or return None so setup continues without one."""
        try:
            return await identity_provider.create_organization(
                name=name, slug=organization_slug(name), created_by=created_by
            )
        except Exception as exc:
            logger.warning(
                f"Continuing school creation without an organization for {name}: {exc}",
                extra={"identity_op": "create_organization", "error_type": type(exc).__name__},
            )
            return None

    def _detail(self, db: Session, school: School) -> SchoolDetail:
        return SchoolDetail(
            **SchoolSchema.model_validate(school).model_dump(),
            user_count=crud_user.count_for_school(db, school_id=school.id),
        )


school_service = SchoolService()
