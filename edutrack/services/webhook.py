from typing import Any, Dict

from sqlalchemy.orm import Session

from edutrack.crud.school import school as crud_school
from edutrack.crud.user import user as crud_user
from edutrack.services.identity import primary_email_address
from edutrack.utils.logger import mask_email, setup_logger

logger = setup_logger("webhook_service", "webhook_service.log")

class IdentityWebhookService:
    """Applies identity-provider changes to local users and schools.

    Users and schools unknown locally are ignored: accounts are created through
    registration and school setup, never from webhooks. Events without an id
    never match, since unclaimed accounts and unlinked schools have a null
    identity column.
    """

    def handle_user_updated(self, db: Session, data: Dict[str, Any]) -> None:
        user = crud_user.get_by_clerk_id(db, clerk_id=data["id"]) if data.get("id") else None
        if not user:
            logger.info(f"Identity {data.get('id')} updated but has no account; ignored")
            return

        changes = {
            "first_name": data.get("first_name") or user.first_name,
            "last_name": data.get("last_name") or user.last_name,
        }
        email = primary_email_address(data)
        if email and email != user.email:
            owner = crud_user.get_by_email(db, email=email)
            if owner and owner.id != user.id:
                logger.warning(
                    f"Email {mask_email(email)} of identity {user.clerk_id} belongs to user {owner.id}; kept {mask_email(user.email)}"
                )
            else:
                changes["email"] = email

        crud_user.update(db, db_obj=user, obj_in=changes)
        logger.info(f"User {user.id} synced from identity {user.clerk_id}")

    def handle_user_deleted(self, db: Session, data: Dict[str, Any]) -> None:
        user = crud_user.get_by_clerk_id(db, clerk_id=data["id"]) if data.get("id") else None
        if not user:
            logger.info(f"Identity {data.get('id')} deleted but has no account; ignored")
            return
        if user.is_active:
            crud_user.set_active(db, user=user, is_active=False)
        logger.info(f"User {user.id} deactivated after identity deletion")

    def handle_organization_updated(self, db: Session, data: Dict[str, Any]) -> None:
        school = crud_school.get_by_organization_id(db, organization_id=data["id"]) if data.get("id") else None
        if not school:
            logger.info(f"Organization {data.get('id')} has no school; ignored")
            return
        if data.get("name") and data["name"] != school.name:
            crud_school.update(db, db_obj=school, obj_in={"name": data["name"]})
            logger.info(f"School {school.id} renamed from organization {school.clerk_organization_id}")

    def handle_organization_deleted(self, db: Session, data: Dict[str, Any]) -> None:
        school = crud_school.get_by_organization_id(db, organization_id=data["id"]) if data.get("id") else None
        if not school:
            logger.info(f"Organization {data.get('id')} has no school; ignored")
            return
        crud_school.update(db, db_obj=school, obj_in={"is_active": False})
        logger.info(f"School {school.id} deactivated after organization deletion")


webhook_service = IdentityWebhookService()
