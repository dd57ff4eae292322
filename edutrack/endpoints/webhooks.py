from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from svix.webhooks import Webhook, WebhookVerificationError

from edutrack.core.config import settings
from edutrack.core.exceptions import BadRequestError, InternalError
from edutrack.services.webhook import webhook_service
from edutrack.utils import deps
from edutrack.utils.logger import setup_logger

logger = setup_logger("webhooks")

router = APIRouter()

SVIX_HEADERS = ("svix-id", "svix-timestamp", "svix-signature")

@router.post("/clerk")
async def clerk_webhook(request: Request, db: Session = Depends(deps.get_db)):
    """Keep users and schools in step with identity-provider changes."""
    if not settings.CLERK_WEBHOOK_SECRET:
        logger.error("CLERK_WEBHOOK_SECRET is not configured")
        raise InternalError("Webhook secret is not configured")

    headers = {name: request.headers.get(name) for name in SVIX_HEADERS}
    if not all(headers.values()):
        raise BadRequestError("Missing svix headers")

    payload = await request.body()
    try:
        event = Webhook(settings.CLERK_WEBHOOK_SECRET).verify(payload, headers)
    except WebhookVerificationError as e:
        logger.warning(f"Rejected webhook {headers['svix-id']}: {e}")
        raise BadRequestError("Invalid webhook signature")

    event_type = event.get("type")
    data = event.get("data") or {}
    if event_type == "user.updated":
        webhook_service.handle_user_updated(db, data)
    elif event_type == "user.deleted":
        webhook_service.handle_user_deleted(db, data)
    elif event_type == "organization.updated":
        webhook_service.handle_organization_updated(db, data)
    elif event_type == "organization.deleted":
        webhook_service.handle_organization_deleted(db, data)
    else:
        # Creation events are handled by registration and school setup
        logger.info(f"Unhandled webhook event type {event_type}")

    return {"status": "success"}
