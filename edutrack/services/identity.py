from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel

from edutrack.core.config import settings
from edutrack.utils.logger import setup_logger

logger = setup_logger("identity_service", "identity_service.log")


class IdentityProviderError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


def primary_email_address(user_data: Dict[str, Any]) -> Optional[str]:
    """Primary address of a Clerk user object, else its first address."""
    addresses: List[dict] = user_data.get("email_addresses") or []
    primary_id = user_data.get("primary_email_address_id")
    for address in addresses:
        if address.get("id") == primary_id:
            return address.get("email_address")
    return addresses[0].get("email_address") if addresses else None


class ClerkClient:
    """Thin client for the Clerk Backend API."""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key if secret_key is not None else settings.CLERK_SECRET_KEY
        self.base_url = (base_url or settings.CLERK_API_URL).rstrip("/")
        self.timeout = timeout or settings.CLERK_TIMEOUT_SECONDS
        self.transport = transport

    async def _make_request(self, method: str, path: str, json: Optional[dict] = None) -> dict:
        if not self.secret_key:
            raise IdentityProviderError("CLERK_SECRET_KEY is not set in environment variables")

        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.secret_key}"},
            transport=self.transport,
        ) as client:
            try:
                response = await client.request(method, path, json=json)
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise IdentityProviderError(
                    f"Clerk API error on {method} {path}: {e.response.text}",
                    status_code=e.response.status_code,
                )
            except httpx.RequestError as e:
                raise IdentityProviderError(f"Network error calling Clerk: {e}")

            return response.json()

    async def create_membership(self, organization_id: str, user_id: str, role: str) -> dict:
        return await self._make_request(
            "POST",
            f"/organizations/{organization_id}/memberships",
            json={"user_id": user_id, "role": role},
        )

    async def update_user_metadata(self, user_id: str, public_metadata: Dict[str, Any]) -> dict:
        return await self._make_request(
            "PATCH",
            f"/users/{user_id}/metadata",
            json={"public_metadata": public_metadata},
        )

    async def create_organization(self, name: str, slug: str, created_by: str) -> str:
        data = await self._make_request(
            "POST",
            "/organizations",
            json={"name": name, "slug": slug, "created_by": created_by},
        )
        return data["id"]

    async def get_primary_email(self, user_id: str) -> Optional[str]:
        data = await self._make_request("GET", f"/users/{user_id}")
        return primary_email_address(data)


clerk_client = ClerkClient()


class IdentitySyncEvent(BaseModel):
    """Membership and metadata to push to the identity provider after a commit."""
    user_id: str
    organization_id: str
    org_role: str
    metadata: Dict[str, Any]


async def notify_identity_provider(provider, event: IdentitySyncEvent) -> bool:
    """Push ``event`` to the provider. Failures are logged and reported as ``False``, never raised."""
    ok = True
    try:
        await provider.create_membership(event.organization_id, event.user_id, event.org_role)
    except Exception as exc:
        ok = False
        logger.warning(
            f"Failed to add {event.user_id} to organization {event.organization_id}: {exc}",
            extra={
                "identity_op": "create_membership",
                "clerk_user_id": event.user_id,
                "organization_id": event.organization_id,
                "error_type": type(exc).__name__,
            },
        )
    try:
        await provider.update_user_metadata(event.user_id, event.metadata)
    except Exception as exc:
        ok = False
        logger.warning(
            f"Failed to update identity metadata for {event.user_id}: {exc}",
            extra={
                "identity_op": "update_user_metadata",
                "clerk_user_id": event.user_id,
                "organization_id": event.organization_id,
                "error_type": type(exc).__name__,
            },
        )
    if ok:
        logger.info(f"Synced identity {event.user_id} with organization {event.organization_id}")
    return ok
