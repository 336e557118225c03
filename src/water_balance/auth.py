from __future__ import annotations

import logging
from typing import Any, Dict

from .client import SupabaseClient
from .exceptions import AuthenticationError
from .models import AuthUser, LoginCredentials, LoginResult, UserProfile

logger = logging.getLogger(__name__)


class AuthService:
    """
    Phone/password sign-in on top of the Supabase identity provider.

    The query facade needs a signed-in client; share the same
    :class:`SupabaseClient` between this service and
    :class:`~water_balance.service.WaterBalanceService`.
    """

    def __init__(self, client: SupabaseClient):
        self.client = client

    async def login(self, credentials: LoginCredentials) -> LoginResult:
        payload = await self.client.sign_in_with_password(credentials.phone, credentials.password)
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise AuthenticationError("Login failed: No session returned")

        user = payload.get("user") or {}
        created_at = str(user.get("created_at", ""))
        logger.info("User %s signed in", user.get("id"))
        return LoginResult(
            token=token,
            user=AuthUser(
                id=str(user.get("id", "")),
                email=user.get("email"),
                phone=user.get("phone") or "",
                created_at=created_at,
                updated_at=user.get("updated_at") or created_at,
            ),
        )

    async def logout(self) -> None:
        await self.client.sign_out()

    async def get_user_info(self) -> UserProfile:
        user = await self.client.get_user()
        if not user:
            raise AuthenticationError("User not authenticated")
        return _profile_from_user(user)


def _profile_from_user(user: Dict[str, Any]) -> UserProfile:
    metadata = user.get("user_metadata") or {}
    return UserProfile(
        account_id=str(user["id"]),
        email=user.get("email"),
        phone=user.get("phone"),
        registration_date=user.get("created_at"),
        avatar=metadata.get("avatar"),
        job=metadata.get("job"),
        organization=metadata.get("organization"),
        location=metadata.get("location"),
        introduction=metadata.get("introduction"),
        personal_website=metadata.get("personalWebsite"),
        job_name=metadata.get("jobName"),
        organization_name=metadata.get("organizationName"),
        location_name=metadata.get("locationName"),
        certification=metadata.get("certification"),
        role=metadata.get("role") or "user",
    )
