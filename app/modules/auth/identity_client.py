"""
Client-side wrapper around Supabase Auth.

Sign-up, sign-in, sign-out and session queries go to Supabase. After a
successful sign-up the new user is also written to the application's users
table through POST /api/auth/sync-user.
"""

import logging
import httpx
from supabase import AsyncClient, AuthError
from app.config import settings
from app.core.exceptions import ProviderAuthError, SyncNetworkError
from app.database.supabase_client import SupabaseClient
from app.modules.auth.schemas import SignUpResult
from app.modules.users.schemas import UserRole
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SYNC_USER_PATH = "/api/auth/sync-user"


class IdentityClient:
    def __init__(
        self,
        supabase: AsyncClient,
        http: Optional[httpx.AsyncClient] = None,
        api_base_url: Optional[str] = None,
        redirect_url: Optional[str] = None,
    ):
        self.supabase = supabase
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            base_url=api_base_url or settings.api_base_url,
            timeout=settings.sync_timeout_seconds,
        )
        self.redirect_url = redirect_url or settings.auth_callback_url

    async def __aenter__(self) -> "IdentityClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def sign_up(
        self,
        email: str,
        password: str,
        name: Optional[str] = None,
        role: Optional[UserRole] = None,
    ) -> SignUpResult:
        """Register with Supabase Auth, then sync the new user into the users table"""
        requested_role = role or UserRole.CANDIDATE
        user_metadata: Dict[str, Any] = {"role": requested_role.value}
        if name:
            user_metadata["name"] = name

        try:
            auth_response = await self.supabase.auth.sign_up({
                "email": email,
                "password": password,
                "options": {
                    "email_redirect_to": self.redirect_url,
                    "data": user_metadata,
                },
            })
        except AuthError as e:
            logger.error(f"Supabase sign up error: {e}")
            return SignUpResult(supabase_error=ProviderAuthError(_auth_error_message(e)))

        user = auth_response.user
        # session is None while email confirmation is pending
        session = auth_response.session
        if not user:
            return SignUpResult(
                supabase_error=ProviderAuthError(
                    "Unknown sign-up issue: No user data returned from Supabase despite no explicit error."
                )
            )

        provider_metadata = user.user_metadata or {}
        try:
            await self.sync_user({
                "id": user.id,
                "email": user.email,
                "name": provider_metadata.get("name") or name,
                "role": provider_metadata.get("role") or requested_role.value,
            })
        except SyncNetworkError as e:
            return SignUpResult(user=user, session=session, api_error=e)

        return SignUpResult(user=user, session=session)

    async def sync_user(self, payload: Dict[str, Any]) -> httpx.Response:
        """POST the user to the sync endpoint; any 2xx counts as synced, whatever the body"""
        try:
            response = await self.http.post(SYNC_USER_PATH, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Network error calling {SYNC_USER_PATH}: {e}")
            raise SyncNetworkError(str(e) or "Network error syncing user")

        if response.is_error:
            message = None
            try:
                body = response.json()
                if isinstance(body, dict):
                    message = body.get("message")
            except ValueError:
                pass
            logger.error(f"API error creating user in DB: {response.status_code} {message}")
            raise SyncNetworkError(
                message or "Failed to sync user with database",
                status_code=response.status_code,
            )
        return response

    async def sign_in(self, email: str, password: str):
        try:
            return await self.supabase.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except AuthError as e:
            raise ProviderAuthError(_auth_error_message(e))

    async def sign_out(self) -> None:
        try:
            await self.supabase.auth.sign_out()
        except AuthError as e:
            raise ProviderAuthError(_auth_error_message(e))

    async def get_current_user(self):
        try:
            user_response = await self.supabase.auth.get_user()
        except AuthError as e:
            raise ProviderAuthError(_auth_error_message(e))
        return user_response.user if user_response else None

    def on_auth_state_change(self, callback: Callable[[str, Any], None]):
        """Register callback(event, session); returns a subscription with unsubscribe()"""
        return self.supabase.auth.on_auth_state_change(callback)


async def create_identity_client() -> IdentityClient:
    supabase = await SupabaseClient.get_async_client()
    return IdentityClient(supabase)


def _auth_error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc)
