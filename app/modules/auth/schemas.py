from pydantic import BaseModel, ConfigDict
from typing import Any, Optional
from app.core.exceptions import ProviderAuthError, SyncNetworkError
from app.modules.users.schemas import UserRole


class SignUpForm(BaseModel):
    email: str = ""
    password: str = ""
    name: Optional[str] = None
    role: UserRole = UserRole.CANDIDATE


class SignUpResult(BaseModel):
    """Outcome of IdentityClient.sign_up; provider and sync failures are reported separately."""
    user: Optional[Any] = None
    session: Optional[Any] = None
    supabase_error: Optional[ProviderAuthError] = None
    api_error: Optional[SyncNetworkError] = None

    model_config = ConfigDict(arbitrary_types_allowed=True)


class AuthState(BaseModel):
    user: Optional[Any] = None
    is_loading: bool = True

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None


class FormOutcome(BaseModel):
    error: Optional[str] = None
    success_message: Optional[str] = None
    redirect_to: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
