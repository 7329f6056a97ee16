"""
Form handlers for the sign-up, login and logout screens.

Each handler returns a FormOutcome with a user-facing message (Spanish) to
show inline on the form, and optionally where to navigate next.
"""

import logging
from app.config import settings
from app.core.exceptions import ProviderAuthError
from app.modules.auth.identity_client import IdentityClient
from app.modules.auth.schemas import AuthState, FormOutcome, SignUpForm
from app.modules.auth.state import AuthStateContainer
from typing import Optional

logger = logging.getLogger(__name__)

HOME_PATH = "/"
VERIFICATION_FAILED_PATH = "/login?error=verification_failed"

MSG_EMAIL_REQUIRED = "El correo electrónico es obligatorio."
MSG_PASSWORD_TOO_SHORT = "La contraseña debe tener al menos {min_length} caracteres."
MSG_SYNC_FAILED = "Error al sincronizar usuario con la base de datos."
MSG_PROVIDER_FAILED = "Error en el registro con Supabase."
MSG_CONFIRMATION_PENDING = "Registro iniciado. Por favor, revisa tu correo electrónico para confirmar tu cuenta."
MSG_SIGN_UP_SUCCESS = "¡Registro exitoso! Por favor, revisa tu correo electrónico para confirmar tu cuenta."
MSG_UNEXPECTED_RESPONSE = "Respuesta inesperada del servidor de autenticación."
MSG_SIGN_UP_FAILED = "Ocurrió un error durante el registro. Por favor, inténtalo de nuevo."
MSG_CREDENTIALS_REQUIRED = "Ingresa tu correo electrónico y contraseña."
MSG_INVALID_CREDENTIALS = "Correo o contraseña incorrectos."
MSG_SIGNED_IN = "Sesión iniciada."
MSG_SIGN_OUT_FAILED = "No se pudo cerrar la sesión. Inténtalo de nuevo."


def validate_sign_up(form: SignUpForm, min_length: Optional[int] = None) -> Optional[str]:
    """Checks done before contacting Supabase"""
    min_length = settings.password_min_length if min_length is None else min_length
    if not form.email.strip():
        return MSG_EMAIL_REQUIRED
    if len(form.password) < min_length:
        return MSG_PASSWORD_TOO_SHORT.format(min_length=min_length)
    return None


async def submit_sign_up(identity: IdentityClient, form: SignUpForm) -> FormOutcome:
    error = validate_sign_up(form)
    if error:
        return FormOutcome(error=error)

    try:
        result = await identity.sign_up(
            email=form.email,
            password=form.password,
            name=form.name or None,
            role=form.role,
        )
    except Exception:
        logger.exception("Error during sign up process")
        return FormOutcome(error=MSG_SIGN_UP_FAILED)

    if result.api_error:
        logger.error(f"API sync error: {result.api_error}")
        return FormOutcome(error=result.api_error.message or MSG_SYNC_FAILED)
    if result.supabase_error:
        logger.error(f"Supabase auth error: {result.supabase_error}")
        return FormOutcome(error=result.supabase_error.message or MSG_PROVIDER_FAILED)
    if result.user and result.session is None:
        return FormOutcome(success_message=MSG_CONFIRMATION_PENDING)
    if result.user and result.session:
        # The auth-change subscription picks up the new session
        return FormOutcome(success_message=MSG_SIGN_UP_SUCCESS)
    return FormOutcome(error=MSG_UNEXPECTED_RESPONSE)


async def submit_sign_in(identity: IdentityClient, email: str, password: str) -> FormOutcome:
    if not email.strip() or not password:
        return FormOutcome(error=MSG_CREDENTIALS_REQUIRED)
    try:
        await identity.sign_in(email, password)
    except ProviderAuthError as e:
        logger.info(f"Sign in rejected: {e}")
        return FormOutcome(error=MSG_INVALID_CREDENTIALS)
    return FormOutcome(success_message=MSG_SIGNED_IN, redirect_to=HOME_PATH)


async def submit_sign_out(state: AuthStateContainer) -> FormOutcome:
    error = await state.sign_out()
    if error:
        return FormOutcome(error=MSG_SIGN_OUT_FAILED)
    return FormOutcome(redirect_to=HOME_PATH)


def redirect_if_authenticated(state: AuthState) -> Optional[str]:
    """Signed-in users are sent home instead of seeing the sign-up form"""
    if not state.is_loading and state.is_authenticated:
        return HOME_PATH
    return None


def resolve_callback_redirect(state: AuthState) -> Optional[str]:
    """Where to go once the email confirmation link has been processed; None while still loading"""
    if state.is_loading:
        return None
    if state.is_authenticated:
        return HOME_PATH
    logger.warning("Auth callback: user not authenticated after processing")
    return VERIFICATION_FAILED_PATH
