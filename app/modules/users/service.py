import logging
from supabase import Client
from app.config import settings
from app.core.exceptions import ValidationError, ConflictError, PersistenceError
from app.modules.users.schemas import SyncUserRequest, SyncUserResponse, UserRole
from typing import Dict, Any, Optional, Tuple

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, supabase: Client, table: Optional[str] = None):
        self.supabase = supabase
        self.table = table or settings.users_table

    def _find_one(self, column: str, value: str) -> Optional[Dict[str, Any]]:
        try:
            result = self.supabase.table(self.table)\
                .select("*")\
                .eq(column, value)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Error looking up user by {column}: {e}")
            raise PersistenceError(_error_message(e))
        return result.data[0] if result.data else None

    def find_existing(self, user_id: str, email: str) -> Optional[Dict[str, Any]]:
        """Return the record matching user_id, else the one matching email, else None"""
        return self._find_one("id", user_id) or self._find_one("email", email)

    def create_user(self, payload: SyncUserRequest) -> Dict[str, Any]:
        row = {
            "id": payload.id,
            "email": payload.email,
            "name": payload.name,
            "role": (payload.role or UserRole.CANDIDATE).value,
        }
        try:
            result = self.supabase.table(self.table).insert(row).execute()
        except Exception as e:
            logger.error(f"Error creating user {payload.id}: {e}")
            raise PersistenceError(_error_message(e))
        if not result.data:
            raise PersistenceError("Insert returned no rows")
        return result.data[0]

    def sync_user(self, payload: SyncUserRequest) -> Tuple[SyncUserResponse, bool]:
        """
        Reconcile a Supabase Auth user into the users table.

        Returns the response body and whether a record was created. A record
        matching both id and email is left untouched; a record matching only
        one of them is a conflict.
        """
        if not payload.id or not payload.email:
            raise ValidationError("Missing Supabase User ID or email")

        existing = self.find_existing(payload.id, payload.email)
        if existing:
            if existing.get("id") == payload.id and existing.get("email") == payload.email:
                return SyncUserResponse(
                    message="User already exists and is in sync",
                    user_id=existing["id"],
                ), False
            logger.warning(
                f"Sync conflict for id={payload.id}: existing record id={existing.get('id')}"
            )
            raise ConflictError("User conflict: ID or email mismatch with existing record")

        created = self.create_user(payload)
        logger.info(f"Synced user {created['id']} with role {created.get('role')}")
        return SyncUserResponse(message="User synced successfully", user_id=created["id"]), True


def _error_message(exc: Exception) -> str:
    # postgrest APIError keeps the server message on .message
    return getattr(exc, "message", None) or str(exc)
