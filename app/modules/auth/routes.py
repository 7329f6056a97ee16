from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from app.database.supabase_client import get_supabase
from app.modules.users.schemas import SyncUserRequest
from app.modules.users.service import UserService
from supabase import Client

router = APIRouter(prefix="/auth", tags=["auth"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.post("/sync-user")
def sync_user(
    payload: SyncUserRequest,
    service: UserService = Depends(get_user_service)
):
    """Create the local user for a Supabase Auth user, or confirm it is already in sync.

    Runs in the threadpool; the Supabase client blocks.
    """
    body, created = service.sync_user(payload)
    return JSONResponse(
        status_code=201 if created else 200,
        content=body.model_dump(by_alias=True),
    )
