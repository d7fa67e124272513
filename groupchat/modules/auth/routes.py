from fastapi import APIRouter, Depends
from groupchat.core.dependencies import get_current_user
from groupchat.modules.users.models import User
from groupchat.modules.users.schemas import UserPublicResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.get("/me", response_model=UserPublicResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the user the presented token belongs to"""
    return current_user
