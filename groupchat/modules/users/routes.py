from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from groupchat.database.engine import get_engine
from groupchat.core.exceptions import NotFoundError
from groupchat.modules.users.schemas import UserCreate, UserResponse, UserPublicResponse
from groupchat.modules.users.repository import UserRepository
from groupchat.modules.users.service import UserService

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(engine: Engine = Depends(get_engine)) -> UserService:
    return UserService(UserRepository(engine))


@router.post("", response_model=UserResponse, status_code=201)
async def register_user(
    user_data: UserCreate,
    service: UserService = Depends(get_user_service)
):
    """Register a new user and hand back their API token"""
    return service.register(user_data.username)


@router.get("/{username}", response_model=UserPublicResponse)
async def get_user(
    username: str,
    service: UserService = Depends(get_user_service)
):
    """Look up a user by name (token is never included)"""
    user = service.get_user_by_username(username)
    if user is None:
        raise NotFoundError("User not found")
    return user
