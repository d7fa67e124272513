import logging
import secrets
from typing import Optional

from groupchat.core.exceptions import ConflictError
from groupchat.core.validation import validate_username
from groupchat.modules.users.models import User
from groupchat.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

API_TOKEN_BYTES = 16  # 128 bits, 32 hex characters


def generate_api_token() -> str:
    return secrets.token_hex(API_TOKEN_BYTES)


class UserService:
    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def register(self, username: str) -> User:
        """Create a user with a fresh API token"""
        validate_username(username)

        if self.user_repository.get_user_by_username(username) is not None:
            raise ConflictError("Username is already taken")

        user = self.user_repository.create_user(username, generate_api_token())
        logger.info(f"Registered user {user.id} ({user.username})")
        return user

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.user_repository.get_user_by_username(username)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.user_repository.get_user_by_id(user_id)

    def get_user_by_token(self, token: str) -> Optional[User]:
        return self.user_repository.get_user_by_token(token)
