import logging
from typing import Optional

from groupchat.core.exceptions import Unauthenticated
from groupchat.modules.users.models import User
from groupchat.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class AuthService:
    """Resolves API tokens to users. Holds no state between requests."""

    def __init__(self, user_repository: UserRepository):
        self.user_repository = user_repository

    def authenticate(self, token: Optional[str]) -> User:
        """Return the user owning the token.

        Raises Unauthenticated with reason MISSING_TOKEN when no token was
        presented and INVALID_TOKEN when it matches no user.
        """
        if token is None or not token.strip():
            logger.info("Rejected request: authentication required")
            raise Unauthenticated(Unauthenticated.MISSING_TOKEN)

        user = self.user_repository.get_user_by_token(token.strip())
        if user is None:
            logger.warning("Rejected request: invalid API token")
            raise Unauthenticated(Unauthenticated.INVALID_TOKEN)

        return user
