import logging
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from groupchat.core.exceptions import ConflictError, StorageError
from groupchat.database.schema import users
from groupchat.modules.users.models import User

logger = logging.getLogger(__name__)

_USER_COLUMNS = (users.c.id, users.c.username, users.c.api_token, users.c.created_at)


class UserRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def create_user(self, username: str, api_token: str) -> User:
        """Insert a user and read the stored row back in one transaction"""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    insert(users).values(username=username, api_token=api_token)
                )
                user_id = result.inserted_primary_key[0]

                row = conn.execute(
                    select(*_USER_COLUMNS).where(users.c.id == user_id)
                ).first()
                if row is None:
                    raise StorageError("Failed to create user: could not retrieve created user")

                return User(**row._mapping)
        except IntegrityError as e:
            # Lost a race with a concurrent registration of the same name
            raise ConflictError("Username is already taken") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating user {username}: {e}")
            raise StorageError(f"Failed to create user: {e}") from e

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._get_one(users.c.username == username, "get user by username")

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one(users.c.id == user_id, "get user by ID")

    def get_user_by_token(self, token: str) -> Optional[User]:
        return self._get_one(users.c.api_token == token, "get user by token")

    def _get_one(self, condition, operation: str) -> Optional[User]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(*_USER_COLUMNS).where(condition)).first()
        except SQLAlchemyError as e:
            logger.error(f"Error in {operation}: {e}")
            raise StorageError(f"Failed to {operation}: {e}") from e

        if row is None:
            return None
        return User(**row._mapping)
