import logging
from datetime import datetime
from typing import List

from sqlalchemy import insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from groupchat.core.exceptions import NotFoundError, StorageError
from groupchat.database.schema import messages, users
from groupchat.modules.messages.models import Message

logger = logging.getLogger(__name__)


def _select_messages():
    return select(
        messages.c.id, messages.c.group_id, messages.c.user_id,
        messages.c.content, messages.c.created_at, users.c.username
    ).select_from(messages.join(users, messages.c.user_id == users.c.id))


class MessageRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def create_message(self, group_id: int, user_id: int, content: str) -> Message:
        """Insert a message and read it back with the author's username"""
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    insert(messages).values(group_id=group_id, user_id=user_id, content=content)
                )
                message_id = result.inserted_primary_key[0]

                row = conn.execute(
                    _select_messages().where(messages.c.id == message_id)
                ).first()
                if row is None:
                    raise StorageError("Failed to create message: could not retrieve created message")

                return Message(**row._mapping)
        except IntegrityError as e:
            raise NotFoundError("Group or user not found") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating message in group {group_id}: {e}")
            raise StorageError(f"Failed to create message: {e}") from e

    def get_messages_by_group_id(self, group_id: int, limit: int, offset: int) -> List[Message]:
        """Newest first. Callers are expected to have clamped limit and offset."""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    _select_messages()
                    .where(messages.c.group_id == group_id)
                    .order_by(messages.c.created_at.desc(), messages.c.id.desc())
                    .limit(limit)
                    .offset(offset)
                ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting messages for group {group_id}: {e}")
            raise StorageError(f"Failed to get messages by group ID: {e}") from e

        return [Message(**row._mapping) for row in rows]

    def get_messages_by_group_id_since(self, group_id: int, since: datetime) -> List[Message]:
        """Messages strictly newer than `since`, oldest first"""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    _select_messages()
                    .where(messages.c.group_id == group_id)
                    .where(messages.c.created_at > since)
                    .order_by(messages.c.created_at.asc(), messages.c.id.asc())
                ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting messages for group {group_id} since {since}: {e}")
            raise StorageError(f"Failed to get messages since timestamp: {e}") from e

        return [Message(**row._mapping) for row in rows]
