import logging
from typing import List, Optional

from groupchat.core.exceptions import ForbiddenError, NotFoundError
from groupchat.core.validation import (
    clamp_pagination, parse_timestamp, validate_message_content
)
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.messages.models import Message
from groupchat.modules.messages.repository import MessageRepository
from groupchat.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class MessageService:
    def __init__(
        self,
        message_repository: MessageRepository,
        group_repository: GroupRepository,
        user_repository: UserRepository,
        default_limit: int = 100,
        max_limit: int = 1000
    ):
        self.message_repository = message_repository
        self.group_repository = group_repository
        self.user_repository = user_repository
        self.default_limit = default_limit
        self.max_limit = max_limit

    def create_message(self, group_id: int, user_id: int, content: str) -> Message:
        """Post a message to a group the user belongs to"""
        self._require_group(group_id)

        if self.user_repository.get_user_by_id(user_id) is None:
            raise NotFoundError("User not found")

        if not self.group_repository.is_user_member(group_id, user_id):
            raise ForbiddenError("User is not a member of this group")

        validate_message_content(content)

        message = self.message_repository.create_message(group_id, user_id, content)
        logger.info(f"User {user_id} posted message {message.id} to group {group_id}")
        return message

    def list_messages(
        self, group_id: int, limit: Optional[int] = None, offset: Optional[int] = 0
    ) -> List[Message]:
        """Page through a group's messages, newest first"""
        self._require_group(group_id)

        limit, offset = clamp_pagination(
            self.default_limit if limit is None else limit,
            offset or 0,
            self.max_limit,
        )
        return self.message_repository.get_messages_by_group_id(group_id, limit, offset)

    def list_messages_since(self, group_id: int, timestamp: str) -> List[Message]:
        """Messages posted after `timestamp`, oldest first, for polling clients"""
        self._require_group(group_id)

        since = parse_timestamp(timestamp)
        return self.message_repository.get_messages_by_group_id_since(group_id, since)

    def _require_group(self, group_id: int) -> None:
        if self.group_repository.get_group_by_id(group_id) is None:
            raise NotFoundError("Group not found")
