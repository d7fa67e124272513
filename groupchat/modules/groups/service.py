import logging
from typing import List, Optional

from groupchat.core.exceptions import NotFoundError, ValidationError
from groupchat.core.validation import validate_group_name
from groupchat.modules.groups.models import Group, GroupWithMembers
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, group_repository: GroupRepository, user_repository: UserRepository):
        self.group_repository = group_repository
        self.user_repository = user_repository

    def create_group(self, name: str, description: Optional[str], creator_id: int) -> Group:
        """Create a group; the creator becomes its first member"""
        validate_group_name(name)

        if self.user_repository.get_user_by_id(creator_id) is None:
            raise ValidationError("User not found")

        group = self.group_repository.create_group(name, description or "", creator_id)
        logger.info(f"User {creator_id} created group {group.id} ({group.name})")
        return group

    def list_groups(self) -> List[Group]:
        """All groups, newest first"""
        return self.group_repository.get_all_groups()

    def get_group_by_id(self, group_id: int) -> Optional[GroupWithMembers]:
        group = self.group_repository.get_group_by_id(group_id)
        if group is None:
            return None

        members = self.group_repository.get_group_members(group_id)
        return GroupWithMembers(**group.model_dump(), members=members)

    def join_group(self, group_id: int, user_id: int) -> bool:
        """Add the user to the group.

        Returns True when a membership was created and False when the user was
        already a member. Neither case is an error.
        """
        if self.group_repository.get_group_by_id(group_id) is None:
            raise NotFoundError("Group not found")

        if self.user_repository.get_user_by_id(user_id) is None:
            raise NotFoundError("User not found")

        joined = self.group_repository.join_group(group_id, user_id)
        if joined:
            logger.info(f"User {user_id} joined group {group_id}")
        else:
            logger.debug(f"User {user_id} is already a member of group {group_id}")
        return joined

    def is_member(self, group_id: int, user_id: int) -> bool:
        return self.group_repository.is_user_member(group_id, user_id)
