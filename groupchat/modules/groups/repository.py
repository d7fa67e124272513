import logging
from typing import List, Optional

from sqlalchemy import insert, select
from sqlalchemy.dialects import sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from groupchat.core.exceptions import NotFoundError, StorageError, ValidationError
from groupchat.database.schema import group_members, groups, users
from groupchat.modules.groups.models import Group, GroupMember

logger = logging.getLogger(__name__)

_GROUP_COLUMNS = (
    groups.c.id, groups.c.name, groups.c.description, groups.c.created_at, groups.c.created_by
)

# Stored timestamps are compared as UTC, which only SQLite CURRENT_TIMESTAMP guarantees
SUPPORTED_DIALECT = "sqlite"


class GroupRepository:
    def __init__(self, engine: Engine):
        self.engine = engine

    def create_group(self, name: str, description: str, user_id: int) -> Group:
        """Insert the group, add its creator as the first member, read it back.

        All three statements share one transaction; nothing is kept if any fails.
        """
        try:
            with self.engine.begin() as conn:
                result = conn.execute(
                    insert(groups).values(name=name, description=description, created_by=user_id)
                )
                group_id = result.inserted_primary_key[0]

                conn.execute(
                    insert(group_members).values(group_id=group_id, user_id=user_id)
                )

                row = conn.execute(
                    select(*_GROUP_COLUMNS).where(groups.c.id == group_id)
                ).first()
                if row is None:
                    raise StorageError("Failed to create group: could not retrieve created group")

                return Group(**row._mapping)
        except IntegrityError as e:
            # created_by no longer references a user
            raise ValidationError("User not found") from e
        except SQLAlchemyError as e:
            logger.error(f"Error creating group {name!r}: {e}")
            raise StorageError(f"Failed to create group: {e}") from e

    def get_all_groups(self) -> List[Group]:
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    select(*_GROUP_COLUMNS)
                    .order_by(groups.c.created_at.desc(), groups.c.id.desc())
                ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting all groups: {e}")
            raise StorageError(f"Failed to get all groups: {e}") from e

        return [Group(**row._mapping) for row in rows]

    def get_group_by_id(self, group_id: int) -> Optional[Group]:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(*_GROUP_COLUMNS).where(groups.c.id == group_id)
                ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error getting group {group_id}: {e}")
            raise StorageError(f"Failed to get group by ID: {e}") from e

        if row is None:
            return None
        return Group(**row._mapping)

    def join_group(self, group_id: int, user_id: int) -> bool:
        """Insert the membership unless it already exists.

        Returns True if a row was inserted, False if the user was already a member.
        A single conditional insert keeps concurrent joins from racing.
        """
        if self.engine.dialect.name != SUPPORTED_DIALECT:
            raise StorageError(
                f"Failed to join group: unsupported database dialect {self.engine.dialect.name}"
            )

        statement = sqlite.insert(group_members)\
            .values(group_id=group_id, user_id=user_id)\
            .on_conflict_do_nothing(index_elements=["group_id", "user_id"])

        try:
            with self.engine.begin() as conn:
                result = conn.execute(statement)
                return result.rowcount > 0
        except IntegrityError as e:
            raise NotFoundError("Group or user not found") from e
        except SQLAlchemyError as e:
            logger.error(f"Error joining group {group_id} as user {user_id}: {e}")
            raise StorageError(f"Failed to join group: {e}") from e

    def is_user_member(self, group_id: int, user_id: int) -> bool:
        try:
            with self.engine.connect() as conn:
                row = conn.execute(
                    select(group_members.c.id)
                    .where(group_members.c.group_id == group_id)
                    .where(group_members.c.user_id == user_id)
                ).first()
        except SQLAlchemyError as e:
            logger.error(f"Error checking membership of user {user_id} in group {group_id}: {e}")
            raise StorageError(f"Failed to check if user is a member: {e}") from e

        return row is not None

    def get_group_members(self, group_id: int) -> List[GroupMember]:
        """Members of a group, earliest joiner first"""
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    select(users.c.id, users.c.username, group_members.c.joined_at)
                    .select_from(group_members.join(users, group_members.c.user_id == users.c.id))
                    .where(group_members.c.group_id == group_id)
                    .order_by(group_members.c.joined_at.asc(), group_members.c.id.asc())
                ).all()
        except SQLAlchemyError as e:
            logger.error(f"Error getting members of group {group_id}: {e}")
            raise StorageError(f"Failed to get group members: {e}") from e

        return [GroupMember(**row._mapping) for row in rows]
