"""
Relational schema for the chat store.

users:
- id: integer (primary key, autoincrement)
- username: text (unique, 3-20 chars of [A-Za-z0-9_])
- api_token: text (unique, 32 hex chars)
- created_at: timestamp (default: CURRENT_TIMESTAMP)

groups:
- id: integer (primary key, autoincrement)
- name: text (not null, 3-50 chars, not unique)
- description: text (not null, default: '')
- created_by: integer (foreign key to users.id, not null)
- created_at: timestamp (default: CURRENT_TIMESTAMP)

group_members:
- id: integer (primary key, autoincrement)
- group_id: integer (foreign key to groups.id, not null)
- user_id: integer (foreign key to users.id, not null)
- joined_at: timestamp (default: CURRENT_TIMESTAMP)
- unique constraint on (group_id, user_id)

messages:
- id: integer (primary key, autoincrement)
- group_id: integer (foreign key to groups.id, not null)
- user_id: integer (foreign key to users.id, not null)
- content: text (not null, 1-1000 chars)
- created_at: timestamp (default: CURRENT_TIMESTAMP)
"""

from sqlalchemy import (
    Column, DateTime, ForeignKey, Index, Integer, MetaData, String, Table, Text,
    UniqueConstraint, func, inspect,
)
from sqlalchemy.engine import Engine

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("username", String(20), nullable=False, unique=True),
    Column("api_token", String(32), nullable=False, unique=True),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

groups = Table(
    "groups",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(50), nullable=False),
    Column("description", Text, nullable=False, server_default=""),
    Column("created_by", Integer, ForeignKey("users.id"), nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
)

group_members = Table(
    "group_members",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("group_id", Integer, ForeignKey("groups.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("joined_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
)

messages = Table(
    "messages",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("group_id", Integer, ForeignKey("groups.id"), nullable=False),
    Column("user_id", Integer, ForeignKey("users.id"), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime, nullable=False, server_default=func.current_timestamp()),
    Index("ix_messages_group_created", "group_id", "created_at"),
)

TABLE_NAMES = ("users", "groups", "group_members", "messages")


def init_schema(engine: Engine) -> None:
    """Create any missing tables. Existing tables are left untouched."""
    metadata.create_all(engine)


def check_tables_exist(engine: Engine) -> bool:
    existing = set(inspect(engine).get_table_names())
    return all(name in existing for name in TABLE_NAMES)
