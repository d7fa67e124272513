# Records for the groups and group_members tables (see groupchat/database/schema.py)
# Rows are converted into these once, inside the repository

from pydantic import BaseModel
from typing import List
from datetime import datetime


class Group(BaseModel):
    id: int
    name: str
    description: str = ""
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True
        frozen = True


class GroupMember(BaseModel):
    """Roster entry: the member's user id and name, plus when they joined"""
    id: int
    username: str
    joined_at: datetime

    class Config:
        from_attributes = True
        frozen = True


class GroupWithMembers(Group):
    members: List[GroupMember] = []
