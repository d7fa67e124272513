from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class GroupCreate(BaseModel):
    name: str
    description: Optional[str] = None


class GroupResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    created_by: int
    created_at: datetime

    class Config:
        from_attributes = True


class GroupMemberResponse(BaseModel):
    id: int
    username: str
    joined_at: datetime

    class Config:
        from_attributes = True


class GroupWithMembersResponse(GroupResponse):
    members: List[GroupMemberResponse]


class JoinGroupResponse(BaseModel):
    message: str
    joined: bool
