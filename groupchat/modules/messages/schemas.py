from pydantic import BaseModel
from typing import List
from datetime import datetime


class MessageCreate(BaseModel):
    content: str


class MessageResponse(BaseModel):
    id: int
    group_id: int
    user_id: int
    content: str
    created_at: datetime
    username: str

    class Config:
        from_attributes = True


class MessageListResponse(BaseModel):
    """A page of messages plus the server time it was read at.

    `timestamp` is UTC at second resolution and is meant to be sent back as
    `since` on the next poll. `since` is exclusive, so a message stored later
    within that same second is not returned by the next poll; clients that
    must not miss messages should poll with the `created_at` of the newest
    message they hold instead.
    """
    messages: List[MessageResponse]
    timestamp: str
