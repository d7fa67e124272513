# Records for the messages table (see groupchat/database/schema.py)
# Every message is read joined with its author's username

from pydantic import BaseModel
from datetime import datetime


class Message(BaseModel):
    id: int
    group_id: int
    user_id: int
    content: str
    created_at: datetime
    username: str

    class Config:
        from_attributes = True
        frozen = True
