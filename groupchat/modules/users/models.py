# Records for the users table (see groupchat/database/schema.py)
# Rows are converted into these once, inside the repository

from pydantic import BaseModel
from datetime import datetime


class User(BaseModel):
    """Registered user. Immutable after creation; api_token is never regenerated."""
    id: int
    username: str
    api_token: str
    created_at: datetime

    class Config:
        from_attributes = True
        frozen = True
