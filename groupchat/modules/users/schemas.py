from pydantic import BaseModel
from datetime import datetime


class UserCreate(BaseModel):
    username: str


class UserResponse(BaseModel):
    """Registration result; the only response that carries the token"""
    id: int
    username: str
    api_token: str
    created_at: datetime

    class Config:
        from_attributes = True


class UserPublicResponse(BaseModel):
    id: int
    username: str
    created_at: datetime

    class Config:
        from_attributes = True
