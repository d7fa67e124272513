from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from groupchat.config.settings import Settings
from groupchat.database.engine import get_engine
from groupchat.core.dependencies import get_current_user, get_settings
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.messages.schemas import MessageCreate, MessageResponse, MessageListResponse
from groupchat.modules.messages.repository import MessageRepository
from groupchat.modules.messages.service import MessageService
from groupchat.modules.users.models import User
from groupchat.modules.users.repository import UserRepository
from typing import Optional

router = APIRouter(prefix="/groups", tags=["messages"])


def get_message_service(
    engine: Engine = Depends(get_engine),
    settings: Settings = Depends(get_settings)
) -> MessageService:
    return MessageService(
        MessageRepository(engine),
        GroupRepository(engine),
        UserRepository(engine),
        default_limit=settings.default_page_size,
        max_limit=settings.max_page_size
    )


def _server_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


@router.get("/{group_id}/messages", response_model=MessageListResponse)
async def list_messages(
    group_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
    since: Optional[str] = None,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """List a group's messages.

    With `since`, returns only newer messages oldest first; otherwise pages
    through newest first using `limit` and `offset`.
    """
    if since:
        messages = service.list_messages_since(group_id, since)
    else:
        messages = service.list_messages(group_id, limit=limit, offset=offset)
    return MessageListResponse(
        messages=[MessageResponse.model_validate(m) for m in messages],
        timestamp=_server_timestamp()
    )


@router.post("/{group_id}/messages", response_model=MessageResponse, status_code=201)
async def create_message(
    group_id: int,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    service: MessageService = Depends(get_message_service)
):
    """Post a message (caller must be a member of the group)"""
    return service.create_message(group_id, current_user.id, message_data.content)
