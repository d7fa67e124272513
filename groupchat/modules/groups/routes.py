from fastapi import APIRouter, Depends
from sqlalchemy.engine import Engine
from groupchat.database.engine import get_engine
from groupchat.core.dependencies import get_current_user
from groupchat.core.exceptions import NotFoundError
from groupchat.modules.groups.schemas import (
    GroupCreate, GroupResponse, GroupWithMembersResponse, JoinGroupResponse
)
from groupchat.modules.groups.repository import GroupRepository
from groupchat.modules.groups.service import GroupService
from groupchat.modules.users.models import User
from groupchat.modules.users.repository import UserRepository
from typing import List

router = APIRouter(prefix="/groups", tags=["groups"])


def get_group_service(engine: Engine = Depends(get_engine)) -> GroupService:
    return GroupService(GroupRepository(engine), UserRepository(engine))


@router.post("", response_model=GroupResponse, status_code=201)
async def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Create a new group with the caller as its first member"""
    return service.create_group(group_data.name, group_data.description, current_user.id)


@router.get("", response_model=List[GroupResponse])
async def list_groups(
    current_user: User = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """List all groups, newest first"""
    return service.list_groups()


@router.get("/{group_id}", response_model=GroupWithMembersResponse)
async def get_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Get a group with its members in join order"""
    group = service.get_group_by_id(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


@router.post("/{group_id}/join", response_model=JoinGroupResponse)
async def join_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    service: GroupService = Depends(get_group_service)
):
    """Join a group; joining again is a no-op"""
    joined = service.join_group(group_id, current_user.id)
    if joined:
        return JoinGroupResponse(message="Successfully joined the group", joined=True)
    return JoinGroupResponse(message="Already a member of the group", joined=False)
