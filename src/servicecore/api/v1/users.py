import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ...messages import MessageCode
from ...repositories.pagination import ListOptions, PaginationRequest
from ...schemas.user import UserCreate, UserUpdate
from ...services.user_service import UserService
from ..dependencies import Actor, get_user_service
from ..responses import send_paginated, send_success
from .params import pagination_params

router = APIRouter(prefix="/users", tags=["users"])

RESOURCE = {"resource": "User"}

Service = Annotated[UserService, Depends(get_user_service)]


@router.post("")
async def create_user(payload: UserCreate, service: Service, actor: Actor):
    user = await service.create(payload, actor=actor)
    return send_success(user, MessageCode.CREATED, RESOURCE)


@router.get("")
async def list_users(
    service: Service,
    pagination: Annotated[PaginationRequest, Depends(pagination_params)],
    email: Annotated[str | None, Query(max_length=255)] = None,
):
    filters = {"email": email.strip().lower()} if email else None
    result = await service.list_all(ListOptions(pagination=pagination, filters=filters))
    return send_paginated(result, MessageCode.LIST_FETCHED, RESOURCE)


@router.get("/{user_id}")
async def get_user(user_id: uuid.UUID, service: Service):
    return send_success(await service.get(user_id), MessageCode.FETCHED, RESOURCE)


@router.patch("/{user_id}")
async def update_user(user_id: uuid.UUID, payload: UserUpdate, service: Service, actor: Actor):
    user = await service.update(user_id, payload, actor=actor)
    return send_success(user, MessageCode.UPDATED, RESOURCE)


@router.delete("/{user_id}")
async def delete_user(user_id: uuid.UUID, service: Service, actor: Actor):
    await service.remove(user_id, actor=actor)
    return send_success(code=MessageCode.DELETED, params=RESOURCE)
