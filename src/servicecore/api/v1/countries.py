import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ...messages import MessageCode
from ...repositories.pagination import ListOptions, PaginationRequest
from ...schemas.country import CountryCreate, CountryUpdate
from ...services.country_service import CountryService
from ..dependencies import Actor, get_country_service
from ..responses import send_paginated, send_success
from .params import pagination_params

router = APIRouter(prefix="/countries", tags=["countries"])

RESOURCE = {"resource": "Country"}

Service = Annotated[CountryService, Depends(get_country_service)]


@router.post("")
async def create_country(payload: CountryCreate, service: Service, actor: Actor):
    country = await service.create(payload, actor=actor)
    return send_success(country, MessageCode.CREATED, RESOURCE)


@router.get("")
async def list_countries(
    service: Service,
    pagination: Annotated[PaginationRequest, Depends(pagination_params)],
    code: Annotated[str | None, Query(max_length=3)] = None,
):
    filters = {"code": code.strip().upper()} if code else None
    result = await service.list_all(ListOptions(pagination=pagination, filters=filters))
    return send_paginated(result, MessageCode.LIST_FETCHED, RESOURCE)


@router.get("/{country_id}")
async def get_country(country_id: uuid.UUID, service: Service):
    return send_success(await service.get(country_id), MessageCode.FETCHED, RESOURCE)


@router.patch("/{country_id}")
async def update_country(country_id: uuid.UUID, payload: CountryUpdate, service: Service, actor: Actor):
    country = await service.update(country_id, payload, actor=actor)
    return send_success(country, MessageCode.UPDATED, RESOURCE)


@router.delete("/{country_id}")
async def delete_country(country_id: uuid.UUID, service: Service, actor: Actor):
    await service.remove(country_id, actor=actor)
    return send_success(code=MessageCode.DELETED, params=RESOURCE)
