from fastapi import APIRouter

from . import countries, users


def get_api_router() -> APIRouter:
    router = APIRouter(prefix="/api/v1")
    router.include_router(countries.router)
    router.include_router(users.router)
    return router
