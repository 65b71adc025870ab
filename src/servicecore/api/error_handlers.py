"""
FastAPI exception handlers.

Every exception the application lets escape ends up in one handler that
delegates to the `ErrorDispatcher`; the handlers only adapt Starlette's
request/response types.

    dispatcher = ErrorDispatcher(include_stack=settings.INCLUDE_ERROR_STACK)
    register_exception_handlers(app, dispatcher)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..exceptions import AppError, ErrorDispatcher

logger = logging.getLogger(__name__)


def make_exception_handler(dispatcher: ErrorDispatcher):
    async def handle(request: Request, exc: Exception) -> JSONResponse:
        response = dispatcher.dispatch(exc, method=request.method, path=request.url.path)
        # handlers run before anything is written, so a response is always returned here
        return JSONResponse(status_code=response.status_code, content=response.body)

    return handle


def register_exception_handlers(app: FastAPI, dispatcher: ErrorDispatcher) -> None:
    handler = make_exception_handler(dispatcher)
    # Most specific first; `Exception` only sees errors raised outside UnhandledErrorMiddleware
    app.add_exception_handler(AppError, handler)
    app.add_exception_handler(IntegrityError, handler)
    app.add_exception_handler(RequestValidationError, handler)
    app.add_exception_handler(StarletteHTTPException, handler)
    app.add_exception_handler(Exception, handler)
    app.state.error_dispatcher = dispatcher
