"""HTTP surface: liveness, health, the new-session webhook and room lookup."""

from __future__ import annotations

import hmac
import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime  # noqa: TC003
from typing import TYPE_CHECKING, Annotated

from fastapi import APIRouter, Depends, FastAPI, Path, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict

from omniresolve.app import (
    Services,
    check_health,
    close_services,
    create_room_from_webhook,
    get_room_by_id,
)
from omniresolve.common.sanitizer import Sanitizer
from omniresolve.domain.errors import RoomNotFoundError, WebhookValidationError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from fastapi import Response

    from omniresolve.config.api import ApiConfig

log = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-Id"
GENERIC_ERROR_MESSAGE = "Something went wrong"
MAX_ROOM_ID = 2**63 - 1

RoomIdPath = Annotated[int, Path(ge=1, le=MAX_ROOM_ID)]


class UnauthorizedError(Exception):
    def __init__(self) -> None:
        super().__init__("Unauthorized")


class ErrorResponse(BaseModel):
    message: str
    request_id: str


class RoomResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    multichannel_room_id: str
    created_at: datetime
    updated_at: datetime | None = None


class HealthResponse(BaseModel):
    database: str
    redis: str


def _services(request: Request) -> Services:
    return request.app.state.services


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


def _error(request: Request, status_code: int, message: str) -> JSONResponse:
    body = ErrorResponse(message=message, request_id=_request_id(request))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(),
        headers={REQUEST_ID_HEADER: body.request_id},
    )


def static_token(secret_key: str) -> Callable[[Request], None]:
    """Dependency requiring the ``Authorization`` header to equal ``secret_key``."""

    def verify(request: Request) -> None:
        supplied = request.headers.get("Authorization", "")
        if not hmac.compare_digest(supplied.encode(), secret_key.encode()):
            raise UnauthorizedError

    return verify


def build_router(config: ApiConfig, sanitizer: Sanitizer) -> APIRouter:
    router = APIRouter()
    require_token = static_token(config.secret_key)

    @router.get("/", response_class=PlainTextResponse)
    async def root() -> str:
        return "OK"

    @router.get("/health", response_model=HealthResponse)
    async def health(request: Request) -> JSONResponse:
        report = await check_health(_services(request))
        body = HealthResponse(database=report.database, redis=report.redis)
        return JSONResponse(content=body.model_dump(), status_code=200 if report.healthy else 503)

    @router.post("/wh/qiscus/omnichannel/new-session")
    async def new_session(request: Request) -> str:
        raw = await request.body()
        log.info(
            "New-session webhook received: body=%s headers=%s",
            sanitizer.sanitize(raw),
            sanitizer.sanitize_headers(dict(request.headers)),
        )
        room = await create_room_from_webhook(_services(request), raw)
        log.info("Room %s registered from webhook", room.multichannel_room_id)
        return "ok"

    @router.get(
        "/api/v1/rooms/{room_id}",
        response_model=RoomResponse,
        dependencies=[Depends(require_token)],
    )
    def room_by_id(request: Request, room_id: RoomIdPath) -> RoomResponse:
        room = get_room_by_id(_services(request), room_id)
        return RoomResponse.model_validate(room)

    return router


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(RoomNotFoundError)
    async def room_not_found(request: Request, exc: RoomNotFoundError) -> JSONResponse:
        return _error(request, 404, str(exc))

    @app.exception_handler(WebhookValidationError)
    async def invalid_webhook(request: Request, exc: WebhookValidationError) -> JSONResponse:
        log.warning("Rejected webhook: %s", exc)
        return _error(request, 400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        message = str(errors[0].get("msg", "Invalid request")) if errors else "Invalid request"
        return _error(request, 400, message)

    @app.exception_handler(UnauthorizedError)
    async def unauthorized(request: Request, exc: UnauthorizedError) -> JSONResponse:
        return _error(request, 401, str(exc))

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.error(
            "Unhandled error on %s %s (request_id=%s)",
            request.method,
            request.url.path,
            _request_id(request),
            exc_info=exc,
        )
        return _error(request, 500, GENERIC_ERROR_MESSAGE)


def create_api(
    services: Services,
    config: ApiConfig,
    *,
    sanitizer: Sanitizer | None = None,
    close_on_shutdown: bool = True,
) -> FastAPI:
    """Build the ASGI application around already wired ``services``."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("API starting on %s:%s", config.host, config.port)
        yield
        log.info("API shutting down")
        if close_on_shutdown:
            await close_services(app.state.services)

    app = FastAPI(title="omniresolve", lifespan=lifespan, docs_url=None, redoc_url=None)
    app.state.services = services

    @app.middleware("http")
    async def assign_request_id(
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    _register_error_handlers(app)
    app.include_router(build_router(config, sanitizer or Sanitizer()))
    return app


__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "REQUEST_ID_HEADER",
    "RoomResponse",
    "UnauthorizedError",
    "create_api",
    "static_token",
]
