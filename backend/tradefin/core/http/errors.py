from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm.exc import StaleDataError

from tradefin.core.middleware.context import get_logger, get_request_id
from tradefin.shared.exceptions import InvalidState, NotAuthorized, NotFound, ValidationError


log = get_logger(__name__)


def _body(error: str, message: str, **extra) -> dict:
    out = {"error": error, "message": message, "request_id": get_request_id()}
    out.update(extra)
    return out


async def _not_found(request: Request, exc: NotFound) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=_body("not_found", str(exc)))


async def _invalid_state(request: Request, exc: InvalidState) -> JSONResponse:
    log.info(
        "lifecycle.transition_rejected",
        entity=exc.entity,
        current_state=exc.current_state,
        operation=exc.operation,
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_body(
            "invalid_state",
            str(exc),
            entity=exc.entity,
            current_state=exc.current_state,
            operation=exc.operation,
        ),
    )


async def _not_authorized(request: Request, exc: NotAuthorized) -> JSONResponse:
    log.warning("access.denied", username=exc.username, resource=exc.resource, path=request.url.path)
    return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content=_body("forbidden", str(exc)))


async def _validation(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_body("validation_error", exc.message, errors=exc.errors),
    )


async def _stale(request: Request, exc: StaleDataError) -> JSONResponse:
    log.warning("persistence.stale_write", path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_body("concurrent_modification", "The record was modified concurrently; reload and retry"),
    )


async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unhandled_error", method=request.method, path=request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_body("internal_error", "Internal server error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(NotFound, _not_found)
    app.add_exception_handler(InvalidState, _invalid_state)
    app.add_exception_handler(NotAuthorized, _not_authorized)
    app.add_exception_handler(ValidationError, _validation)
    app.add_exception_handler(StaleDataError, _stale)
    app.add_exception_handler(Exception, _unhandled)
