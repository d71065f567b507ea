from datetime import datetime, timezone
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import PeerReadsError
from app.schemas.error import ErrorResponse

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(request: Request, status_code: int, message: str, headers=None) -> JSONResponse:
    """Cuerpo uniforme: {timestamp, status, error, message, path}."""
    status_code = int(status_code)
    body = ErrorResponse(
        timestamp=datetime.now(timezone.utc),
        status=status_code,
        error=HTTPStatus(status_code).phrase,
        message=message,
        path=request.url.path,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"), headers=headers)


async def handle_domain_error(request: Request, exc: PeerReadsError) -> JSONResponse:
    return error_response(request, exc.status_code, exc.message)


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(
        request,
        exc.status_code,
        str(exc.detail),
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    parts = []
    for error in exc.errors():
        field = error["loc"][-1] if error.get("loc") else "body"
        parts.append(f"{field} {error['msg']};")
    message = "Validation failed: " + " ".join(parts)
    return error_response(request, HTTPStatus.BAD_REQUEST, message.strip())


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    # El middleware de main.py ya logueó la traza; al cliente no se le da detalle
    return error_response(request, HTTPStatus.INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PeerReadsError, handle_domain_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
