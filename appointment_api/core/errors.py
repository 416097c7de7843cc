import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

DATABASE_UNAVAILABLE = 'Database unavailable. Verify DATABASE_URL and database credentials.'

DEFAULT_MESSAGES = {
    status.HTTP_400_BAD_REQUEST: 'Bad request',
    status.HTTP_401_UNAUTHORIZED: 'Not authorized',
    status.HTTP_403_FORBIDDEN: 'Forbidden',
    status.HTTP_404_NOT_FOUND: 'No content found',
    status.HTTP_500_INTERNAL_SERVER_ERROR: 'Internal error',
}


def default_message(status_code: int) -> str | None:
    return DEFAULT_MESSAGES.get(status_code)


def bad_request(detail: str | None = None) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=detail or default_message(status.HTTP_400_BAD_REQUEST),
    )


def database_unavailable() -> HTTPException:
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=DATABASE_UNAVAILABLE)


def error_envelope(status_code: int, message: str | None = None, details: str | None = None) -> dict:
    return {
        'success': False,
        'data': None,
        'error': {'message': message or default_message(status_code), 'details': details},
    }


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else None
    details = None if isinstance(exc.detail, str) or exc.detail is None else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.status_code, message, details),
        headers=getattr(exc, 'headers', None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in jsonable_encoder(exc.errors())
    ]
    logger.info('Rejected request to %s: %s', request.url.path, '; '.join(messages))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_envelope(status.HTTP_400_BAD_REQUEST, details='; '.join(messages)),
    )


async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error('Database error while handling %s %s', request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content=error_envelope(status.HTTP_503_SERVICE_UNAVAILABLE, DATABASE_UNAVAILABLE),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
