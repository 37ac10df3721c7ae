"""
Translate feature errors into JSON error responses.

Handlers build plain JSONResponses, so an error response never carries an
ETag. 500-class failures are logged at error with the operation and the raw
cause; upstream outages at warning; client errors at info.
"""

from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.features.communications.domain.errors import CommunicationError, QueryFailed
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

INTERNAL_SERVER_ERROR = "Internal server error"


@contextmanager
def reporting(message: str) -> Iterator[None]:
    """
    Name the operation in the public error of any store failure.

    Feature errors other than QueryFailed pass through untouched. Anything
    unexpected is reported as a QueryFailed carrying the raw cause.
    """
    try:
        yield
    except QueryFailed as exc:
        raise exc.reported_as(message) from exc
    except CommunicationError:
        raise
    except Exception as exc:
        raise QueryFailed(message, exc, message=message) from exc


async def communication_error_handler(request: Request, exc: CommunicationError) -> JSONResponse:
    if isinstance(exc, QueryFailed):
        logger.error(
            exc.message,
            operation=exc.operation,
            cause=repr(exc.cause),
            path=request.url.path,
        )
    elif exc.status_code >= 500:
        logger.warning(exc.message, path=request.url.path, status_code=exc.status_code)
    else:
        logger.info(
            "Client request rejected",
            error=exc.message,
            path=request.url.path,
            status_code=exc.status_code,
        )

    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error",
        path=request.url.path,
        error=repr(exc),
        error_type=type(exc).__name__,
    )
    return JSONResponse(status_code=500, content={"error": INTERNAL_SERVER_ERROR})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CommunicationError, communication_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
