import logging
import uuid

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from contapyme.core.exceptions import ContaPymeException, InternalError, ValidationError

logger = logging.getLogger("contapyme.errors")


def _request_context(request: Request) -> dict:
    return {
        "path": request.url.path,
        "method": request.method,
        "entity_id": request.path_params.get("id") or request.path_params.get("entity_id"),
    }


def register_error_handlers(app):
    @app.exception_handler(ContaPymeException)
    async def domain_exception(request: Request, exc: ContaPymeException):
        context = _request_context(request)
        level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
        logger.log(
            level,
            "%s %s failed: %s (%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code,
            extra={**context, "error_code": exc.code},
        )
        return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_dict()))

    @app.exception_handler(RequestValidationError)
    async def request_validation(request: Request, exc: RequestValidationError):
        error = ValidationError("Request validation failed", details={"errors": exc.errors()})
        logger.warning(
            "%s %s rejected: invalid request",
            request.method,
            request.url.path,
            extra=_request_context(request),
        )
        return JSONResponse(status_code=error.status_code, content=jsonable_encoder(error.to_dict()))

    @app.exception_handler(Exception)
    async def unhandled_exception(request: Request, exc: Exception):  # noqa: BLE001
        correlation_id = uuid.uuid4().hex
        logger.exception(
            "Unhandled error cid=%s path=%s method=%s",
            correlation_id,
            request.url.path,
            request.method,
            extra=_request_context(request),
        )
        error = InternalError(details={"cid": correlation_id})
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    return app
