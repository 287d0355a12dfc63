from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from shared.core import get_logger
from storefront.domain.errors import StorefrontError, AuthenticationError

logger = get_logger(__name__)

def _describe(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", "invalid"))
    return "Invalid request: " + "; ".join(parts)

async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    else:
        logger.warning(
            f"{request.method} {request.url.path} rejected: {exc.message}",
            extra={'extra_fields': {'error': type(exc).__name__, 'status_code': exc.status_code}}
        )
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message}, headers=headers)

async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _describe(exc)
    logger.warning(f"{request.method} {request.url.path} rejected: {message}")
    return JSONResponse(status_code=400, content={"detail": message})

def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
