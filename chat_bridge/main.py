"""
Chat Bridge Application Entry Point

FastAPI application main entry, including router registration and application configuration.
"""

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from chat_bridge import __version__
from chat_bridge.api.proxy import openai_router
from chat_bridge.common.errors import AppError, ValidationError
from chat_bridge.config import get_settings
from chat_bridge.logging_config import setup_logging
from chat_bridge.middleware import PermissiveCORSMiddleware
from chat_bridge.middleware.cors import ALLOW_ORIGIN_HEADERS
from chat_bridge.services import get_model_table

logger = logging.getLogger(__name__)

# Initialize logging configuration
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application Lifecycle Management

    Loads the model table on startup so a broken MODEL_TABLE_FILE fails fast.
    """
    settings = get_settings()
    table = get_model_table()
    logger.info(
        "%s started: upstream=%s models=%d default_model=%s",
        settings.APP_NAME,
        settings.UPSTREAM_BASE_URL,
        len(table.model_ids()),
        table.default.name,
    )
    yield


settings = get_settings()

app = FastAPI(
    title=settings.APP_NAME,
    description="OpenAI-compatible chat completions proxy",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(PermissiveCORSMiddleware)


# Global Exception Handlers
@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    """
    Handle application custom exceptions

    In production mode, error details are hidden to prevent information leakage.
    """
    settings = get_settings()
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(include_details=settings.DEBUG),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    error = ValidationError(
        message="Invalid chat completion request",
        details={"errors": jsonable_encoder(exc.errors())},
    )
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """
    Unmatched method/path combinations answer 404 in plaintext
    """
    if exc.status_code in (404, 405):
        return PlainTextResponse(f"Not Found: {request.url.path}", status_code=404)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"message": str(exc.detail), "type": "http_error", "code": str(exc.status_code)}},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """
    Handle uncaught exceptions

    These responses bypass the CORS middleware, so the header is set here.
    """
    settings = get_settings()
    logger.error(
        "Uncaught exception: %s\nPath: %s\nTraceback:\n%s",
        str(exc),
        request.url.path,
        traceback.format_exc(),
    )

    if settings.DEBUG:
        content = {
            "error": {
                "message": str(exc),
                "type": type(exc).__name__,
                "code": "internal_error",
                "traceback": traceback.format_exc().split("\n"),
            }
        }
    else:
        content = {
            "error": {
                "message": "Internal server error",
                "type": "internal_error",
                "code": "internal_error",
            }
        }
    return JSONResponse(status_code=500, content=content, headers=ALLOW_ORIGIN_HEADERS)


@app.get("/", tags=["Health"])
async def root():
    """
    Root Path

    Plaintext liveness message.
    """
    return PlainTextResponse(get_settings().LIVENESS_MESSAGE)


@app.get("/health", tags=["Health"])
async def health_check():
    return {"status": "healthy"}


# Register Proxy Routers
app.include_router(openai_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "chat_bridge.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.DEBUG,
    )
