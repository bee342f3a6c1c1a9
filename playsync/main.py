import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.cors import CORSMiddleware

from playsync import containers
from playsync.config import settings
from playsync.core.exception_handlers import (
    handle_base_api_exception,
    handle_http_exception,
    handle_unexpected_error,
    handle_validation_error,
)
from playsync.core.exceptions import BaseAPIException
from playsync.core.logging_middleware import LoggingMiddleware
from playsync.logging_config import setup_logging
from playsync.routers import auth_router, health_router, sync_router, wallet_router

load_dotenv(".env")
setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title=settings.APP_NAME)
    app.container = containers.Container()  # type: ignore

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(BaseAPIException, handle_base_api_exception)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(health_router.router)
    app.include_router(auth_router.router)
    app.include_router(sync_router.router)
    app.include_router(wallet_router.router)

    logger.info(f"{settings.APP_NAME} initialized ({settings.ENVIRONMENT})")
    return app


app = create_app()

handler = Mangum(app)
