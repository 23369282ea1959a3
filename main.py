# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError

from pricebook.routers import auth_router, product_router, user_router

from pricebook.core.config import APP_ENV, APP_NAME, APP_VERSION, CORS_ORIGINS, IS_PRODUCTION
from pricebook.core.db import init_models
from pricebook.core.exceptions import AppException
from pricebook.core.logging import setup_logging
from pricebook.middleware.request_logging import request_logging_middleware
from pricebook.core.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    unhandled_exception_handler,
)

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application", extra={"env": APP_ENV})

    if APP_ENV == "development":
        await init_models()
        logger.info("Database models initialized (development)")
    else:
        logger.info("init_models() skipped outside development")

    yield

    logger.info("Shutting down application")


# ------------------------------------------------------------------------------
# APP INIT
# ------------------------------------------------------------------------------
def create_app() -> FastAPI:
    app = FastAPI(
        title=APP_NAME,
        description="Products, price history and user permissions",
        version=APP_VERSION,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None,
        lifespan=lifespan,
    )

    # --------------------------------------------------------------------------
    # EXCEPTION HANDLERS
    # --------------------------------------------------------------------------
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # --------------------------------------------------------------------------
    # MIDDLEWARE
    # --------------------------------------------------------------------------
    app.middleware("http")(request_logging_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --------------------------------------------------------------------------
    # HEALTH CHECK
    # --------------------------------------------------------------------------
    @app.get("/", tags=["Health"])
    async def health_check():
        return {
            "status": "ok",
            "service": "pricebook-api",
            "environment": APP_ENV,
            "version": APP_VERSION,
        }

    # --------------------------------------------------------------------------
    # ROUTERS
    # --------------------------------------------------------------------------
    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(user_router)

    return app


app = create_app()
