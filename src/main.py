from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from src.api.router import api_router
from src.core.config import Settings, get_cors_origins, get_settings
from src.core.errors import AppError, app_error_handler, validation_error_handler
from src.core.logging import configure_logging

logger = logging.getLogger(__name__)


def log_store_configuration(settings: Settings) -> None:
    logger.info("ENDPOINT: %s", settings.appwrite_url)
    logger.info("PROJECT:  %s", settings.appwrite_project_id)
    logger.info("KEY SET:  %s", bool(settings.appwrite_api_key))
    logger.info("DB_ID:    %s", settings.appwrite_database_id)
    logger.info("EMPLOYEE: %s", settings.appwrite_employee_collection_id)
    logger.info("BOOKING:  %s", settings.appwrite_booking_collection_id)


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)
    log_store_configuration(settings)

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix=settings.api_prefix)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    return app


app = create_app()
