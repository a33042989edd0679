from __future__ import annotations

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Ignore unrelated env keys so the shared front-end .env can be reused.
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "Travel Analytics Backend"
    environment: str = "development"
    api_prefix: str = "/api/v1"
    cors_allow_origins: str = "http://localhost:3000,http://127.0.0.1:3000"
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    appwrite_url: str = Field(
        default="https://cloud.appwrite.io/v1",
        validation_alias=AliasChoices("APPWRITE_URL", "VITE_APPWRITE_URL"),
    )
    appwrite_project_id: str = Field(
        default="",
        validation_alias=AliasChoices("APPWRITE_PROJECT_ID", "VITE_APPWRITE_PROJECT_ID"),
    )
    appwrite_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("APPWRITE_API_KEY", "API_KEY"),
    )
    appwrite_database_id: str = Field(
        default="",
        validation_alias=AliasChoices("APPWRITE_DATABASE_ID", "VITE_APPWRITE_DATABASE_ID"),
    )
    appwrite_employee_collection_id: str = Field(
        default="",
        validation_alias=AliasChoices(
            "APPWRITE_EMPLOYEE_COLLECTION_ID", "VITE_APPWRITE_EMPLOYEE_COLLECTION_ID"
        ),
    )
    appwrite_booking_collection_id: str = Field(
        default="",
        validation_alias=AliasChoices(
            "APPWRITE_BOOKING_COLLECTION_ID", "VITE_APPWRITE_BOOKING_COLLECTION_ID"
        ),
    )
    appwrite_page_limit: int = Field(default=2000, alias="APPWRITE_PAGE_LIMIT")
    appwrite_max_pages: int = Field(default=500, alias="APPWRITE_MAX_PAGES")
    appwrite_timeout_seconds: float = Field(default=30.0, alias="APPWRITE_TIMEOUT_SECONDS")

    whatsapp_api_url: str = Field(
        default="https://api.msg91.com/api/v5/whatsapp/whatsapp-outbound-message/bulk/",
        alias="WHATSAPP_API_URL",
    )
    whatsapp_auth_key: str = Field(default="", alias="WHATSAPP_AUTH_KEY")
    whatsapp_integrated_number: str = Field(default="", alias="WHATSAPP_INTEGRATED_NUMBER")
    whatsapp_template_name: str = Field(default="welcome_message", alias="WHATSAPP_TEMPLATE_NAME")
    whatsapp_template_namespace: str = Field(default="", alias="WHATSAPP_TEMPLATE_NAMESPACE")
    whatsapp_template_language: str = Field(default="en", alias="WHATSAPP_TEMPLATE_LANGUAGE")
    whatsapp_timeout_seconds: float = Field(default=15.0, alias="WHATSAPP_TIMEOUT_SECONDS")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def get_cors_origins() -> list[str]:
    settings = get_settings()
    return [origin.strip() for origin in settings.cors_allow_origins.split(",") if origin.strip()]
