from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter

from src.core.config import get_settings
from src.shared.response import Meta, ResponseEnvelope


router = APIRouter(tags=["health"])


def _health_meta() -> Meta:
    return Meta(
        as_of_date=date.today().isoformat(),
        source="system",
        calculation_version="v1",
        generated_at=datetime.now(timezone.utc).isoformat(),
    )


@router.get("/health")
def health_check() -> ResponseEnvelope[dict]:
    settings = get_settings()
    store_configured = bool(settings.appwrite_project_id and settings.appwrite_database_id)
    return ResponseEnvelope(
        data={"status": "ok", "storeConfigured": store_configured},
        meta=_health_meta(),
    )


@router.get("/healthz")
def health_check_liveness() -> ResponseEnvelope[dict]:
    return ResponseEnvelope(data={"status": "ok"}, meta=_health_meta())
