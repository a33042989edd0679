from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from src.api.dependencies import get_analytics_dispatcher
from src.core.config import Settings
from src.main import create_app
from src.repositories.analytics_repository import AnalyticsRepository
from src.services.analytics_dispatcher import AnalyticsDispatcher
from src.services.analytics_service import AnalyticsService
from src.services.notification_service import WhatsAppNotificationService
from tests.fakes import BOOKINGS, EMPLOYEES, FakeDocumentStore, make_settings


@pytest.fixture()
def settings() -> Settings:
    return make_settings()


@pytest.fixture()
def store() -> FakeDocumentStore:
    return FakeDocumentStore({EMPLOYEES: [], BOOKINGS: []})


@pytest.fixture()
def service(store: FakeDocumentStore, settings: Settings) -> AnalyticsService:
    return AnalyticsService(repository=AnalyticsRepository(store=store, settings=settings))


@pytest.fixture()
def dispatcher(service: AnalyticsService, settings: Settings) -> AnalyticsDispatcher:
    return AnalyticsDispatcher(
        analytics_service=service,
        notification_service=WhatsAppNotificationService(settings=settings),
    )


@pytest.fixture()
def client(dispatcher: AnalyticsDispatcher) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_analytics_dispatcher] = lambda: dispatcher
    return TestClient(app)
