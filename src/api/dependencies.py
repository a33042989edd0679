from __future__ import annotations

from src.core.appwrite import AppwriteClient
from src.core.config import get_settings
from src.repositories.analytics_repository import AnalyticsRepository
from src.services.analytics_dispatcher import AnalyticsDispatcher
from src.services.analytics_service import AnalyticsService
from src.services.notification_service import WhatsAppNotificationService


def get_analytics_repository() -> AnalyticsRepository:
    settings = get_settings()
    return AnalyticsRepository(store=AppwriteClient(settings), settings=settings)


def get_analytics_service() -> AnalyticsService:
    return AnalyticsService(repository=get_analytics_repository())


def get_notification_service() -> WhatsAppNotificationService:
    return WhatsAppNotificationService(settings=get_settings())


def get_analytics_dispatcher() -> AnalyticsDispatcher:
    return AnalyticsDispatcher(
        analytics_service=get_analytics_service(),
        notification_service=get_notification_service(),
    )
