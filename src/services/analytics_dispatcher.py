from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from src.core.errors import AppError
from src.schemas.analytics import (
    BranchSummaryRequest,
    ConsultantDetailRequest,
    CountryWiseRequest,
    DispatchResult,
    DispatchStatus,
    LeaderboardRequest,
    WelcomeMessageRequest,
)
from src.services.analytics_service import (
    AnalyticsService,
    empty_country_wise_response,
    empty_leaderboard_response,
)
from src.services.notification_service import WhatsAppNotificationService

logger = logging.getLogger(__name__)


class ErrorPolicy(str, Enum):
    # Handler catches its own failures and returns a result flagged with error=True.
    ABSORB = "absorb"
    # Handler exceptions reach the dispatcher and fail the request.
    PROPAGATE = "propagate"
    # Handler returns a success/failure value and never raises.
    REPORT = "report"


@dataclass(frozen=True)
class HandlerRoute:
    request_model: Type[BaseModel]
    service: str
    method: str
    error_policy: ErrorPolicy
    # Returned in place of the handler result when an absorbing route gets a bad payload.
    fallback: Optional[Callable[[], BaseModel]] = None


HANDLERS: Dict[str, HandlerRoute] = {
    "leaderboard": HandlerRoute(
        LeaderboardRequest,
        "analytics_service",
        "get_leaderboard",
        ErrorPolicy.ABSORB,
        fallback=empty_leaderboard_response,
    ),
    "branchSummary": HandlerRoute(
        BranchSummaryRequest, "analytics_service", "get_branch_summary", ErrorPolicy.PROPAGATE
    ),
    "consultantDetail": HandlerRoute(
        ConsultantDetailRequest, "analytics_service", "get_consultant_detail", ErrorPolicy.PROPAGATE
    ),
    "countryWise": HandlerRoute(
        CountryWiseRequest,
        "analytics_service",
        "get_country_wise",
        ErrorPolicy.ABSORB,
        fallback=empty_country_wise_response,
    ),
    "welcomeMessage": HandlerRoute(
        WelcomeMessageRequest, "notification_service", "send_welcome_message", ErrorPolicy.REPORT
    ),
}


MASKED_FIELDS = ("phone",)


def mask_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of ``payload`` with contact details reduced to their last four characters."""
    masked = dict(payload)
    for key in MASKED_FIELDS:
        value = masked.get(key)
        if value:
            text = str(value)
            masked[key] = "*" * max(len(text) - 4, 0) + text[-4:]
    return masked


class AnalyticsDispatcher:
    def __init__(
        self,
        analytics_service: AnalyticsService,
        notification_service: WhatsAppNotificationService,
    ) -> None:
        self.analytics_service = analytics_service
        self.notification_service = notification_service

    def dispatch(self, request_type: Optional[str], payload: Optional[Dict[str, Any]]) -> DispatchResult:
        route = HANDLERS.get(request_type) if request_type else None
        if route is None:
            return DispatchResult(
                success=False,
                status=DispatchStatus.FAILED,
                status_code=400,
                error=f'Unknown type "{request_type}". Valid types: {", ".join(HANDLERS)}',
            )

        try:
            request = route.request_model.model_validate(payload or {})
        except ValidationError as exc:
            if route.fallback is not None:
                logger.warning(
                    "[analytics] type=%s invalid payload: %s", request_type, self._describe_errors(exc)
                )
                return DispatchResult(
                    success=True,
                    status=DispatchStatus.DEGRADED,
                    status_code=200,
                    data=route.fallback().model_dump(by_alias=True, mode="json"),
                )
            return DispatchResult(
                success=False,
                status=DispatchStatus.FAILED,
                status_code=400,
                error=f"Invalid payload for {request_type}: {self._describe_errors(exc)}",
            )

        logger.info(
            "[analytics] type=%s payload=%s",
            request_type,
            json.dumps(mask_payload(payload or {}), default=str),
        )
        handler = getattr(getattr(self, route.service), route.method)
        try:
            result = handler(request)
        except AppError as exc:
            logger.error("[analytics] type=%s failed: %s", request_type, exc.message)
            return DispatchResult(
                success=False,
                status=DispatchStatus.FAILED,
                status_code=exc.status_code,
                error=exc.message,
            )
        except Exception as exc:
            logger.exception("[analytics] type=%s failed: %s", request_type, exc)
            return DispatchResult(
                success=False,
                status=DispatchStatus.FAILED,
                status_code=500,
                error=str(exc),
            )

        status = DispatchStatus.DEGRADED if self._is_degraded(route, result) else DispatchStatus.OK
        return DispatchResult(
            success=True,
            status=status,
            status_code=200,
            data=result.model_dump(by_alias=True, mode="json"),
        )

    @staticmethod
    def _is_degraded(route: HandlerRoute, result: BaseModel) -> bool:
        if route.error_policy is ErrorPolicy.ABSORB:
            return bool(getattr(result, "error", False))
        if route.error_policy is ErrorPolicy.REPORT:
            return not getattr(result, "success", True)
        return False

    @staticmethod
    def _describe_errors(exc: ValidationError) -> str:
        return "; ".join(
            f"{'.'.join(str(part) for part in error['loc']) or 'payload'}: {error['msg']}"
            for error in exc.errors()
        )
