from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.api.dependencies import get_analytics_dispatcher
from src.schemas.analytics import AnalyticsRequest
from src.services.analytics_dispatcher import AnalyticsDispatcher

router = APIRouter(tags=["analytics"])


@router.post("/analytics")
def analytics(
    request: AnalyticsRequest,
    dispatcher: AnalyticsDispatcher = Depends(get_analytics_dispatcher),
) -> JSONResponse:
    result = dispatcher.dispatch(request.type, request.payload)
    return JSONResponse(
        status_code=result.status_code,
        content=result.model_dump(by_alias=True, mode="json"),
    )
