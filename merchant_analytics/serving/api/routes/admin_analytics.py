"""
Super Admin Analytics Endpoints

GET /api/admin/analytics/charts - chart data for the platform dashboard

Query Parameters:
- period: '7d' | '30d' | '90d' | '1y' (default: '30d')
"""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from merchant_analytics.analytics.charts import ChartService, chart_cache_key
from merchant_analytics.analytics.datasource import ChartDataSource
from merchant_analytics.analytics.periods import PERIODS, resolve_period
from merchant_analytics.analytics.schemas import ChartData, ChartResponse
from merchant_analytics.config import get_settings
from merchant_analytics.exceptions import AnalyticsError
from merchant_analytics.serving.api.auth import AuthContext, require_super_admin
from merchant_analytics.serving.api.dependencies import get_analytics_source
from merchant_analytics.serving.cache import analytics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/charts", response_model=ChartResponse)
async def get_chart_data(
    period: Optional[str] = Query(
        None,
        description=f"One of {', '.join(PERIODS)}; anything else means 30d",
    ),
    context: AuthContext = Depends(require_super_admin),
    source: ChartDataSource = Depends(get_analytics_source),
):
    """
    Get revenue, customer growth, activity heatmap and month-over-month
    comparison for the platform dashboard.
    """
    settings = get_settings()
    resolved = resolve_period(period)
    cache_key = chart_cache_key(resolved)
    use_cache = settings.analytics.cache_enabled and analytics_cache.available

    logger.info("get_chart_data called", period=resolved.token, user_id=context.user_id)

    try:
        if use_cache:
            cached = await analytics_cache.get(cache_key)
            if cached:
                logger.debug("Returning cached chart data", period=resolved.token)
                return ChartResponse(data=ChartData.model_validate(cached))

        data = await ChartService(source, settings.analytics).build(resolved.token)

        if use_cache:
            await analytics_cache.set(cache_key, data.model_dump(mode="json", by_alias=True))
    except Exception as e:
        logger.exception("Error fetching chart data", period=resolved.token, error_type=type(e).__name__)
        error = AnalyticsError("Failed to fetch chart data")
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    return ChartResponse(data=data)
