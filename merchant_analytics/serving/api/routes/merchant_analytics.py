"""
Merchant Analytics Endpoints

GET /api/merchant/analytics/sales - sales report for the caller's merchant

Query Parameters:
- period: 'today' | 'week' | 'month' | 'quarter' | 'year' | 'custom' (default: 'month')
- startDate, endDate: ISO dates, required for 'custom'
"""

from typing import Optional
from zoneinfo import ZoneInfo

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from merchant_analytics.analytics.bucketing import UTC, utc_now
from merchant_analytics.analytics.datasource import SalesDataSource
from merchant_analytics.analytics.periods import SALES_PERIODS, resolve_sales_range
from merchant_analytics.analytics.sales import SalesAnalyticsService
from merchant_analytics.analytics.schemas import SalesMeta, SalesResponse
from merchant_analytics.config import get_settings
from merchant_analytics.exceptions import AnalyticsError
from merchant_analytics.serving.api.auth import AuthContext, require_merchant
from merchant_analytics.serving.api.dependencies import get_analytics_source

router = APIRouter()
logger = structlog.get_logger(__name__)


@router.get("/sales", response_model=SalesResponse)
async def get_sales_analytics(
    period: Optional[str] = Query(None, description=f"One of {', '.join(SALES_PERIODS)}"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    context: AuthContext = Depends(require_merchant),
    source: SalesDataSource = Depends(get_analytics_source),
):
    """Revenue trend, top sellers, peak hours and order breakdowns."""
    settings = get_settings()
    sales_range = resolve_sales_range(
        period,
        utc_now(),
        ZoneInfo(settings.analytics.timezone),
        start_date=start_date,
        end_date=end_date,
    )

    logger.info(
        "get_sales_analytics called",
        merchant_id=context.merchant_id,
        period=sales_range.period,
    )

    try:
        data = await SalesAnalyticsService(source, settings.analytics).build(
            context.merchant_id, sales_range
        )
    except Exception as e:
        logger.exception("Sales analytics error", merchant_id=context.merchant_id, error_type=type(e).__name__)
        error = AnalyticsError("Failed to fetch sales analytics", error_code="ANALYTICS_ERROR")
        return JSONResponse(status_code=error.status_code, content=error.to_payload())

    return SalesResponse(
        data=data,
        meta=SalesMeta(
            period=sales_range.period,
            start_date=sales_range.start.replace(tzinfo=UTC),
            end_date=sales_range.end.replace(tzinfo=UTC),
        ),
    )
