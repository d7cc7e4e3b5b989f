"""
Analytics response models.

Fields are snake_case in Python and camelCase on the wire.
"""

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# =============================================================================
# CHART DATA
# =============================================================================

class RevenuePoint(CamelModel):
    """One bucket of the revenue series"""
    date: str
    revenue: float
    order_count: int


class CustomerGrowthPoint(CamelModel):
    """One day of customer growth"""
    date: str
    new_customers: int
    total_customers: int


class HeatmapCell(CamelModel):
    """Orders in one (day of week, hour) slot; day 0 is Sunday"""
    day_of_week: int
    hour: int
    order_count: int


class CurrencyRevenue(CamelModel):
    """Revenue totals for one currency"""
    total_revenue: float
    total_orders: int
    avg_order_value: float


class ChartSummary(CamelModel):
    total_revenue: float
    total_orders: int
    avg_order_value: float
    total_new_customers: int
    current_total_customers: int


class MonthOverMonth(CamelModel):
    """Current vs. previous calendar month, growth in percent"""
    current_month_revenue: float
    last_month_revenue: float
    revenue_growth: float
    current_month_orders: int
    last_month_orders: int
    order_growth: float
    current_month_customers: int
    last_month_customers: int
    customer_growth: float


class ChartData(CamelModel):
    """Super-admin dashboard chart payload"""
    period: str
    revenue_data: List[RevenuePoint]
    revenue_data_by_currency: Dict[str, List[RevenuePoint]]
    customer_growth: List[CustomerGrowthPoint]
    activity_heatmap: List[HeatmapCell]
    summary: ChartSummary
    revenue_by_currency: Dict[str, CurrencyRevenue]
    month_over_month: MonthOverMonth


class ChartResponse(CamelModel):
    success: bool = True
    data: ChartData


# =============================================================================
# MERCHANT SALES
# =============================================================================

class SalesSummary(CamelModel):
    total_revenue: float
    total_orders: int
    average_order_value: float
    completed_orders: int
    cancelled_orders: int
    completion_rate: float


class RevenueTrendPoint(CamelModel):
    date: str
    revenue: float
    orders: int


class TopSellingItem(CamelModel):
    menu_id: str
    menu_name: str
    quantity: int
    revenue: float
    percentage: float


class PeakHour(CamelModel):
    hour: int
    orders: int
    revenue: float


class StatusBreakdown(CamelModel):
    status: str
    count: int
    percentage: float


class PaymentMethodBreakdown(CamelModel):
    method: str
    count: int
    revenue: float
    percentage: float


class OrderTypeBreakdown(CamelModel):
    type: str
    count: int
    revenue: float
    percentage: float


class SalesAnalytics(CamelModel):
    """Merchant sales report payload"""
    summary: SalesSummary
    revenue_trend: List[RevenueTrendPoint]
    top_selling_items: List[TopSellingItem]
    peak_hours: List[PeakHour]
    orders_by_status: List[StatusBreakdown]
    payment_methods: List[PaymentMethodBreakdown]
    order_types: List[OrderTypeBreakdown]


class SalesMeta(CamelModel):
    period: str
    start_date: datetime
    end_date: datetime


class SalesResponse(CamelModel):
    success: bool = True
    data: SalesAnalytics
    meta: SalesMeta
