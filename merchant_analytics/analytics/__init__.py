"""
Analytics Module

Chart and sales aggregation over order and customer records.
"""
from .bucketing import Granularity
from .charts import ChartService
from .datasource import ChartDataSource, SalesDataSource, SqlAlchemyAnalyticsSource
from .periods import PERIODS, resolve_period, resolve_sales_range
from .sales import SalesAnalyticsService

__all__ = [
    "Granularity",
    "ChartService",
    "ChartDataSource",
    "SalesDataSource",
    "SqlAlchemyAnalyticsSource",
    "PERIODS",
    "resolve_period",
    "resolve_sales_range",
    "SalesAnalyticsService",
]
