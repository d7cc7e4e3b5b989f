"""
Shared FastAPI dependencies.
"""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from merchant_analytics.analytics.datasource import SqlAlchemyAnalyticsSource
from merchant_analytics.database.connection import get_db_dependency


async def get_analytics_source(
    db: AsyncSession = Depends(get_db_dependency),
) -> SqlAlchemyAnalyticsSource:
    """Analytics reads bound to the request's session. Override in tests."""
    return SqlAlchemyAnalyticsSource(db)
