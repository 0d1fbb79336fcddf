"""
FastAPI Dependencies
"""

from fastapi import Depends

from src.database.connection import get_database
from src.database.repository import MongoDataSource, ReportDataSource
from src.reporting.errors import UpstreamUnavailableError
from src.reporting.service import ReportService


def get_data_source() -> ReportDataSource:
    """
    Data source for the current request.

    Use this in route handlers or override it in tests:

    Example:
        app.dependency_overrides[get_data_source] = lambda: InMemoryDataSource(...)
    """
    try:
        database = get_database()
    except RuntimeError as e:
        raise UpstreamUnavailableError("Database is not connected") from e
    return MongoDataSource(database)


def get_report_service(
    data_source: ReportDataSource = Depends(get_data_source),
) -> ReportService:
    return ReportService(data_source)
