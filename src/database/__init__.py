"""
Database Module
"""
from .connection import init_database, close_database, get_database, check_database_health
from .models import OrderStatus, UserRole
from .repository import MongoDataSource, ReportDataSource

__all__ = [
    "init_database",
    "close_database",
    "get_database",
    "check_database_health",
    "OrderStatus",
    "UserRole",
    "MongoDataSource",
    "ReportDataSource",
]
