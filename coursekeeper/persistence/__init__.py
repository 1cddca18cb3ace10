"""
Persistence module for course storage backends.
"""

from .database import DatabaseManager, SQLiteDatabase, PostgreSQLDatabase, DatabaseFactory, Transaction
from .repositories import JsonCourseRepository, SqlCourseRepository, RepositoryFactory
from .migrations import DataMigrationTool, MigrationReport

__all__ = [
    "DatabaseManager",
    "SQLiteDatabase",
    "PostgreSQLDatabase",
    "DatabaseFactory",
    "Transaction",
    "JsonCourseRepository",
    "SqlCourseRepository",
    "RepositoryFactory",
    "DataMigrationTool",
    "MigrationReport",
]
