"""
API module for the REST surface.
"""

from .rest_api import CourseKeeperRestAPI

__all__ = [
    "CourseKeeperRestAPI",
]
