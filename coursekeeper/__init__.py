"""
CourseKeeper: course and assignment deadline tracking.

Courses and their assignments are stored through one interchangeable backend
(a JSON document or a relational database) and a background scheduler
surfaces upcoming and overdue deadlines.
"""

__version__ = "1.0.0"
__author__ = "CourseKeeper Development Team"
__description__ = "Course and assignment deadline tracking"
