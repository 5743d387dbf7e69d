# student_dashboard/models/__init__.py
"""
Database models package
"""

from .base import BaseModel, db
from .key_value import KeyValueEntry

__all__ = [
    "db",
    "BaseModel",
    "KeyValueEntry",
]
