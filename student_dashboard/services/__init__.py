"""
Application services package
"""

from .auth_service import AuthError, AuthUser, MockAuthService
from .kv_store import InMemoryKeyValueStore, KeyValueStore, SqlKeyValueStore
from .notification_service import (
    NOTIFICATION_TYPES,
    NotificationNotFoundError,
    NotificationService,
    NotificationType,
)

__all__ = [
    "AuthError",
    "AuthUser",
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "MockAuthService",
    "NOTIFICATION_TYPES",
    "NotificationNotFoundError",
    "NotificationService",
    "NotificationType",
    "SqlKeyValueStore",
]
