# student_dashboard/services/notification_service.py
"""
Notification Service - notification history, per-user preferences and
templated (mock) email delivery, persisted through a key-value store
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional
from uuid import uuid4

from flask import current_app, has_app_context

from .kv_store import KeyValueStore

logger = logging.getLogger(__name__)

HISTORY_KEY = "notificationHistory"
PREFERENCES_KEY_TEMPLATE = "notificationPreferences_{user_id}"


class NotificationType(str, Enum):
    GRADE_UPDATE = "grade_update"
    ATTENDANCE_ALERT = "attendance_alert"
    ASSIGNMENT_REMINDER = "assignment_reminder"
    GENERAL_ANNOUNCEMENT = "general_announcement"
    PERFORMANCE_UPDATE = "performance_update"


NOTIFICATION_TYPES = tuple(item.value for item in NotificationType)

_SIGNATURE = "\n\nBest regards,\nStudent Dashboard Team"

NOTIFICATION_TEMPLATES: Dict[str, Dict[str, str]] = {
    NotificationType.GRADE_UPDATE.value: {
        "subject": "Grade Update for {courseName}",
        "body": "Hello {studentName},\n\nYour grade for {courseName} has been updated to {grade}." + _SIGNATURE,
    },
    NotificationType.ATTENDANCE_ALERT.value: {
        "subject": "Attendance Alert for {courseName}",
        "body": "Hello {studentName},\n\nYour attendance for {courseName} has fallen below {threshold}%. "
        "Please improve your attendance." + _SIGNATURE,
    },
    NotificationType.ASSIGNMENT_REMINDER.value: {
        "subject": "Assignment Reminder for {courseName}",
        "body": "Hello {studentName},\n\nThis is a reminder that your assignment for {courseName} "
        "is due on {dueDate}." + _SIGNATURE,
    },
    NotificationType.GENERAL_ANNOUNCEMENT.value: {
        "subject": "{announcementTitle}",
        "body": "Hello {studentName},\n\n{announcementBody}" + _SIGNATURE,
    },
    NotificationType.PERFORMANCE_UPDATE.value: {
        "subject": "Performance Update",
        "body": "Hello {studentName},\n\nYour overall performance has been updated. "
        "Your current average is {averageGrade}." + _SIGNATURE,
    },
}


class NotificationNotFoundError(LookupError):
    """Raised when a notification id is not in the history"""

    def __init__(self, notification_id: str) -> None:
        super().__init__(f"Notification {notification_id} not found")
        self.notification_id = notification_id


def _log():
    return current_app.logger if has_app_context() else logger


def format_template(template: str, data: Mapping[str, Any]) -> str:
    """Replace ``{key}`` placeholders; unknown placeholders are left as-is"""
    result = template
    for key, value in data.items():
        result = result.replace("{" + key + "}", str(value))
    return result


@dataclass(frozen=True)
class ComposedEmail:
    to: str
    subject: str
    body: str

    def to_dict(self) -> Dict[str, str]:
        return {"to": self.to, "subject": self.subject, "body": self.body}


class NotificationService:
    """Service for notification history and preferences"""

    def __init__(
        self,
        kv_store: KeyValueStore,
        *,
        history_limit: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.kv_store = kv_store
        self.history_limit = history_limit
        self._clock = clock

    # History

    def get_history(self) -> List[Dict[str, Any]]:
        history = self.kv_store.get(HISTORY_KEY, default=[])
        if not isinstance(history, list):
            _log().warning(f"Invalid notification history format: {history!r}. Resetting to empty.")
            return []
        return history

    def unread_count(self) -> int:
        return sum(1 for notification in self.get_history() if not notification.get("read"))

    def add_notification(self, notification_type: str, title: str, message: str) -> Dict[str, Any]:
        """
        Prepend a new unread notification to the history.

        Raises:
            ValueError: unknown type, or a title/message that is blank or not text
        """
        if notification_type not in NOTIFICATION_TYPES:
            raise ValueError(f"Unknown notification type: {notification_type}")
        if not isinstance(title, (str, type(None))) or not isinstance(message, (str, type(None))):
            raise ValueError("Notification title and message must be strings.")
        title = (title or "").strip()
        message = (message or "").strip()
        if not title or not message:
            raise ValueError("Notification title and message are required.")

        notification = {
            "id": uuid4().hex,
            "type": notification_type,
            "title": title,
            "message": message,
            "timestamp": self._clock().isoformat(),
            "read": False,
        }
        history = [notification, *self.get_history()]
        if self.history_limit:
            history = history[: self.history_limit]
        self.kv_store.set(HISTORY_KEY, history)
        _log().info(f"Added {notification_type} notification {notification['id']}")
        return notification

    def mark_as_read(self, notification_id: str) -> Dict[str, Any]:
        history = self.get_history()
        for notification in history:
            if notification.get("id") == notification_id:
                notification["read"] = True
                self.kv_store.set(HISTORY_KEY, history)
                return notification
        raise NotificationNotFoundError(notification_id)

    def mark_all_as_read(self) -> int:
        history = self.get_history()
        changed = 0
        for notification in history:
            if not notification.get("read"):
                notification["read"] = True
                changed += 1
        if changed:
            self.kv_store.set(HISTORY_KEY, history)
        return changed

    def delete_notification(self, notification_id: str) -> None:
        history = self.get_history()
        remaining = [item for item in history if item.get("id") != notification_id]
        if len(remaining) == len(history):
            raise NotificationNotFoundError(notification_id)
        self.kv_store.set(HISTORY_KEY, remaining)

    def clear_notifications(self) -> None:
        self.kv_store.set(HISTORY_KEY, [])

    # Preferences

    @staticmethod
    def default_preferences() -> Dict[str, bool]:
        return {notification_type: True for notification_type in NOTIFICATION_TYPES}

    def get_preferences(self, user_id: str) -> Dict[str, bool]:
        """Stored preferences for ``user_id``, or every type enabled when none exist"""
        stored = self.kv_store.get(PREFERENCES_KEY_TEMPLATE.format(user_id=user_id), default=None)
        if stored is None:
            return self.default_preferences()
        if not isinstance(stored, dict):
            _log().warning(f"Invalid notification preferences for user {user_id}. Using defaults.")
            return self.default_preferences()
        preferences = self.default_preferences()
        preferences.update({key: bool(value) for key, value in stored.items() if key in preferences})
        return preferences

    def save_preferences(self, user_id: str, preferences: Mapping[str, Any]) -> Dict[str, bool]:
        """
        Validate and persist preferences.

        Raises:
            ValueError: unknown notification type or non-boolean value
        """
        if not isinstance(preferences, Mapping):
            raise ValueError("Preferences must be an object keyed by notification type.")
        for key, value in preferences.items():
            if key not in NOTIFICATION_TYPES:
                raise ValueError(f"Unknown notification type: {key}")
            if not isinstance(value, bool):
                raise ValueError(f"Preference for {key} must be true or false.")

        merged = self.get_preferences(user_id)
        merged.update(preferences)
        self.kv_store.set(PREFERENCES_KEY_TEMPLATE.format(user_id=user_id), merged)
        return merged

    def is_enabled(self, user_id: str, notification_type: str) -> bool:
        return self.get_preferences(user_id).get(notification_type) is True

    # Email (mock delivery)

    def compose_email(self, to: str, notification_type: str, data: Mapping[str, Any]) -> ComposedEmail:
        template = NOTIFICATION_TEMPLATES.get(notification_type)
        if template is None:
            raise ValueError(f"Template not found for notification type: {notification_type}")
        return ComposedEmail(
            to=to,
            subject=format_template(template["subject"], data),
            body=format_template(template["body"], data),
        )

    def send_batch(
        self,
        recipients: Iterable[Mapping[str, Any]],
        notification_type: str,
        common_data: Optional[Mapping[str, Any]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Compose one email per recipient and log the (mock) delivery.

        A failure for one recipient is reported in its result and does not
        stop the batch.
        """
        results = []
        for recipient in recipients:
            email = recipient.get("email")
            data = {**(common_data or {}), **(recipient.get("data") or {})}
            try:
                composed = self.compose_email(email, notification_type, data)
            except ValueError as e:
                _log().error(f"Error composing email to {email}: {str(e)}")
                results.append({"recipient": email, "success": False, "error": str(e)})
                continue
            _log().info(f"Sending email to {email}: {composed.subject}")
            results.append({"recipient": email, "success": True, "details": composed.to_dict()})
        return results
