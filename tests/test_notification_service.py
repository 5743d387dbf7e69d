from datetime import datetime, timezone

import pytest

from student_dashboard.services import (
    NOTIFICATION_TYPES,
    InMemoryKeyValueStore,
    NotificationNotFoundError,
    NotificationService,
)
from student_dashboard.services.notification_service import HISTORY_KEY, format_template


@pytest.fixture
def kv_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def service(kv_store):
    return NotificationService(kv_store, clock=lambda: datetime(2024, 1, 1, tzinfo=timezone.utc))


def test_add_notification_prepends_unread_entry(service, kv_store):
    first = service.add_notification("grade_update", "Grades posted", "Physics grades are in")
    second = service.add_notification("general_announcement", "Holiday", "No class Monday")

    history = service.get_history()
    assert [item["id"] for item in history] == [second["id"], first["id"]]
    assert history[0]["read"] is False
    assert history[0]["timestamp"] == "2024-01-01T00:00:00+00:00"
    assert kv_store.get(HISTORY_KEY) == history
    assert service.unread_count() == 2


def test_add_notification_validates_type_and_text(service):
    with pytest.raises(ValueError):
        service.add_notification("pigeon_post", "Title", "Message")
    with pytest.raises(ValueError):
        service.add_notification("grade_update", "  ", "Message")
    with pytest.raises(ValueError, match="must be strings"):
        service.add_notification("grade_update", 5, "Message")


def test_history_is_bounded_by_limit(kv_store):
    service = NotificationService(kv_store, history_limit=2)

    for index in range(3):
        service.add_notification("grade_update", f"Title {index}", "Message")

    assert [item["title"] for item in service.get_history()] == ["Title 2", "Title 1"]


def test_mark_read_mark_all_and_delete(service):
    first = service.add_notification("grade_update", "One", "Message")
    service.add_notification("grade_update", "Two", "Message")
    service.add_notification("grade_update", "Three", "Message")

    assert service.mark_as_read(first["id"])["read"] is True
    assert service.unread_count() == 2
    assert service.mark_all_as_read() == 2
    assert service.unread_count() == 0

    service.delete_notification(first["id"])
    assert len(service.get_history()) == 2
    with pytest.raises(NotificationNotFoundError):
        service.delete_notification(first["id"])
    with pytest.raises(NotificationNotFoundError):
        service.mark_as_read("missing")


def test_clear_notifications(service):
    service.add_notification("grade_update", "One", "Message")

    service.clear_notifications()

    assert service.get_history() == []


def test_corrupt_history_reads_as_empty(kv_store, service):
    kv_store.set(HISTORY_KEY, {"not": "a list"})

    assert service.get_history() == []


def test_preferences_default_to_all_enabled(service):
    preferences = service.get_preferences("user_1")

    assert set(preferences) == set(NOTIFICATION_TYPES)
    assert all(preferences.values())


def test_save_preferences_merges_and_validates(service):
    saved = service.save_preferences("user_1", {"attendance_alert": False})

    assert saved["attendance_alert"] is False
    assert saved["grade_update"] is True
    assert service.is_enabled("user_1", "attendance_alert") is False
    assert service.is_enabled("user_2", "attendance_alert") is True

    with pytest.raises(ValueError):
        service.save_preferences("user_1", {"carrier_pigeon": True})
    with pytest.raises(ValueError):
        service.save_preferences("user_1", {"grade_update": "yes"})


def test_format_template_leaves_unknown_placeholders():
    assert format_template("{a} and {b}", {"a": 1}) == "1 and {b}"


def test_compose_email_fills_template(service):
    email = service.compose_email(
        "ada@example.com",
        "grade_update",
        {"studentName": "Ada", "courseName": "Maths", "grade": "A"},
    )

    assert email.subject == "Grade Update for Maths"
    assert "Your grade for Maths has been updated to A." in email.body


def test_send_batch_reports_per_recipient_results(service):
    results = service.send_batch(
        [
            {"email": "ada@example.com", "data": {"studentName": "Ada"}},
            {"email": "alan@example.com", "data": {"studentName": "Alan"}},
        ],
        "attendance_alert",
        {"courseName": "Physics", "threshold": 75},
    )

    assert [result["success"] for result in results] == [True, True]
    assert "fallen below 75%" in results[1]["details"]["body"]
    assert results[1]["details"]["body"].startswith("Hello Alan,")


def test_send_batch_with_unknown_type_fails_each_recipient(service):
    results = service.send_batch([{"email": "ada@example.com"}], "unknown")

    assert results == [
        {
            "recipient": "ada@example.com",
            "success": False,
            "error": "Template not found for notification type: unknown",
        }
    ]
