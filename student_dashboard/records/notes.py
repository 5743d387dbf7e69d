"""Helpers for building and editing student notes."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from uuid import uuid4

from .types import DEFAULT_NOTE_CATEGORY, NOTE_CATEGORIES, StudentNote, utcnow


def normalize_category(category: str | None) -> str:
    token = (category or DEFAULT_NOTE_CATEGORY).strip().lower()
    if token not in NOTE_CATEGORIES:
        raise ValueError(f"Note category must be one of: {', '.join(NOTE_CATEGORIES)}.")
    return token


def new_note(
    content: str,
    *,
    category: str | None = None,
    important: bool = False,
    now: datetime | None = None,
) -> StudentNote:
    text = (content or "").strip()
    if not text:
        raise ValueError("Note content is required.")
    return StudentNote(
        id=uuid4().hex,
        content=text,
        category=normalize_category(category),
        important=bool(important),
        created_at=now or utcnow(),
    )


def edit_note(
    note: StudentNote,
    *,
    content: str | None = None,
    category: str | None = None,
    important: bool | None = None,
    now: datetime | None = None,
) -> StudentNote:
    changes: dict[str, object] = {}
    if content is not None:
        text = content.strip()
        if not text:
            raise ValueError("Note content is required.")
        changes["content"] = text
    if category is not None:
        changes["category"] = normalize_category(category)
    if important is not None:
        changes["important"] = bool(important)
    changes["updated_at"] = now or utcnow()
    return replace(note, **changes)
