"""Sticky notes over the ``notes`` preference section."""

import logging
from datetime import datetime, timezone
from typing import Optional

from client.preferences import PreferenceSync
from models.utils import generate_uuid
from schemas.preference import Note, NoteColor
from services.preference_store import Section

logger = logging.getLogger(__name__)


def list_notes(preferences: PreferenceSync) -> list[dict]:
    notes = preferences.get(Section.NOTES.value, [])
    return list(notes) if isinstance(notes, list) else []


def add_note(
    preferences: PreferenceSync,
    content: str,
    color: NoteColor = "yellow",
    now: Optional[datetime] = None,
) -> Optional[dict]:
    """Append a note and persist the section. Blank content adds nothing.

    Raises:
        pydantic.ValidationError: ``color`` is not one of the note colors.
    """
    if not content or not content.strip():
        return None
    now = now or datetime.now(timezone.utc)
    note = Note(
        id=generate_uuid(),
        content=content,
        color=color,
        created_at=now.isoformat().replace("+00:00", "Z"),
    ).model_dump()
    preferences.update_section(Section.NOTES.value, [*list_notes(preferences), note])
    logger.info("Added %s note", color)
    return note


def delete_note(preferences: PreferenceSync, note_id: str) -> bool:
    notes = list_notes(preferences)
    remaining = [n for n in notes if str(n.get("id")) != str(note_id)]
    if len(remaining) == len(notes):
        return False
    preferences.update_section(Section.NOTES.value, remaining)
    logger.info("Deleted note %s", note_id)
    return True
