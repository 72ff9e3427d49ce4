"""Preference store - tiered persistence for the single preferences document.

The document is a set of independently addressable sections.  Storage
backends are tried in a fixed order (hosted database, then local JSON
file); the first backend that succeeds wins.  The third tier, client-local
storage, lives in :mod:`client.preferences` and is never seen here.
"""

import json
import logging
import secrets
from contextlib import contextmanager
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Iterator, Protocol

from sqlalchemy.orm import Session

from models.user_preference import DEFAULT_USER_ID, UserPreferences
from models.utils import generate_uuid
from schemas.preference import (
    AppearancePreferences,
    Message,
    TeamPreferences,
    default_document,
)

logger = logging.getLogger(__name__)

REDACTED = "***"


class PreferenceStoreError(Exception):
    """The preferences document could not be read or written."""


class Section(str, Enum):
    """Known preference sections (top-level keys of the document)."""

    PASSWORD = "password"
    TEAM_PREFERENCES = "teamPreferences"
    APPEARANCE_PREFERENCES = "appearancePreferences"
    CONCERT_PREFERENCES = "concertPreferences"
    CALENDAR_PREFERENCES = "calendarPreferences"
    MESSAGES = "messages"
    NOTES = "notes"
    DAILY_MOTIVATION = "dailyMotivation"
    DAILY_MOTIVATION_DATE = "dailyMotivationDate"
    DAILY_MOTIVATION_DATA = "dailyMotivationData"

    @classmethod
    def parse(cls, name: str) -> "Section | None":
        """Return the known section for ``name``, or None for unknown keys."""
        try:
            return cls(name)
        except ValueError:
            return None


# Hosted-tier column for every known section.  Unknown sections go to ``extra``.
SECTION_COLUMNS: dict[Section, str] = {
    Section.PASSWORD: "password",
    Section.TEAM_PREFERENCES: "team_preferences",
    Section.APPEARANCE_PREFERENCES: "appearance_preferences",
    Section.CONCERT_PREFERENCES: "concert_preferences",
    Section.CALENDAR_PREFERENCES: "calendar_preferences",
    Section.MESSAGES: "messages",
    Section.NOTES: "notes",
    Section.DAILY_MOTIVATION: "daily_motivation",
    Section.DAILY_MOTIVATION_DATE: "daily_motivation_date",
    Section.DAILY_MOTIVATION_DATA: "daily_motivation_data",
}


def normalize_section(section: str, value: Any) -> Any:
    """Apply section invariants (unique team keys, complete widget orders) to a value."""
    if section == Section.TEAM_PREFERENCES.value and isinstance(value, dict):
        return TeamPreferences.model_validate(value).to_document()
    if section == Section.APPEARANCE_PREFERENCES.value and isinstance(value, dict):
        return AppearancePreferences.model_validate(value).to_document()
    return value


class PreferenceBackend(Protocol):
    """One storage tier for the preferences document."""

    name: str

    def is_configured(self) -> bool:
        ...

    def load(self) -> dict[str, Any]:
        """Return the whole document, creating it with defaults if absent."""
        ...

    def save_sections(self, values: dict[str, Any]) -> None:
        """Overwrite the given top-level sections, leaving all others untouched."""
        ...


class DatabaseBackend:
    """Hosted tier: one ``user_preferences`` row keyed by the default user id."""

    name = "hosted"

    def __init__(self, session_factory, default_password: str):
        self._session_factory = session_factory
        self._default_password = default_password

    def is_configured(self) -> bool:
        return self._session_factory is not None

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _get_or_create_row(self, db: Session) -> UserPreferences:
        row = (
            db.query(UserPreferences)
            .filter(UserPreferences.user_id == DEFAULT_USER_ID)
            .first()
        )
        if row is not None:
            return row

        logger.info("No hosted preferences row found, creating defaults")
        row = UserPreferences(user_id=DEFAULT_USER_ID, extra={})
        _apply_values(row, default_document(self._default_password))
        db.add(row)
        db.commit()
        db.refresh(row)
        return row

    def load(self) -> dict[str, Any]:
        with self._session() as db:
            row = self._get_or_create_row(db)
            return _row_to_document(row)

    def save_sections(self, values: dict[str, Any]) -> None:
        with self._session() as db:
            row = self._get_or_create_row(db)
            _apply_values(row, values)
            row.updated_at = datetime.now(timezone.utc)
            db.commit()
        logger.info("Updated hosted preferences: %s", ", ".join(values))


def _apply_values(row: UserPreferences, values: dict[str, Any]) -> None:
    """Assign document sections onto a row (new objects, so JSON changes are tracked)."""
    extra = dict(row.extra or {})
    for key, value in values.items():
        section = Section.parse(key)
        if section is None:
            extra[key] = value
        else:
            setattr(row, SECTION_COLUMNS[section], value)
    row.extra = extra


def _row_to_document(row: UserPreferences) -> dict[str, Any]:
    document = {
        section.value: getattr(row, column) for section, column in SECTION_COLUMNS.items()
    }
    for key, value in (row.extra or {}).items():
        document.setdefault(key, value)
    return document


class JsonFileBackend:
    """File tier: one pretty-printed JSON document at a fixed path."""

    name = "file"

    def __init__(self, path: Path | str, default_password: str):
        self._path = Path(path)
        self._default_password = default_password

    @property
    def path(self) -> Path:
        return self._path

    def is_configured(self) -> bool:
        return True

    def _ensure_file(self) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if not self._path.exists():
            logger.info("Creating default preferences file at %s", self._path)
            self._write(default_document(self._default_password))

    def _write(self, document: dict[str, Any]) -> None:
        self._path.write_text(json.dumps(document, indent=2), encoding="utf-8")

    def load(self) -> dict[str, Any]:
        self._ensure_file()
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise PreferenceStoreError(
                f"Preferences file {self._path} is not valid JSON: {e}"
            ) from e
        if not isinstance(document, dict):
            raise PreferenceStoreError(
                f"Preferences file {self._path} does not hold a JSON object"
            )
        return document

    def save_sections(self, values: dict[str, Any]) -> None:
        document = self.load()
        document.update(values)
        self._write(document)
        logger.info("Updated preferences file: %s", ", ".join(values))


def redact_document(document: dict[str, Any]) -> dict[str, Any]:
    """Drop the password and mask OAuth tokens for bulk reads."""
    public = {key: value for key, value in document.items() if key != Section.PASSWORD.value}
    calendar = dict(document.get(Section.CALENDAR_PREFERENCES.value) or {})
    for field in ("accessToken", "refreshToken"):
        if calendar.get(field):
            calendar[field] = REDACTED
        else:
            calendar.pop(field, None)
    public[Section.CALENDAR_PREFERENCES.value] = calendar
    return public


def compose_daily_motivation(document: dict[str, Any]) -> dict[str, Any]:
    """Read the virtual ``dailyMotivation`` section from split or combined fields."""
    combined = document.get(Section.DAILY_MOTIVATION_DATA.value)
    if not isinstance(combined, dict):
        combined = {}
    return {
        "dailyMotivation": document.get(Section.DAILY_MOTIVATION.value)
        or combined.get("motivation"),
        "dailyMotivationDate": document.get(Section.DAILY_MOTIVATION_DATE.value)
        or combined.get("date"),
    }


class PreferenceStore:
    """Coordinator over an ordered list of preference backends."""

    def __init__(self, backends: list[PreferenceBackend]):
        self._backends = list(backends)

    @property
    def backends(self) -> list[PreferenceBackend]:
        return list(self._backends)

    def _active_backends(self) -> list[PreferenceBackend]:
        active = [backend for backend in self._backends if backend.is_configured()]
        if not active:
            raise PreferenceStoreError("No preference backend is configured")
        return active

    def load_document(self) -> dict[str, Any]:
        """Load the whole document from the first tier that answers."""
        active = self._active_backends()
        for index, backend in enumerate(active):
            try:
                return backend.load()
            except Exception:
                if index == len(active) - 1:
                    raise
                logger.warning(
                    "Preference read from %s tier failed, falling back to %s",
                    backend.name,
                    active[index + 1].name,
                    exc_info=True,
                )
        raise PreferenceStoreError("Preference read failed")  # pragma: no cover

    def _save(self, values: dict[str, Any]) -> str:
        """Persist ``values`` to the first tier that accepts them; return its name."""
        active = self._active_backends()
        for index, backend in enumerate(active):
            try:
                backend.save_sections(values)
                return backend.name
            except Exception:
                if index == len(active) - 1:
                    raise
                # Tiers are not reconciled afterwards; the next read may see the older copy.
                logger.warning(
                    "Preference write to %s tier failed, writing to %s instead; "
                    "tiers may now diverge",
                    backend.name,
                    active[index + 1].name,
                    exc_info=True,
                )
        raise PreferenceStoreError("Preference write failed")  # pragma: no cover

    def read(self, section: str | None = None) -> Any:
        """Return one section's value, or the whole redacted document."""
        document = self.load_document()
        if section is None:
            return redact_document(document)
        if section == Section.DAILY_MOTIVATION.value:
            return compose_daily_motivation(document)
        return document.get(section)

    def write(self, section: str, value: Any) -> str:
        """Replace one section.  Returns the name of the tier that stored it."""
        if (
            section == Section.DAILY_MOTIVATION.value
            and isinstance(value, dict)
            and value.get("motivation")
        ):
            values = {
                Section.DAILY_MOTIVATION.value: value["motivation"],
                Section.DAILY_MOTIVATION_DATE.value: value.get("date"),
                Section.DAILY_MOTIVATION_DATA.value: value,
            }
        else:
            values = {section: normalize_section(section, value)}
        return self._save(values)

    def merge(self, section: str, updates: dict[str, Any]) -> str:
        """Shallow-merge ``updates`` into one section object."""
        current = self.load_document().get(section)
        if not isinstance(current, dict):
            current = {}
        return self._save({section: normalize_section(section, {**current, **updates})})

    def verify_password(self, candidate: str) -> bool:
        stored = self.read(Section.PASSWORD.value) or ""
        return secrets.compare_digest(str(stored).encode(), candidate.encode())

    def append_message(self, name: str, message: str, now: datetime | None = None) -> dict[str, Any]:
        """Add an unread message to the inbox and return it."""
        now = now or datetime.now(timezone.utc)
        entry = Message(
            id=generate_uuid(),
            name=name,
            message=message,
            created_at=now.isoformat().replace("+00:00", "Z"),
        ).model_dump()
        messages = self.read(Section.MESSAGES.value)
        if not isinstance(messages, list):
            messages = []
        self.write(Section.MESSAGES.value, [*messages, entry])
        logger.info("Stored new message from %s", name)
        return entry


def build_preference_store(session_factory, file_path: Path | str, default_password: str) -> PreferenceStore:
    """Assemble the standard tier order: hosted database, then JSON file."""
    return PreferenceStore(
        [
            DatabaseBackend(session_factory, default_password),
            JsonFileBackend(file_path, default_password),
        ]
    )
