"""Tests for the tiered preference store."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from models import DEFAULT_USER_ID, UserPreferences
from schemas.preference import DEFAULT_TEAM_KEY
from services.preference_store import (
    REDACTED,
    DatabaseBackend,
    JsonFileBackend,
    PreferenceStore,
    PreferenceStoreError,
    Section,
    build_preference_store,
    compose_daily_motivation,
    redact_document,
)


class FailingBackend:
    """Backend that is configured but raises on every call."""

    name = "hosted"

    def __init__(self):
        self.save_attempts = 0

    def is_configured(self) -> bool:
        return True

    def load(self):
        raise RuntimeError("connection refused")

    def save_sections(self, values):
        self.save_attempts += 1
        raise RuntimeError("connection refused")


class UnconfiguredBackend(FailingBackend):
    def is_configured(self) -> bool:
        return False


class TestSection:
    def test_parse_known(self):
        assert Section.parse("teamPreferences") is Section.TEAM_PREFERENCES

    def test_parse_unknown_returns_none(self):
        assert Section.parse("widgetLayout") is None


class TestJsonFileBackend:
    """Tests for the JSON file tier."""

    def test_creates_default_document_on_first_load(self, store_path):
        """First access writes the full default document."""
        backend = JsonFileBackend(store_path, "secret")
        document = backend.load()

        assert store_path.exists()
        assert document["password"] == "secret"
        assert document["teamPreferences"]["selectedTeams"] == [DEFAULT_TEAM_KEY]
        assert document["teamPreferences"]["favoriteTeams"] == [DEFAULT_TEAM_KEY]
        assert document["messages"] == []
        assert document["appearancePreferences"]["showWeather"] is True

    def test_file_is_pretty_printed(self, store_path):
        JsonFileBackend(store_path, "secret").load()
        assert store_path.read_text().startswith("{\n  ")

    def test_save_sections_leaves_others_untouched(self, store_path):
        backend = JsonFileBackend(store_path, "secret")
        backend.save_sections({"notes": [{"id": "1", "content": "hi"}]})

        document = json.loads(store_path.read_text())
        assert document["notes"] == [{"id": "1", "content": "hi"}]
        assert document["password"] == "secret"
        assert document["teamPreferences"]["selectedTeams"] == [DEFAULT_TEAM_KEY]

    def test_malformed_json_raises(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{not json")
        with pytest.raises(PreferenceStoreError, match="not valid JSON"):
            JsonFileBackend(store_path, "secret").load()

    def test_non_object_document_raises(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("[1, 2, 3]")
        with pytest.raises(PreferenceStoreError):
            JsonFileBackend(store_path, "secret").load()


class TestDatabaseBackend:
    """Tests for the hosted (SQL) tier."""

    def test_unconfigured_without_session_factory(self):
        assert DatabaseBackend(None, "secret").is_configured() is False

    def test_creates_default_row(self, session_factory):
        backend = DatabaseBackend(session_factory, "secret")
        document = backend.load()

        assert document["password"] == "secret"
        assert document["teamPreferences"]["selectedTeams"] == [DEFAULT_TEAM_KEY]
        db = session_factory()
        try:
            rows = db.query(UserPreferences).all()
            assert len(rows) == 1
            assert rows[0].user_id == DEFAULT_USER_ID
        finally:
            db.close()

    def test_save_known_section_updates_column(self, session_factory):
        backend = DatabaseBackend(session_factory, "secret")
        backend.save_sections({"teamPreferences": {"selectedTeams": ["19-baseball-mlb"], "favoriteTeams": []}})

        db = session_factory()
        try:
            row = db.query(UserPreferences).one()
            assert row.team_preferences["selectedTeams"] == ["19-baseball-mlb"]
        finally:
            db.close()

    def test_unknown_section_round_trips_through_extra(self, session_factory):
        backend = DatabaseBackend(session_factory, "secret")
        backend.save_sections({"widgetLayout": {"compact": True}})

        assert backend.load()["widgetLayout"] == {"compact": True}

    def test_repeated_saves_keep_single_row(self, session_factory):
        backend = DatabaseBackend(session_factory, "secret")
        backend.save_sections({"notes": []})
        backend.save_sections({"messages": []})

        db = session_factory()
        try:
            assert db.query(UserPreferences).count() == 1
        finally:
            db.close()


class TestRedaction:
    def test_password_removed_and_tokens_masked(self):
        document = {
            "password": "secret",
            "calendarPreferences": {
                "calendarIds": ["primary"],
                "accessToken": "ya29.abc",
                "refreshToken": "1//xyz",
                "tokenExpiry": 123,
            },
        }
        public = redact_document(document)

        assert "password" not in public
        assert public["calendarPreferences"]["accessToken"] == REDACTED
        assert public["calendarPreferences"]["refreshToken"] == REDACTED
        assert public["calendarPreferences"]["calendarIds"] == ["primary"]
        assert public["calendarPreferences"]["tokenExpiry"] == 123
        # Original untouched
        assert document["calendarPreferences"]["accessToken"] == "ya29.abc"

    def test_absent_tokens_are_omitted(self):
        public = redact_document({"calendarPreferences": {"calendarIds": [], "accessToken": None}})
        assert "accessToken" not in public["calendarPreferences"]
        assert "refreshToken" not in public["calendarPreferences"]


class TestComposeDailyMotivation:
    def test_prefers_split_fields(self):
        result = compose_daily_motivation(
            {"dailyMotivation": "Go!", "dailyMotivationDate": "2025-06-28"}
        )
        assert result == {"dailyMotivation": "Go!", "dailyMotivationDate": "2025-06-28"}

    def test_falls_back_to_combined_field(self):
        result = compose_daily_motivation(
            {"dailyMotivationData": {"motivation": "Go!", "date": "2025-06-28"}}
        )
        assert result == {"dailyMotivation": "Go!", "dailyMotivationDate": "2025-06-28"}

    def test_missing_everything(self):
        assert compose_daily_motivation({}) == {
            "dailyMotivation": None,
            "dailyMotivationDate": None,
        }


class TestPreferenceStore:
    """Tests for read/write/merge semantics."""

    def test_read_whole_document_is_redacted(self, file_store):
        file_store.write("calendarPreferences", {"accessToken": "tok"})
        document = file_store.read()
        assert "password" not in document
        assert document["calendarPreferences"]["accessToken"] == REDACTED

    def test_read_single_section_is_not_redacted(self, file_store):
        file_store.write("calendarPreferences", {"accessToken": "tok"})
        assert file_store.read("calendarPreferences") == {"accessToken": "tok"}

    def test_read_unknown_section_is_none(self, file_store):
        assert file_store.read("noSuchSection") is None

    def test_write_replaces_section(self, file_store):
        file_store.write("concertPreferences", {"favoriteArtists": ["Adele"]})
        assert file_store.read("concertPreferences") == {"favoriteArtists": ["Adele"]}

    def test_write_dedupes_team_keys(self, file_store):
        file_store.write(
            "teamPreferences",
            {"selectedTeams": ["1-football-nfl", "1-football-nfl", "25-baseball-mlb"]},
        )
        teams = file_store.read("teamPreferences")
        assert teams["selectedTeams"] == ["1-football-nfl", "25-baseball-mlb"]
        assert teams["favoriteTeams"] == []

    def test_write_completes_widget_order(self, file_store):
        file_store.write("appearancePreferences", {"darkMode": True, "widgetOrder": ["sports", "bogus", "sports"]})
        appearance = file_store.read("appearancePreferences")
        assert appearance["darkMode"] is True
        assert appearance["widgetOrder"] == ["sports", "weather", "concerts", "motivation"]
        assert appearance["leftPanelOrder"] == ["calendar", "notes"]

    def test_merge_dedupes_team_keys(self, file_store):
        file_store.merge("teamPreferences", {"favoriteTeams": ["1-football-nfl", "1-football-nfl"]})
        teams = file_store.read("teamPreferences")
        assert teams["favoriteTeams"] == ["1-football-nfl"]
        assert teams["selectedTeams"] == [DEFAULT_TEAM_KEY]

    def test_write_unknown_section_is_stored(self, file_store):
        file_store.write("customWidget", [1, 2])
        assert file_store.read("customWidget") == [1, 2]

    def test_write_returns_tier_name(self, file_store):
        assert file_store.write("notes", []) == "file"

    def test_write_daily_motivation_splits_fields(self, file_store):
        value = {"motivation": "Keep going!", "date": "2025-06-28"}
        file_store.write("dailyMotivation", value)

        assert file_store.read("dailyMotivationDate") == "2025-06-28"
        assert file_store.read("dailyMotivationData") == value
        assert file_store.read("dailyMotivation") == {
            "dailyMotivation": "Keep going!",
            "dailyMotivationDate": "2025-06-28",
        }

    def test_merge_is_shallow(self, file_store):
        file_store.write(
            "concertPreferences",
            {"favoriteArtists": ["A"], "location": {"city": "San Diego", "stateCode": "CA"}},
        )
        file_store.merge("concertPreferences", {"location": {"city": "Austin"}})

        section = file_store.read("concertPreferences")
        assert section["favoriteArtists"] == ["A"]
        # Nested objects are replaced, not merged
        assert section["location"] == {"city": "Austin"}

    def test_merge_into_missing_section(self, file_store):
        file_store.merge("newSection", {"a": 1})
        assert file_store.read("newSection") == {"a": 1}

    def test_verify_password(self, file_store):
        assert file_store.verify_password("dad2025") is True
        assert file_store.verify_password("wrong") is False
        assert file_store.verify_password("") is False

    def test_append_message(self, file_store):
        now = datetime(2025, 6, 28, 18, 30, tzinfo=timezone.utc)
        entry = file_store.append_message("Sam", "Happy birthday!", now=now)

        assert len(entry["id"]) == 36
        assert {k: v for k, v in entry.items() if k != "id"} == {
            "name": "Sam",
            "message": "Happy birthday!",
            "read": False,
            "created_at": "2025-06-28T18:30:00Z",
        }
        assert file_store.read("messages") == [entry]

    def test_append_message_ids_unique_within_same_instant(self, file_store):
        now = datetime(2025, 6, 28, 18, 30, tzinfo=timezone.utc)
        first = file_store.append_message("A", "one", now=now)
        second = file_store.append_message("B", "two", now=now)
        assert first["id"] != second["id"]

    def test_append_message_keeps_existing(self, file_store):
        file_store.append_message("A", "one")
        file_store.append_message("B", "two")
        assert [m["name"] for m in file_store.read("messages")] == ["A", "B"]


class TestTierFallback:
    """Tests for hosted -> file fallback."""

    def test_hosted_tier_used_when_available(self, hosted_store, store_path):
        assert hosted_store.write("notes", [{"id": "1"}]) == "hosted"
        assert hosted_store.read("notes") == [{"id": "1"}]
        # The file tier was never touched
        assert not store_path.exists()

    def test_hosted_tier_accepts_non_string_motivation(self, hosted_store, store_path):
        value = {"motivation": "", "date": "2026-10-18"}
        assert hosted_store.write("dailyMotivation", value) == "hosted"
        assert hosted_store.read("dailyMotivation") == {
            "dailyMotivation": value,
            "dailyMotivationDate": None,
        }
        assert not store_path.exists()

    def test_read_falls_back_when_hosted_fails(self, file_store, store_path):
        store = PreferenceStore([FailingBackend(), JsonFileBackend(store_path, "dad2025")])
        file_store.write("notes", [{"id": "from-file"}])

        assert store.read("notes") == [{"id": "from-file"}]

    def test_write_falls_back_and_warns(self, store_path, caplog):
        failing = FailingBackend()
        store = PreferenceStore([failing, JsonFileBackend(store_path, "dad2025")])

        with caplog.at_level("WARNING"):
            assert store.write("notes", []) == "file"
        assert failing.save_attempts == 1
        assert "may now diverge" in caplog.text

    def test_unconfigured_tier_is_skipped(self, store_path):
        store = PreferenceStore([UnconfiguredBackend(), JsonFileBackend(store_path, "dad2025")])
        assert store.write("notes", []) == "file"

    def test_last_tier_failure_propagates(self, store_path):
        store_path.parent.mkdir(parents=True)
        store_path.write_text("{broken")
        store = PreferenceStore([FailingBackend(), JsonFileBackend(store_path, "dad2025")])
        with pytest.raises(PreferenceStoreError):
            store.read()

    def test_no_configured_backend(self):
        with pytest.raises(PreferenceStoreError, match="No preference backend"):
            PreferenceStore([UnconfiguredBackend()]).read()


class TestBuildPreferenceStore:
    def test_tier_order(self, store_path):
        store = build_preference_store(MagicMock(), store_path, "pw")
        assert [b.name for b in store.backends] == ["hosted", "file"]

    def test_without_database_uses_file(self, store_path):
        store = build_preference_store(None, store_path, "pw")
        assert store.write("notes", []) == "file"
