"""Tests for client storage and the per-category data cache."""

import json

import pytest

from client.cache import (
    CACHE_KEY_PREFIX,
    CATEGORY_TTLS,
    CONCERTS,
    SESSION_MARKER,
    SPORTS,
    WEATHER,
    DataCache,
    LocalStorage,
    SessionStorage,
    initialize_session,
)


class FakeClock:
    def __init__(self, now: float = 1_750_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


class TestLocalStorage:
    def test_in_memory(self):
        storage = LocalStorage()
        storage.set("a", 1)
        assert storage.get("a") == 1
        assert "a" in storage
        storage.remove("a")
        assert storage.get("a", "gone") == "gone"

    def test_persists_to_file(self, tmp_path):
        path = tmp_path / "local.json"
        LocalStorage(path).set("team_preferences", {"selectedTeams": []})

        assert json.loads(path.read_text()) == {"team_preferences": {"selectedTeams": []}}
        assert LocalStorage(path).get("team_preferences") == {"selectedTeams": []}

    def test_unreadable_file_starts_empty(self, tmp_path):
        path = tmp_path / "local.json"
        path.write_text("not json")
        assert LocalStorage(path).get("anything") is None

    def test_remove_missing_key(self, tmp_path):
        storage = LocalStorage(tmp_path / "local.json")
        storage.remove("nope")
        assert not (tmp_path / "local.json").exists()


class TestSessionStorage:
    def test_get_set_remove(self):
        session = SessionStorage()
        session.set("k", "v")
        assert "k" in session
        session.remove("k")
        assert session.get("k") is None


class TestDataCache:
    """Tests for TTL handling and write-through persistence."""

    def test_default_ttls(self):
        assert CATEGORY_TTLS[WEATHER] == 30 * 60
        assert CATEGORY_TTLS[SPORTS] == 30 * 60
        assert CATEGORY_TTLS[CONCERTS] == 60 * 60

    def test_set_and_get(self, clock):
        cache = DataCache(LocalStorage(), clock=clock)
        cache.set(WEATHER, {"temp": 72})
        assert cache.get(WEATHER) == {"temp": 72}
        assert cache.is_fresh(WEATHER) is True

    def test_expires_after_ttl(self, clock):
        cache = DataCache(LocalStorage(), clock=clock)
        cache.set(WEATHER, {"temp": 72})
        clock.advance(30 * 60)
        assert cache.get(WEATHER) is None
        assert cache.is_fresh(WEATHER) is False

    def test_concerts_live_longer(self, clock):
        cache = DataCache(LocalStorage(), clock=clock)
        cache.set(CONCERTS, {"events": []})
        clock.advance(45 * 60)
        assert cache.get(CONCERTS) == {"events": []}

    def test_write_through_format(self, clock):
        storage = LocalStorage()
        DataCache(storage, clock=clock).set(SPORTS, {"teams": []})
        assert storage.get(f"{CACHE_KEY_PREFIX}{SPORTS}") == {
            "value": {"teams": []},
            "timestamp": clock.now,
        }

    def test_loads_fresh_persisted_entry(self, clock):
        storage = LocalStorage()
        storage.set(f"{CACHE_KEY_PREFIX}{WEATHER}", {"value": {"temp": 60}, "timestamp": clock.now - 60})
        assert DataCache(storage, clock=clock).get(WEATHER) == {"temp": 60}

    def test_drops_stale_persisted_entry(self, clock):
        storage = LocalStorage()
        key = f"{CACHE_KEY_PREFIX}{WEATHER}"
        storage.set(key, {"value": {"temp": 60}, "timestamp": clock.now - 3600})

        assert DataCache(storage, clock=clock).get(WEATHER) is None
        assert key not in storage

    def test_ignores_malformed_persisted_entry(self, clock):
        storage = LocalStorage()
        storage.set(f"{CACHE_KEY_PREFIX}{WEATHER}", "garbage")
        assert DataCache(storage, clock=clock).entry(WEATHER) is None

    def test_invalidate(self, clock):
        storage = LocalStorage()
        cache = DataCache(storage, clock=clock)
        cache.set(SPORTS, {"teams": []})
        cache.invalidate(SPORTS)
        assert cache.get(SPORTS) is None
        assert f"{CACHE_KEY_PREFIX}{SPORTS}" not in storage

    def test_custom_ttls(self, clock):
        cache = DataCache(LocalStorage(), ttls={WEATHER: 10}, clock=clock)
        cache.set(WEATHER, 1)
        clock.advance(11)
        assert cache.get(WEATHER) is None


class TestInitializeSession:
    """A reload clears data caches but never preferences."""

    def test_first_load_keeps_cache(self, clock):
        storage = LocalStorage()
        cache = DataCache(storage, clock=clock)
        cache.set(WEATHER, {"temp": 70})

        assert initialize_session(SessionStorage(), cache, clock) is False
        assert cache.get(WEATHER) == {"temp": 70}

    def test_reload_clears_data_categories(self, clock):
        storage = LocalStorage()
        storage.set("team_preferences", {"selectedTeams": ["25-baseball-mlb"]})
        cache = DataCache(storage, clock=clock)
        for category in (WEATHER, SPORTS, CONCERTS):
            cache.set(category, {"x": 1})
        session = SessionStorage()
        session.set(SESSION_MARKER, clock.now - 5)

        assert initialize_session(session, cache, clock) is True
        for category in (WEATHER, SPORTS, CONCERTS):
            assert cache.get(category) is None
        assert storage.get("team_preferences") == {"selectedTeams": ["25-baseball-mlb"]}
        assert session.get(SESSION_MARKER) == clock.now
