"""Tests for the inbox helpers."""

import pytest

from client.cache import LocalStorage
from client.messages import delete_message, mark_all_read, mark_read, poll_messages, unread_count
from client.preferences import PreferenceSync
from tests.fixtures.mocks import MockDashboardAPI


def make_message(message_id, read=False, name="Emma"):
    return {
        "id": message_id,
        "name": name,
        "message": "Love you dad!",
        "created_at": "2025-06-28T12:00:00Z",
        "read": read,
    }


@pytest.fixture
def api():
    api = MockDashboardAPI()
    api.document["messages"] = [make_message("1"), make_message("2", read=True)]
    return api


@pytest.fixture
def prefs(api):
    sync = PreferenceSync(api, LocalStorage())
    sync.load()
    return sync


class TestInbox:
    def test_unread_count(self, prefs):
        assert unread_count(prefs) == 1

    def test_unread_count_ignores_malformed_section(self, prefs):
        prefs.apply_remote("messages", None)
        assert unread_count(prefs) == 0

    def test_mark_read(self, api, prefs):
        mark_read(prefs, "1")
        assert unread_count(prefs) == 0
        assert all(m["read"] for m in api.document["messages"])

    def test_mark_read_unknown_id(self, prefs):
        mark_read(prefs, "999")
        assert unread_count(prefs) == 1

    def test_mark_all_read(self, api, prefs):
        prefs.apply_remote("messages", [make_message("1"), make_message("3")])
        mark_all_read(prefs)
        assert unread_count(prefs) == 0
        assert [m["read"] for m in api.document["messages"]] == [True, True]

    def test_delete_message(self, api, prefs):
        delete_message(prefs, "2")
        assert [m["id"] for m in prefs.get("messages")] == ["1"]
        assert [m["id"] for m in api.document["messages"]] == ["1"]


class TestPollMessages:
    def test_server_copy_wins(self, api, prefs):
        api.document["messages"] = api.document["messages"] + [make_message("3", name="Jack")]

        assert poll_messages(api, prefs) == 2
        assert [m["id"] for m in prefs.get("messages")] == ["1", "2", "3"]
        assert api.saved == []

    def test_offline_keeps_local_count(self, api, prefs):
        api.offline = True
        assert poll_messages(api, prefs) == 1
