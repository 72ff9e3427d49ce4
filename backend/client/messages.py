"""Inbox helpers over the ``messages`` preference section."""

import logging

from client.api import DashboardAPI, DashboardAPIError
from client.preferences import PreferenceSync
from services.preference_store import Section

logger = logging.getLogger(__name__)


def _messages(preferences: PreferenceSync) -> list[dict]:
    messages = preferences.get(Section.MESSAGES.value, [])
    return list(messages) if isinstance(messages, list) else []


def unread_count(preferences: PreferenceSync) -> int:
    return sum(1 for m in _messages(preferences) if not m.get("read"))


def mark_read(preferences: PreferenceSync, message_id: str) -> None:
    updated = [
        {**m, "read": True} if str(m.get("id")) == str(message_id) else m
        for m in _messages(preferences)
    ]
    preferences.update_section(Section.MESSAGES.value, updated)


def mark_all_read(preferences: PreferenceSync) -> None:
    preferences.update_section(
        Section.MESSAGES.value, [{**m, "read": True} for m in _messages(preferences)]
    )


def delete_message(preferences: PreferenceSync, message_id: str) -> None:
    remaining = [m for m in _messages(preferences) if str(m.get("id")) != str(message_id)]
    preferences.update_section(Section.MESSAGES.value, remaining)
    logger.info("Deleted message %s", message_id)


def poll_messages(api: DashboardAPI, preferences: PreferenceSync) -> int:
    """Pull the inbox from the server and return the unread count.

    Messages arrive from the public send form, so the server copy wins.
    """
    try:
        data = api.get_preferences(Section.MESSAGES.value)
    except DashboardAPIError as e:
        logger.debug("Message poll failed: %s", e)
        return unread_count(preferences)
    messages = data.get(Section.MESSAGES.value)
    preferences.apply_remote(Section.MESSAGES.value, messages if isinstance(messages, list) else [])
    return unread_count(preferences)
