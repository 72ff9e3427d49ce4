"""Message of the day, chosen once per date and shared across devices."""

import logging
from datetime import date
from typing import Optional

from client.api import DashboardAPI, DashboardAPIError
from client.cache import LocalStorage
from services.preference_store import Section

logger = logging.getLogger(__name__)

MOTIVATIONS = (
    "You're doing great! Keep up the amazing work!",
    "Every day is a fresh start. Make it count!",
    "You've got this! Believe in yourself!",
    "Small steps lead to big achievements!",
    "Your positive attitude makes a difference!",
    "Today is full of possibilities!",
    "You're stronger than you think!",
    "Keep moving forward, one step at a time!",
    "Your hard work doesn't go unnoticed!",
    "Remember: progress, not perfection!",
    "You bring joy to those around you!",
    "Every challenge is an opportunity to grow!",
    "You're making a difference!",
    "Stay positive and keep smiling!",
    "You have the power to make today great!",
    "Your consistency is your superpower.",
    "One good decision today is enough.",
    "The people around you are better because of you.",
    "Every day you show up matters.",
    "You lead by example more than you know.",
    "Your patience is a gift to others.",
    "Hard work done the right way always adds up.",
    "You make the people around you feel safe.",
    "Even slow progress is still progress.",
    "Your reliability means more than you realize.",
    "Your steady pace wins in the long run.",
    "You're someone people can count on.",
    "You've already come a long way.",
    "Your effort today makes tomorrow easier.",
    "You bring stability wherever you go.",
    "Your effort today is enough.",
)

LOCAL_TEXT_KEY = "daily-motivation"
LOCAL_DATE_KEY = "daily-motivation-date"


def motivation_for(day: date) -> str:
    return MOTIVATIONS[day.day % len(MOTIVATIONS)]


def daily_motivation(
    api: DashboardAPI, storage: LocalStorage, today: Optional[date] = None
) -> str:
    """Today's message: reuse the stored one if it is from today, else pick and save."""
    today = today or date.today()
    today_str = today.isoformat()

    try:
        stored = api.get_preferences(Section.DAILY_MOTIVATION.value)
        if stored.get("dailyMotivation") and stored.get("dailyMotivationDate") == today_str:
            return stored["dailyMotivation"]
    except DashboardAPIError as e:
        logger.warning("Daily motivation unavailable from server: %s", e)
        if storage.get(LOCAL_TEXT_KEY) and storage.get(LOCAL_DATE_KEY) == today_str:
            return storage.get(LOCAL_TEXT_KEY)

    message = motivation_for(today)
    storage.set(LOCAL_TEXT_KEY, message)
    storage.set(LOCAL_DATE_KEY, today_str)
    try:
        api.save_section(Section.DAILY_MOTIVATION.value, {"motivation": message, "date": today_str})
    except DashboardAPIError as e:
        logger.warning("Failed to save daily motivation: %s", e)
    return message
