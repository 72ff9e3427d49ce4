"""API route handlers."""
from . import auth, calendar, concerts, messages, oauth, preferences, sports, weather

__all__ = ["auth", "calendar", "concerts", "messages", "oauth", "preferences", "sports", "weather"]
