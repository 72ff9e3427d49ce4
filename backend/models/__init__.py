"""SQLAlchemy ORM models."""

from .user_preference import DEFAULT_USER_ID, UserPreferences
from .utils import generate_uuid

__all__ = ["DEFAULT_USER_ID", "UserPreferences", "generate_uuid"]
