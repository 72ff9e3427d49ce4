"""UserPreferences model - the single-row hosted copy of the preferences document."""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, String

from database import Base
from models.utils import generate_uuid

# Single-tenant: every installation reads and writes this one row.
DEFAULT_USER_ID = "default"


class UserPreferences(Base):
    """All preference sections for the installation, one JSON column per section."""

    __tablename__ = "user_preferences"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, unique=True, index=True, nullable=False, default=DEFAULT_USER_ID)
    password = Column(JSON, nullable=False)
    team_preferences = Column(JSON, nullable=True)
    appearance_preferences = Column(JSON, nullable=True)
    concert_preferences = Column(JSON, nullable=True)
    calendar_preferences = Column(JSON, nullable=True)
    messages = Column(JSON, nullable=True)
    notes = Column(JSON, nullable=True)
    # Any JSON value: dailyMotivation payloads other than {motivation, date} are stored verbatim
    daily_motivation = Column(JSON, nullable=True)
    daily_motivation_date = Column(JSON, nullable=True)
    daily_motivation_data = Column(JSON, nullable=True)
    # Sections without a dedicated column, keyed by section name
    extra = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
