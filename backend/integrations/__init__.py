"""External API integrations.

This package contains:
- Base client: shared httpx request/error translation
- ESPN client: teams, schedules, scoreboards and news
- Ticketmaster client: concert search
- Google Calendar and Google OAuth clients
- Weather client: wttr.in current conditions
"""

from integrations.espn_client import EspnClient
from integrations.google_calendar_client import GoogleCalendarClient
from integrations.google_oauth_client import GoogleOAuthClient
from integrations.ticketmaster_client import TicketmasterClient
from integrations.weather_client import WeatherClient

__all__ = [
    "EspnClient",
    "GoogleCalendarClient",
    "GoogleOAuthClient",
    "TicketmasterClient",
    "WeatherClient",
]
