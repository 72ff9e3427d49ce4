"""Dashboard client: the browser-side half of the dashboard, in Python.

Reads preferences through the server tiers (falling back to local
storage), keeps the per-category data cache, drives refresh cadences,
and runs the Google Calendar token lifecycle.
"""

from client.api import DashboardAPI, DashboardAPIError
from client.cache import DataCache, LocalStorage, SessionStorage, initialize_session
from client.dashboard import Dashboard

__all__ = [
    "Dashboard",
    "DashboardAPI",
    "DashboardAPIError",
    "DataCache",
    "LocalStorage",
    "SessionStorage",
    "initialize_session",
]
