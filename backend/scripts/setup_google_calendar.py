#!/usr/bin/env python3
"""Google Calendar / Ticketmaster setup script.

Collects the upstream credentials the dashboard needs and prints the
Google consent URL so the OAuth client can be checked before first use.

Usage:
    1. Create an OAuth client (type "Web application") in the Google
       Cloud console and add ``{DASHBOARD_URL}/api/oauth/callback`` as an
       authorized redirect URI
    2. Optionally create a Ticketmaster Discovery API key
    3. Run this script and paste the values when prompted

    python scripts/setup_google_calendar.py --status   # what the keychain holds
    python scripts/setup_google_calendar.py --reset    # forget calendar secrets
"""

import argparse
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import settings
from integrations.google_oauth_client import GoogleOAuthClient, generate_state
from services.credential_manager import (
    WIDGET_CREDENTIALS,
    delete_credential,
    keychain_status,
    set_credential,
)

PROMPTS = (
    ("GOOGLE_CLIENT_ID", "Google OAuth client ID"),
    ("GOOGLE_CLIENT_SECRET", "Google OAuth client secret"),
    ("GOOGLE_CALENDAR_API_KEY", "Google Calendar API key (optional)"),
    ("TICKETMASTER_API_KEY", "Ticketmaster API key (optional)"),
)


def redirect_uri() -> str:
    return settings.GOOGLE_REDIRECT_URI or f"{settings.DASHBOARD_URL.rstrip('/')}/api/oauth/callback"


def print_status() -> None:
    """Show which widget secrets are already in the keychain."""
    for widget, keys in keychain_status().items():
        print(f"{widget}:")
        for key, present in keys.items():
            print(f"  {key:<26} {'stored' if present else '-'}")


def reset_calendar() -> None:
    for key in WIDGET_CREDENTIALS["calendar"]:
        if delete_credential(key):
            print(f"  Removed {key}")
        else:
            print(f"  {key} was not stored")


def _offer_keychain_store(credentials: dict[str, str]) -> None:
    """Prompt the user to store credentials in the OS keychain."""
    answer = input("\nStore these credentials in the keychain? [Y/n] ").strip().lower()
    if answer in ("", "y", "yes"):
        for key, value in credentials.items():
            if set_credential(key, value):
                print(f"  Stored {key} in keychain")
            else:
                print(f"  Failed to store {key}")
    else:
        print("  Skipped keychain storage.")


def main(argv: list[str] | None = None):
    """Collect credentials and show the consent URL."""
    parser = argparse.ArgumentParser(description="Set up the calendar and concerts widgets.")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--status", action="store_true", help="Show stored keychain secrets and exit")
    group.add_argument("--reset", action="store_true", help="Delete the calendar secrets and exit")
    args = parser.parse_args(argv)

    if args.status:
        print_status()
        return
    if args.reset:
        reset_calendar()
        return

    print("Dad Dashboard Calendar Setup")
    print("=" * 50)
    print()
    print(f"Redirect URI to register: {redirect_uri()}")
    print("Leave optional values blank to skip them.")
    print()

    credentials: dict[str, str] = {}
    for key, label in PROMPTS:
        value = input(f"{label}: ").strip()
        if value:
            credentials[key] = value

    client_id = credentials.get("GOOGLE_CLIENT_ID")
    if not client_id:
        print("Error: A Google OAuth client ID is required")
        sys.exit(1)

    oauth = GoogleOAuthClient(
        client_id=client_id,
        client_secret=credentials.get("GOOGLE_CLIENT_SECRET", ""),
        redirect_uri=redirect_uri(),
    )

    print()
    print("Open this URL to confirm the consent screen loads:")
    print()
    print(oauth.authorization_url(generate_state()))
    print()
    print("Add the following to your .env file (or store them in the keychain):")
    print()
    for key, value in credentials.items():
        print(f"{key}={value}")

    _offer_keychain_store(credentials)


if __name__ == "__main__":
    main()
