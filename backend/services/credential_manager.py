"""OS keychain storage for the dashboard's upstream secrets.

Values live under the ``dad-dashboard`` keyring service and are picked up
by :class:`config.KeychainSettingsSource` ahead of environment variables.
``keyring`` is imported lazily; without it every lookup simply misses.
"""

import logging

logger = logging.getLogger(__name__)

SERVICE_NAME = "dad-dashboard"

# Which widget (or tier) each secret switches on
WIDGET_CREDENTIALS: dict[str, tuple[str, ...]] = {
    "preferences": ("DATABASE_URL", "DASHBOARD_PASSWORD"),
    "concerts": ("TICKETMASTER_API_KEY",),
    "calendar": ("GOOGLE_CLIENT_ID", "GOOGLE_CLIENT_SECRET", "GOOGLE_CALENDAR_API_KEY"),
}

CREDENTIAL_KEYS: frozenset[str] = frozenset(
    key for keys in WIDGET_CREDENTIALS.values() for key in keys
)


def _keyring():
    try:
        import keyring
    except ImportError:
        return None
    return keyring


def get_credential(key: str) -> str | None:
    """Look up ``key`` in the keychain; ``None`` when missing or unavailable."""
    keyring = _keyring()
    if keyring is None:
        return None
    try:
        return keyring.get_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("keyring lookup failed for %s", key, exc_info=True)
        return None


def set_credential(key: str, value: str) -> bool:
    """Store a dashboard secret. Returns ``False`` for unknown keys, blank values or keyring failures."""
    if key not in CREDENTIAL_KEYS:
        logger.warning("Refusing to store unknown credential %s", key)
        return False
    if not value or not value.strip():
        logger.warning("Refusing to store blank value for %s", key)
        return False

    keyring = _keyring()
    if keyring is None:
        logger.warning("keyring is not installed, cannot store %s", key)
        return False
    try:
        keyring.set_password(SERVICE_NAME, key, value.strip())
    except Exception:
        logger.warning("Failed to store %s in keychain", key, exc_info=True)
        return False
    logger.info("Stored %s in keychain", key)
    return True


def delete_credential(key: str) -> bool:
    if key not in CREDENTIAL_KEYS:
        logger.warning("Refusing to delete unknown credential %s", key)
        return False

    keyring = _keyring()
    if keyring is None:
        return False
    try:
        keyring.delete_password(SERVICE_NAME, key)
    except Exception:
        logger.debug("No %s to delete from keychain", key, exc_info=True)
        return False
    logger.info("Deleted %s from keychain", key)
    return True


def keychain_status() -> dict[str, dict[str, bool]]:
    """Per widget, whether each of its secrets is present in the keychain.

    Only presence is reported so the result is safe to print or log.
    """
    return {
        widget: {key: get_credential(key) is not None for key in keys}
        for widget, keys in WIDGET_CREDENTIALS.items()
    }
