"""Preferences API endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.helpers import error_response, get_preference_store
from schemas.preference import PreferencePatch, PreferenceWrite
from services.preference_store import PreferenceStore, Section

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/preferences", tags=["preferences"])


@router.get("")
def read_preferences(
    section: Optional[str] = None,
    store: PreferenceStore = Depends(get_preference_store),
):
    """Get one section, or the whole document with secrets redacted."""
    try:
        value = store.read(section)
    except Exception:
        logger.exception("Failed to read preferences (section=%s)", section)
        return error_response("Failed to read user data")

    if section is None or section == Section.DAILY_MOTIVATION.value:
        return value
    return {section: value}


@router.post("")
def write_preferences(
    body: PreferenceWrite,
    store: PreferenceStore = Depends(get_preference_store),
):
    """Replace one section."""
    if not body.section:
        return error_response("Section parameter required", 400)
    try:
        store.write(body.section, body.data)
    except Exception:
        logger.exception("Failed to write preferences section %s", body.section)
        return error_response("Failed to update user data")
    return {"success": True}


@router.patch("")
def merge_preferences(
    body: PreferencePatch,
    store: PreferenceStore = Depends(get_preference_store),
):
    """Shallow-merge fields into one section."""
    if not body.section or body.updates is None:
        return error_response("Section and updates parameters required", 400)
    try:
        store.merge(body.section, body.updates)
    except Exception:
        logger.exception("Failed to merge preferences section %s", body.section)
        return error_response("Failed to update user data")
    return {"success": True}
