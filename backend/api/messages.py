"""Family message inbox (the public send-message form posts here)."""

import logging

from fastapi import APIRouter, Depends

from api.helpers import error_response, get_preference_store
from schemas.preference import MessageCreate
from services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("")
def send_message(
    body: MessageCreate,
    store: PreferenceStore = Depends(get_preference_store),
):
    """Append an unread message to the inbox."""
    name = body.name.strip()
    text = body.message.strip()
    if not name or not text:
        return error_response("Name and message are required", 400)
    try:
        entry = store.append_message(name, text)
    except Exception:
        logger.exception("Failed to store message")
        return error_response("Failed to send message")
    return {"success": True, "message": entry}
