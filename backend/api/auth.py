"""Dashboard password check."""

import logging

from fastapi import APIRouter, Depends

from api.helpers import error_response, get_preference_store
from schemas.preference import PasswordCheck
from services.preference_store import PreferenceStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/verify")
def verify_password(
    body: PasswordCheck,
    store: PreferenceStore = Depends(get_preference_store),
):
    try:
        valid = store.verify_password(body.password)
    except Exception:
        logger.exception("Password check failed")
        return error_response("Failed to read user data", valid=False)
    if not valid:
        logger.info("Rejected dashboard password attempt")
    return {"valid": valid}
