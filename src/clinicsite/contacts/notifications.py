"""Staff/patient email notifications for new contact requests.

Currently a stub: it records the intent in the log. A real provider
integration slots in here without touching the submission flow.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

logger = logging.getLogger(__name__)


def send_contact_emails(contact: Mapping[str, Any]) -> None:
    """Notify the care coordination team and acknowledge the patient."""
    try:
        logger.info(
            "Contact email dispatch (stub): contact=%s email=%s",
            contact.get("id"),
            contact.get("email"),
        )
    except Exception:
        logger.error("Contact email dispatch failed", exc_info=True)
