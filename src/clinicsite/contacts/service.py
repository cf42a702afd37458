"""Contact submission pipeline: validate → persist → audit → notify → route.

Once the record is durably appended and audited the submission counts as
accepted. Notification and routing run afterwards; their failures are
logged and reported, never turned into a failed submission.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any

from pydantic import BaseModel

from clinicsite.audit import AuditLog
from clinicsite.contacts.models import ContactSubmission, generate_contact_id
from clinicsite.contacts.notifications import send_contact_emails
from clinicsite.contacts.routing import ContactRouter, RouteOutcome, normalize_route
from clinicsite.content.store import ContentStore
from clinicsite.errors import ClinicSiteError
from clinicsite.pagination import Pagination, paginate
from clinicsite.storage import now_iso
from clinicsite.validation import ContactsQuery, validate_contact

logger = logging.getLogger(__name__)

THANK_YOU_MESSAGE = "Thank you. We will contact you within 24 hours."
SUBMIT_FAILED_MESSAGE = "Unable to submit. Please try again or call us."

_SEARCH_FIELDS = ("firstName", "lastName", "email", "phone", "concern", "message")


class SubmissionResult(BaseModel):
    """Response for a contact form submission."""

    success: bool
    message: str = ""
    error: str = ""
    route: dict[str, Any] | None = None
    contact: ContactSubmission | None = None


def _created_at(record: Any) -> float:
    raw = record.get("createdAt") if isinstance(record, dict) else None
    try:
        return datetime.fromisoformat(str(raw)).timestamp()
    except ValueError:
        return 0.0


class ContactService:
    """Runs the contact pipeline against the content store."""

    def __init__(
        self,
        content_store: ContentStore,
        audit_log: AuditLog,
        router: ContactRouter,
        notifier: Callable[[Mapping[str, Any]], None] = send_contact_emails,
    ) -> None:
        self._content = content_store
        self._audit = audit_log
        self._router = router
        self._notifier = notifier

    # ── Private helpers ──────────────────────────────────────────

    def _route(self, record: dict[str, Any]) -> RouteOutcome:
        raw_route = self._content.form_route()
        try:
            return self._router.route(record, raw_route)
        except Exception:
            route_type = normalize_route(raw_route).type
            logger.error("Contact %s routing failed via %s", record["id"], route_type, exc_info=True)
            return RouteOutcome(type=route_type, ok=False, reason="delivery_failed")

    @staticmethod
    def _log_notification_failure(future: Future[None]) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("Contact emails failed: %s", exc)

    # ── Public API ───────────────────────────────────────────────

    def submit(self, payload: Any) -> SubmissionResult:
        validation = validate_contact(payload)
        if not validation.success:
            return SubmissionResult(success=False, error=validation.error)

        contact = ContactSubmission(
            id=generate_contact_id(),
            created_at=now_iso(),
            **validation.data,
        )
        record = contact.to_record()

        try:
            self._content.append_contact(record)
        except (OSError, ClinicSiteError):
            logger.exception("Contact submission could not be stored")
            return SubmissionResult(success=False, error=SUBMIT_FAILED_MESSAGE)

        self._audit.record("contact_submission", contactId=contact.id)

        # Notification result is only logged; routing result is reported.
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="contact") as pool:
            notified = pool.submit(self._notifier, record)
            notified.add_done_callback(self._log_notification_failure)
            outcome = pool.submit(self._route, record).result()

        return SubmissionResult(
            success=True,
            message=THANK_YOU_MESSAGE,
            route=outcome.as_dict(),
            contact=contact,
        )

    def list_contacts(self, query: ContactsQuery) -> tuple[list[Any], Pagination]:
        """Newest-first contact inbox with free-text search."""
        records = sorted(self._content.read_contacts(), key=_created_at, reverse=True)
        if query.search:
            records = [
                r for r in records
                if isinstance(r, dict)
                and query.search in " ".join(str(r[f]) for f in _SEARCH_FIELDS if r.get(f)).lower()
            ]
        return paginate(records, query.page, query.limit)
