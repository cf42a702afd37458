"""Contacts domain: submission models, routing, and the intake pipeline."""

from clinicsite.contacts.models import Concern, ContactSubmission, generate_contact_id
from clinicsite.contacts.routing import (
    ContactRoute,
    ContactRouter,
    RouteOutcome,
    RouteType,
    build_message,
    build_whatsapp_redirect,
    normalize_route,
)
from clinicsite.contacts.service import ContactService, SubmissionResult

__all__ = [
    "Concern",
    "ContactRoute",
    "ContactRouter",
    "ContactService",
    "ContactSubmission",
    "RouteOutcome",
    "RouteType",
    "SubmissionResult",
    "build_message",
    "build_whatsapp_redirect",
    "generate_contact_id",
    "normalize_route",
]
