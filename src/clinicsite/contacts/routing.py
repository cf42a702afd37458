"""Delivery of contact submissions to the configured form route.

The published content's ``contactSection.formRoute`` selects one of four
routes: ``none``, ``email`` (SMTP), ``url`` (JSON webhook) or
``whatsapp`` (a wa.me redirect link for the visitor's browser).
"""

from __future__ import annotations

import json
import logging
import re
import smtplib
import urllib.error
import urllib.request
from collections.abc import Callable, Mapping
from email.message import EmailMessage
from enum import StrEnum
from typing import Any
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from clinicsite.config import SmtpConfig

logger = logging.getLogger(__name__)

EMAIL_SUBJECT = "New contact request"

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_NON_DIGITS_RE = re.compile(r"\D+")


class RouteType(StrEnum):
    """Delivery mechanism for contact submissions."""

    NONE = "none"
    EMAIL = "email"
    URL = "url"
    WHATSAPP = "whatsapp"


class ContactRoute(BaseModel):
    type: RouteType = RouteType.NONE
    value: str = ""


class RouteOutcome(BaseModel):
    """What happened when a submission was routed.

    ``ok`` is None for routes that make no outbound call.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: RouteType
    ok: bool | None = None
    reason: str | None = None
    status: int | None = None
    redirect_url: str | None = None

    def as_dict(self) -> dict[str, Any]:
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if self.type == RouteType.WHATSAPP:
            data["redirectUrl"] = self.redirect_url
        return data


def normalize_route(raw: Any) -> ContactRoute:
    """Coerce a stored formRoute into a :class:`ContactRoute`.

    Anything unrecognized becomes the ``none`` route.
    """
    if not isinstance(raw, Mapping):
        return ContactRoute()
    type_tag = str(raw.get("type") or "none").strip().lower()
    value = str(raw.get("value") or "").strip()
    try:
        route_type = RouteType(type_tag)
    except ValueError:
        logger.warning("Unknown contact route type %r, treating as none", type_tag)
        route_type = RouteType.NONE
    return ContactRoute(type=route_type, value=value)


def build_message(contact: Mapping[str, Any]) -> str:
    """Plain-text summary shared by the email and WhatsApp routes."""

    def field(key: str) -> str:
        value = contact.get(key)
        return "" if value is None else str(value)

    return "\n".join(
        [
            "New contact request",
            f"Name: {field('firstName')} {field('lastName')}".strip(),
            f"Email: {field('email')}",
            f"Phone: {field('phone')}",
            f"Concern: {field('concern')}",
            f"Message: {field('message')}",
            f"ID: {field('id')}",
            f"Created: {field('createdAt')}",
        ]
    )


def build_whatsapp_redirect(value: str, contact: Mapping[str, Any]) -> str | None:
    """``https://wa.me/<digits>?text=<message>``, or None without a number."""
    phone = _NON_DIGITS_RE.sub("", value)
    if not phone:
        return None
    text = quote(build_message(contact), safe="!~*'()")
    return f"https://wa.me/{phone}?text={text}"


class ContactRouter:
    """Dispatches a stored submission to its configured route.

    Outbound transports are injectable so they can be replaced in tests.
    Passing ``opener=None`` models an environment without an HTTP client.
    """

    def __init__(
        self,
        smtp: SmtpConfig,
        *,
        opener: Callable[..., Any] | None = urllib.request.urlopen,
        smtp_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP,
        smtp_ssl_factory: Callable[..., smtplib.SMTP] = smtplib.SMTP_SSL,
    ) -> None:
        self._smtp = smtp
        self._opener = opener
        self._smtp_factory = smtp_factory
        self._smtp_ssl_factory = smtp_ssl_factory

    def route(self, contact: Mapping[str, Any], raw_route: Any) -> RouteOutcome:
        """Deliver ``contact`` via ``raw_route``.

        Raises:
            smtplib.SMTPException, OSError: The SMTP transport failed.
            urllib.error.URLError: The webhook could not be reached.
        """
        route = normalize_route(raw_route)
        if route.type == RouteType.NONE or not route.value:
            return RouteOutcome(type=RouteType.NONE)

        handlers: dict[RouteType, Callable[[Mapping[str, Any], str], RouteOutcome]] = {
            RouteType.EMAIL: self._send_email,
            RouteType.URL: self._post_webhook,
            RouteType.WHATSAPP: self._whatsapp,
        }
        return handlers[route.type](contact, route.value)

    # ── Handlers ─────────────────────────────────────────────────

    def _whatsapp(self, contact: Mapping[str, Any], value: str) -> RouteOutcome:
        return RouteOutcome(
            type=RouteType.WHATSAPP,
            redirect_url=build_whatsapp_redirect(value, contact),
        )

    def _send_email(self, contact: Mapping[str, Any], value: str) -> RouteOutcome:
        cfg = self._smtp
        recipient = value or cfg.to_addr
        if not (cfg.is_configured and recipient):
            logger.warning(
                "Email route skipped: missing SMTP config (host=%s user=%s from=%s to=%s)",
                bool(cfg.host), bool(cfg.user), bool(cfg.sender), bool(recipient),
            )
            return RouteOutcome(type=RouteType.EMAIL, ok=False, reason="missing_smtp_config")

        msg = EmailMessage()
        msg["Subject"] = EMAIL_SUBJECT
        msg["From"] = cfg.sender
        msg["To"] = recipient
        msg.set_content(build_message(contact))

        if cfg.port == 465:
            server = self._smtp_ssl_factory(cfg.host, cfg.port)
        else:
            server = self._smtp_factory(cfg.host, cfg.port)
        with server:
            if cfg.port != 465:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(cfg.user, cfg.password)
            server.send_message(msg)

        logger.info("Contact %s emailed to route recipient", contact.get("id"))
        return RouteOutcome(type=RouteType.EMAIL, ok=True)

    def _post_webhook(self, contact: Mapping[str, Any], value: str) -> RouteOutcome:
        if not _HTTP_URL_RE.match(value):
            return RouteOutcome(type=RouteType.URL, ok=False, reason="invalid_url")
        if self._opener is None:
            logger.warning("URL route skipped: no HTTP client available")
            return RouteOutcome(type=RouteType.URL, ok=False, reason="fetch_unavailable")

        req = urllib.request.Request(
            value,
            data=json.dumps(dict(contact)).encode("utf-8"),
            method="POST",
            headers={"Content-Type": "application/json"},
        )
        try:
            with self._opener(req) as resp:
                status = int(resp.status)
        except urllib.error.HTTPError as exc:
            status = exc.code
            exc.close()
        ok = 200 <= status < 300
        if not ok:
            logger.warning("Webhook %s answered HTTP %d", value, status)
        return RouteOutcome(type=RouteType.URL, ok=ok, status=status)
