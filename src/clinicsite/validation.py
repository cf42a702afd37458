"""Validation and normalization of untrusted input.

Every ``validate_*`` function is pure and returns a :class:`Result`;
none of them raise. Client-side checks are never relied upon.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel

from clinicsite.posts.models import POST_TYPES, Post
from clinicsite.results import Result

CONTACT_CONCERNS = ("diagnosis", "treatment", "genetic", "support")

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]{2,}$")
_USERNAME_RE = re.compile(r"^[A-Za-z0-9._-]{3,64}$")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x1f\x7f]")
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

_SCRIPT_BLOCK_RE = re.compile(r"<script[\s\S]*?>[\s\S]*?</script>", re.IGNORECASE)
_EVENT_HANDLER_RE = re.compile(r"""\son\w+\s*=\s*(['"]).*?\1""", re.IGNORECASE)
_JS_URI_RE = re.compile(r"""\s(href|src)\s*=\s*(['"])\s*javascript:[^'"]*\2""", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]*>")

EXCERPT_LENGTH = 220
SLUG_MAX_LENGTH = 120
MAX_TAGS = 20
TAG_MAX_LENGTH = 40


class FieldTooLongError(ValueError):
    """A field exceeded its length cap."""


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _as_text(value: Any) -> str:
    return "" if value is None else str(value)


def sanitize_text(value: Any, max_length: int) -> str:
    """Trim ``value``; raise FieldTooLongError if it exceeds ``max_length``."""
    text = _as_text(value).strip()
    if len(text) > max_length:
        raise FieldTooLongError(f"value longer than {max_length} characters")
    return text


def sanitize_credential_text(value: Any, max_length: int) -> str:
    """Like :func:`sanitize_text` but also drops ASCII control characters."""
    text = _CONTROL_CHARS_RE.sub("", _as_text(value)).strip()
    if len(text) > max_length:
        raise FieldTooLongError(f"value longer than {max_length} characters")
    return text


def sanitize_rich_text(value: Any, max_length: int) -> str:
    """Strip the most dangerous constructs from editor HTML.

    Removes ``<script>`` blocks and inline ``on*=`` handlers, and rewrites
    ``javascript:`` URIs in ``href``/``src`` to ``#``. This is a narrow
    filter, not a general HTML sanitizer.
    """
    html = _as_text(value)
    if len(html) > max_length:
        raise FieldTooLongError(f"content longer than {max_length} characters")
    html = _SCRIPT_BLOCK_RE.sub("", html)
    html = _EVENT_HANDLER_RE.sub("", html)
    html = _JS_URI_RE.sub(r' \1="#"', html)
    return html.strip()


def strip_tags(html: str) -> str:
    return _TAG_RE.sub("", html)


def slugify(value: Any) -> str:
    """Lowercase, drop quotes, collapse non-alphanumerics to single hyphens."""
    text = _as_text(value).lower()
    text = re.sub(r"['\"]", "", text)
    text = re.sub(r"[^a-z0-9]+", "-", text)
    text = text.strip("-")
    return text[:SLUG_MAX_LENGTH]


def normalize_tags(raw: Any) -> list[str]:
    """Lowercased, non-empty tags from a list or a comma-separated string."""
    if isinstance(raw, list):
        items = raw
    elif isinstance(raw, str):
        items = raw.split(",")
    else:
        return []
    tags = [sanitize_text(item, TAG_MAX_LENGTH).lower() for item in items]
    return [t for t in tags if t][:MAX_TAGS]


def _as_mapping(value: Any) -> Mapping[str, Any]:
    """Request bodies that are not JSON objects read as empty."""
    return value if isinstance(value, Mapping) else {}


def _parse_int(value: Any) -> int | None:
    match = _LEADING_INT_RE.match(_as_text(value))
    return int(match.group(1)) if match else None


# ---------------------------------------------------------------------------
# Contact form
# ---------------------------------------------------------------------------


def validate_contact(payload: Any) -> Result:
    """Validate and normalize a public contact form submission.

    Length violations fail with one generic message so the response does
    not reveal which limit was hit.
    """
    data = _as_mapping(payload)
    try:
        first_name = sanitize_text(data.get("firstName"), 80)
        last_name = sanitize_text(data.get("lastName"), 80)
        email = sanitize_text(data.get("email"), 160)
        phone = sanitize_text(data.get("phone"), 40)
        concern = sanitize_text(data.get("concern"), 120)
        message = sanitize_text(data.get("message"), 4000) if data.get("message") else ""
    except FieldTooLongError:
        return Result.fail("Please review the form fields and try again.")

    if not first_name or not last_name:
        return Result.fail("Please provide your first and last name.")
    if not email or not _EMAIL_RE.match(email):
        return Result.fail("Please provide a valid email address.")
    if not phone:
        return Result.fail("Please provide a contact phone number.")
    if concern not in CONTACT_CONCERNS:
        return Result.fail("Please select a valid primary concern.")

    return Result.ok(
        {
            "firstName": first_name,
            "lastName": last_name,
            "email": email,
            "phone": phone,
            "concern": concern,
            "message": message,
        }
    )


# ---------------------------------------------------------------------------
# Posts
# ---------------------------------------------------------------------------


class PostsQuery(BaseModel):
    """Normalized listing parameters for posts."""

    type: str = ""
    page: int = 1
    limit: int = 6
    search: str = ""


class ContactsQuery(BaseModel):
    """Normalized listing parameters for the admin contact inbox."""

    page: int = 1
    limit: int = 25
    search: str = ""


def validate_posts_query(query: Any) -> PostsQuery:
    q = _as_mapping(query)
    return PostsQuery(
        type=_as_text(q.get("type")).strip().lower() if q.get("type") else "",
        page=max(_parse_int(q.get("page")) or 1, 1),
        limit=min(max(_parse_int(q.get("limit")) or 6, 1), 24),
        search=_as_text(q.get("search")).strip()[:80] if q.get("search") else "",
    )


def validate_contacts_query(query: Any) -> ContactsQuery:
    q = _as_mapping(query)
    return ContactsQuery(
        page=max(_parse_int(q.get("page")) or 1, 1),
        limit=min(max(_parse_int(q.get("limit")) or 25, 5), 100),
        search=_as_text(q.get("search")).strip().lower()[:120],
    )


def validate_post_payload(payload: Any, existing: Post | None = None) -> Result:
    """Validate an admin post create/update body.

    Success data is a :class:`Post` with no timestamps; the caller assigns
    ``id``, timestamps and the final unique slug.
    """
    body = _as_mapping(payload)
    try:
        title = sanitize_text(body.get("title"), 180)
        if not title:
            return Result.fail("Title is required.")

        post_type = sanitize_text(body.get("type") or "news", 20).lower()
        if post_type not in POST_TYPES:
            return Result.fail("Invalid post type.")

        slug = slugify(sanitize_text(body.get("slug") or "", 180) or title)
        if not slug:
            return Result.fail("Unable to generate slug.")

        content = sanitize_rich_text(body.get("content"), 50000)
        excerpt = sanitize_text(body.get("excerpt"), 500) or strip_tags(content)[:EXCERPT_LENGTH]
        seo_title = sanitize_text(body.get("seoTitle"), 180) or title
        seo_description = sanitize_text(body.get("seoDescription"), 300) or excerpt

        post = Post(
            id=existing.id if existing else None,
            title=title,
            slug=slug,
            type=post_type,
            excerpt=excerpt,
            content=content,
            featured_image=sanitize_text(body.get("featuredImage"), 1000),
            video_url=sanitize_text(body.get("videoUrl"), 1000),
            author=sanitize_text(body.get("author"), 120),
            tags=normalize_tags(body.get("tags")),
            is_published=bool(body.get("isPublished")),
            is_featured=bool(body.get("isFeatured")),
            seo_title=seo_title,
            seo_description=seo_description,
        )
    except FieldTooLongError:
        return Result.fail("Invalid post payload.")

    return Result.ok(post)


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


def validate_credential_update(payload: Any) -> Result:
    """Validate a change-username/change-password request.

    Success data: ``currentPassword``, ``newUsername`` and ``newPassword``,
    the latter two None when not being changed.
    """
    body = _as_mapping(payload)
    try:
        new_username = sanitize_credential_text(body.get("newUsername") or "", 64)
    except FieldTooLongError:
        return Result.fail("Invalid credentials payload.")
    current_password = _as_text(body.get("currentPassword") or "")
    new_password = _as_text(body.get("newPassword") or "")
    confirm_password = _as_text(body.get("confirmNewPassword") or "")

    if not current_password:
        return Result.fail("Current password is required.")
    if not new_username and not new_password:
        return Result.fail("Provide a new username or new password.")
    if new_username and not _USERNAME_RE.match(new_username):
        return Result.fail(
            "Username must be 3-64 characters and only include letters, numbers, "
            "dot, underscore, or hyphen."
        )
    if new_password:
        if len(new_password) < 8:
            return Result.fail("New password must be at least 8 characters.")
        if new_password != confirm_password:
            return Result.fail("New password and confirmation do not match.")

    return Result.ok(
        {
            "currentPassword": current_password,
            "newUsername": new_username or None,
            "newPassword": new_password or None,
        }
    )
