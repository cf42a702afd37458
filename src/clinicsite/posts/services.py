"""Post operations used by the admin dashboard and the public site.

Each mutation follows the same sequence: load the full collection,
change it, sort newest first, write it back, recompute the published
projection, then audit. Missing posts and invalid payloads come back as
failed :class:`Result` values.
"""

from __future__ import annotations

import logging
import secrets
import string
import time
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from clinicsite.audit import AuditLog
from clinicsite.pagination import Pagination, paginate
from clinicsite.posts.models import Post, sort_by_created_desc
from clinicsite.posts.store import PostStore
from clinicsite.results import Result
from clinicsite.storage import now_iso
from clinicsite.validation import PostsQuery, slugify, validate_post_payload

logger = logging.getLogger(__name__)

_BASE36 = string.digits + string.ascii_lowercase

POST_NOT_FOUND = "Post not found"


def random_suffix(length: int = 7) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_post_id() -> str:
    return f"p-{int(time.time() * 1000)}-{random_suffix()}"


def ensure_unique_slug(posts: Sequence[Post], slug: str, current_id: str | None) -> str:
    """Return ``slug``, or ``slug-2``, ``slug-3``… whichever is free first.

    The post identified by ``current_id`` never collides with itself.
    """
    taken = {p.slug for p in posts if p.id != current_id}
    candidate = slug
    counter = 2
    while candidate in taken:
        candidate = f"{slug}-{counter}"
        counter += 1
    return candidate


# ── Listing ─────────────────────────────────────────────────────


def _matches(post: Post, query: PostsQuery) -> bool:
    if query.type and post.type != query.type:
        return False
    if query.search:
        haystack = " ".join([post.title, post.excerpt, post.author, " ".join(post.tags)]).lower()
        if query.search.lower() not in haystack:
            return False
    return True


def list_posts(posts: Sequence[Post], query: PostsQuery) -> tuple[list[Post], Pagination]:
    """Filter by type and free-text search, then paginate."""
    filtered = [p for p in posts if _matches(p, query)]
    return paginate(filtered, query.page, query.limit)


# ── Service ─────────────────────────────────────────────────────


class PostService:
    """Admin and public post operations over a :class:`PostStore`."""

    def __init__(self, store: PostStore, audit_log: AuditLog) -> None:
        self._store = store
        self._audit = audit_log

    # ── Private helpers ──────────────────────────────────────────

    def _commit(self, posts: list[Post], event: str, post_id: str | None, user: str) -> None:
        ordered = sort_by_created_desc(posts)
        self._store.write_all(ordered)
        self._store.sync_published(ordered)
        self._audit.record(event, postId=post_id, user=user or "unknown")

    def _toggle(
        self, post_id: str, event: str, flip: Callable[[Post], None], user: str
    ) -> Result:
        post_id = str(post_id or "").strip()
        if not post_id:
            return Result.fail("Invalid post id")
        posts = self._store.read_all()
        post = next((p for p in posts if p.id == post_id), None)
        if post is None:
            return Result.not_found(POST_NOT_FOUND)
        flip(post)
        post.updated_at = now_iso()
        self._commit(posts, event, post_id, user)
        return Result.ok(post)

    # ── Read operations ──────────────────────────────────────────

    def list_admin(self, query: PostsQuery) -> tuple[list[Post], Pagination]:
        return list_posts(sort_by_created_desc(self._store.read_all()), query)

    def list_public(self, query: PostsQuery) -> tuple[list[Post], Pagination]:
        return list_posts(self._store.read_published(), query)

    def get_by_id(self, post_id: str) -> Result:
        post_id = str(post_id or "").strip()
        if not post_id:
            return Result.fail("Invalid post id")
        post = next((p for p in self._store.read_all() if p.id == post_id), None)
        return Result.ok(post) if post else Result.not_found(POST_NOT_FOUND)

    def get_by_slug(self, slug: str, *, published_only: bool = False) -> Result:
        """Look a post up by slug.

        Admin lookups slugify the input first; public lookups only trim
        and lowercase it and search the published projection.
        """
        if published_only:
            key = str(slug or "").strip().lower()
            posts = self._store.read_published()
        else:
            key = slugify(slug)
            posts = self._store.read_all()
        if not key:
            return Result.fail("Slug is required")
        post = next((p for p in posts if p.slug == key), None)
        return Result.ok(post) if post else Result.not_found(POST_NOT_FOUND)

    # ── Write operations ─────────────────────────────────────────

    def create(self, payload: Mapping[str, Any] | None, user: str = "unknown") -> Result:
        validation = validate_post_payload(payload)
        if not validation.success:
            return validation
        posts = self._store.read_all()
        post: Post = validation.data
        now = now_iso()
        post.id = generate_post_id()
        post.slug = ensure_unique_slug(posts, post.slug, post.id)
        post.created_at = now
        post.updated_at = now
        posts.append(post)
        self._commit(posts, "post_create", post.id, user)
        logger.info("Created post %s (%s)", post.id, post.slug)
        return Result.ok(post)

    def update(self, post_id: str, payload: Mapping[str, Any] | None, user: str = "unknown") -> Result:
        post_id = str(post_id or "").strip()
        if not post_id:
            return Result.fail("Invalid post id")
        posts = self._store.read_all()
        index = next((i for i, p in enumerate(posts) if p.id == post_id), None)
        if index is None:
            return Result.not_found(POST_NOT_FOUND)
        existing = posts[index]
        validation = validate_post_payload(payload, existing)
        if not validation.success:
            return validation
        post: Post = validation.data
        post.id = existing.id
        post.created_at = existing.created_at
        post.updated_at = now_iso()
        post.slug = ensure_unique_slug(posts, post.slug, post.id)
        posts[index] = post
        self._commit(posts, "post_update", post.id, user)
        return Result.ok(post)

    def delete(self, post_id: str, user: str = "unknown") -> Result:
        post_id = str(post_id or "").strip()
        if not post_id:
            return Result.fail("Invalid post id")
        posts = self._store.read_all()
        remaining = [p for p in posts if p.id != post_id]
        if len(remaining) == len(posts):
            return Result.not_found(POST_NOT_FOUND)
        self._commit(remaining, "post_delete", post_id, user)
        return Result.ok()

    def toggle_publish(self, post_id: str, user: str = "unknown") -> Result:
        def flip(post: Post) -> None:
            post.is_published = not post.is_published

        return self._toggle(post_id, "post_toggle_publish", flip, user)

    def toggle_feature(self, post_id: str, user: str = "unknown") -> Result:
        def flip(post: Post) -> None:
            post.is_featured = not post.is_featured

        return self._toggle(post_id, "post_toggle_feature", flip, user)
