"""Post domain models and the per-record normalization table.

Records are stored with camelCase keys; Python code uses the snake_case
attribute names. Every record read from or written to disk passes through
:func:`normalize_post`, so older files pick up new fields with correct
types.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from clinicsite.storage import now_iso


class PostType(StrEnum):
    """Editorial category of a post."""

    NEWS = "news"
    UPDATE = "update"
    ARTICLE = "article"


POST_TYPES = tuple(t.value for t in PostType)


class Post(BaseModel):
    """A news item, update, or article."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str | None = None
    title: str = ""
    slug: str = ""
    type: PostType = PostType.NEWS
    excerpt: str = ""
    content: str = ""
    featured_image: str = ""
    video_url: str = ""
    author: str = ""
    tags: list[str] = Field(default_factory=list)
    is_published: bool = False
    is_featured: bool = False
    seo_title: str = ""
    seo_description: str = ""
    created_at: str = ""
    updated_at: str = ""

    def to_record(self) -> dict[str, Any]:
        """Serialize to the on-disk camelCase shape."""
        return self.model_dump(mode="json", by_alias=True)


def _text(value: Any) -> str:
    if value is None or value is False or value == "" or value == 0:
        return ""
    if value is True:
        return "true"
    return str(value)


def _post_type(value: Any) -> PostType:
    return PostType(value) if value in POST_TYPES else PostType.NEWS


def _tag(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _tags(value: Any) -> list[str]:
    """Stringify every tag; only empty strings and nulls are dropped."""
    if not isinstance(value, list):
        return []
    return [s for s in map(_tag, value) if s]


# Default table: on-disk key → coercion applied to the raw value.
# Timestamps are handled separately because their default depends on "now".
POST_DEFAULTS: dict[str, Callable[[Any], Any]] = {
    "id": lambda v: v if v is None else str(v),
    "title": _text,
    "slug": _text,
    "type": _post_type,
    "excerpt": _text,
    "content": _text,
    "featuredImage": _text,
    "videoUrl": _text,
    "author": _text,
    "tags": _tags,
    "isPublished": bool,
    "isFeatured": bool,
    "seoTitle": _text,
    "seoDescription": _text,
}


def normalize_post(raw: Any) -> Post:
    """Coerce a raw record of any vintage into a complete :class:`Post`."""
    if isinstance(raw, Post):
        raw = raw.to_record()
    source = raw if isinstance(raw, dict) else {}
    values = {key: coerce(source.get(key)) for key, coerce in POST_DEFAULTS.items()}
    now = now_iso()
    values["createdAt"] = _text(source.get("createdAt")) or now
    values["updatedAt"] = _text(source.get("updatedAt")) or now
    return Post.model_validate(values)


def created_at_key(post: Post) -> float:
    """Sort key for ``created_at``; unparseable dates sort as oldest."""
    try:
        return datetime.fromisoformat(post.created_at).timestamp()
    except ValueError:
        return float("-inf")


def sort_by_created_desc(posts: Iterable[Post]) -> list[Post]:
    """Newest first. Stable, so equal timestamps keep their relative order."""
    return sorted(posts, key=created_at_key, reverse=True)
