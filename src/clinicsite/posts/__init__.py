"""Posts domain: news, updates, and articles with a published projection.

Operations live in ``clinicsite.posts.services``.
"""

from clinicsite.posts.models import (
    POST_TYPES,
    Post,
    PostType,
    normalize_post,
    sort_by_created_desc,
)
from clinicsite.posts.store import PostStore

__all__ = [
    "POST_TYPES",
    "Post",
    "PostStore",
    "PostType",
    "normalize_post",
    "sort_by_created_desc",
]
