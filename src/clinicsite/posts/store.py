"""JSON-backed post collection with a derived published projection.

``posts.json`` holds every post. ``posts.published.json`` is recomputed
in full from it on every change and never patched in place.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from clinicsite.errors import StoreUnavailableError
from clinicsite.posts.models import Post, normalize_post, sort_by_created_desc
from clinicsite.storage import backup_before_write, dump_json, read_json, write_atomic

logger = logging.getLogger(__name__)

POSTS_FILENAME = "posts.json"
PUBLISHED_POSTS_FILENAME = "posts.published.json"
DRAFT_BACKUP_LABEL = "posts.draft.backup"
PUBLISHED_BACKUP_LABEL = "posts.published.backup"


class PostStore:
    """Reads and writes the draft and published post collections."""

    def __init__(self, data_dir: Path, *, retention: int = 0) -> None:
        self._data_dir = data_dir
        self._retention = retention

    @property
    def posts_path(self) -> Path:
        return self._data_dir / POSTS_FILENAME

    @property
    def published_path(self) -> Path:
        return self._data_dir / PUBLISHED_POSTS_FILENAME

    # ── Private helpers ──────────────────────────────────────────

    def _load(self, path: Path) -> list[Post]:
        raw = read_json(path, "[]")
        if not isinstance(raw, list):
            raise StoreUnavailableError(path, "expected a JSON array of posts")
        return [normalize_post(item) for item in raw]

    def _save(self, path: Path, label: str, posts: Iterable[Post]) -> None:
        backup_before_write(path, label, retention=self._retention)
        records = [normalize_post(p).to_record() for p in posts]
        write_atomic(path, dump_json(records))

    # ── Public API ───────────────────────────────────────────────

    def ensure_files(self) -> None:
        """Create empty collections for any missing post file."""
        self._data_dir.mkdir(parents=True, exist_ok=True)
        for path in (self.posts_path, self.published_path):
            if not path.exists():
                path.write_text("[]", encoding="utf-8")
                logger.info("Created empty %s", path.name)

    def read_all(self) -> list[Post]:
        return self._load(self.posts_path)

    def read_published(self) -> list[Post]:
        return self._load(self.published_path)

    def write_all(self, posts: Iterable[Post]) -> None:
        """Back up, then atomically replace the full collection."""
        self._save(self.posts_path, DRAFT_BACKUP_LABEL, posts)

    def sync_published(self, posts: Iterable[Post]) -> list[Post]:
        """Recompute the published projection from ``posts``.

        Returns:
            The published posts, newest first.
        """
        published = sort_by_created_desc(p for p in posts if p.is_published)
        self._save(self.published_path, PUBLISHED_BACKUP_LABEL, published)
        return published
