"""Tests for PostStore — draft collection and published projection."""

import json
from pathlib import Path

import pytest
from clinicsite.errors import StoreUnavailableError
from clinicsite.posts.models import Post
from clinicsite.posts.store import PostStore
from clinicsite.storage import list_backups


def _post(post_id: str, published: bool, created_at: str) -> Post:
    return Post(
        id=post_id,
        title=post_id,
        slug=post_id,
        is_published=published,
        created_at=created_at,
        updated_at=created_at,
    )


class TestEnsureFiles:
    def test_creates_empty_collections(self, tmp_path: Path):
        store = PostStore(tmp_path / "data")
        store.ensure_files()
        assert json.loads(store.posts_path.read_text(encoding="utf-8")) == []
        assert json.loads(store.published_path.read_text(encoding="utf-8")) == []

    def test_leaves_existing_files(self, tmp_path: Path):
        store = PostStore(tmp_path)
        store.posts_path.write_text('[{"title": "keep"}]', encoding="utf-8")
        store.ensure_files()
        assert store.read_all()[0].title == "keep"


class TestReadWrite:
    def test_missing_file_reads_empty(self, tmp_path: Path):
        assert PostStore(tmp_path).read_all() == []

    def test_round_trip(self, tmp_path: Path):
        store = PostStore(tmp_path)
        posts = [_post("a", True, "2024-01-01T00:00:00.000Z")]
        store.write_all(posts)
        assert store.read_all() == posts

    def test_non_list_file_is_unavailable(self, tmp_path: Path):
        store = PostStore(tmp_path)
        store.posts_path.write_text('{"posts": []}', encoding="utf-8")
        with pytest.raises(StoreUnavailableError):
            store.read_all()

    def test_write_backs_up_previous_file(self, tmp_path: Path):
        store = PostStore(tmp_path)
        store.write_all([_post("a", False, "2024-01-01T00:00:00.000Z")])
        store.write_all([])
        backups = list_backups(tmp_path, "posts.draft.backup")
        assert len(backups) == 1
        assert json.loads(backups[0].read_text(encoding="utf-8"))[0]["id"] == "a"

    def test_old_records_gain_new_fields(self, tmp_path: Path):
        store = PostStore(tmp_path)
        store.posts_path.write_text('[{"id": "x", "title": "Legacy"}]', encoding="utf-8")
        post = store.read_all()[0]
        assert post.seo_title == ""
        assert post.tags == []


class TestSyncPublished:
    def test_projection_matches_published_subset(self, tmp_path: Path):
        store = PostStore(tmp_path)
        posts = [
            _post("old", True, "2023-01-01T00:00:00.000Z"),
            _post("draft", False, "2024-06-01T00:00:00.000Z"),
            _post("new", True, "2024-01-01T00:00:00.000Z"),
        ]
        published = store.sync_published(posts)

        assert [p.id for p in published] == ["new", "old"]
        assert [p.id for p in store.read_published()] == ["new", "old"]
        assert all(p.is_published for p in store.read_published())
