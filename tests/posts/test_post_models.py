"""Tests for Post normalization and ordering."""

from clinicsite.posts.models import (
    Post,
    PostType,
    created_at_key,
    normalize_post,
    sort_by_created_desc,
)


class TestNormalizePost:
    def test_fills_missing_fields(self):
        post = normalize_post({"title": "Hello"})
        assert post.title == "Hello"
        assert post.type == PostType.NEWS
        assert post.tags == []
        assert post.is_published is False
        assert post.created_at
        assert post.updated_at

    def test_unknown_type_becomes_news(self):
        assert normalize_post({"type": "podcast"}).type == PostType.NEWS

    def test_keeps_valid_type(self):
        assert normalize_post({"type": "article"}).type == PostType.ARTICLE

    def test_coerces_values(self):
        post = normalize_post(
            {"title": 42, "tags": ["a", "", None, 7], "isPublished": 1, "author": None}
        )
        assert post.title == "42"
        assert post.tags == ["a", "7"]
        assert post.is_published is True
        assert post.author == ""

    def test_falsy_scalar_tags_are_kept_as_text(self):
        assert normalize_post({"tags": [0, False, True, "a"]}).tags == ["0", "false", "true", "a"]

    def test_tags_must_be_a_list(self):
        assert normalize_post({"tags": "a,b"}).tags == []

    def test_non_dict_input(self):
        post = normalize_post("garbage")
        assert post.id is None
        assert post.title == ""

    def test_preserves_timestamps(self):
        post = normalize_post(
            {"createdAt": "2024-01-01T00:00:00.000Z", "updatedAt": "2024-01-02T00:00:00.000Z"}
        )
        assert post.created_at == "2024-01-01T00:00:00.000Z"
        assert post.updated_at == "2024-01-02T00:00:00.000Z"

    def test_idempotent(self):
        once = normalize_post({"title": "T", "tags": ["x"], "isFeatured": True})
        twice = normalize_post(once.to_record())
        assert twice == once

    def test_accepts_post_instances(self):
        post = Post(id="p-1", title="T", slug="t", created_at="2024-01-01T00:00:00Z")
        assert normalize_post(post).id == "p-1"


class TestToRecord:
    def test_uses_camel_case_keys(self):
        record = Post(title="T", featured_image="img.png", is_published=True).to_record()
        assert record["featuredImage"] == "img.png"
        assert record["isPublished"] is True
        assert record["type"] == "news"
        assert "featured_image" not in record


class TestOrdering:
    def test_newest_first(self):
        old = Post(id="a", created_at="2023-01-01T00:00:00.000Z")
        new = Post(id="b", created_at="2024-01-01T00:00:00.000Z")
        assert [p.id for p in sort_by_created_desc([old, new])] == ["b", "a"]

    def test_unparseable_dates_sort_last(self):
        bad = Post(id="bad", created_at="yesterday")
        good = Post(id="good", created_at="2024-01-01T00:00:00.000Z")
        assert created_at_key(bad) == float("-inf")
        assert [p.id for p in sort_by_created_desc([bad, good])] == ["good", "bad"]

    def test_stable_for_equal_timestamps(self):
        stamp = "2024-01-01T00:00:00.000Z"
        posts = [Post(id=str(i), created_at=stamp) for i in range(3)]
        assert [p.id for p in sort_by_created_desc(posts)] == ["0", "1", "2"]
