"""Tests for default content and the backfill rules."""

import copy

from clinicsite.content.defaults import (
    CONTENT_KEYS,
    DEFAULT_CONTENT,
    default_content,
    default_experts,
    default_testimonials,
    ensure_defaults,
)


class TestDefaultContent:
    def test_fresh_copy_each_time(self):
        first = default_content()
        first["siteInfo"]["title"] = "changed"
        assert default_content()["siteInfo"]["title"] == "Comprehensive Cancer Center"
        assert DEFAULT_CONTENT["siteInfo"]["title"] == "Comprehensive Cancer Center"

    def test_has_every_key(self):
        assert set(default_content()) == set(CONTENT_KEYS)

    def test_default_route_is_none(self):
        assert default_content()["contactSection"]["formRoute"] == {"type": "none", "value": ""}

    def test_default_lists(self):
        assert len(default_experts()) == 4
        assert len(default_testimonials()) == 3


class TestEnsureDefaults:
    def test_empty_document_is_filled(self):
        doc = ensure_defaults({})
        for key in CONTENT_KEYS:
            assert key in doc
        assert doc["contactSection"]["formRoute"]["type"] == "none"

    def test_idempotent(self):
        once = ensure_defaults({"siteInfo": {"title": "X"}, "sectionsOrder": ["hero"]})
        assert ensure_defaults(once) == once

    def test_defaults_are_a_fixed_point(self):
        assert ensure_defaults(default_content()) == default_content()

    def test_does_not_mutate_input(self):
        doc = {"sectionsOrder": ["hero", "about"], "contactSection": {}}
        snapshot = copy.deepcopy(doc)
        ensure_defaults(doc)
        assert doc == snapshot

    def test_non_dict_returned_unchanged(self):
        assert ensure_defaults(["a"]) == ["a"]
        assert ensure_defaults(None) is None

    def test_keeps_existing_values(self):
        doc = ensure_defaults({"siteInfo": {"title": "Mine"}, "experts": [{"name": "Dr. A"}]})
        assert doc["siteInfo"] == {"title": "Mine"}
        assert doc["experts"] == [{"name": "Dr. A"}]

    def test_empty_lists_get_defaults(self):
        doc = ensure_defaults({"experts": [], "testimonials": []})
        assert len(doc["experts"]) == 4
        assert len(doc["testimonials"]) == 3

    def test_missing_order_uses_legacy_order_plus_new_sections(self):
        doc = ensure_defaults({})
        assert doc["sectionsOrder"] == [
            "hero", "services", "team", "testimonials", "news",
            "updates", "articles", "about", "contact", "cta",
        ]

    def test_new_sections_inserted_before_about(self):
        doc = ensure_defaults({"sectionsOrder": ["hero", "about", "contact"]})
        assert doc["sectionsOrder"] == [
            "hero", "testimonials", "news", "updates", "articles", "about", "contact",
        ]

    def test_new_sections_appended_without_about(self):
        doc = ensure_defaults({"sectionsOrder": ["hero"]})
        assert doc["sectionsOrder"] == ["hero", "testimonials", "news", "updates", "articles"]

    def test_visibility_respects_existing_flags(self):
        doc = ensure_defaults({"sectionVisibility": {"news": False}})
        assert doc["sectionVisibility"]["news"] is False
        assert doc["sectionVisibility"]["updates"] is True

    def test_form_route_added_to_existing_section(self):
        doc = ensure_defaults({"contactSection": {"heading": "Hi"}})
        assert doc["contactSection"]["heading"] == "Hi"
        assert doc["contactSection"]["formRoute"] == {"type": "none", "value": ""}

    def test_insurance_partial_backfill(self):
        doc = ensure_defaults({"insurance": {"blurb": {"en": "Ours"}}})
        assert doc["insurance"]["blurb"] == {"en": "Ours"}
        assert doc["insurance"]["coverageLinkLabel"]["en"] == "Check Your Coverage"
