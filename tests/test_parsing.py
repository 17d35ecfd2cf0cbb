"""Tests for the per-field tag extraction rules."""

from linkshelf.services.parsing import (
    CANONICAL_RULES,
    DESCRIPTION_RULES,
    IMAGE_RULES,
    TITLE_RULES,
    collect_candidates,
    first_match,
    parse_html,
)


def _soup(head: str):
    return parse_html(f"<html><head>{head}</head><body><p>x</p></body></html>")


# ---------------------------------------------------------------------------
# Title
# ---------------------------------------------------------------------------

class TestTitleRules:
    def test_og_title_wins_over_title_element(self):
        soup = _soup(
            '<title>Page Title</title>'
            '<meta property="og:title" content="Social Title">'
        )
        assert first_match(soup, TITLE_RULES) == ("Social Title", "og:title")

    def test_og_title_is_returned_verbatim(self):
        soup = _soup('<meta property="og:title" content="Hello, World: A Story | Site">')
        assert first_match(soup, TITLE_RULES)[0] == "Hello, World: A Story | Site"

    def test_og_title_without_title_element(self):
        soup = _soup('<meta property="og:title" content="Hello">')
        assert first_match(soup, TITLE_RULES) == ("Hello", "og:title")

    def test_twitter_title_is_second_choice(self):
        soup = _soup(
            '<title>Page Title</title>'
            '<meta name="twitter:title" content="Tweet Title">'
        )
        assert first_match(soup, TITLE_RULES) == ("Tweet Title", "twitter:title")

    def test_title_element_is_last_resort_and_stripped(self):
        soup = _soup("<title>\n   Plain Title  \n</title>")
        assert first_match(soup, TITLE_RULES) == ("Plain Title", "title")

    def test_empty_og_title_falls_through(self):
        soup = _soup(
            '<meta property="og:title" content="">'
            '<meta name="twitter:title" content="Tweet Title">'
        )
        assert first_match(soup, TITLE_RULES) == ("Tweet Title", "twitter:title")

    def test_attribute_matching_is_case_insensitive(self):
        soup = _soup('<META PROPERTY="OG:Title" CONTENT="Shouty">')
        assert first_match(soup, TITLE_RULES) == ("Shouty", "og:title")

    def test_og_title_declared_with_name_attribute(self):
        soup = _soup('<meta name="og:title" content="Misdeclared">')
        assert first_match(soup, TITLE_RULES) == ("Misdeclared", "og:title")

    def test_no_title_sources(self):
        assert first_match(_soup(""), TITLE_RULES) == (None, None)


# ---------------------------------------------------------------------------
# Description / image
# ---------------------------------------------------------------------------

class TestDescriptionRules:
    def test_standard_description_wins(self):
        soup = _soup(
            '<meta property="og:description" content="Social">'
            '<meta name="description" content="Standard">'
        )
        assert first_match(soup, DESCRIPTION_RULES) == ("Standard", "description")

    def test_og_description_fallback(self):
        soup = _soup('<meta property="og:description" content="Social">')
        assert first_match(soup, DESCRIPTION_RULES) == ("Social", "og:description")

    def test_missing_description(self):
        assert first_match(_soup("<title>t</title>"), DESCRIPTION_RULES) == (None, None)


class TestImageRules:
    def test_og_image_wins(self):
        soup = _soup(
            '<meta name="twitter:image" content="https://cdn.example.com/t.png">'
            '<meta property="og:image" content="https://cdn.example.com/o.png">'
        )
        assert first_match(soup, IMAGE_RULES) == ("https://cdn.example.com/o.png", "og:image")

    def test_twitter_image_fallback(self):
        soup = _soup('<meta name="twitter:image" content="/t.png">')
        assert first_match(soup, IMAGE_RULES) == ("/t.png", "twitter:image")


# ---------------------------------------------------------------------------
# Canonical
# ---------------------------------------------------------------------------

class TestCanonicalRules:
    def test_canonical_href(self):
        soup = _soup('<link rel="canonical" href="https://example.com/c">')
        assert first_match(soup, CANONICAL_RULES) == ("https://example.com/c", "canonical")

    def test_literal_undefined_is_absent(self):
        soup = _soup('<link rel="canonical" href="undefined">')
        assert first_match(soup, CANONICAL_RULES) == (None, None)

    def test_rel_matching_is_case_insensitive(self):
        soup = _soup('<link REL="Canonical" href="/c">')
        assert first_match(soup, CANONICAL_RULES) == ("/c", "canonical")

    def test_other_link_rels_are_ignored(self):
        soup = _soup('<link rel="alternate" href="https://example.com/feed">')
        assert first_match(soup, CANONICAL_RULES) == (None, None)


def test_collect_candidates_reports_every_source():
    soup = _soup(
        '<title>Page</title>'
        '<meta property="og:title" content="Social">'
    )
    assert collect_candidates(soup, TITLE_RULES) == {
        "og:title": "Social",
        "twitter:title": None,
        "title": "Page",
    }
