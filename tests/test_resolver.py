"""Tests for URL validation, tracking-parameter stripping and video-ID extraction."""

import pytest

from linkshelf.errors import InvalidUrlError
from linkshelf.services.resolver import (
    GenericSource,
    VideoSource,
    extract_video_id,
    resolve,
    strip_tracking_params,
)


# ---------------------------------------------------------------------------
# resolve()
# ---------------------------------------------------------------------------

class TestResolve:
    def test_domain_is_hostname(self):
        resolved = resolve("https://News.Example.com/story?id=7")
        assert resolved.domain == "news.example.com"

    def test_raw_url_is_kept_as_submitted(self):
        url = "https://example.com/article?utm_source=x"
        assert resolve(url).raw_url == url

    def test_cleaned_url_drops_tracking_params(self):
        resolved = resolve("https://example.com/article?utm_source=x")
        assert resolved.cleaned_url == "https://example.com/article"

    def test_bare_host_gets_root_path(self):
        assert resolve("https://example.com").cleaned_url == "https://example.com/"

    def test_generic_url_has_no_platform_id(self):
        resolved = resolve("https://example.com/watch?v=abc")
        assert resolved.platform_id is None
        assert resolved.source == GenericSource()

    def test_video_url_yields_video_source(self):
        resolved = resolve("https://www.youtube.com/watch?v=abc123")
        assert resolved.platform_id == "abc123"
        assert resolved.source == VideoSource("abc123")

    @pytest.mark.parametrize(
        "url",
        [
            "https://Example.COM/a",
            "https://example.com:443/a",
            "HTTPS://EXAMPLE.com:443/a",
        ],
    )
    def test_cleaned_url_normalizes_host_and_default_port(self, url):
        assert resolve(url).cleaned_url == "https://example.com/a"

    def test_non_default_port_is_kept(self):
        assert resolve("http://example.com:8080/a").cleaned_url == "http://example.com:8080/a"
        assert resolve("http://example.com:80/a").cleaned_url == "http://example.com/a"

    def test_userinfo_and_ipv6_host_survive_normalization(self):
        assert resolve("https://user:pw@Example.com:443/").cleaned_url == "https://user:pw@example.com/"
        assert resolve("https://[2001:DB8::1]:443/x").cleaned_url == "https://[2001:db8::1]/x"

    def test_control_characters_are_percent_encoded(self):
        resolved = resolve("https://example.com/a\x01b\x7f")
        assert resolved.raw_url == "https://example.com/a%01b%7F"
        assert resolved.cleaned_url == "https://example.com/a%01b%7F"

    def test_control_character_in_host_is_rejected(self):
        with pytest.raises(InvalidUrlError):
            resolve("https://exa\x01mple.com/")

    def test_surrounding_whitespace_is_ignored(self):
        assert resolve("  https://example.com/a  ").raw_url == "https://example.com/a"

    @pytest.mark.parametrize(
        "url",
        [
            "",
            "   ",
            "not a url",
            "example.com/path",
            "https://",
            "ftp://example.com/file",
            "javascript:alert(1)",
            "http://example.com:99999/",
        ],
    )
    def test_invalid_urls_raise(self, url):
        with pytest.raises(InvalidUrlError):
            resolve(url)

    @pytest.mark.parametrize(
        "url",
        [
            "http://localhost:8080/",
            "https://example.com/a/b?c=d#e",
            "https://user:pw@example.com/",
            "https://[2001:db8::1]/path",
            "https://xn--bcher-kva.example/",
        ],
    )
    def test_valid_urls_always_have_a_domain(self, url):
        assert resolve(url).domain


# ---------------------------------------------------------------------------
# strip_tracking_params()
# ---------------------------------------------------------------------------

class TestStripTrackingParams:
    def test_removes_all_known_params(self):
        url = (
            "https://example.com/p?utm_source=a&utm_medium=b&utm_campaign=c"
            "&utm_content=d&utm_term=e&fbclid=f&gclid=g&ref=h&source=i"
        )
        assert strip_tracking_params(url) == "https://example.com/p"

    def test_keeps_other_params_in_order(self):
        url = "https://example.com/p?b=2&utm_source=x&a=1"
        assert strip_tracking_params(url) == "https://example.com/p?b=2&a=1"

    def test_param_names_match_case_insensitively(self):
        assert strip_tracking_params("https://example.com/?UTM_Source=x&id=3") == (
            "https://example.com/?id=3"
        )

    def test_preserves_encoding_of_surviving_params(self):
        url = "https://example.com/search?q=a%20b&fbclid=1"
        assert strip_tracking_params(url) == "https://example.com/search?q=a%20b"

    def test_preserves_fragment(self):
        url = "https://example.com/p?gclid=1#section"
        assert strip_tracking_params(url) == "https://example.com/p#section"

    def test_url_without_query_is_unchanged(self):
        assert strip_tracking_params("https://example.com/p") == "https://example.com/p"

    @pytest.mark.parametrize(
        "url",
        [
            "https://example.com/p?utm_source=x",
            "https://example.com/p?a=1&&utm_term=z&b=",
            "https://example.com/p?ref&x=1",
            "https://example.com/p?",
            "https://example.com/p?q=%E2%9C%93&source=feed#top",
        ],
    )
    def test_stripping_is_idempotent(self, url):
        once = strip_tracking_params(url)
        assert strip_tracking_params(once) == once


# ---------------------------------------------------------------------------
# extract_video_id()
# ---------------------------------------------------------------------------

class TestExtractVideoId:
    @pytest.mark.parametrize(
        "url, expected",
        [
            ("https://www.youtube.com/watch?v=abc123", "abc123"),
            ("https://youtube.com/watch?feature=share&v=abc123", "abc123"),
            ("https://m.youtube.com/watch?v=abc123", "abc123"),
            ("https://music.youtube.com/watch?v=abc123&list=x", "abc123"),
            ("https://www.youtube.com/embed/abc123", "abc123"),
            ("https://www.youtube.com/shorts/abc123", "abc123"),
            ("https://youtu.be/abc123", "abc123"),
            ("https://youtu.be/abc123?t=42", "abc123"),
            ("https://youtu.be/dQw4w9WgXcQ", "dQw4w9WgXcQ"),
        ],
    )
    def test_known_forms(self, url, expected):
        assert extract_video_id(url) == expected

    @pytest.mark.parametrize(
        "url",
        [
            "https://www.youtube.com/",
            "https://www.youtube.com/watch",
            "https://www.youtube.com/watch?v=",
            "https://www.youtube.com/@channel",
            "https://youtu.be/",
            "https://notyoutube.com/watch?v=abc123",
            "https://example.com/watch?v=abc123",
        ],
    )
    def test_non_matching_urls_return_none(self, url):
        assert extract_video_id(url) is None
