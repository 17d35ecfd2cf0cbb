import pytest
from pydantic import ValidationError

from linkshelf.models.content import ContentRecord

_BASE = {
    "raw_url": "https://example.com/a",
    "canonical_url": "https://example.com/a",
    "domain": "example.com",
    "title": "A",
    "content_type": "article",
}


def _record(**overrides) -> ContentRecord:
    return ContentRecord(**{**_BASE, **overrides})


@pytest.mark.parametrize("canonical", ["undefined", " Undefined "])
def test_canonical_cannot_be_undefined(canonical):
    with pytest.raises(ValidationError):
        _record(canonical_url=canonical)


def test_title_cannot_be_empty():
    with pytest.raises(ValidationError):
        _record(title="")


def test_video_cannot_have_description():
    with pytest.raises(ValidationError):
        _record(content_type="video", description="nope")


@pytest.mark.parametrize("image", ["/relative.png", "img.png", "//cdn.example.com/x.png"])
def test_image_must_be_absolute(image):
    with pytest.raises(ValidationError):
        _record(image_url=image)


def test_lengths_are_capped():
    record = _record(title="t" * 501, description="d" * 1001)
    assert len(record.title) == 500
    assert len(record.description) == 1000


def test_empty_description_becomes_none():
    assert _record(description="").description is None


def test_record_is_immutable():
    record = _record()
    with pytest.raises(ValidationError):
        record.title = "changed"
