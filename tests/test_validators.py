import pytest

from school_library.errors import ValidationError
from school_library.utils.validators import ISBNValidator, TextValidator


@pytest.mark.parametrize("raw, expected", [
    ("978-0-306-40615-7", "9780306406157"),
    ("0 306 40615 x", "030640615X"),
    (None, ""),
])
def test_normalize_isbn(raw, expected):
    assert ISBNValidator.normalize_isbn(raw) == expected


@pytest.mark.parametrize("raw, expected", [
    ("9789793062792", True),
    ("979-306-279-X", True),
    ("Laskar Pelangi", False),
    ("isbn 9789793062792", False),
    ("123", False),
])
def test_looks_like_isbn(raw, expected):
    assert ISBNValidator.looks_like_isbn(raw) is expected


def test_require_strips_and_rejects_blank():
    assert TextValidator.require("  Andrea Hirata ", "Author") == "Andrea Hirata"
    with pytest.raises(ValidationError, match="Author is required"):
        TextValidator.require("   ", "Author")
    with pytest.raises(ValidationError):
        TextValidator.require(None, "Title")


def test_sanitize_text_strips_tags():
    assert TextValidator.sanitize_text("<p>Novel <b>inspiratif</b></p>") == "Novel inspiratif"
    assert TextValidator.sanitize_text(None) == ""
