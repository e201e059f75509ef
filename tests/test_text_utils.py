"""
Tests for slug, excerpt and sanitizing helpers.
"""
import pytest
from bson import ObjectId

from text_utils import extract_excerpt, normalize_tags, sanitize_markdown, slugify, unique_slug


@pytest.mark.parametrize("title, expected", [
    ("Hello World", "hello-world"),
    ("Hello, World!", "hello-world"),
    ("  Spaces   everywhere  ", "spaces-everywhere"),
    ("Node.js (and friends)", "nodejs-and-friends"),
    ("C++ & Rust", "c-and-rust"),
    ("Café crème", "cafe-creme"),
    ("!!!", "post"),
])
def test_slugify(title, expected):
    assert slugify(title) == expected


class TestUniqueSlug:

    def test_free_slug(self, db):
        assert unique_slug(db, "Fresh Title") == "fresh-title"

    def test_taken_slug_gets_counter(self, db):
        db["posts"].insert_many([{"slug": "taken"}, {"slug": "taken-1"}])
        assert unique_slug(db, "Taken") == "taken-2"

    def test_excludes_own_post(self, db):
        own = db["posts"].insert_one({"slug": "mine"}).inserted_id
        assert unique_slug(db, "Mine", exclude_id=own) == "mine"
        assert unique_slug(db, "Mine", exclude_id=ObjectId()) == "mine-1"


class TestExcerpt:

    def test_strips_markdown(self):
        text = "# Title\n\nSome **bold** and *italic* text with a [link](http://x.y)."
        assert extract_excerpt(text) == "Title Some bold and italic text with a link."

    def test_truncates_on_word_boundary(self):
        excerpt = extract_excerpt("word " * 100, length=22)
        assert excerpt == "word word word word..."

    def test_short_text_untouched(self):
        assert extract_excerpt("Short.") == "Short."

    def test_keeps_snake_case(self):
        assert extract_excerpt("Set my_var_name to *on*.") == "Set my_var_name to on."


def test_sanitize_strips_unsafe_html():
    dirty = 'Hi <script>alert(1)</script><img src=x onerror="steal()"> <a href="javascript:alert(1)">a</a>'
    clean = sanitize_markdown(dirty)
    assert "<script>" not in clean
    assert "onerror" not in clean
    assert "javascript:" not in clean
    assert '<img src="x">' in clean
    assert clean.startswith("Hi ")


def test_sanitize_keeps_prose():
    text = "Let one = 5 and only=3. In javascript: closures capture scope."
    assert sanitize_markdown(text) == text


def test_sanitize_keeps_markdown():
    text = "> quoted line\n\n**Tom & Jerry** use `a_b` and [docs](https://example.com)"
    assert sanitize_markdown(text) == text


def test_sanitize_escapes_stray_angle_bracket():
    assert sanitize_markdown("if a < b then") == "if a &lt; b then"


def test_normalize_tags():
    assert normalize_tags([" Python", "python", "", "  ", "Web Dev"]) == ["python", "web dev"]
