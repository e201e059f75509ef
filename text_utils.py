"""Slug, excerpt and markdown helpers used when saving posts."""
import re
import unicodedata
from typing import Iterable, List, Optional

import bleach
from bson import ObjectId

_CHAR_MAP = {"&": " and "}
_REMOVE_CHARS = re.compile(r"[*+~.()'\"!:@]")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")

# Inline HTML a markdown body may carry; everything else is stripped
ALLOWED_TAGS = [
    "p", "br", "strong", "em", "del", "code", "pre", "h1", "h2", "h3", "h4", "h5", "h6",
    "ul", "ol", "li", "blockquote", "a", "img", "hr", "table", "thead", "tbody", "tr", "th", "td",
]
ALLOWED_ATTRIBUTES = {
    "a": ["href", "title"],
    "img": ["src", "alt", "title"],
}
ALLOWED_PROTOCOLS = ["http", "https", "mailto"]

_MARKDOWN_PATTERNS = [
    (re.compile(r"```.*?```", re.DOTALL), " "),
    (re.compile(r"`([^`]*)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"\[([^\]]*)\]\([^)]*\)"), r"\1"),
    (re.compile(r"^\s{0,3}#{1,6}\s*", re.MULTILINE), ""),
    (re.compile(r"^\s{0,3}>\s?", re.MULTILINE), ""),
    (re.compile(r"^\s*([-*+]|\d+\.)\s+", re.MULTILINE), ""),
    (re.compile(r"(?<!\w)(\*\*|__)(?!\s)(.+?)(?<!\s)\1(?!\w)"), r"\2"),
    (re.compile(r"(?<!\w)(\*|_)(?!\s)(.+?)(?<!\s)\1(?!\w)"), r"\2"),
    (re.compile(r"~~(.*?)~~"), r"\1"),
    (re.compile(r"<[^>]+>"), ""),
]


def slugify(text: str) -> str:
    """
    Turn a title into a URL-safe slug.

    "Hello, World!" -> "hello-world"
    "C++ & Rust" -> "c-and-rust"
    """
    text = unicodedata.normalize("NFKD", text or "")
    text = text.encode("ascii", "ignore").decode("ascii").lower()
    for char, replacement in _CHAR_MAP.items():
        text = text.replace(char, replacement)
    text = _REMOVE_CHARS.sub("", text)
    slug = _NON_ALNUM.sub("-", text).strip("-")
    return slug or "post"


def unique_slug(db, title: str, exclude_id: Optional[ObjectId] = None) -> str:
    """Slug for title that no other post holds: base, base-1, base-2, ..."""
    base = slugify(title)
    slug = base
    counter = 1
    while True:
        query = {"slug": slug}
        if exclude_id is not None:
            query["_id"] = {"$ne": exclude_id}
        if db["posts"].find_one(query, {"_id": 1}) is None:
            return slug
        slug = f"{base}-{counter}"
        counter += 1


def strip_markdown(text: str) -> str:
    for pattern, repl in _MARKDOWN_PATTERNS:
        text = pattern.sub(repl, text)
    return re.sub(r"\s+", " ", text).strip()


def extract_excerpt(markdown: str, length: int = 150) -> str:
    plain = strip_markdown(markdown or "")
    if len(plain) <= length:
        return plain
    cut = plain[:length]
    if " " in cut:
        cut = cut[:cut.rfind(" ")]
    return cut.rstrip(" ,.;:") + "..."


def sanitize_markdown(text: str) -> str:
    """
    Strip HTML outside the allow-list from a markdown body.

    bleach escapes bare text; ">" and "&" are put back so blockquotes and
    ampersands stay markdown, while "<" stays escaped.
    """
    cleaned = bleach.clean(
        text or "",
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
    return cleaned.replace("&gt;", ">").replace("&amp;", "&")


def normalize_tags(tags: Iterable[str]) -> List[str]:
    seen = []
    for tag in tags or []:
        tag = str(tag).strip().lower()
        if tag and tag not in seen:
            seen.append(tag)
    return seen
