import html
import random
import re
import time

import bleach
from django.utils.text import slugify

SLUG_MAX_LENGTH = 80
EXCERPT_LENGTH = 200
SNIPPET_LENGTH = 200

_MARKDOWN_PATTERNS = [
    (re.compile(r"```.*?```", re.S), " "),               # fenced code
    (re.compile(r"!\[([^\]]*)\]\([^)]*\)"), r"\1"),       # images
    (re.compile(r"\[([^\]]+)\]\([^)]*\)"), r"\1"),        # links
    (re.compile(r"^\s{0,3}#{1,6}\s*", re.M), ""),         # headings
    (re.compile(r"^\s{0,3}>\s?", re.M), ""),              # blockquotes
    (re.compile(r"^\s*(?:[-*+]|\d+\.)\s+", re.M), ""),    # list markers
    (re.compile(r"(\*\*|__|\*|_|~~|`)"), ""),             # emphasis, inline code
]


def slugify_text(value, max_length=SLUG_MAX_LENGTH):
    """Lowercase, hyphen separated, ASCII only."""
    value = re.sub(r"['\"]", "", value or "")
    slug = slugify(value).replace("_", "-")
    slug = re.sub(r"-{2,}", "-", slug).strip("-")
    return slug[:max_length].strip("-")


def unique_slug(model, source, fallback="item", attempts=6):
    base = slugify_text(source) or fallback
    candidate = base
    for _ in range(attempts):
        if not model.objects.filter(slug=candidate).exists():
            return candidate
        candidate = slugify_text(f"{base}-{random.randint(1000, 9999)}")
    return slugify_text(f"{base}-{int(time.time() * 1000)}")


def collapse_whitespace(value):
    if not value:
        return None
    return re.sub(r"\s+", " ", value).strip()


def markdown_to_text(markdown):
    # strip any inline HTML first; bleach escapes entities so undo that
    text = html.unescape(bleach.clean(markdown or "", tags=set(), strip=True))
    for pattern, replacement in _MARKDOWN_PATTERNS:
        text = pattern.sub(replacement, text)
    return collapse_whitespace(text) or ""


def truncate_words(text, length):
    if len(text) <= length:
        return text
    cut = text[:length].rsplit(" ", 1)[0].rstrip(",.;:")
    return f"{cut}…"


def generate_excerpt(markdown, length=EXCERPT_LENGTH):
    return truncate_words(markdown_to_text(markdown), length)


def article_snippet(excerpt, content, length=SNIPPET_LENGTH):
    if excerpt and excerpt.strip():
        return collapse_whitespace(excerpt)
    return collapse_whitespace((content or "")[:length])
