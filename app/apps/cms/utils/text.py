"""
Text helpers for CMS content: slugs, reading time and tag input
"""
import math
import re
from typing import Iterable, List

WORDS_PER_MINUTE = 200

_NON_ALNUM = re.compile(r'[^a-z0-9]+')


def derive_slug(text: str) -> str:
    """
    Turn a title into a URL-safe slug.

    Examples:
    - "Hello, World!" -> "hello-world"
    - "  The Future of Sustainable Fashion " -> "the-future-of-sustainable-fashion"
    - "Café №5" -> "caf-5"
    """
    if not text:
        return ""
    return _NON_ALNUM.sub('-', text.lower()).strip('-')


def count_words(content: str) -> int:
    return len(content.split()) if content else 0


def calculate_reading_time(content: str) -> int:
    """Minutes to read ``content`` at 200 words per minute, at least 1 when there is any content."""
    if not content:
        return 0
    return max(1, math.ceil(count_words(content) / WORDS_PER_MINUTE))


def normalize_tags(names: Iterable[str]) -> List[str]:
    """
    Trim tag names, drop empty ones and collapse names that share a slug.

    The first spelling of a tag wins, so ["Linen", "linen", " Wool "] gives
    ["Linen", "Wool"].
    """
    tags = []
    seen = set()
    for name in names:
        name = (name or "").strip()
        slug = derive_slug(name)
        if not slug or slug in seen:
            continue
        seen.add(slug)
        tags.append(name)
    return tags


def parse_tag_input(value: str) -> List[str]:
    """Split the editor's comma-separated tag field."""
    if not value:
        return []
    return normalize_tags(value.split(','))
