"""Text processing utilities."""

import re
import unicodedata

from onboardkit.core.constants import MAX_SLUG_LENGTH, MIN_SLUG_LENGTH, SLUG_FALLBACK_WORD


_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHEN_RUNS = re.compile(r"-{2,}")
_VALID_SLUG = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


def _transliterate(value: str) -> str:
    # Decompose accented letters and drop the combining marks: "Café" -> "Cafe"
    decomposed = unicodedata.normalize("NFKD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_slug(name: str, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Turn an arbitrary display name into a canonical slug candidate.

    The function is total and deterministic. The result contains only
    lowercase ASCII letters, digits and single inner hyphens, and is at
    least three characters long:

    - letters are lowercased and transliterated where Unicode allows it
    - every other disallowed character is dropped
    - whitespace runs become one hyphen, hyphen runs collapse
    - leading and trailing hyphens are trimmed
    - the result is capped at ``max_length``
    - a result shorter than three characters gets the ``-restaurant``
      suffix, an empty one becomes ``restaurant``

    Examples:
        >>> normalize_slug("Joe's Café & Grill")
        'joes-cafe-grill'
        >>> normalize_slug("A")
        'a-restaurant'
        >>> normalize_slug("!!!")
        'restaurant'
    """
    slug = _transliterate(name).lower().strip()
    slug = _DISALLOWED.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHEN_RUNS.sub("-", slug)
    slug = slug.strip("-")
    slug = slug[:max_length].rstrip("-")

    if not slug:
        return SLUG_FALLBACK_WORD
    if len(slug) < MIN_SLUG_LENGTH:
        return f"{slug}-{SLUG_FALLBACK_WORD}"
    return slug


def is_valid_slug(value: str, max_length: int = MAX_SLUG_LENGTH) -> bool:
    """Check whether ``value`` already satisfies every slug invariant."""
    if not MIN_SLUG_LENGTH <= len(value) <= max_length:
        return False
    return _VALID_SLUG.fullmatch(value) is not None


def suffixed_slug(base: str, counter: int, max_length: int = MAX_SLUG_LENGTH) -> str:
    """Build the ``{base}-{counter}`` candidate, cutting ``base`` to fit the cap."""
    suffix = f"-{counter}"
    head = base[: max_length - len(suffix)].rstrip("-")
    return f"{head}{suffix}"
