"""Input sanitization utilities.

Provides the sanitization applied to curator-entered text before it is
persisted:
- String sanitization (control character removal, Unicode normalization)
- HTML stripping for free-text descriptions
- Slug generation for stable exhibit URLs
- Contact email address validation
"""

import html
import re
import unicodedata

# Regex patterns compiled once for performance
_CONTROL_CHARS_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_DANGEROUS_BLOCK_PATTERN = re.compile(
    r"<(script|style|noscript)\b[^>]*>.*?</\1\s*>",
    re.DOTALL | re.IGNORECASE,
)
_COMMENT_PATTERN = re.compile(r"<!--.*?-->", re.DOTALL)
_TAG_PATTERN = re.compile(r"<[^>]+>")

# A single bare address: no display name, no list, and a domain part
_EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*$"
)

_SLUG_INVALID_PATTERN = re.compile(r"[^a-z0-9]+")


def sanitize_string(
    value: str,
    max_length: int | None = None,
    strip: bool = True,
    normalize_unicode: bool = True,
    remove_control_chars: bool = True,
) -> str:
    """Sanitize a string input.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length (truncates if exceeded)
        strip: Whether to strip whitespace
        normalize_unicode: Whether to normalize Unicode to NFC
        remove_control_chars: Whether to remove control characters

    Returns:
        Sanitized string

    Example:
        >>> sanitize_string("  Hello\\x00World  ", max_length=10)
        'HelloWorld'
    """
    if not value:
        return ""

    result = value
    if strip:
        result = result.strip()
    if normalize_unicode:
        result = unicodedata.normalize("NFC", result)
    if remove_control_chars:
        result = _CONTROL_CHARS_PATTERN.sub("", result)
    if max_length is not None and len(result) > max_length:
        result = result[:max_length]
    return result


def strip_html(value: str | None) -> str | None:
    """Remove all HTML markup, keeping the text content.

    Script, style and noscript blocks are dropped together with their
    content; entities are unescaped after the tags are gone.

    Example:
        >>> strip_html("<p>Maps of <b>New Mexico</b></p><script>x()</script>")
        'Maps of New Mexico'
    """
    if value is None:
        return None
    if not value:
        return ""

    result = _DANGEROUS_BLOCK_PATTERN.sub("", value)
    result = _COMMENT_PATTERN.sub("", result)
    result = _TAG_PATTERN.sub("", result)
    result = html.unescape(result)
    return sanitize_string(result)


def slugify(value: str, max_length: int = 90) -> str:
    """Derive a URL-safe slug from a title.

    Example:
        >>> slugify("Maps of the New World!")
        'maps-of-the-new-world'
    """
    normalized = unicodedata.normalize("NFKD", value)
    ascii_only = normalized.encode("ascii", "ignore").decode("ascii").lower()
    slug = _SLUG_INVALID_PATTERN.sub("-", ascii_only).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or "exhibit"


def validate_email(email: str) -> bool:
    """Validate a single contact email address.

    The address must stand alone (no display name, no second address) and
    carry a domain part; purely local addresses are rejected.

    Example:
        >>> validate_email("bob@example.com")
        True
        >>> validate_email("bob")
        False
    """
    if not email or len(email) > 254:
        return False
    return bool(_EMAIL_PATTERN.match(email))
