"""Input sanitization for curator-entered content."""

from .sanitization import sanitize_string, slugify, strip_html, validate_email

__all__ = [
    "sanitize_string",
    "slugify",
    "strip_html",
    "validate_email",
]
