"""Utility modules for Vitrine."""

from vitrine.utils.exceptions import VitrineError

__all__ = [
    "VitrineError",
]
