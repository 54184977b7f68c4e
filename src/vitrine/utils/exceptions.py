"""Custom exceptions for Vitrine."""


class VitrineError(Exception):
    """Base exception for all Vitrine errors."""

    pass
