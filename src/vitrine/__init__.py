"""Vitrine: curated exhibits of saved searches over an external document index."""

__version__ = "0.1.0"
