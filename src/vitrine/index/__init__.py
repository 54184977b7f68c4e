"""Client for the external document index."""

from vitrine.index.client import DocumentIndexClient, IndexQuery, IndexResponse, compose_query

__all__ = [
    "DocumentIndexClient",
    "IndexQuery",
    "IndexResponse",
    "compose_query",
]
