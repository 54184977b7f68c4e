"""Typeahead over a saved search's scope.

A curator picking a featured item for a saved search types a few letters;
the suggestions must come from inside that search's stored scope, ranked by
the typed term.
"""

from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from vitrine.config.settings import IndexFieldMapping, Settings, get_settings
from vitrine.core.exceptions import SavedSearchNotFoundError
from vitrine.core.logging import get_logger
from vitrine.db.models.exhibit import Exhibit
from vitrine.db.repositories.search import SavedSearchRepository
from vitrine.index.client import DocumentIndexClient, compose_query

logger = get_logger(__name__)


@dataclass
class AutocompleteDocument:
    id: str
    title: str
    description: str
    thumbnail: str
    url: str

    def to_dict(self) -> dict[str, str]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "thumbnail": self.thumbnail,
            "url": self.url,
        }


@dataclass
class AutocompleteResult:
    docs: list[AutocompleteDocument] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.docs)


def first_value(doc: dict[str, Any], field_name: str) -> str:
    """Display value of an index field: first of many, "" when absent."""
    value = doc.get(field_name)
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None:
        return ""
    return str(value)


def project_document(
    doc: dict[str, Any],
    fields: IndexFieldMapping,
    exhibit_slug: str,
    url_template: str,
) -> AutocompleteDocument:
    """Reduce an index document to the typeahead shape."""
    doc_id = first_value(doc, fields.id_field)
    return AutocompleteDocument(
        id=doc_id,
        title=first_value(doc, fields.title_field),
        description=first_value(doc, fields.description_field),
        thumbnail=first_value(doc, fields.thumbnail_field),
        url=url_template.format(exhibit=exhibit_slug, id=doc_id) if doc_id else "",
    )


class AutocompleteProxy:
    """Resolve a saved search plus an optional term to ranked suggestions."""

    def __init__(
        self,
        db: AsyncSession,
        index_client: DocumentIndexClient,
        settings: Settings | None = None,
    ):
        self.db = db
        self.index_client = index_client
        self.settings = settings or get_settings()
        self.repo = SavedSearchRepository(db)

    async def autocomplete(
        self, exhibit: Exhibit, search_id: int, term: str | None = None
    ) -> AutocompleteResult:
        """Suggest documents within a saved search's scope.

        Args:
            exhibit: The requesting exhibit; the search must belong to it
            search_id: The saved search whose parameters scope the lookup
            term: Optional typed text ranking the suggestions

        Raises:
            SavedSearchNotFoundError: If the search is not in this exhibit
            UpstreamUnavailableError: If the index cannot answer
        """
        search = await self.repo.get_for_exhibit(exhibit.exhibit_id, search_id)
        if search is None:
            raise SavedSearchNotFoundError([search_id], exhibit.exhibit_id)

        query = compose_query(
            search.query_params or {},
            term,
            self.settings.AUTOCOMPLETE_ROWS,
            query_parser=self.settings.INDEX_QUERY_PARSER,
        )
        response = await self.index_client.search(query)

        docs = [
            project_document(
                doc,
                self.settings.index_fields,
                exhibit.slug,
                self.settings.DOCUMENT_URL_TEMPLATE,
            )
            for doc in response.docs
        ]

        logger.debug(
            "autocomplete_served",
            exhibit=exhibit.slug,
            search_id=search_id,
            term=term,
            count=len(docs),
        )
        return AutocompleteResult(docs=docs)
