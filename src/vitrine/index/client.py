"""Document index client.

The index speaks a Solr-style select API: GET {INDEX_URL}/select with a
relevance query ``q``, repeated filter queries ``fq``, a page size ``rows``
and ``wt=json``. Filter queries scope the corpus without affecting ranking.
"""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import httpx
import structlog

from vitrine.config.settings import Settings, get_settings
from vitrine.core.exceptions import UpstreamUnavailableError
from vitrine.core.logging import log_external_call
from vitrine.db.schemas.search import DISPLAY_KEYS, FACET_KEY, QUERY_KEY, RANGE_KEY

logger = structlog.get_logger()

MATCH_ALL = "*:*"
# Request parameter carrying a stored query that was moved into a filter
STORED_QUERY_PARAM = "sq"


def _as_values(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    return [value]


def term_filter(field_name: str, value: Any) -> str:
    """Exact-match filter on one field value, immune to query syntax."""
    return f"{{!term f={field_name}}}{value}"


def range_filter(field_name: str, bounds: Mapping[str, Any]) -> str:
    """Inclusive range filter; a missing bound is open."""

    def bound(name: str) -> str:
        value = bounds.get(name)
        return "*" if value is None or value == "" else str(value)

    return f"{field_name}:[{bound('begin')} TO {bound('end')}]"


def stored_query_filter(query_parser: str) -> str:
    """Filter that parses the stored query the way the handler parses ``q``."""
    return f"{{!{query_parser} v=${STORED_QUERY_PARAM}}}"


@dataclass
class IndexQuery:
    """One select request against the document index."""

    q: str | None = None
    filters: list[str] = field(default_factory=list)
    rows: int = 10
    extra: dict[str, str] = field(default_factory=dict)

    def to_params(self) -> list[tuple[str, str]]:
        params: list[tuple[str, str]] = []
        params.append(("q", self.q or MATCH_ALL))
        params.extend(("fq", fq) for fq in self.filters)
        params.extend(self.extra.items())
        params.append(("rows", str(self.rows)))
        params.append(("wt", "json"))
        return params


@dataclass
class IndexResponse:
    """Ranked documents as returned by the index."""

    num_found: int
    docs: list[dict[str, Any]]


def compose_query(
    stored: Mapping[str, Any],
    term: str | None,
    rows: int,
    query_parser: str = "edismax",
) -> IndexQuery:
    """Combine a saved search's stored parameters with a typed term.

    Facet and range selections always become filter queries. Without a term
    the stored ``q`` ranks results; with a term the term ranks results and
    the stored ``q`` is demoted to a filter, so results match both. The
    demoted query is passed by reference and parsed with ``query_parser``,
    since Solr would otherwise read a bare ``fq`` with the lucene parser.

    Example:
        >>> compose_query({"q": "maps", "f": {"genre_ssim": ["Atlas"]}}, "Noorder", 10).to_params()
        [('q', 'Noorder'), ('fq', '{!term f=genre_ssim}Atlas'), ('fq', '{!edismax v=$sq}'),
         ('sq', 'maps'), ('rows', '10'), ('wt', 'json')]

    Raises:
        ValueError: If the stored parameters hold a key the index cannot
            apply; saved searches are validated against this on every write
    """
    unknown = sorted(set(stored) - {QUERY_KEY, FACET_KEY, RANGE_KEY} - DISPLAY_KEYS)
    if unknown:
        raise ValueError(f"stored parameters cannot be applied: {', '.join(unknown)}")

    filters: list[str] = []
    for field_name, values in (stored.get(FACET_KEY) or {}).items():
        filters.extend(term_filter(field_name, v) for v in _as_values(values))
    for field_name, bounds in (stored.get(RANGE_KEY) or {}).items():
        filters.append(range_filter(field_name, bounds))

    stored_q = stored.get(QUERY_KEY)
    if isinstance(stored_q, list):
        stored_q = stored_q[0] if stored_q else None
    stored_q = str(stored_q).strip() if stored_q is not None else ""
    term = term.strip() if term else ""

    if term:
        extra: dict[str, str] = {}
        if stored_q:
            filters.append(stored_query_filter(query_parser))
            extra[STORED_QUERY_PARAM] = stored_q
        return IndexQuery(q=term, filters=filters, rows=rows, extra=extra)
    return IndexQuery(q=stored_q or None, filters=filters, rows=rows)


class DocumentIndexClient:
    """Async client for the document index.

    Either owns its httpx.AsyncClient or uses one supplied by the caller
    (which then remains responsible for closing it). There is no retry:
    a failed call surfaces immediately as UpstreamUnavailableError.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self._base_url = self.settings.INDEX_URL.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=self.settings.INDEX_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "DocumentIndexClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def search(self, query: IndexQuery) -> IndexResponse:
        """Run a select request.

        Raises:
            UpstreamUnavailableError: If the index cannot be reached, times
                out, answers with a non-2xx status, or returns a body that
                is not a select response
        """
        url = f"{self._base_url}/select"
        started = time.perf_counter()
        try:
            response = await self._client.get(url, params=query.to_params())
        except httpx.TimeoutException as exc:
            self._log_call(started, success=False, error="timeout")
            raise UpstreamUnavailableError("request timed out", timed_out=True) from exc
        except httpx.RequestError as exc:
            self._log_call(started, success=False, error=str(exc))
            raise UpstreamUnavailableError(f"request failed: {exc}") from exc

        if not response.is_success:
            self._log_call(started, success=False, status_code=response.status_code)
            raise UpstreamUnavailableError(
                f"index answered {response.status_code}", status_code=response.status_code
            )

        try:
            result = self._parse(response.json())
        except ValueError as exc:
            self._log_call(started, success=False, error="malformed response")
            raise UpstreamUnavailableError(
                "malformed response", status_code=response.status_code
            ) from exc

        self._log_call(started, success=True, num_found=result.num_found, rows=len(result.docs))
        return result

    @staticmethod
    def _parse(body: Any) -> IndexResponse:
        if not isinstance(body, dict) or not isinstance(body.get("response"), dict):
            raise ValueError("missing response section")
        section = body["response"]
        docs = section.get("docs")
        if not isinstance(docs, list) or not all(isinstance(d, dict) for d in docs):
            raise ValueError("docs must be a list of objects")
        num_found = section.get("numFound", len(docs))
        if not isinstance(num_found, int):
            raise ValueError("numFound must be an integer")
        return IndexResponse(num_found=num_found, docs=docs)

    def _log_call(self, started: float, success: bool, **kwargs: Any) -> None:
        log_external_call(
            logger,
            service="document_index",
            operation="select",
            duration_ms=(time.perf_counter() - started) * 1000,
            success=success,
            **kwargs,
        )
