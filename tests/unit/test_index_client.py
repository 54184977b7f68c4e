"""Unit tests for the document index client and query composition."""

import httpx
import pytest

from vitrine.core.exceptions import UpstreamUnavailableError
from vitrine.index.client import (
    MATCH_ALL,
    DocumentIndexClient,
    IndexQuery,
    compose_query,
    term_filter,
)


def _fqs(query: IndexQuery) -> list[str]:
    return [value for key, value in query.to_params() if key == "fq"]


class TestComposeQuery:
    """Tests for compose_query()."""

    def test_no_term_uses_stored_query(self):
        """Test the stored q ranks results when nothing is typed."""
        query = compose_query({"q": "New Mexico"}, None, 10)

        assert query.q == "New Mexico"
        assert query.filters == []

    def test_term_demotes_stored_query_to_filter(self):
        """Test a typed term ranks results while the stored q still scopes them."""
        query = compose_query({"q": "New Mexico"}, "Noorder", 10)

        assert query.to_params() == [
            ("q", "Noorder"),
            ("fq", "{!edismax v=$sq}"),
            ("sq", "New Mexico"),
            ("rows", "10"),
            ("wt", "json"),
        ]

    def test_demoted_query_uses_configured_parser(self):
        """Test the moved query is not left to the filter's default lucene parser."""
        query = compose_query({"q": "New Mexico"}, "Noorder", 10, query_parser="dismax")

        assert query.filters == ["{!dismax v=$sq}"]
        assert query.extra == {"sq": "New Mexico"}

    def test_no_stored_query_parameter_without_term(self):
        query = compose_query({"q": "New Mexico"}, None, 10)

        assert "sq" not in dict(query.to_params())

    def test_facets_become_term_filters(self):
        """Test each facet value is an exact-match filter."""
        stored = {"f": {"genre_ssim": ["Atlas", "Map"], "language_ssim": "Dutch"}}

        query = compose_query(stored, "Noorder", 10)

        assert _fqs(query) == [
            "{!term f=genre_ssim}Atlas",
            "{!term f=genre_ssim}Map",
            "{!term f=language_ssim}Dutch",
        ]

    def test_facets_kept_with_and_without_term(self):
        """Test the term never widens the facet scope."""
        stored = {"q": "maps", "f": {"genre_ssim": ["Atlas"]}}

        without_term = compose_query(stored, None, 10)
        with_term = compose_query(stored, "Noorder", 10)

        assert term_filter("genre_ssim", "Atlas") in without_term.filters
        assert term_filter("genre_ssim", "Atlas") in with_term.filters

    def test_rows_independent_of_term(self):
        """Test the page size does not depend on whether a term was typed."""
        stored = {"q": "maps"}

        assert compose_query(stored, None, 7).rows == 7
        assert compose_query(stored, "x", 7).rows == 7

    def test_empty_stored_params_match_all(self):
        """Test an unscoped search with no term matches everything."""
        params = compose_query({}, None, 10).to_params()

        assert ("q", MATCH_ALL) in params
        assert ("wt", "json") in params
        assert ("rows", "10") in params

    def test_blank_term_is_ignored(self):
        """Test whitespace alone does not count as a term."""
        query = compose_query({"q": "maps"}, "   ", 10)

        assert query.q == "maps"
        assert query.filters == []

    def test_stored_query_as_list(self):
        """Test a stored q held as a single-element list."""
        query = compose_query({"q": ["maps"]}, "Noorder", 10)

        assert query.extra == {"sq": "maps"}

    def test_display_keys_ignored(self):
        """Test presentation state saved with a search does not affect the request."""
        query = compose_query({"q": "maps", "sort": "title asc", "view": "gallery"}, None, 10)

        assert [key for key, _ in query.to_params()] == ["q", "rows", "wt"]

    def test_range_becomes_inclusive_filter(self):
        """Test a stored range scopes results, with blank bounds left open."""
        stored = {"range": {"pub_date_si": {"begin": "1700", "end": 1800}, "year_isim": {"end": ""}}}

        query = compose_query(stored, "Noorder", 10)

        assert query.filters == ["pub_date_si:[1700 TO 1800]", "year_isim:[* TO *]"]

    def test_range_kept_with_and_without_term(self):
        stored = {"q": "maps", "range": {"pub_date_si": {"begin": 1700}}}

        assert compose_query(stored, None, 10).filters == ["pub_date_si:[1700 TO *]"]
        assert "pub_date_si:[1700 TO *]" in compose_query(stored, "x", 10).filters

    def test_unappliable_stored_key_raises(self):
        """Test a stored key the index cannot apply is never silently dropped."""
        with pytest.raises(ValueError, match="collection"):
            compose_query({"q": "maps", "collection": {"id": "x"}}, None, 10)


class TestDocumentIndexClient:
    """Tests for DocumentIndexClient.search()."""

    @pytest.mark.asyncio
    async def test_sends_select_request(self, index_client, fake_index):
        """Test the request goes to /select with the composed parameters."""
        fake_index.docs = [{"id": "doc-1"}]

        await index_client.search(compose_query({"f": {"genre_ssim": ["Atlas"]}}, "Noorder", 5))

        request = fake_index.requests[-1]
        assert request.method == "GET"
        assert request.url.path == "/solr/blacklight-core/select"
        assert fake_index.last_params["q"] == "Noorder"
        assert fake_index.last_params.get_list("fq") == ["{!term f=genre_ssim}Atlas"]
        assert fake_index.last_params["rows"] == "5"
        assert fake_index.last_params["wt"] == "json"

    @pytest.mark.asyncio
    async def test_returns_docs_in_index_order(self, index_client, fake_index):
        """Test ranking order is preserved."""
        fake_index.docs = [{"id": "c"}, {"id": "a"}, {"id": "b"}]
        fake_index.num_found = 42

        result = await index_client.search(IndexQuery(q="x"))

        assert [d["id"] for d in result.docs] == ["c", "a", "b"]
        assert result.num_found == 42

    @pytest.mark.asyncio
    async def test_zero_matches_is_not_an_error(self, index_client, fake_index):
        """Test an empty answer is an empty result."""
        result = await index_client.search(IndexQuery(q="nothing"))

        assert result.docs == []
        assert result.num_found == 0

    @pytest.mark.asyncio
    async def test_timeout(self, index_client, fake_index):
        """Test a timeout is reported as such."""
        fake_index.error = httpx.ConnectTimeout

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await index_client.search(IndexQuery(q="x"))

        assert exc_info.value.timed_out is True

    @pytest.mark.asyncio
    async def test_connection_refused(self, index_client, fake_index):
        """Test a transport failure is reported as unavailable, not timed out."""
        fake_index.error = httpx.ConnectError

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await index_client.search(IndexQuery(q="x"))

        assert exc_info.value.timed_out is False
        assert exc_info.value.status_code is None

    @pytest.mark.asyncio
    async def test_server_error_status(self, index_client, fake_index):
        """Test a non-2xx answer is unavailable with its status."""
        fake_index.status_code = 500

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await index_client.search(IndexQuery(q="x"))

        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            b"<html>Service Unavailable</html>",
            b'{"responseHeader": {"status": 0}}',
            b'{"response": {"docs": "not-a-list"}}',
            b'{"response": {"numFound": "many", "docs": []}}',
        ],
    )
    async def test_malformed_body(self, index_client, fake_index, body):
        """Test a body that is not a select response is unavailable."""
        fake_index.body = body

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await index_client.search(IndexQuery(q="x"))

        assert "malformed" in exc_info.value.reason

    @pytest.mark.asyncio
    async def test_shared_client_not_closed(self, test_settings, fake_index):
        """Test a caller-supplied httpx client outlives the index client."""
        http = httpx.AsyncClient(transport=httpx.MockTransport(fake_index.handler))

        async with DocumentIndexClient(test_settings, client=http) as index:
            await index.search(IndexQuery(q="x"))

        assert http.is_closed is False
        await http.aclose()
