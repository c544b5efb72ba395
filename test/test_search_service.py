"""Tests for the search service and the request bodies it sends."""

from __future__ import annotations

import sys
import tempfile
import unittest
from pathlib import Path
from typing import Any

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from FacetSearch.core.filters import FacetRegistry, FieldSpec, dates_entry, query_entry, terms_entry
from FacetSearch.core.models import SearchContext, SortSpec, TermSuggestion
from FacetSearch.services.search import FacetSearchService
from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler

CAT = FieldSpec(field="cat", kind="terms")
YEAR = FieldSpec(field="year", kind="dates")
TEXT = FieldSpec(field="ocr", kind="query")
REGISTRY = FacetRegistry({"cat": CAT, "year": YEAR, "text": TEXT})

SEARCH_RESPONSE = {
    "hits": {
        "total": {"value": 42, "relation": "eq"},
        "hits": [
            {
                "_id": "doc-1",
                "_source": {"titre": "Profession de foi", "date": "1981"},
                "highlight": {"ocr": ["le <em>chômage</em> recule"]},
            },
            {"_id": "doc-2", "_source": {"titre": "Circulaire"}},
        ],
    }
}


class _StubBackend:
    def __init__(self, *, search_response: dict | None = None, agg_response: dict | None = None) -> None:
        self.search_response = search_response or SEARCH_RESPONSE
        self.agg_response = agg_response or {"aggregations": {"termsList": {"buckets": []}}}
        self.search_bodies: list[dict[str, Any]] = []
        self.proxy_calls: list[tuple[str, dict[str, Any]]] = []
        self.csv_calls: list[tuple[dict[str, Any], str]] = []
        self.closed = False
        self.on_search = None

    def search(self, body: dict[str, Any]) -> dict[str, Any]:
        self.search_bodies.append(body)
        if self.on_search is not None:
            callback, self.on_search = self.on_search, None
            callback()
        return self.search_response

    def proxy_search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self.proxy_calls.append((index, body))
        return self.agg_response

    def download_csv(self, body: dict[str, Any], *, filename: str) -> bytes:
        self.csv_calls.append((body, filename))
        return b"id;titre\ndoc-1;Profession de foi\n"

    def close(self) -> None:
        self.closed = True


def _service(backend: _StubBackend) -> FacetSearchService:
    return FacetSearchService(
        compiler=FilterQueryCompiler(REGISTRY),
        backend=backend,
        index="archives",
        page_size=10,
    )


class TestSearchBody(unittest.TestCase):
    def test_search_body_example(self) -> None:
        context = SearchContext(filters={"cat": terms_entry(CAT, "red"), "year": dates_entry(YEAR, min="2000")})
        body = _service(_StubBackend()).search_body(context, page=3)
        self.assertEqual(body["size"], 10)
        self.assertEqual(body["from"], 20)
        self.assertTrue(body["track_total_hits"])
        self.assertEqual(body["highlight"], {"fields": []})
        self.assertEqual(len(body["query"]["bool"]["must"]), 2)
        self.assertNotIn("sort", body)

    def test_search_body_with_sort_and_highlight(self) -> None:
        context = SearchContext(
            filters={"text": query_entry(TEXT, "emploi")},
            sort=SortSpec(label="date", expression=({"date": "desc"},)),
        )
        body = _service(_StubBackend()).search_body(context)
        self.assertEqual(body["sort"], [{"date": "desc"}])
        self.assertEqual(body["highlight"]["fields"], [{"ocr": {"number_of_fragments": 2, "fragment_size": 50}}])

    def test_invalid_page(self) -> None:
        with self.assertRaises(ValueError):
            _service(_StubBackend()).search_body(SearchContext(), page=0)


class TestFacetSearchService(unittest.TestCase):
    def test_search_parses_hits(self) -> None:
        backend = _StubBackend()
        page = _service(backend).search(SearchContext())
        self.assertEqual(page.total, 42)
        self.assertEqual([h.id for h in page.hits], ["doc-1", "doc-2"])
        self.assertEqual(page.hits[0].highlight["ocr"], ("le <em>chômage</em> recule",))
        self.assertFalse(page.stale)
        self.assertEqual(backend.search_bodies[0]["query"], {"match_all": {}})

    def test_superseded_search_is_flagged_stale(self) -> None:
        backend = _StubBackend()
        service = _service(backend)
        newer: list = []
        backend.on_search = lambda: newer.append(service.search(SearchContext()))

        older = service.search(SearchContext(filters={"cat": terms_entry(CAT, "red")}))

        self.assertTrue(older.stale)
        self.assertFalse(newer[0].stale)

    def test_export_uses_same_query_as_search(self) -> None:
        backend = _StubBackend()
        service = _service(backend)
        context = SearchContext(
            filters={"cat": terms_entry(CAT, "red"), "year": dates_entry(YEAR, max="1995")},
            sort=SortSpec(label="date", expression=({"date": "desc"},)),
        )
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "exports" / "results.csv"
            written = service.export_csv(context, output)
            self.assertEqual(written.read_bytes(), b"id;titre\ndoc-1;Profession de foi\n")

        body, filename = backend.csv_calls[0]
        self.assertEqual(filename, "results.csv")
        self.assertEqual(body["query"], service.search_body(context)["query"])
        self.assertEqual(body["sort"], [{"date": "desc"}])
        self.assertEqual(set(body), {"query", "sort"})

    def test_suggest_terms(self) -> None:
        backend = _StubBackend(
            agg_response={
                "aggregations": {
                    "termsList": {"buckets": [{"key": "red", "doc_count": 3}, {"key": "rouge", "doc_count": 0}]}
                }
            }
        )
        context = SearchContext(filters={"cat": terms_entry(CAT, "blue"), "year": dates_entry(YEAR, min="2000")})
        result = _service(backend).suggest_terms(context, "cat", typed="r", limit=5)

        self.assertEqual(result, [TermSuggestion("red", 3)])
        index, body = backend.proxy_calls[0]
        self.assertEqual(index, "archives")
        self.assertNotIn("blue", str(body["query"]))
        self.assertEqual(body["aggs"]["termsList"]["terms"]["size"], 5)

    def test_suggest_uses_context_index(self) -> None:
        backend = _StubBackend()
        _service(backend).suggest_terms(SearchContext(index="other"), "cat")
        self.assertEqual(backend.proxy_calls[0][0], "other")

    def test_suggest_rejects_non_terms_facet(self) -> None:
        with self.assertRaisesRegex(ValueError, "not a terms facet"):
            _service(_StubBackend()).suggest_terms(SearchContext(), "year")

    def test_suggest_rejects_unknown_facet(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown facet"):
            _service(_StubBackend()).suggest_terms(SearchContext(), "party")

    def test_close_closes_backend(self) -> None:
        backend = _StubBackend()
        _service(backend).close()
        self.assertTrue(backend.closed)


if __name__ == "__main__":
    unittest.main()
