"""Tests for term suggestion aggregations."""

import re
import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from FacetSearch.core.clauses import Term
from FacetSearch.core.filters import FacetRegistry, FieldSpec, dates_entry, terms_entry
from FacetSearch.core.models import TermSuggestion
from FacetSearch.sources.elasticsearch.aggregation import (
    build_include_pattern,
    build_suggestion_query,
    parse_suggestion_response,
)
from FacetSearch.sources.elasticsearch.query import FilterQueryCompiler

CAT = FieldSpec(field="cat", kind="terms")
SORTED = FieldSpec(field="dept", kind="terms", order="key_asc")
YEAR = FieldSpec(field="year", kind="dates")
PERSON = FieldSpec(field="person.name", kind="terms")
PARTY = FieldSpec(field="person.party", kind="terms", extra_query_field=Term(field="person.kind", value="parti"))


def _compiler() -> FilterQueryCompiler:
    return FilterQueryCompiler(
        FacetRegistry({"cat": CAT, "dept": SORTED, "year": YEAR, "person": PERSON, "party": PARTY})
    )


class TestIncludePattern(unittest.TestCase):
    def test_two_case_character_classes(self) -> None:
        self.assertEqual(build_include_pattern("Ab"), ".*[aA][bB].*")

    def test_pattern_is_case_insensitive_contains(self) -> None:
        pattern = build_include_pattern("Ab")
        for value in ("ab", "AB", "aB", "Ab", "xxABxx"):
            with self.subTest(value=value):
                self.assertIsNotNone(re.fullmatch(pattern, value))
        self.assertIsNone(re.fullmatch(pattern, "cd"))

    def test_class_special_characters_are_escaped(self) -> None:
        pattern = build_include_pattern("a-]")
        self.assertEqual(pattern, ".*[aA][\\-\\-][\\]\\]].*")
        self.assertIsNotNone(re.fullmatch(pattern, "xa-]"))


class TestBuildSuggestionQuery(unittest.TestCase):
    def test_end_to_end_example(self) -> None:
        filters = {"cat": terms_entry(CAT, "red"), "year": dates_entry(YEAR, min="2000")}
        body = build_suggestion_query(_compiler(), filters, CAT, typed="re")

        self.assertEqual(body["size"], 0)
        self.assertEqual(
            body["query"],
            {
                "bool": {
                    "must": [
                        {"range": {"year": {"gte": "2000", "format": "yyyy"}}},
                        {
                            "bool": {
                                "should": [
                                    {"wildcard": {"cat.raw": {"value": "*re*", "case_insensitive": True}}}
                                ]
                            }
                        },
                    ]
                }
            },
        )
        self.assertEqual(
            body["aggs"],
            {
                "termsList": {
                    "terms": {
                        "field": "cat.raw",
                        "size": 15,
                        "order": {"_count": "desc"},
                        "include": ".*[rR][eE].*",
                    }
                }
            },
        )

    def test_own_filter_never_constrains_suggestions(self) -> None:
        others = {"year": dates_entry(YEAR, min="2000")}
        without = build_suggestion_query(_compiler(), others, CAT)
        with_red = build_suggestion_query(_compiler(), {**others, "cat": terms_entry(CAT, "red")}, CAT)
        with_blue = build_suggestion_query(_compiler(), {**others, "cat": terms_entry(CAT, "blue")}, CAT)
        self.assertEqual(without, with_red)
        self.assertEqual(with_red, with_blue)

    def test_other_facet_filters_constrain_suggestions(self) -> None:
        filters = {"cat": terms_entry(CAT, "red")}
        body = build_suggestion_query(_compiler(), filters, SORTED)
        self.assertEqual(body["query"], {"bool": {"should": [{"terms": {"cat.raw": ["red"]}}]}})

    def test_no_filters_and_no_typed_text(self) -> None:
        body = build_suggestion_query(_compiler(), {}, CAT, limit=5)
        self.assertEqual(body["query"], {"match_all": {}})
        self.assertEqual(body["aggs"]["termsList"]["terms"]["size"], 5)
        self.assertNotIn("include", body["aggs"]["termsList"]["terms"])

    def test_empty_typed_text_adds_no_override(self) -> None:
        body = build_suggestion_query(_compiler(), {}, CAT, typed="")
        self.assertEqual(body["query"], {"match_all": {}})
        self.assertNotIn("include", body["aggs"]["termsList"]["terms"])

    def test_key_ascending_order(self) -> None:
        body = build_suggestion_query(_compiler(), {}, SORTED)
        self.assertEqual(body["aggs"]["termsList"]["terms"]["order"], {"_key": "asc"})

    def test_nested_facet_wraps_aggregation(self) -> None:
        body = build_suggestion_query(_compiler(), {}, PERSON, typed="du")
        self.assertEqual(set(body["aggs"]), {"person"})
        nested = body["aggs"]["person"]
        self.assertEqual(nested["nested"], {"path": "person"})
        self.assertEqual(nested["aggs"]["termsList"]["terms"]["field"], "person.name.raw")
        self.assertEqual(body["query"]["nested"]["path"], "person")

    def test_extra_query_field_adds_sub_aggregation(self) -> None:
        body = build_suggestion_query(_compiler(), {}, PARTY)
        terms_agg = body["aggs"]["person"]["aggs"]["termsList"]
        self.assertEqual(terms_agg["aggs"], {"extra": {"filter": {"term": {"person.kind": "parti"}}}})


class TestParseSuggestionResponse(unittest.TestCase):
    def test_flat_buckets(self) -> None:
        payload = {
            "aggregations": {
                "termsList": {
                    "buckets": [
                        {"key": "red", "doc_count": 4},
                        {"key": "rose", "doc_count": 0},
                        {"key": "bordeaux", "doc_count": 1},
                    ]
                }
            }
        }
        result = list(parse_suggestion_response(payload, CAT))
        self.assertEqual(result, [TermSuggestion("red", 4), TermSuggestion("bordeaux", 1)])

    def test_nested_buckets(self) -> None:
        payload = {"aggregations": {"person": {"doc_count": 9, "termsList": {"buckets": [{"key": "Dupont", "doc_count": 3}]}}}}
        result = list(parse_suggestion_response(payload, PERSON))
        self.assertEqual(result, [TermSuggestion("Dupont", 3)])

    def test_extra_count_replaces_doc_count(self) -> None:
        payload = {
            "aggregations": {
                "person": {
                    "termsList": {
                        "buckets": [
                            {"key": "PS", "doc_count": 10, "extra": {"doc_count": 7}},
                            {"key": "RPR", "doc_count": 5, "extra": {"doc_count": 0}},
                        ]
                    }
                }
            }
        }
        result = list(parse_suggestion_response(payload, PARTY))
        self.assertEqual(result, [TermSuggestion("PS", 7)])

    def test_extra_ignored_without_extra_clause(self) -> None:
        payload = {"aggregations": {"termsList": {"buckets": [{"key": "red", "doc_count": 2, "extra": {"doc_count": 0}}]}}}
        self.assertEqual(list(parse_suggestion_response(payload, CAT)), [TermSuggestion("red", 2)])

    def test_missing_aggregations_raises(self) -> None:
        with self.assertRaises(ValueError):
            parse_suggestion_response({"hits": {}}, CAT)

    def test_missing_nested_layer_raises(self) -> None:
        payload = {"aggregations": {"termsList": {"buckets": []}}}
        with self.assertRaises(ValueError):
            parse_suggestion_response(payload, PERSON)


if __name__ == "__main__":
    unittest.main()
