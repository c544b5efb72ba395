"""CLI tests with the HTTP backend replaced by a stub."""

from __future__ import annotations

import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Any
from unittest.mock import patch

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from FacetSearch.cli.ui import cli
from FacetSearch.services import create_search_service

CONFIG_PATH = REPO_ROOT / "config" / "default.yml"
FILTERS_PATH = REPO_ROOT / "config" / "test" / "filters.yml"


class _StubBackend:
    def __init__(self) -> None:
        self.bodies: list[dict[str, Any]] = []
        self.closed = False

    def search(self, body: dict[str, Any]) -> dict[str, Any]:
        self.bodies.append(body)
        return {"hits": {"total": {"value": 1}, "hits": [{"_id": "doc-1", "_source": {"titre": "Tract"}}]}}

    def proxy_search(self, index: str, body: dict[str, Any]) -> dict[str, Any]:
        self.bodies.append(body)
        return {
            "aggregations": {
                "candidats": {"termsList": {"buckets": [{"key": "Mitterrand", "doc_count": 12}]}}
            }
        }

    def download_csv(self, body: dict[str, Any], *, filename: str) -> bytes:
        self.bodies.append(body)
        return b"id\ndoc-1\n"

    def close(self) -> None:
        self.closed = True


class TestCli(unittest.TestCase):
    def setUp(self) -> None:
        self.backend = _StubBackend()
        self._env = patch.dict(os.environ, {}, clear=True)
        self._env.start()
        self._factory = patch(
            "FacetSearch.cli.runner.create_search_service",
            side_effect=lambda config: create_search_service(config, backend=self.backend),
        )
        self._factory.start()

    def tearDown(self) -> None:
        self._factory.stop()
        self._env.stop()

    def test_compile_prints_search_body(self) -> None:
        result = CliRunner().invoke(
            cli, ["--config", str(CONFIG_PATH), "compile", "--filters", str(FILTERS_PATH), "--sort", "date"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        body = json.loads(result.stdout)
        self.assertEqual(len(body["query"]["bool"]["must"]), 4)
        self.assertEqual(body["sort"], [{"date": "desc"}])
        self.assertEqual(body["highlight"]["fields"], [{"ocr": {"number_of_fragments": 2, "fragment_size": 50}}])

    def test_search_prints_results(self) -> None:
        result = CliRunner().invoke(cli, ["--config", str(CONFIG_PATH), "search", "--filters", str(FILTERS_PATH)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("1 document(s)", result.output)
        self.assertIn("doc-1", result.output)
        self.assertTrue(self.backend.closed)

    def test_suggest_prints_terms(self) -> None:
        result = CliRunner().invoke(
            cli, ["--config", str(CONFIG_PATH), "suggest", "candidate", "--typed", "mit", "--limit", "3"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("12  Mitterrand", result.output)
        self.assertEqual(self.backend.bodies[0]["aggs"]["candidats"]["aggs"]["termsList"]["terms"]["size"], 3)

    def test_export_writes_csv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            output = Path(tmp) / "export.csv"
            result = CliRunner().invoke(cli, ["--config", str(CONFIG_PATH), "export", str(output)])
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertEqual(output.read_bytes(), b"id\ndoc-1\n")

    def test_unknown_facet_aborts(self) -> None:
        result = CliRunner().invoke(cli, ["--config", str(CONFIG_PATH), "suggest", "nope"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("Aborted", result.output)


if __name__ == "__main__":
    unittest.main()
