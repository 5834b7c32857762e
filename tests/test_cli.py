"""benchcore command line."""

import contextlib
import io
import json
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

import pandas as pd

from benchcore import config
from benchcore.__main__ import run
from benchcore.cli import main

from tests.factories import jmh_entry, sample_results


class TestCli(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)
        self.results = self.root / "jmh-results.json"
        self.results.write_text(json.dumps(sample_results()), encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    def _run(self, *args):
        out, err = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
            code = main([str(a) for a in args])
        return code, out.getvalue(), err.getvalue()

    def test_summary(self):
        code, out, _ = self._run(self.results, "--provider-a", "BC", "--provider-b", "Jostle")
        self.assertEqual(code, 0)
        self.assertIn("Records:     10", out)
        self.assertIn("Comparisons: 5", out)
        self.assertIn("ML-KEM", out)
        self.assertIn("classification_failure: 1", out)

    def test_exports(self):
        csv_path = self.root / "comparisons.csv"
        json_path = self.root / "tree.json"
        code, _, _ = self._run(
            self.results, "--provider-a", "BC", "--provider-b", "Jostle",
            "--csv", csv_path, "--json", json_path, "--quiet",
        )
        self.assertEqual(code, 0)

        table = pd.read_csv(csv_path)
        self.assertEqual(len(table), 5)
        self.assertIn("ratio", table.columns)

        tree = json.loads(json_path.read_text(encoding="utf-8"))
        self.assertEqual(tree["path"], "")
        self.assertEqual(tree["comparison_count"], 5)
        self.assertEqual([c["name"] for c in tree["children"]], ["PQC", "KDF", "Symmetric"])

    def test_strict_duplicate_exits_nonzero(self):
        entries = sample_results() + [jmh_entry("Aes/Encrypt/CBC/PKCS5", "BC", 1.0)]
        self.results.write_text(json.dumps(entries), encoding="utf-8")
        code, _, err = self._run(self.results, "--provider-a", "BC", "--provider-b", "Jostle", "--strict", "--quiet")
        self.assertEqual(code, 1)
        self.assertIn("Error:", err)

    def test_missing_results_is_empty(self):
        code, out, _ = self._run(self.root / "nope.json", "--provider-a", "BC", "--provider-b", "Jostle")
        self.assertEqual(code, 0)
        self.assertIn("No data.", out)
        self.assertIn("load_errors: 1", out)

    def test_same_provider_twice_is_a_config_error(self):
        code, _, err = self._run(self.results, "--provider-a", "Jostle", "--provider-b", "Jostle", "--quiet")
        self.assertEqual(code, 2)
        self.assertIn("must differ", err)

    def test_provider_a_matching_configured_b_is_a_config_error(self):
        with mock.patch.dict(os.environ, {"BENCH_PROVIDER_B": "Jostle"}):
            code, _, err = self._run(self.results, "--provider-a", "jostle", "--quiet")
        self.assertEqual(code, 2)
        self.assertIn("must differ", err)

    def test_bad_env_value_exits_with_config_code(self):
        original = dict(config.CONFIG)
        try:
            with mock.patch.dict(os.environ, {"BENCH_STRICT_UNITS": "maybe"}):
                code, _, err = self._run(self.results, "--quiet")
        finally:
            config.CONFIG.clear()
            config.CONFIG.update(original)
        self.assertEqual(code, 2)
        self.assertIn("BENCH_STRICT_UNITS", err)


class TestEntryPoint(unittest.TestCase):

    def test_config_error_on_import_exits_with_config_code(self):
        err = io.StringIO()
        with mock.patch.dict(os.environ, {"BENCH_STRICT_UNITS": "maybe"}), mock.patch.dict(sys.modules):
            # force benchcore.config to validate again on import
            sys.modules.pop("benchcore.cli", None)
            sys.modules.pop("benchcore.config", None)
            with contextlib.redirect_stderr(err):
                code = run()
        self.assertEqual(code, 2)
        self.assertIn("BENCH_STRICT_UNITS", err.getvalue())
