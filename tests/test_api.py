"""HTTP API over the results store (FastAPI TestClient)."""

import json
import tempfile
import unittest
from pathlib import Path

from fastapi.testclient import TestClient

from dashboard.backend import ingest
from dashboard.backend.main import app

from tests.factories import jmh_entry, sample_results


class ApiTestCase(unittest.TestCase):

    results = None

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.results_path = Path(self._tmp.name) / "jmh-results.json"
        payload = sample_results() if self.results is None else self.results
        self.results_path.write_text(json.dumps(payload), encoding="utf-8")
        ingest.set_store(ingest.build_store(self.results_path))
        self.client = TestClient(app)

    def tearDown(self):
        ingest.set_store(None)
        self._tmp.cleanup()


class TestStatus(ApiTestCase):

    def test_root(self):
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "online")

    def test_health(self):
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "ok")
        self.assertEqual(body["records_loaded"], 10)
        self.assertEqual(body["comparisons_loaded"], 5)
        self.assertEqual(body["excluded_records"], 1)
        self.assertEqual(body["anomaly_count"], 1)
        self.assertEqual(body["results_path"], str(self.results_path))


class TestTree(ApiTestCase):

    def test_hierarchy(self):
        body = self.client.get("/api/hierarchy").json()
        self.assertEqual(body["path"], "")
        self.assertEqual(body["display_name"], "All Benchmarks")
        self.assertEqual(body["comparison_count"], 5)
        self.assertEqual([c["name"] for c in body["children"]], ["PQC", "KDF", "Symmetric"])
        pqc = body["children"][0]
        self.assertEqual([c["display_name"] for c in pqc["children"]], ["ML-KEM", "ML-DSA"])

    def test_node(self):
        resp = self.client.get("/api/node", params={"path": "PQC/ML-KEM/encapsulate"})
        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertFalse(body["fallback"])
        self.assertEqual(body["title"], "Encapsulate")
        self.assertEqual(body["display_path"], "PQC / ML-KEM / Encapsulate")
        self.assertEqual([b["name"] for b in body["breadcrumbs"]], ["All", "PQC", "ML-KEM", "Encapsulate"])
        self.assertEqual([c["name"] for c in body["children"]], ["ML-KEM-768"])
        self.assertEqual(body["modes"][0]["label"], "Throughput")

    def test_missing_node_404(self):
        resp = self.client.get("/api/node", params={"path": "PQC/Nope"})
        self.assertEqual(resp.status_code, 404)

    def test_missing_node_fallback_to_root(self):
        body = self.client.get("/api/node", params={"path": "PQC/Nope", "fallback": "true"}).json()
        self.assertTrue(body["fallback"])
        self.assertEqual(body["node"]["path"], "")
        self.assertEqual(body["title"], "All Benchmarks")

    def test_modes(self):
        body = self.client.get("/api/modes", params={"path": "PQC"}).json()
        self.assertEqual([m["mode"] for m in body], ["thrpt", "avgt"])
        self.assertEqual([m["higher_is_better"] for m in body], [True, False])


class TestComparisons(ApiTestCase):

    def test_grouped_by_mode(self):
        body = self.client.get("/api/comparisons", params={"path": "PQC"}).json()
        self.assertEqual(body["provider_a"], "BC")
        self.assertEqual(body["provider_b"], "Jostle")
        self.assertEqual(body["count"], 2)
        self.assertEqual([g["mode"] for g in body["groups"]], ["thrpt", "avgt"])
        avgt = body["groups"][1]
        self.assertEqual(avgt["score_unit"], "ms/op")
        self.assertEqual(avgt["rows"][0]["winner"], "Jostle")

    def test_symmetric_row(self):
        path = "Symmetric/AES/encrypt/default/CBC/PKCS5"
        body = self.client.get("/api/comparisons", params={"path": path}).json()
        row = body["groups"][0]["rows"][0]
        self.assertEqual(row["path"], path)
        self.assertEqual(row["label"], "CBC · PKCS5")
        self.assertAlmostEqual(row["ratio"], 0.815, delta=1e-3)
        self.assertEqual(row["ratio_text"], "0.82x")
        self.assertEqual(row["a_error_text"], "+/- 1.2000")

    def test_mode_filter(self):
        body = self.client.get("/api/comparisons", params={"mode": "avgt"}).json()
        self.assertEqual(body["count"], 1)
        self.assertEqual(body["groups"][0]["label"], "Average Time")

    def test_bad_mode(self):
        resp = self.client.get("/api/comparisons", params={"mode": "fastest"})
        self.assertEqual(resp.status_code, 400)

    def test_missing_path(self):
        resp = self.client.get("/api/comparisons", params={"path": "Nope"})
        self.assertEqual(resp.status_code, 404)

    def test_summary(self):
        body = self.client.get("/api/summary").json()
        by_category = {row["category"]: row for row in body}
        self.assertEqual(by_category["Symmetric"]["comparisons"], 2)
        self.assertEqual(by_category["PQC"]["Jostle"], 2)


class TestAnomalies(ApiTestCase):

    def test_anomalies(self):
        body = self.client.get("/api/anomalies").json()
        self.assertEqual(body["counts"]["classification_failure"], 1)
        self.assertEqual(body["excluded_records"], 1)
        self.assertEqual(body["anomalies"][0]["identifier"], "com.example.Mystery.run")
        self.assertEqual(body["load_errors"], [])

    def test_kind_filter(self):
        body = self.client.get("/api/anomalies", params={"kind": "unit_mismatch"}).json()
        self.assertEqual(body["anomalies"], [])
        resp = self.client.get("/api/anomalies", params={"kind": "bogus"})
        self.assertEqual(resp.status_code, 400)


class TestReload(ApiTestCase):

    def test_reload_swaps_store(self):
        before = ingest.get_store()
        entries = sample_results() + [jmh_entry("Aes/Decrypt/GCM/NoPadding", "Jostle", 150.0)]
        self.results_path.write_text(json.dumps(entries), encoding="utf-8")

        body = self.client.post("/api/reload").json()
        self.assertEqual(body["records_loaded"], 11)
        self.assertEqual(body["comparisons_loaded"], 5)
        self.assertIsNot(ingest.get_store(), before)
        # the old store is untouched
        self.assertEqual(before.record_count, 10)

        node = self.client.get("/api/comparisons", params={"path": "Symmetric/AES/decrypt"}).json()
        self.assertEqual(node["groups"][0]["rows"][0]["ratio_text"], "1.07x")


class TestNoData(ApiTestCase):

    results = []

    def test_health_reports_no_data(self):
        body = self.client.get("/api/health").json()
        self.assertEqual(body["status"], "no_data")
        self.assertEqual(body["comparisons_loaded"], 0)

    def test_empty_tree(self):
        body = self.client.get("/api/hierarchy").json()
        self.assertEqual(body["children"], [])
        counts = self.client.get("/api/anomalies").json()["counts"]
        self.assertEqual(counts["empty_input"], 1)
