"""Hierarchy Builder: path templates, aggregation, lookup."""

import unittest

from benchcore.classifier import Classifier
from benchcore.hierarchy import (
    build_hierarchy,
    entity_path,
    join_path,
    normalize_path,
    path_segments,
    split_path,
)
from benchcore.matcher import PairMatcher
from benchcore.records import Category

from tests.factories import raw

CLASSIFIER = Classifier(providers=("BC", "Jostle"))
MATCHER = PairMatcher("BC", "Jostle")


def comparisons(*records):
    return MATCHER.match([CLASSIFIER.classify(r) for r in records]).comparisons


MIXED = (
    raw("Aes/Encrypt/CBC/PKCS5", "BC"),
    raw("Aes/Encrypt/CBC/PKCS5", "Jostle"),
    raw("Aes/Encrypt/GCM/NoPadding", "BC"),
    raw("ChaCha20/Encrypt", "BC"),
    raw("MlKem/encapsulate", "BC", parameterSet="ML-KEM-512"),
    raw("MlKem/encapsulate", "BC", parameterSet="ML-KEM-768"),
    raw("MlDsa/sign", "Jostle"),
    raw("Pbkdf2/deriveKey", "BC", hashAlgorithm="SHA256", iterations="1000"),
    raw("SCrypt/deriveKey", "BC"),
)


class TestPaths(unittest.TestCase):

    def test_templates_per_category(self):
        entities = comparisons(*MIXED)
        paths = {entity_path(e) for e in entities}
        self.assertIn("Symmetric/AES/encrypt/default/CBC/PKCS5", paths)
        self.assertIn("Symmetric/AES/encrypt/default/GCM/none", paths)
        self.assertIn("Symmetric/ChaCha20/encrypt/default/none/none", paths)
        self.assertIn("PQC/ML-KEM/encapsulate/ML-KEM-768", paths)
        self.assertIn("PQC/ML-DSA/sign/default", paths)
        self.assertIn("KDF/PBKDF2/SHA256/default/1000", paths)
        self.assertIn("KDF/SCrypt/default/default/default", paths)

    def test_sibling_depth_consistent_within_category(self):
        depths = {}
        for entity in comparisons(*MIXED):
            depths.setdefault(entity.category, set()).add(len(path_segments(entity)))
        for category, seen in depths.items():
            self.assertEqual(len(seen), 1, category)

    def test_extras_are_trailing_segments(self):
        entity = comparisons(raw("Aes/Encrypt/CBC/PKCS5", "BC", dataSize="1024"))[0]
        self.assertEqual(path_segments(entity)[-1], "dataSize=1024")

    def test_missing_extras_are_padded_within_a_category(self):
        entities = comparisons(
            raw("Aes/Encrypt/CBC/PKCS5", "BC", dataSize="1024"),
            raw("Aes/Encrypt/GCM/NoPadding", "BC"),
            raw("Sm4/Encrypt/CBC/PKCS5", "BC", keyFormat="raw"),
            raw("MlKem/encapsulate", "BC"),
        )
        tree = build_hierarchy(entities)
        self.assertEqual(tree.extra_names[Category.SYMMETRIC], ("dataSize", "keyFormat"))
        self.assertEqual(tree.extra_names[Category.PQC], ())

        paths = [tree.path_of(e) for e in entities]
        self.assertEqual(paths, [
            "Symmetric/AES/encrypt/default/CBC/PKCS5/dataSize%3D1024/keyFormat%3Ddefault",
            "Symmetric/AES/encrypt/default/GCM/none/dataSize%3Ddefault/keyFormat%3Ddefault",
            "Symmetric/SM4/encrypt/default/CBC/PKCS5/dataSize%3Ddefault/keyFormat%3Draw",
            "PQC/ML-KEM/encapsulate/default",
        ])
        for entity, path in zip(entities, paths):
            self.assertEqual(tree.find(path).direct_comparisons, (entity,))
        depths = {len(split_path(p)) for p in paths[:3]}
        self.assertEqual(depths, {8})

    def test_slash_inside_a_value_is_quoted(self):
        entity = comparisons(raw("Aes/Encrypt/CBC/PKCS5", "BC", input="a/b"))[0]
        path = entity_path(entity)
        self.assertTrue(path.endswith("input%3Da%2Fb"))
        self.assertEqual(split_path(path)[-1], "input=a/b")

    def test_join_split_roundtrip_helpers(self):
        self.assertEqual(split_path(""), [])
        self.assertEqual(join_path(["PQC", "ML-KEM"]), "PQC/ML-KEM")
        self.assertEqual(normalize_path("/PQC/ML-KEM/"), "PQC/ML-KEM")


class TestTree(unittest.TestCase):

    def setUp(self):
        self.entities = comparisons(*MIXED)
        self.tree = build_hierarchy(self.entities)

    def test_root(self):
        root = self.tree.root
        self.assertEqual(root.path, "")
        self.assertEqual(root.name, "")
        self.assertEqual(list(root.comparisons), list(self.entities))

    def test_first_seen_sibling_order(self):
        self.assertEqual([c.name for c in self.tree.root.children], ["Symmetric", "PQC", "KDF"])
        symmetric = self.tree.find("Symmetric")
        self.assertEqual([c.name for c in symmetric.children], ["AES", "ChaCha20"])
        variants = self.tree.find("PQC/ML-KEM/encapsulate")
        self.assertEqual([c.name for c in variants.children], ["ML-KEM-512", "ML-KEM-768"])

    def test_aggregation_invariant(self):
        for node in self.tree.walk():
            expected = list(node.direct_comparisons)
            for child in node.children:
                expected.extend(child.comparisons)
            self.assertEqual(sorted(map(id, node.comparisons)), sorted(map(id, expected)), node.path)

    def test_leaf_holds_entity(self):
        leaf = self.tree.find("Symmetric/AES/encrypt/default/CBC/PKCS5")
        self.assertTrue(leaf.is_leaf)
        self.assertEqual(len(leaf.direct_comparisons), 1)
        self.assertTrue(leaf.direct_comparisons[0].is_paired)

    def test_path_uniqueness(self):
        paths = self.tree.paths()
        self.assertEqual(len(paths), len(set(paths)))
        self.assertEqual(len(paths), len(self.tree))
        for path in paths:
            self.assertIs(self.tree.find(path).path, path)

    def test_find_and_resolve(self):
        self.assertIsNone(self.tree.find("PQC/Nope"))
        self.assertIs(self.tree.resolve("PQC/Nope"), self.tree.root)
        self.assertIs(self.tree.resolve(None), self.tree.root)
        self.assertEqual(self.tree.resolve("PQC").name, "PQC")
        self.assertIn("KDF/SCrypt", self.tree)

    def test_children_and_comparisons_by_path(self):
        self.assertEqual(len(self.tree.children("PQC")), 2)
        self.assertEqual(len(self.tree.comparisons("PQC")), 3)
        self.assertEqual(self.tree.children("missing"), ())
        self.assertEqual(self.tree.comparisons("missing"), ())

    def test_depth(self):
        self.assertEqual(self.tree.root.depth, 0)
        self.assertEqual(self.tree.find("PQC/ML-KEM").depth, 2)


class TestEmptyAndRebuild(unittest.TestCase):

    def test_empty(self):
        tree = build_hierarchy([])
        self.assertEqual(tree.root.children, ())
        self.assertEqual(tree.root.comparisons, ())
        self.assertEqual(tree.paths(), [""])

    def test_rebuild_is_identical(self):
        first = build_hierarchy(comparisons(*MIXED))
        second = build_hierarchy(comparisons(*MIXED))
        self.assertEqual(first.paths(), second.paths())
        self.assertEqual(first.root, second.root)
