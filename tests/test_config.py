"""CONFIG validation, env overrides and .benchenv loading."""

import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from benchcore import config
from benchcore.env_loader import load_env_files
from benchcore.exceptions import ConfigError


class TestValidateConfig(unittest.TestCase):

    def _cfg(self, **overrides):
        cfg = dict(config._DEFAULTS)
        cfg.update(overrides)
        return cfg

    def test_defaults_are_valid(self):
        config.validate_config(self._cfg())

    def test_missing_key(self):
        cfg = self._cfg()
        del cfg["PROVIDER_A"]
        with self.assertRaises(ConfigError):
            config.validate_config(cfg)

    def test_wrong_type(self):
        with self.assertRaises(ConfigError):
            config.validate_config(self._cfg(STRICT_UNITS="yes"))

    def test_empty_provider(self):
        with self.assertRaises(ConfigError):
            config.validate_config(self._cfg(PROVIDER_B="  "))

    def test_providers_must_differ(self):
        with self.assertRaises(ConfigError):
            config.validate_config(self._cfg(PROVIDER_A="bc", PROVIDER_B="BC"))

    def test_log_level(self):
        with self.assertRaises(ConfigError):
            config.validate_config(self._cfg(LOG_LEVEL="chatty"))


class TestEnvOverrides(unittest.TestCase):

    def test_string_and_bool_overrides(self):
        env = {"BENCH_PROVIDER_B": "SunJCE", "BENCH_STRICT_DUPLICATES": "on"}
        with mock.patch.dict(os.environ, env):
            cfg = config._apply_env_overrides(config._DEFAULTS)
        self.assertEqual(cfg["PROVIDER_B"], "SunJCE")
        self.assertIs(cfg["STRICT_DUPLICATES"], True)
        self.assertIs(cfg["STRICT_UNITS"], False)

    def test_bad_bool(self):
        with mock.patch.dict(os.environ, {"BENCH_STRICT_UNITS": "maybe"}):
            with self.assertRaises(ConfigError):
                config._apply_env_overrides(config._DEFAULTS)

    def test_refresh_config_updates_in_place(self):
        original = dict(config.CONFIG)
        cfg_ref = config.CONFIG
        try:
            with mock.patch.dict(os.environ, {"BENCH_RESULTS_PATH": "/tmp/other.json"}):
                config.refresh_config()
            self.assertIs(config.CONFIG, cfg_ref)
            self.assertEqual(config.CONFIG["RESULTS_PATH"], "/tmp/other.json")
        finally:
            config.CONFIG.clear()
            config.CONFIG.update(original)


class TestEnvLoader(unittest.TestCase):

    def test_local_overrides_base_and_env_wins(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".benchenv").write_text(
                "# comment\nBENCH_PROVIDER_A=BaseA\nBENCH_PROVIDER_B='Quoted'\nnot a pair\n",
                encoding="utf-8",
            )
            (root / ".benchenv.local").write_text("BENCH_PROVIDER_A=LocalA\n", encoding="utf-8")

            with mock.patch.dict(os.environ, {"BENCH_PROVIDER_B": "FromEnv"}, clear=False):
                os.environ.pop("BENCH_PROVIDER_A", None)
                loaded = load_env_files(root)
                self.assertEqual(loaded["BENCH_PROVIDER_A"], "LocalA")
                self.assertEqual(loaded["BENCH_PROVIDER_B"], "Quoted")
                self.assertEqual(os.environ["BENCH_PROVIDER_A"], "LocalA")
                self.assertEqual(os.environ["BENCH_PROVIDER_B"], "FromEnv")

    def test_missing_files(self):
        with tempfile.TemporaryDirectory() as tmp:
            self.assertEqual(load_env_files(Path(tmp)), {})

    def test_export_prefix_and_bad_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / ".benchenv").write_text(
                'export BENCH_TEST_EXPORTED="yes"\nBAD KEY=1\n=novalue\n',
                encoding="utf-8",
            )
            with mock.patch.dict(os.environ, {}, clear=False):
                loaded = load_env_files(root)
            self.assertEqual(loaded, {"BENCH_TEST_EXPORTED": "yes"})
