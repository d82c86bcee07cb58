import json
import os
import tempfile
import unittest
from io import StringIO
from unittest.mock import patch

from ada_cli.config import CONFIG_ENV_VAR, DEFAULT_CONFIG, load_config, resolve_config_path
from ada_cli.errors import ConfigError


class TestLoadConfig(unittest.TestCase):
    """Tests for reading the JSON config file."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = os.path.join(self._tmp.name, "ada", "config.json")

    def write(self, content: str):
        os.makedirs(os.path.dirname(self.path), exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(content)

    @patch("sys.stderr", new_callable=StringIO)
    def test_missing_file_is_created_with_defaults(self, mock_stderr):
        config = load_config(self.path)

        self.assertEqual(config, DEFAULT_CONFIG)
        with open(self.path, "r", encoding="utf-8") as f:
            self.assertEqual(json.load(f), DEFAULT_CONFIG)
        self.assertIn(f"Created default config at: {self.path}", mock_stderr.getvalue())

    def test_file_values_override_defaults(self):
        self.write(json.dumps({"model": "gpt-4o", "show_intent": False}))

        config = load_config(self.path)

        self.assertEqual(config["model"], "gpt-4o")
        self.assertFalse(config["show_intent"])
        self.assertEqual(config["provider"], DEFAULT_CONFIG["provider"])

    def test_defaults_are_not_shared(self):
        self.write("{}")
        load_config(self.path)["provider_configs"]["openai"] = {"api_key": "x"}
        self.assertEqual(DEFAULT_CONFIG["provider_configs"], {})

    def test_invalid_json(self):
        self.write("{not json")
        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_non_object_json(self):
        self.write("[1, 2]")
        with self.assertRaisesRegex(ConfigError, "JSON object"):
            load_config(self.path)


class TestResolveConfigPath(unittest.TestCase):
    def test_explicit_path_wins(self):
        with patch.dict(os.environ, {CONFIG_ENV_VAR: "/env/config.json"}):
            self.assertEqual(resolve_config_path("/cli/config.json"), "/cli/config.json")

    def test_environment_variable(self):
        with patch.dict(os.environ, {CONFIG_ENV_VAR: "/env/config.json"}):
            self.assertEqual(resolve_config_path(), "/env/config.json")

    def test_default_location(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertTrue(resolve_config_path().endswith(os.path.join(".ada", "config.json")))


if __name__ == "__main__":
    unittest.main()
