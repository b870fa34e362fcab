import os
import sys
import tempfile
import unittest
from unittest.mock import patch

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from vpsctl.config import (
    VPSConfig, parse_env_text, load_env_file, load_config, validate_config,
    load_and_validate_config, load_provision_config, with_overrides, find_env_file,
)
from vpsctl.errors import ConfigError

ENV_TEXT = """# deployment target
VPS_HOST=203.0.113.10
VPS_USER="deploy"

VPS_TIMEZONE='Europe/Berlin'
VPS_HOSTNAME=
  VPS_SSH_PUBKEY = ~/.ssh/id_ed25519.pub
not a pair
"""

class TestEnvParsing(unittest.TestCase):
    def test_parse_env_text(self):
        env = parse_env_text(ENV_TEXT)
        self.assertEqual(env, {
            "VPS_HOST": "203.0.113.10",
            "VPS_USER": "deploy",
            "VPS_TIMEZONE": "Europe/Berlin",
            "VPS_SSH_PUBKEY": "~/.ssh/id_ed25519.pub",
        })

    def test_mismatched_quotes_are_kept(self):
        self.assertEqual(parse_env_text("A=\"abc'")["A"], "\"abc'")

    def test_missing_file_is_empty(self):
        self.assertEqual(load_env_file("/nonexistent/.env"), {})
        self.assertEqual(load_env_file(None), {})

class TestLoadConfig(unittest.TestCase):
    def setUp(self):
        fd, self.env_path = tempfile.mkstemp(suffix=".env")
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(ENV_TEXT)
        self.addCleanup(os.remove, self.env_path)

    def test_file_values(self):
        config = load_config(env_file=self.env_path, environ={})
        self.assertEqual(config.vps_host, "203.0.113.10")
        self.assertEqual(config.vps_user, "deploy")
        self.assertIsNone(config.vps_hostname)

    def test_environment_wins_over_file(self):
        config = load_config(env_file=self.env_path, environ={"VPS_HOST": "198.51.100.7"})
        self.assertEqual(config.vps_host, "198.51.100.7")
        self.assertEqual(config.vps_user, "deploy")

    def test_explicit_env_file_variable(self):
        with patch.dict(os.environ, {"VPS_ENV_FILE": self.env_path}):
            self.assertEqual(find_env_file(), self.env_path)

    def test_validation_names_missing_variables(self):
        self.assertEqual(validate_config(VPSConfig(vps_host="h", vps_user="  ")), ["VPS_USER"])
        with self.assertRaises(ConfigError) as ctx:
            load_and_validate_config(env_file="", environ={})
        self.assertIn("VPS_HOST, VPS_USER", str(ctx.exception))

    def test_provision_config_requires_hostname(self):
        with self.assertRaises(ConfigError) as ctx:
            load_provision_config(env_file=self.env_path, environ={})
        self.assertIn("VPS_HOSTNAME", str(ctx.exception))

        config = load_provision_config(env_file=self.env_path, environ={"VPS_HOSTNAME": "web1"})
        self.assertEqual(config.username, "deploy")
        self.assertEqual(config.hostname, "web1")
        self.assertEqual(config.timezone, "Europe/Berlin")

    def test_overrides(self):
        base = VPSConfig(vps_host="h", vps_user="u")
        self.assertEqual(with_overrides(base, host="other"), VPSConfig(vps_host="other", vps_user="u"))
        self.assertEqual(with_overrides(base), base)

if __name__ == '__main__':
    unittest.main()
