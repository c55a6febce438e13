import tempfile
import unittest
from pathlib import Path

import yaml

from rcon_console.config import (
    PLACEHOLDER_PASSWORD,
    RconConsoleConfig,
    load_config,
    write_default_config,
)


class TestRconConsoleConfig(unittest.TestCase):
    def test_defaults(self):
        cfg = RconConsoleConfig()
        self.assertTrue(cfg.enabled)
        self.assertEqual(cfg.rcon_host, "127.0.0.1")
        self.assertEqual(cfg.rcon_port, 25575)
        self.assertEqual(cfg.timeout, 5.0)
        self.assertEqual(cfg.connect_timeout, 10.0)
        self.assertFalse(cfg.always_authenticate)
        self.assertFalse(cfg.is_rcon_ready)

    def test_from_dict_ignores_unknown_keys(self):
        cfg = RconConsoleConfig.from_dict({"rcon_password": "pw", "unknown": 1})
        self.assertEqual(cfg.rcon_password, "pw")
        self.assertFalse(hasattr(cfg, "unknown"))

    def test_from_dict_nested_rcon_section(self):
        cfg = RconConsoleConfig.from_dict(
            {
                "admins": [111, "222", ""],
                "rcon": {
                    "host": "mc.example.org",
                    "port": "25576",
                    "password": "secret",
                    "timeout": 3,
                    "always_authenticate": True,
                },
                "max_output": 200,
            }
        )
        self.assertEqual(cfg.admins, ["111", "222"])
        self.assertEqual(cfg.rcon_host, "mc.example.org")
        self.assertEqual(cfg.rcon_port, 25576)
        self.assertEqual(cfg.timeout, 3.0)
        self.assertTrue(cfg.always_authenticate)
        self.assertEqual(cfg.max_output, 200)
        self.assertTrue(cfg.is_rcon_ready)

    def test_admins_from_multiline_string(self):
        cfg = RconConsoleConfig(admins="111\n# comment\n\n 222 ")
        self.assertEqual(cfg.admins, ["111", "222"])
        self.assertTrue(cfg.is_admin(111))
        self.assertFalse(cfg.is_admin(333))
        self.assertFalse(cfg.is_admin(None))

    def test_admins_comma_separated_and_deduplicated(self):
        cfg = RconConsoleConfig(admins="111, 222\n111,333")
        self.assertEqual(cfg.admins, ["111", "222", "333"])

    def test_single_numeric_admin(self):
        self.assertEqual(RconConsoleConfig(admins=42).admins, ["42"])
        self.assertEqual(RconConsoleConfig(admins=None).admins, [])

    def test_placeholder_password_is_not_ready(self):
        cfg = RconConsoleConfig(rcon_password=PLACEHOLDER_PASSWORD)
        self.assertFalse(cfg.is_rcon_ready)
        cfg = RconConsoleConfig(rcon_password="   ")
        self.assertFalse(cfg.is_rcon_ready)


class TestConfigFile(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.path = Path(self._tmp.name) / "config.yml"

    def tearDown(self):
        self._tmp.cleanup()

    def test_default_file_round_trips(self):
        write_default_config(self.path)
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8"))
        self.assertEqual(raw["rcon"]["password"], PLACEHOLDER_PASSWORD)
        self.assertEqual(list(raw), ["enabled", "admins", "rcon", "max_output"])

        cfg = load_config(self.path)
        self.assertEqual(cfg.admins, ["111", "222", "333"])
        self.assertFalse(cfg.is_rcon_ready)

    def test_load_user_file(self):
        self.path.write_text(
            "admins: [42]\nrcon:\n  host: 10.0.0.5\n  port: 27015\n  password: hunter2\n",
            encoding="utf-8",
        )
        cfg = load_config(self.path)
        self.assertEqual(cfg.rcon_port, 27015)
        self.assertTrue(cfg.is_rcon_ready)
        self.assertTrue(cfg.is_admin("42"))

    def test_empty_file(self):
        self.path.write_text("", encoding="utf-8")
        cfg = load_config(self.path)
        self.assertEqual(cfg.admins, [])

    def test_non_mapping_rejected(self):
        self.path.write_text("- a\n- b\n", encoding="utf-8")
        with self.assertRaises(ValueError):
            load_config(self.path)
