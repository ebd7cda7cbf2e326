import json
import tempfile
import unittest
from pathlib import Path

from pydantic import ValidationError

from payload_router.config import FilterConfig, SnifferSettings, load_settings
from payload_router.errors import ConfigError


class SnifferSettingsTests(unittest.TestCase):
    def test_defaults(self):
        s = SnifferSettings()
        self.assertIsNone(s.device_keyword)
        self.assertIsNone(s.ports)
        self.assertTrue(s.filter_source_port)
        self.assertTrue(s.filter_destination_port)
        self.assertEqual(s.rabbit_queue, "sniffer")
        cfg = s.filter_config()
        self.assertIsNone(cfg.ports)
        self.assertIsNone(cfg.http_path_filters)

    def test_keys_are_case_insensitive(self):
        s = SnifferSettings.model_validate({
            "DeviceKeyword": "Intel",
            "ports": [80, 443],
            "FILTERSOURCEPORT": False,
            "http_path_filters": ["/api"],
            "Unknown": 1,
        })
        self.assertEqual(s.device_keyword, "Intel")
        self.assertFalse(s.filter_source_port)
        cfg = s.filter_config()
        self.assertEqual(cfg.ports, frozenset({80, 443}))
        self.assertFalse(cfg.filter_by_source)
        self.assertEqual(cfg.http_path_filters, ("/api",))

    def test_empty_ports_disable_filtering(self):
        self.assertIsNone(SnifferSettings(ports=[]).filter_config().ports)

    def test_port_range(self):
        with self.assertRaises(ValidationError):
            SnifferSettings(ports=[0])
        with self.assertRaises(ValidationError):
            FilterConfig(ports=frozenset({70000}))

    def test_frozen(self):
        with self.assertRaises(ValidationError):
            FilterConfig().filter_by_source = False


class LoadSettingsTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = Path(self.tmp.name)

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_settings(self.dir / "nope.json"), SnifferSettings())

    def test_reads_file(self):
        path = self.dir / "config.json"
        path.write_text(json.dumps({
            "DeviceKeyword": "Realtek",
            "Ports": [8080],
            "FilterDestinationPort": False,
            "PublishEnabled": False,
        }), encoding="utf-8")
        s = load_settings(path)
        self.assertEqual(s.device_keyword, "Realtek")
        self.assertEqual(s.ports, [8080])
        self.assertFalse(s.filter_destination_port)
        self.assertFalse(s.publish_enabled)

    def test_invalid_json(self):
        path = self.dir / "config.json"
        path.write_text("{not json", encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_settings(path)

    def test_invalid_values(self):
        path = self.dir / "config.json"
        path.write_text('{"Ports": ["http"]}', encoding="utf-8")
        with self.assertRaises(ConfigError):
            load_settings(path)

    def test_shipped_example_config_is_valid(self):
        example = Path(__file__).resolve().parent.parent / "config.json"
        s = load_settings(example)
        self.assertIsNone(s.filter_config().ports)
        self.assertEqual(s.rabbit_queue, "sniffer")


if __name__ == "__main__":
    unittest.main()
