import os
import unittest
from unittest.mock import patch

from pydantic import ValidationError

from resizer.config import ResizerConfig, get_config


class TestResizerConfig(unittest.TestCase):

    def test_defaults(self):
        config = ResizerConfig(_env_file=None)  # type: ignore[call-arg]
        self.assertEqual(config.search_iterations, 7)
        self.assertEqual(config.fallback_quality, 0.1)
        self.assertFalse(config.webp_target_search)
        self.assertEqual(config.searchable_formats(), ("JPEG",))
        self.assertEqual(config.max_percentage, 200)

    def test_environment_overrides(self):
        env = {
            "RESIZER_WEBP_TARGET_SEARCH": "true",
            "RESIZER_SEARCH_ITERATIONS": "5",
            "RESIZER_LOG_LEVEL": " debug ",
        }
        with patch.dict(os.environ, env):
            config = ResizerConfig(_env_file=None)  # type: ignore[call-arg]
        self.assertTrue(config.webp_target_search)
        self.assertEqual(config.searchable_formats(), ("JPEG", "WebP"))
        self.assertEqual(config.search_iterations, 5)
        self.assertEqual(config.log_level, "DEBUG")

    def test_invalid_values_rejected(self):
        with self.assertRaises(ValidationError):
            ResizerConfig(_env_file=None, fallback_quality=2.0)  # type: ignore[call-arg]
        with self.assertRaises(ValidationError):
            ResizerConfig(_env_file=None, default_format="GIF")  # type: ignore[call-arg]

    def test_get_config_is_cached(self):
        get_config.cache_clear()
        self.assertIs(get_config(), get_config())
        get_config.cache_clear()


if __name__ == "__main__":
    unittest.main()
