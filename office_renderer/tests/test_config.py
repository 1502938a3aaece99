"""Tests for environment-driven settings."""
import unittest

from office_renderer.config import DEFAULT_MAX_GROUP_DEPTH, DEFAULT_MAX_PART_BYTES, ConverterSettings


class ConverterSettingsTest(unittest.TestCase):
    def test_defaults_without_environment(self) -> None:
        settings = ConverterSettings.from_env({})

        self.assertEqual(settings, ConverterSettings())
        self.assertEqual(settings.max_part_bytes, DEFAULT_MAX_PART_BYTES)

    def test_overrides_from_environment(self) -> None:
        settings = ConverterSettings.from_env(
            {"OFFICE_RENDERER_MAX_PART_BYTES": "2048", "OFFICE_RENDERER_MAX_REPEAT": " 10 ", "OFFICE_RENDERER_MAX_NESTING_DEPTH": "16"}
        )

        self.assertEqual(settings.max_part_bytes, 2048)
        self.assertEqual(settings.max_repeat, 10)
        self.assertEqual(settings.max_nesting_depth, 16)

    def test_invalid_values_fall_back_to_defaults(self) -> None:
        with self.assertLogs("office_renderer.config", level="WARNING"):
            settings = ConverterSettings.from_env(
                {"OFFICE_RENDERER_MAX_GROUP_DEPTH": "deep", "OFFICE_RENDERER_MAX_REPEAT": "-1"}
            )

        self.assertEqual(settings.max_group_depth, DEFAULT_MAX_GROUP_DEPTH)
        self.assertEqual(settings.max_repeat, ConverterSettings().max_repeat)


if __name__ == "__main__":
    unittest.main()
