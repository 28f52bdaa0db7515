"""Tests for package defaults."""

from picset.config.defaults import (
    DEFAULT_CACHE_DISABLED,
    DEFAULT_LOG_LEVEL,
    DEFAULT_PIXEL_DENSITIES,
    DEFAULT_SIZE_THRESHOLD,
    get_defaults,
)


class TestDefaults:
    def test_default_threshold(self):
        assert DEFAULT_SIZE_THRESHOLD == 0.8

    def test_default_densities(self):
        assert DEFAULT_PIXEL_DENSITIES == [1.0, 2.0]

    def test_default_cache_not_disabled(self):
        assert DEFAULT_CACHE_DISABLED is False

    def test_default_log_level(self):
        assert DEFAULT_LOG_LEVEL == "WARNING"

    def test_get_defaults_returns_fresh_lists(self):
        d = get_defaults()
        d["pixel_densities"].append(3.0)
        assert get_defaults()["pixel_densities"] == [1.0, 2.0]

    def test_get_defaults_has_all_keys(self):
        d = get_defaults()
        expected_keys = {
            "size_threshold", "pixel_densities", "quality", "sequential", "max_workers",
            "output_directory", "public_path_prefix", "cache_file", "cache_disabled",
            "log_level",
        }
        assert expected_keys == set(d.keys())
