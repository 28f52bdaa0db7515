"""Tests for YAML config loading."""

import pytest
from pydantic import ValidationError

from picset.config.loader import load_imageset_yaml, load_yaml
from picset.config.schema import ImageSetConfig


@pytest.fixture
def imageset_yaml(tmp_path):
    content = """
imageset:
  breakpoints:
    - max_width: 600
      image_width: 300
    - max_width: 1024
      image_width: 700
    - max_width: null
      image_width: 1200
  pixel_densities: [1, 1.5, 2]
  size_threshold: 0.85
"""
    path = tmp_path / "hero.yaml"
    path.write_text(content)
    return path


class TestLoadImagesetYaml:
    def test_loads_valid_imageset(self, imageset_yaml):
        config = load_imageset_yaml(imageset_yaml)
        assert isinstance(config, ImageSetConfig)
        assert len(config.breakpoints) == 3
        assert config.pixel_densities == [1.0, 1.5, 2.0]
        assert config.size_threshold == 0.85

    def test_source_breakpoints(self, imageset_yaml):
        config = load_imageset_yaml(imageset_yaml)
        assert [b.max_width for b in config.source_breakpoints] == [600, 1024]

    def test_defaults_applied(self, tmp_path):
        path = tmp_path / "min.yaml"
        path.write_text("imageset:\n  breakpoints:\n    - image_width: 800\n")
        config = load_imageset_yaml(path)
        assert config.pixel_densities == [1.0, 2.0]
        assert config.size_threshold == 0.8
        assert config.sequential is False

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_imageset_yaml(tmp_path / "nonexistent.yaml")

    def test_missing_top_level_key(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("foo: bar\n")
        with pytest.raises(ValueError, match="missing top-level 'imageset' key"):
            load_imageset_yaml(path)

    def test_requires_exactly_one_fallback(self, tmp_path):
        path = tmp_path / "nofallback.yaml"
        path.write_text("imageset:\n  breakpoints:\n    - max_width: 600\n      image_width: 300\n")
        with pytest.raises(ValidationError, match="fallback"):
            load_imageset_yaml(path)

    def test_rejects_threshold_out_of_range(self, tmp_path):
        path = tmp_path / "threshold.yaml"
        path.write_text(
            "imageset:\n  breakpoints:\n    - image_width: 300\n  size_threshold: 1.5\n"
        )
        with pytest.raises(ValidationError):
            load_imageset_yaml(path)

    def test_rejects_non_positive_density(self, tmp_path):
        path = tmp_path / "density.yaml"
        path.write_text(
            "imageset:\n  breakpoints:\n    - image_width: 300\n  pixel_densities: [1, 0]\n"
        )
        with pytest.raises(ValidationError):
            load_imageset_yaml(path)


class TestLoadYaml:
    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "x.yaml"
        path.write_text("a: 1\n")
        assert load_yaml(path) == {"a": 1}

    def test_rejects_non_mapping(self, tmp_path):
        path = tmp_path / "x.yaml"
        path.write_text("- 1\n")
        with pytest.raises(ValueError, match="Expected YAML mapping"):
            load_yaml(path)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_yaml(tmp_path / "missing.yaml")
