"""
Tests for configuration loading and argument handling.
"""

import pytest

from lipguide.config import (
    Config,
    OutputConfig,
    TrackerConfig,
    create_argument_parser,
)


def _parse(*argv):
    return create_argument_parser().parse_args(list(argv))


class TestConfigFromArgs:
    """Test Config.from_args overrides and validation."""

    def test_precompute(self):
        config = Config.from_args(_parse("calib.json", "--precompute"))
        assert config.calibration_file == "calib.json"
        assert config.precompute is True
        assert config.tracker == TrackerConfig()
        assert config.output == OutputConfig()

    def test_tracking_overrides(self):
        config = Config.from_args(_parse(
            "calib.json", "--landmarks", "frames.json", "--vowel", "ㅔ",
            "--base-depth", "0.2", "--no-distance-scale", "--calibrate-from-record",
            "-o", "out.json", "--indent", "0",
        ))
        assert config.landmarks_file == "frames.json"
        assert config.tracker.target_vowel == "ㅔ"
        assert config.tracker.base_depth == 0.2
        assert config.tracker.apply_distance_scale is False
        assert config.tracker.calibrate_from_record is True
        assert config.output.output_file == "out.json"
        assert config.output.indent == 0

    def test_missing_calibration(self):
        with pytest.raises(ValueError, match="calibration file"):
            Config.from_args(_parse("--precompute"))

    def test_missing_mode(self):
        with pytest.raises(ValueError, match="--precompute or --landmarks"):
            Config.from_args(_parse("calib.json"))

    def test_landmarks_require_vowel(self):
        with pytest.raises(ValueError, match="--vowel"):
            Config.from_args(_parse("calib.json", "--landmarks", "frames.json"))


class TestConfigYaml:
    """Test YAML round trip and the generated template."""

    def test_round_trip(self, tmp_path):
        config = Config(
            calibration_file="calib.json",
            landmarks_file="frames.json",
            tracker=TrackerConfig(target_vowel="ㅗ", base_depth=0.15,
                                  apply_distance_scale=False, min_interval_ms=16.0),
            output=OutputConfig(output_file="out.json", indent=4),
        )
        path = tmp_path / "config.yaml"
        config.to_yaml(str(path))

        loaded = Config.from_yaml(str(path))
        assert loaded == config

    def test_calibration_override(self, tmp_path):
        path = tmp_path / "config.yaml"
        Config(calibration_file="calib.json", precompute=True).to_yaml(str(path))
        loaded = Config.from_yaml(str(path), calibration_file_override="other.json")
        assert loaded.calibration_file == "other.json"

    def test_missing_calibration_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("precompute: true\n", encoding="utf-8")
        with pytest.raises(ValueError):
            Config.from_yaml(str(path))

    def test_template_is_valid_yaml(self, tmp_path):
        path = tmp_path / "template.yaml"
        path.write_text(Config.generate_default_config_template(), encoding="utf-8")
        loaded = Config.from_yaml(str(path))
        assert loaded.calibration_file == "path/to/calibration.json"
        assert loaded.tracker == TrackerConfig()
        assert loaded.output == OutputConfig()

    def test_args_override_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        Config(
            calibration_file="calib.json",
            landmarks_file="frames.json",
            tracker=TrackerConfig(target_vowel="ㅏ"),
        ).to_yaml(str(path))

        config = Config.from_args(_parse("--config", str(path), "--vowel", "ㅣ"))
        assert config.landmarks_file == "frames.json"
        assert config.tracker.target_vowel == "ㅣ"
