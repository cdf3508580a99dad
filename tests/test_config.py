"""
Smoke tests for configuration loading, validation and typed views.
"""

import argparse

import pytest

from main import apply_overrides, build_parser, load_config, validate_config
from models.config import Config, DetectionConfig


class TestValidateConfig:
    """Tests for validate_config function."""

    def test_valid_config_passes(self, valid_config):
        """A complete valid config passes validation."""
        is_valid, error = validate_config(valid_config)

        assert is_valid is True
        assert error is None

    @pytest.mark.parametrize("section", ["server", "client", "capture", "detection", "log_path", "log_level"])
    def test_missing_required_section(self, valid_config, section):
        """Each required top-level section is enforced."""
        del valid_config[section]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert section in error.lower()

    def test_invalid_port(self, valid_config):
        valid_config["server"]["port"] = 70000

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "port" in error.lower()

    def test_invalid_api_base(self, valid_config):
        valid_config["client"]["api_base"] = "localhost:4000"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "api_base" in error.lower()

    def test_non_positive_flush_interval(self, valid_config):
        valid_config["client"]["flush_interval_s"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "flush_interval_s" in error

    def test_invalid_device_id_type(self, valid_config):
        """device_id with invalid type fails."""
        valid_config["capture"]["device_id"] = [1, 2, 3]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error.lower()

    def test_negative_device_id(self, valid_config):
        """Negative integer device_id fails."""
        valid_config["capture"]["device_id"] = -1

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "device_id" in error.lower()

    def test_video_file_device_id_valid(self, valid_config):
        """String device_id (recorded video) is valid."""
        valid_config["capture"]["device_id"] = "recordings/sitting.mp4"

        is_valid, error = validate_config(valid_config)

        assert is_valid is True

    def test_invalid_resolution_length(self, valid_config):
        """Resolution with wrong length fails."""
        valid_config["capture"]["resolution"] = [640]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "resolution" in error.lower()

    def test_invalid_fps(self, valid_config):
        """Non-positive fps fails."""
        valid_config["capture"]["fps"] = 0

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "fps" in error.lower()

    def test_threshold_out_of_range(self, valid_config):
        valid_config["detection"]["object_confidence"] = 1.5

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "object_confidence" in error

    def test_object_classes_must_be_strings(self, valid_config):
        valid_config["detection"]["object_classes"] = ["book", 3]

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "object_classes" in error

    def test_invalid_log_level(self, valid_config):
        """Invalid log level fails."""
        valid_config["log_level"] = "VERBOSE"

        is_valid, error = validate_config(valid_config)

        assert is_valid is False
        assert "log_level" in error.lower()


class TestLoadConfig:
    """Tests for load_config function."""

    def test_loads_default_yaml(self, temp_config_dir):
        """Config loads from default.yaml when only it exists."""
        config = load_config(str(temp_config_dir / "config.yaml"))

        assert config["server"]["port"] == 4000
        assert config["capture"]["resolution"] == [640, 480]

    def test_local_overrides_merge(self, temp_config_dir):
        """Local config.yaml overrides default.yaml, keeping untouched keys."""
        config_yaml = temp_config_dir / "config.yaml"
        config_yaml.write_text("""
server:
  port: 5000
detection:
  objects_enabled: true
""")

        config = load_config(str(config_yaml))

        assert config["server"]["port"] == 5000
        assert config["server"]["host"] == "0.0.0.0"
        assert config["detection"]["objects_enabled"] is True
        assert config["detection"]["performance_mode"] is True

    def test_explicit_config_applied_last(self, temp_config_dir):
        (temp_config_dir / "config.yaml").write_text("client:\n  candidate_name: Local\n")
        explicit = temp_config_dir / "exam.yaml"
        explicit.write_text("client:\n  candidate_name: Exam\n")

        config = load_config(str(explicit))

        assert config["client"]["candidate_name"] == "Exam"
        assert config["client"]["api_base"] == "http://localhost:4000"


class TestTypedConfig:
    def test_defaults_round_trip(self):
        cfg = Config()

        assert Config.from_dict(cfg.to_dict()) == cfg

    def test_performance_mode_selects_cadence_and_interval(self):
        assert DetectionConfig(performance_mode=True).face_cadence == 4
        assert DetectionConfig(performance_mode=False).face_cadence == 2
        assert DetectionConfig(performance_mode=True).object_interval == 3.5
        assert DetectionConfig(performance_mode=False).object_interval == 1.2

    def test_missing_sections_use_defaults(self):
        cfg = Config.from_dict({"detection": None})

        assert cfg.detection.absence_seconds == 10.0
        assert cfg.server.port == 4000


class TestCommandLine:
    def test_monitor_overrides(self):
        args = build_parser().parse_args(["monitor", "--no-performance", "--objects", "--candidate", "Ada"])

        cfg = apply_overrides(Config(), args)

        assert cfg.detection.performance_mode is False
        assert cfg.detection.objects_enabled is True
        assert cfg.client.candidate_name == "Ada"

    def test_monitor_keeps_config_performance_mode(self):
        args = build_parser().parse_args(["monitor"])

        cfg = apply_overrides(Config(), args)

        assert cfg.detection.performance_mode is True
        assert cfg.detection.objects_enabled is False

    def test_port_env_overrides_config(self, monkeypatch):
        monkeypatch.setenv("PORT", "8123")
        args = build_parser().parse_args(["serve"])

        cfg = apply_overrides(Config(), args)

        assert cfg.server.port == 8123

    def test_port_flag_beats_env(self, monkeypatch):
        monkeypatch.setenv("PORT", "8123")
        args = argparse.Namespace(command="serve", host=None, port=9000)

        assert apply_overrides(Config(), args).server.port == 9000
