"""Tests for loading the booth configuration file."""

import json
from pathlib import Path

import pytest

from conftest import booth_config_data
from photobooth.errors import ConfigError
from photobooth.models.booth import BoothConfig, load_booth_config


def write_config(tmp_path, data) -> str:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data) if isinstance(data, dict) else data, encoding="utf-8")
    return str(path)


def test_load_valid_config(tmp_path) -> None:
    config = load_booth_config(write_config(tmp_path, booth_config_data()))
    assert config.name == "Test Booth"
    assert config.email_max_recipients == 2
    assert config.email_blacklisted_domains == ["blocked.org"]
    assert len(config.template.frames) == 3
    assert config.template.size == (300, 600)
    assert config.template.frames[0].aspect_ratio == pytest.approx(260 / 170)


def test_mirror_flags_default(tmp_path) -> None:
    data = booth_config_data()
    del data["mirrorPreview"]
    del data["mirrorOutput"]
    config = load_booth_config(write_config(tmp_path, data))
    assert config.mirror_preview is True
    assert config.mirror_output is False


def test_template_without_frames_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_booth_config(write_config(tmp_path, booth_config_data(frame_count=0)))


def test_non_positive_frame_size_is_rejected() -> None:
    data = booth_config_data()
    data["template"]["frames"][0]["width"] = 0
    with pytest.raises(ValueError):
        BoothConfig.model_validate(data)


def test_zero_recipients_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_booth_config(write_config(tmp_path, booth_config_data(emailMaxRecipients=0)))


def test_malformed_json_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_booth_config(write_config(tmp_path, "{not json"))


def test_missing_file_is_rejected(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_booth_config(str(tmp_path / "absent.json"))


def test_config_is_immutable(booth_config: BoothConfig) -> None:
    with pytest.raises(ValueError):
        booth_config.name = "Other"


def test_bundled_config_loads() -> None:
    config = load_booth_config(str(Path(__file__).parent.parent / "assets" / "config.json"))
    assert config.template.frames
