"""
Tests for settings defaults, environment overrides and validation.
"""
import pytest
from pydantic import ValidationError

from gaze_pose.configs import AppSettings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    # Keep a developer's .env out of the defaults under test.
    monkeypatch.chdir(tmp_path)


def test_defaults():
    settings = AppSettings()
    assert settings.source == "dummy"
    assert settings.validator.queue_length == 30
    assert settings.validator.min_eyes_distance == 0.1
    assert settings.validator.max_eyes_distance == 0.3
    assert settings.filter.measurement_accuracy == 1.0
    assert settings.filter.time_dilution == 1.0
    assert settings.filter.merge_threshold == 10.0
    assert settings.filter.filtered is True
    assert settings.projection.base_distance == -10.0
    assert settings.runner.render_rate_hz == 30
    assert settings.logging.level == "INFO"


def test_nested_environment_overrides(monkeypatch):
    monkeypatch.setenv("GAZE_POSE__SOURCE", "tobii")
    monkeypatch.setenv("GAZE_POSE__FILTER__MEASUREMENT_ACCURACY", "2.5")
    monkeypatch.setenv("GAZE_POSE__VALIDATOR__QUEUE_LENGTH", "12")
    monkeypatch.setenv("GAZE_POSE__DUMMY__SEED", "42")

    settings = AppSettings()
    assert settings.source == "tobii"
    assert settings.filter.measurement_accuracy == 2.5
    assert settings.validator.queue_length == 12
    assert settings.dummy.seed == 42


def test_env_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("GAZE_POSE__RUNNER__RENDER_RATE_HZ=90\n")
    assert AppSettings().runner.render_rate_hz == 90


def test_rejects_unknown_source(monkeypatch):
    monkeypatch.setenv("GAZE_POSE__SOURCE", "webcam")
    with pytest.raises(ValidationError):
        AppSettings()


@pytest.mark.parametrize(
    "name, value",
    [
        ("GAZE_POSE__VALIDATOR__QUEUE_LENGTH", "0"),
        ("GAZE_POSE__VALIDATOR__MIN_EYES_DISTANCE", "0.5"),
        ("GAZE_POSE__FILTER__MEASUREMENT_ACCURACY", "0"),
        ("GAZE_POSE__FILTER__SMOOTHING_STEP", "1.0"),
        ("GAZE_POSE__DUMMY__LOST_PROBABILITY", "1.5"),
    ],
)
def test_invalid_values(monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValidationError):
        AppSettings()
