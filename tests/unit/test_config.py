"""
MOONPOINTER Unit Tests - Configuration

Run:
    pytest tests/unit/test_config.py -v
"""

import os

import pytest
from pydantic import ValidationError

from moonpointer.config import (
    EphemerisConfig,
    MoonPointerConfig,
    ObserverConfig,
    OrientationConfig,
    get_config_paths,
    load_config,
)
from moonpointer.exceptions import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    """No stray MOONPOINTER_* variables or config files from the host."""
    for key in list(os.environ):
        if key.startswith("MOONPOINTER_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)


# =============================================================================
# Section models
# =============================================================================


class TestDefaults:

    def test_defaults(self):
        config = MoonPointerConfig()
        assert config.ephemeris.backend == "analytic"
        assert config.ephemeris.ephemeris_file == "de440s.bsp"
        assert config.ephemeris.horizon_offset_deg == pytest.approx(0.133)
        assert config.ephemeris.apply_refraction is True
        assert config.observer.timezone is None
        assert config.service_log_levels == {}
        assert config.orientation.slider_min == 0.0
        assert config.orientation.slider_max == 359.0
        assert config.log_level == "INFO"

    def test_unknown_sections_ignored(self):
        config = MoonPointerConfig(telescope={"aperture": 200})
        assert not hasattr(config, "telescope")


class TestValidation:

    def test_latitude_range(self):
        with pytest.raises(ValidationError):
            ObserverConfig(latitude=91.0)

    def test_longitude_range(self):
        with pytest.raises(ValidationError):
            ObserverConfig(longitude=-180.5)

    def test_timezone_format(self):
        with pytest.raises(ValidationError):
            ObserverConfig(timezone="EST")
        assert ObserverConfig(timezone="Europe/Paris").timezone == "Europe/Paris"

    def test_backend_choice(self):
        with pytest.raises(ValidationError):
            EphemerisConfig(backend="vsop87")

    def test_service_log_levels(self):
        config = MoonPointerConfig(service_log_levels={"ephemeris": "DEBUG"})
        assert config.service_log_levels == {"ephemeris": "DEBUG"}
        with pytest.raises(ValidationError):
            MoonPointerConfig(service_log_levels={"ephemeris": "LOUD"})

    def test_horizon_offset_bounds(self):
        with pytest.raises(ValidationError):
            EphemerisConfig(horizon_offset_deg=10.0)

    def test_slider_range_must_be_non_empty(self):
        with pytest.raises(ValidationError):
            OrientationConfig(slider_min=200.0, slider_max=100.0)

    def test_log_level_choice(self):
        with pytest.raises(ValidationError):
            MoonPointerConfig(log_level="VERBOSE")


# =============================================================================
# load_config
# =============================================================================


class TestLoadConfig:

    def test_defaults_without_files(self):
        assert load_config() == MoonPointerConfig()

    def test_explicit_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(
            "observer:\n"
            "  timezone: America/New_York\n"
            "  latitude: 38.9\n"
            "  longitude: -77.0\n"
            "ephemeris:\n"
            "  backend: skyfield\n"
        )
        config = load_config(path)
        assert config.observer.timezone == "America/New_York"
        assert config.observer.latitude == 38.9
        assert config.ephemeris.backend == "skyfield"

    def test_discovers_local_file(self, tmp_path):
        (tmp_path / "moonpointer.yaml").write_text("log_level: DEBUG\n")
        assert load_config().log_level == "DEBUG"

    def test_discovers_home_file(self, tmp_path):
        home_dir = tmp_path / "home" / ".moonpointer"
        home_dir.mkdir(parents=True)
        (home_dir / "config.yaml").write_text("ephemeris:\n  apply_refraction: false\n")
        assert load_config().ephemeris.apply_refraction is False

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == MoonPointerConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("observer: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(path)

    def test_non_mapping_root(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(path)

    def test_invalid_values(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("observer:\n  latitude: 123\n")
        with pytest.raises(ConfigurationError, match="validation"):
            load_config(path)

    def test_config_paths_order(self):
        paths = get_config_paths()
        assert paths[0].name == "moonpointer.yaml"
        assert paths[-1].as_posix() == "/etc/moonpointer/config.yaml"


class TestEnvironmentOverrides:

    def test_section_override(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_EPHEMERIS_BACKEND", "skyfield")
        assert load_config().ephemeris.backend == "skyfield"

    def test_multi_word_setting(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_EPHEMERIS_HORIZON_OFFSET_DEG", "0.5")
        assert load_config().ephemeris.horizon_offset_deg == pytest.approx(0.5)

    def test_boolean_value(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_ORIENTATION_ALLOW_MANUAL_OVERRIDE", "false")
        assert load_config().orientation.allow_manual_override is False

    def test_negative_float(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_OBSERVER_LONGITUDE", "-77.0")
        assert load_config().observer.longitude == pytest.approx(-77.0)

    def test_top_level_log_level(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_LOG_LEVEL", "debug")
        assert load_config().log_level == "DEBUG"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        path = tmp_path / "moonpointer.yaml"
        path.write_text("observer:\n  timezone: Europe/Paris\n")
        monkeypatch.setenv("MOONPOINTER_OBSERVER_TIMEZONE", "Asia/Tokyo")
        assert load_config(path).observer.timezone == "Asia/Tokyo"

    def test_invalid_env_value(self, monkeypatch):
        monkeypatch.setenv("MOONPOINTER_EPHEMERIS_BACKEND", "vsop87")
        with pytest.raises(ConfigurationError):
            load_config()
