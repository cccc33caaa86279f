"""
MOONPOINTER Unit Tests - Command Line

Run:
    pytest tests/unit/test_cli.py -v
"""

import logging
import os
import re

import pytest

from moonpointer.cli import build_parser, main

J2000_ISO = "2000-01-01T12:00:00+00:00"
# SunCalc test.js reference: the Moon sits at compass bearing ~123.94 deg
REFERENCE_ISO = "2013-03-05T00:00:00+00:00"


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path, monkeypatch):
    for key in list(os.environ):
        if key.startswith("MOONPOINTER_"):
            monkeypatch.delenv(key)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    yield
    root_logger = logging.getLogger("moonpointer")
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    logging.getLogger("moonpointer.services.ephemeris").setLevel(logging.NOTSET)


def _rotation(output: str) -> float:
    match = re.search(r"Rotation:\s+([+-]\d+\.\d)", output)
    assert match, output
    return float(match.group(1))


class TestParser:

    def test_parses_arguments(self):
        args = build_parser().parse_args(
            ["--lat", "38.9", "--lon", "-77", "--heading", "90", "--at", J2000_ISO]
        )
        assert args.lat == 38.9
        assert args.lon == -77.0
        assert args.heading == 90.0
        assert args.at.year == 2000

    def test_rejects_unknown_backend(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["--backend", "vsop87"])


class TestMain:

    def test_reference_rotation(self, capsys):
        """Lat 50.5, lon 30.5 facing east: turn ~33.9 degrees clockwise."""
        code = main([
            "--lat", "50.5", "--lon", "30.5", "--heading", "90",
            "--at", REFERENCE_ISO, "--log-level", "ERROR",
        ])
        out = capsys.readouterr().out
        assert code == 0
        assert _rotation(out) == pytest.approx(33.9, abs=0.1)
        assert "Moon bearing:  123.9 deg" in out
        assert "visible" in out.lower()

    def test_without_heading_rotation_undefined(self, capsys):
        code = main(["--lat", "38.9", "--lon", "-77.0", "--at", J2000_ISO, "--log-level", "ERROR"])
        out = capsys.readouterr().out
        assert code == 0
        assert "undefined" in out
        assert "Moon bearing:" in out

    def test_location_from_config(self, tmp_path, capsys):
        (tmp_path / "moonpointer.yaml").write_text(
            "observer:\n  latitude: 50.5\n  longitude: 30.5\nlog_level: ERROR\n"
        )
        code = main(["--heading", "90", "--at", REFERENCE_ISO])
        assert code == 0
        assert _rotation(capsys.readouterr().out) == pytest.approx(33.9, abs=0.1)

    def test_missing_location(self, capsys):
        code = main(["--heading", "90", "--log-level", "ERROR"])
        assert code == 2
        assert "--lat and --lon are required" in capsys.readouterr().out

    def test_missing_config_file(self, tmp_path, capsys):
        code = main(["--config", str(tmp_path / "absent.yaml"), "--lat", "0", "--lon", "0"])
        assert code == 2
        assert "Configuration error" in capsys.readouterr().out

    def test_invalid_latitude(self, capsys):
        code = main(["--lat", "95", "--lon", "0", "--at", J2000_ISO, "--log-level", "CRITICAL"])
        assert code == 1
        assert "Error:" in capsys.readouterr().out

    def test_invalid_heading(self, capsys):
        code = main([
            "--lat", "0", "--lon", "0", "--heading", "nan",
            "--at", J2000_ISO, "--log-level", "CRITICAL",
        ])
        assert code == 1

    def test_service_log_levels_from_config(self, tmp_path, capsys):
        (tmp_path / "moonpointer.yaml").write_text(
            "log_level: WARNING\nservice_log_levels:\n  ephemeris: DEBUG\n"
        )
        code = main(["--lat", "50.5", "--lon", "30.5", "--at", REFERENCE_ISO])
        assert code == 0
        assert logging.getLogger("moonpointer.services.ephemeris").level == logging.DEBUG
        assert logging.getLogger("moonpointer").level == logging.WARNING

