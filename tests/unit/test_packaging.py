"""
MOONPOINTER Unit Tests - Packaging

Checks that an installed distribution carries every import package,
including the ``services`` namespace package (it has no ``__init__.py``).

Run:
    pytest tests/unit/test_packaging.py -v
"""

from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[2]

SERVICE_PACKAGES = {
    "services.ephemeris",
    "services.location",
    "services.orientation",
}


@pytest.fixture
def find_config():
    tomllib = pytest.importorskip("tomllib")
    with open(PROJECT_ROOT / "pyproject.toml", "rb") as f:
        return tomllib.load(f)["tool"]["setuptools"]["packages"]["find"]


class TestPackageDiscovery:

    def test_namespace_discovery_enabled(self, find_config):
        assert find_config.get("namespaces") is True

    def test_discovers_service_packages(self, find_config):
        setuptools = pytest.importorskip("setuptools")
        packages = set(setuptools.find_namespace_packages(
            where=str(PROJECT_ROOT / find_config["where"][0]),
            include=find_config["include"],
        ))
        assert "moonpointer" in packages
        assert "services" in packages
        assert SERVICE_PACKAGES <= packages

    def test_tests_not_packaged(self, find_config):
        setuptools = pytest.importorskip("setuptools")
        packages = setuptools.find_namespace_packages(
            where=str(PROJECT_ROOT / find_config["where"][0]),
            include=find_config["include"],
        )
        assert not any(name.startswith("tests") for name in packages)
