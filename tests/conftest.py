"""
Shared fixtures for license-finder tests.
"""

import pytest

from src.license_finder.config import reset_config
from src.license_finder.error_handling import setup_error_handling
from src.license_finder.resolver import ResolvedPackage


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run every test with default configuration and no config files in reach."""
    for key in (
        "LICENSE_FINDER_MANAGED_SOURCE",
        "LICENSE_FINDER_UNKNOWN_LICENSE",
        "LICENSE_FINDER_RESET_APPROVAL",
        "LICENSE_FINDER_HTML_TITLE",
        "LICENSE_FINDER_LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)

    reset_config()
    setup_error_handling()
    yield
    reset_config()


@pytest.fixture
def temp_dir(tmp_path):
    """Scratch directory for files written by a test."""
    work = tmp_path / "work"
    work.mkdir()
    return work


@pytest.fixture
def resolved_packages():
    """A small resolution: rails needs activesupport, activesupport needs i18n."""
    return [
        ResolvedPackage(
            name="rails",
            version="3.2.8",
            dependencies=["activesupport", "bundler"],
            groups=["default"],
            homepage="http://rubyonrails.org",
            license="MIT",
        ),
        ResolvedPackage(
            name="activesupport",
            version="3.2.8",
            dependencies=["i18n"],
            groups=["default"],
            license="MIT",
        ),
        ResolvedPackage(name="i18n", version="0.6.1", groups=["default"], license="MIT"),
        ResolvedPackage(
            name="rspec",
            version="2.11.0",
            groups=["test"],
            license="MIT",
        ),
    ]
