# tests/conftest.py
"""
Central test configuration for pytest.
Provides reusable fixtures and setup/teardown logic for all test types:
- unit
- integration

Ensures:
- Isolation between tests (temp config dirs, no leaked COLORBLIND_THEME_* variables)
- The shared ThemeBundle is back in English after every test
- Root logging handlers installed by HostApplication/CLI do not outlive a test
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Generator

import pytest

from colorblind_theme.bundle import ThemeBundle
from colorblind_theme.core.application import HostApplication
from colorblind_theme.core.config.env_loader import ENV_PREFIX
from colorblind_theme.core.config.unified_config_manager import UnifiedConfigManager
from colorblind_theme.core.dependency.project_service_registry import ProjectServiceRegistry
from colorblind_theme.core.error_handling import ErrorHandler
from colorblind_theme.core.project.project_manager import ProjectManager
from colorblind_theme.core.themes.theme_registry import ThemeRegistry

from .fixtures import write_json

PROJECT_ROOT = Path(__file__).parent.parent


@pytest.fixture(scope="session")
def project_root() -> Path:
    """Return the absolute path to the project root."""
    return PROJECT_ROOT


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch) -> None:
    """Drop COLORBLIND_THEME_* variables so the host environment cannot leak into tests."""
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def reset_theme_bundle() -> Generator[None, None, None]:
    """The plugin's bundle is module level; put it back to its defaults."""
    yield
    ThemeBundle.configure(locale="en", fallback_locale="en", missing_key_policy="error")
    ThemeBundle.reload()


@pytest.fixture(autouse=True)
def restore_root_logging() -> Generator[None, None, None]:
    """Remove handlers that setup_logging() attached to the root logger during a test."""
    root = logging.getLogger()
    before, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        # pytest manages its own capture handlers per test phase
        if handler in before or type(handler).__module__.startswith("_pytest"):
            continue
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


@pytest.fixture
def config_dir(tmp_path: Path) -> Path:
    """Empty configuration directory; the packaged defaults apply."""
    path = tmp_path / "config"
    path.mkdir()
    return path


@pytest.fixture
def make_settings(config_dir: Path):
    """Write settings.json (and optionally a profile) into config_dir."""
    def _make(settings: Dict[str, Any], profile: str = None) -> Path:
        if profile:
            return write_json(config_dir / "profiles" / f"{profile}.json", settings)
        return write_json(config_dir / "settings.json", settings)
    return _make


@pytest.fixture
def config_manager(config_dir: Path) -> Generator[UnifiedConfigManager, None, None]:
    """Provide a clean, isolated config manager for each test."""
    manager = UnifiedConfigManager(base_config_dir=config_dir)
    yield manager
    manager.shutdown()


@pytest.fixture
def error_handler() -> ErrorHandler:
    return ErrorHandler(history_size=20)


@pytest.fixture
def service_registry(error_handler: ErrorHandler) -> ProjectServiceRegistry:
    return ProjectServiceRegistry(error_handler)


@pytest.fixture
def project_manager(service_registry: ProjectServiceRegistry, error_handler: ErrorHandler) -> ProjectManager:
    manager = ProjectManager(service_registry, error_handler=error_handler)
    yield manager
    manager.shutdown()


@pytest.fixture
def theme_registry() -> ThemeRegistry:
    return ThemeRegistry()


@pytest.fixture
def host(config_dir: Path) -> Generator[HostApplication, None, None]:
    """Started host application with the builtin plugin loaded."""
    app = HostApplication(config_dir=config_dir, configure_logging=False)
    app.start()
    yield app
    app.shutdown()


# Global test hooks

def pytest_configure(config):
    """Pytest configuration hook."""
    # Register custom markers
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration (full host with plugins loaded)"
    )


def pytest_runtest_setup(item):
    """Skip tests based on markers and environment."""
    if "integration" in item.keywords and os.getenv("SKIP_INTEGRATION_TESTS", "0") == "1":
        pytest.skip("Skipping integration tests (SKIP_INTEGRATION_TESTS=1)")
