"""pytest fixtures for building entity doubles.

Registered through the ``pytest11`` entry point, so installing the package
is enough::

    def test_title(standin_factory):
        node = standin_factory.create(
            {"entity_type": "node", "fields": {"title": "Hello"}, "interfaces": ["fieldable"]}
        )
        assert node.get("title").value == "Hello"

``standin_factory`` uses the backend named by ``--standin-backend``, else
``STANDIN_BACKEND``, else ``mock``. ``mock_factory`` and ``proxy_factory``
pin one backend regardless.

``--standin-verbose`` / ``STANDIN_VERBOSE`` logs each double built, and
``--standin-log-json`` / ``STANDIN_LOG_JSON`` renders those records as JSON
lines. Logging is left untouched unless one of them is set.
"""

from __future__ import annotations

import pytest

from standin.config.logging import configure_from_settings
from standin.config.settings import StandinSettings
from standin.factory import EntityDoubleFactory
from standin.plugins.manager import BackendManager

SETTINGS_KEY = pytest.StashKey[StandinSettings]()


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("standin")
    group.addoption(
        "--standin-backend",
        action="store",
        default=None,
        help="Backend used by the standin_factory fixture (default: STANDIN_BACKEND or 'mock').",
    )
    group.addoption(
        "--standin-verbose",
        action="store_true",
        default=None,
        help="Log double construction at DEBUG level.",
    )
    group.addoption(
        "--standin-log-json",
        action="store_true",
        default=None,
        help="Render standin log records as JSON lines.",
    )


def pytest_configure(config: pytest.Config) -> None:
    # Command-line flags take priority over the environment.
    settings = StandinSettings.from_options(
        backend=config.getoption("standin_backend"),
        verbose=config.getoption("standin_verbose"),
        log_json=config.getoption("standin_log_json"),
    )
    config.stash[SETTINGS_KEY] = settings
    if settings.verbose or settings.log_json:
        configure_from_settings(settings)


@pytest.fixture(scope="session")
def standin_settings(pytestconfig: pytest.Config) -> StandinSettings:
    """Settings resolved from the command line and the environment."""
    return pytestconfig.stash[SETTINGS_KEY]


@pytest.fixture(scope="session")
def standin_backend_manager() -> BackendManager:
    """Backend manager with built-in and entry-point backends loaded."""
    manager = BackendManager()
    manager.discover_and_load()
    return manager


@pytest.fixture
def standin_factory(
    standin_settings: StandinSettings, standin_backend_manager: BackendManager
) -> EntityDoubleFactory:
    """Factory on the configured backend."""
    return EntityDoubleFactory.for_backend(
        standin_settings.backend, manager=standin_backend_manager
    )


@pytest.fixture
def mock_factory(standin_backend_manager: BackendManager) -> EntityDoubleFactory:
    """Factory on the ``mock`` backend."""
    return EntityDoubleFactory.for_backend("mock", manager=standin_backend_manager)


@pytest.fixture
def proxy_factory(standin_backend_manager: BackendManager) -> EntityDoubleFactory:
    """Factory on the ``proxy`` backend."""
    return EntityDoubleFactory.for_backend("proxy", manager=standin_backend_manager)
