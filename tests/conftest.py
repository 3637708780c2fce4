" generic fixtures "
import logging

import pytest

from argsuggest.caches import CacheRegistry
from argsuggest.scheduler import GeneratorScheduler
from argsuggest.settings import make_settings
from argsuggest.store import AutocompleteStore

from .testtools import ControlledExecutor


def pytest_configure():
    "Runs once before all"
    from argsuggest.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A logger for components taking one"
    return logging.getLogger("argsuggest.tests")


@pytest.fixture
def registry():
    "An isolated cache registry"
    return CacheRegistry()


@pytest.fixture
def settings(test_logger):
    "Default settings"
    return make_settings(logger=test_logger)


@pytest.fixture
def executor(settings):
    "An executor whose runs are resolved by the test"
    return ControlledExecutor(settings)


@pytest.fixture
def store():
    return AutocompleteStore()


@pytest.fixture
def scheduler(store, executor, registry, settings):
    return GeneratorScheduler(store, executor=executor, registry=registry, settings=settings)
