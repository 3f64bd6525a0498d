import logging

import pytest


def by_integration_marker(item):
    # Unit tests first, then integration tests
    return 1 if "integration" in str(item.fspath) else 0


def pytest_addoption(parser):
    parser.addoption("--integration-last", action="store_true", default=False)


def pytest_collection_modifyitems(items, config):
    if config.getoption("--integration-last"):
        items.sort(key=by_integration_marker)


@pytest.fixture(autouse=True)
def configure_logging_for_tests(caplog):
    """Let caplog capture Inkwell log records.

    Inkwell loggers do not propagate by default; this re-enables propagation to
    the root logger for the duration of each test.
    """
    caplog.set_level(logging.DEBUG)

    inkwell_logger = logging.getLogger("inkwell")
    original_propagate = inkwell_logger.propagate
    inkwell_logger.propagate = True

    yield

    inkwell_logger.propagate = original_propagate
