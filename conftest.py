"""
Pytest configuration for the API sheet runner.

Options for data-driven runs (--excel, --groups, ...) and logging are
defined here; fixtures live in fixtures.py.
"""

import pytest
from base.logger import Logger

# Import shared fixtures to make them available to all tests
from fixtures import *


# ==================== Pytest Configuration ====================
#
# ARCHITECTURE NOTE:
# - All pytest options are defined HERE in conftest.py (single source of truth)
# - All fixtures are in fixtures.py (imported via "from fixtures import *")
# - Test files only contain test functions, no fixtures or options
# - Engine classes (CaseExecutor, SuiteOrchestrator, ...) receive dependencies
#   via constructor parameters because they cannot access pytest fixtures directly

def pytest_addoption(parser):
    """
    Add custom command line options

    Note: All pytest options should be defined here, not in individual test files
    """

    parser.addoption(
        "--log-path", action="store", default="logs",
        help="Log directory"
    )
    parser.addoption(
        "--file-log-level", action="store", default="DEBUG",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="File log level"
    )
    parser.addoption(
        "--console-log-level", action="store", default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level"
    )

    # Data-driven test options
    parser.addoption(
        "--excel", action="store",
        help="Path to Excel/CSV test file"
    )
    parser.addoption(
        "--groups", action="store",
        help="Group names to run, comma separated (default: all groups)"
    )
    parser.addoption(
        "--base-url", action="store",
        help="Prefix for relative URLs (default: API_BASE_URL)"
    )
    parser.addoption(
        "--worksheet", action="store",
        help="Worksheet name (default: first sheet)"
    )
    parser.addoption(
        "--start-row", action="store", type=int,
        help="First row index to read (default: 1, skipping the header)"
    )
    parser.addoption(
        "--end-row", action="store", type=int,
        help="Last row index to read, inclusive"
    )


# ==================== Session-Scoped Fixtures ====================

@pytest.fixture(scope="session", autouse=True)
def setup_logger(request):
    """Initialize logger"""
    log_path = request.config.getoption("--log-path")
    file_level = request.config.getoption("--file-log-level")
    console_level = request.config.getoption("--console-log-level")

    return Logger.get_instance(
        log_path=log_path,
        file_level=file_level,
        console_level=console_level
    )
