"""
Pytest configuration for craftc test suite.

This configuration enables the --full flag to run integration tests that
drive a real C toolchain.
"""

import pytest


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--full",
        action="store_true",
        default=False,
        help="Run full test suite including integration tests (needs cc and ar)",
    )


def pytest_configure(config):
    """Register markers."""
    config.addinivalue_line("markers", "integration: drives a real C toolchain")


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --full is given."""
    if config.getoption("--full"):
        return
    skip_integration = pytest.mark.skip(reason="needs --full to run")
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)
