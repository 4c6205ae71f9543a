"""pytest integration: ``--refresh-fixtures`` and harness fixtures.

Enable with ``pytest_plugins = ["src.golden.pytest_plugin"]`` in the
top-level ``conftest.py``.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Generator, Iterator
from typing import Any

import pytest

from src.golden.client import HTTPClient
from src.golden.context import TestContext, TestContextArgs, new_test_context
from src.golden.reporter import CaseReporter
from src.shared.config import HarnessConfig
from src.shared.constants import HARNESS_LOGGER
from src.shared.errors import StepFailureError
from src.shared.logging import JSONFormatter, setup_logging


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("golden", "golden-fixture HTTP harness")
    group.addoption(
        "--refresh-fixtures",
        action="store_true",
        default=False,
        help="Overwrite fixture files with live responses instead of comparing.",
    )


def pytest_configure(config: pytest.Config) -> None:
    setup_logging(HARNESS_LOGGER, HarnessConfig().log_level)


def pytest_unconfigure(config: pytest.Config) -> None:
    logger = logging.getLogger(HARNESS_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler.formatter, JSONFormatter):
            logger.removeHandler(handler)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    # Failures reported through the case reporter fail the test call.
    report = yield
    if report.when != "call" or not report.passed:
        return report
    reporter = getattr(item, "funcargs", {}).get("case_reporter")
    if isinstance(reporter, CaseReporter) and reporter.failed:
        report.outcome = "failed"
        report.longrepr = str(StepFailureError(reporter.case_name, reporter.failures))
    return report


@pytest.fixture
def harness_config(request: pytest.FixtureRequest) -> HarnessConfig:
    """Harness settings from the environment, plus command-line overrides."""
    config = HarnessConfig()
    if request.config.getoption("refresh_fixtures"):
        config = config.model_copy(update={"refresh_fixtures": True})
    return config


@pytest.fixture
def refresh_fixtures(harness_config: HarnessConfig) -> bool:
    return harness_config.refresh_fixtures


@pytest.fixture
def case_reporter(request: pytest.FixtureRequest) -> CaseReporter:
    return CaseReporter(request.node.nodeid)


@pytest.fixture
def http_client(harness_config: HarnessConfig) -> Iterator[HTTPClient]:
    with HTTPClient.from_config(harness_config) as client:
        yield client


@pytest.fixture
def golden_context(
    case_reporter: CaseReporter,
    harness_config: HarnessConfig,
) -> Callable[..., TestContext]:
    """Factory building numbered :class:`TestContext` objects for this test.

    Keyword arguments are passed through to :class:`TestContextArgs`.
    """
    counter = itertools.count(1)

    def factory(**kwargs: Any) -> TestContext:
        kwargs.setdefault("test_manager", case_reporter)
        kwargs.setdefault("config", harness_config)
        kwargs.setdefault("test_num", next(counter))
        return new_test_context(TestContextArgs(**kwargs))

    return factory
