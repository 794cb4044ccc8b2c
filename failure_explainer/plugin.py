"""pytest plugin binding failure triage to the test lifecycle."""

import asyncio
import logging
import os
from collections.abc import AsyncGenerator, Coroutine, Generator
from dataclasses import dataclass
from functools import partial
from pathlib import Path
from typing import Any

import aiohttp
import pytest
import pytest_asyncio
from pydantic import ValidationError
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.remote.webdriver import WebDriver

from failure_explainer.browser import create_driver
from failure_explainer.config import HarnessConfig
from failure_explainer.config_loader import (
    load_harness_config,
    resolve_explainer_settings,
)
from failure_explainer.diagnostics import DiagnosticCapture
from failure_explainer.explainers.loading import (
    ExplainerNotFoundError,
    load_explainer_manifest,
)
from failure_explainer.models.outcome import FailureCause, TestOutcome, TestStatus
from failure_explainer.reporting import JsonReportSink, MemoryReportSink
from failure_explainer.triage import FailureTriage

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "failure-explainer.yaml"
REPORT_SECTION = "LLM Analysis"


@dataclass(frozen=True, kw_only=True)
class Harness:
    """Components shared by every test of a session."""

    config: HarnessConfig
    capture: DiagnosticCapture
    sink: MemoryReportSink
    triage: FailureTriage


harness_key = pytest.StashKey[Harness]()


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command line options and ini keys."""
    group = parser.getgroup("failure-explainer", "explain failed tests")
    group.addoption(
        "--explainer-config",
        dest="explainer_config_path",
        type=Path,
        default=None,
        help=f"YAML harness configuration (default: {DEFAULT_CONFIG_FILE})",
    )
    group.addoption(
        "--explainer",
        dest="explainer",
        default=None,
        help="Explainer key (e.g. gemini)",
    )
    group.addoption(
        "--failure-report",
        dest="failure_report",
        type=Path,
        default=None,
        help="Write report entries to this JSON file",
    )
    group.addoption(
        "--screenshot-dir",
        dest="screenshot_dir",
        type=Path,
        default=None,
        help="Directory for failure screenshots",
    )
    group.addoption(
        "--browser-name",
        dest="browser_name",
        default=None,
        help="Browser for UI tests (chrome, firefox, edge)",
    )
    group.addoption(
        "--headless",
        dest="headless",
        action="store_true",
        default=None,
        help="Run the browser headless",
    )
    parser.addini(
        "failure_explainer_config",
        help="Path of the YAML harness configuration",
        default=DEFAULT_CONFIG_FILE,
    )


def load_session_config(config: pytest.Config) -> HarnessConfig:
    """Build the harness configuration from the config file and options."""
    explicit_path: Path | None = config.getoption("explainer_config_path")
    config_path = explicit_path or config.rootpath / config.getini(
        "failure_explainer_config"
    )

    if config_path.exists():
        try:
            harness_config = load_harness_config(config_path)
        except ValueError as e:
            raise pytest.UsageError(str(e)) from e
    elif explicit_path is not None:
        raise pytest.UsageError(f"Config file not found: {explicit_path}")
    else:
        harness_config = HarnessConfig()

    overrides: dict[str, Any] = {
        key: value
        for key, value in {
            "explainer": config.getoption("explainer"),
            "report_path": config.getoption("failure_report"),
            "screenshot_dir": config.getoption("screenshot_dir"),
            "browser": config.getoption("browser_name"),
            "headless": config.getoption("headless"),
        }.items()
        if value is not None
    }
    if not overrides:
        return harness_config

    try:
        return HarnessConfig.model_validate(
            {**harness_config.model_dump(), **overrides}
        )
    except ValidationError as e:
        raise pytest.UsageError(f"Invalid failure explainer option: {e}") from e


def build_harness(harness_config: HarnessConfig) -> Harness:
    """Wire capture, sink, explainer and triage together."""
    try:
        manifest = load_explainer_manifest(harness_config.explainer)
    except ExplainerNotFoundError as e:
        raise pytest.UsageError(str(e)) from e

    try:
        explainer_config = manifest.config_cls.model_validate(
            resolve_explainer_settings(harness_config, os.environ)
        )
    except ValidationError as e:
        raise pytest.UsageError(f"Invalid explainer configuration: {e}") from e

    capture = DiagnosticCapture()
    sink = (
        JsonReportSink(harness_config.report_path)
        if harness_config.report_path is not None
        else MemoryReportSink()
    )
    triage = FailureTriage(
        capture=capture,
        sink=sink,
        open_explainer=partial(manifest.explainer_factory, explainer_config),
        screenshot_dir=harness_config.screenshot_dir,
    )
    return Harness(config=harness_config, capture=capture, sink=sink, triage=triage)


def get_harness(config: pytest.Config) -> Harness:
    """Return the harness built for this session."""
    return config.stash[harness_key]


def run_blocking[T](coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion on a private event loop.

    The loop is never installed as the thread's current loop, so loops managed
    by pytest-asyncio are left alone.
    """
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.run_until_complete(loop.shutdown_asyncgens())
        loop.close()


def outcome_from_report(
    item: pytest.Item, call: pytest.CallInfo[None], report: pytest.TestReport
) -> TestOutcome:
    """Translate a pytest report into a test outcome."""
    status: TestStatus
    if report.passed:
        status = "passed"
    elif report.skipped:
        status = "skipped"
    else:
        status = "failed"

    failure = None
    trace = report.longreprtext or None
    if call.excinfo is not None:
        failure = FailureCause(message=str(call.excinfo.value), trace=trace)
    elif trace is not None and trace.strip():
        # e.g. strict xpass, reported without an exception
        failure = FailureCause(message=trace.strip().splitlines()[-1], trace=trace)

    return TestOutcome(
        test_id=item.nodeid, name=item.name, status=status, failure=failure
    )


def pytest_configure(config: pytest.Config) -> None:
    """Build the harness once for the whole session."""
    config.stash[harness_key] = build_harness(load_session_config(config))


@pytest.hookimpl(tryfirst=True)
def pytest_runtest_setup(item: pytest.Item) -> None:
    """Open a fresh diagnostic slot before fixtures are set up."""
    get_harness(item.config).triage.on_test_start(item.nodeid)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    """Triage the test once its outcome is known."""
    report = yield

    finished = report.when == "call" or (report.when == "setup" and not report.passed)
    if finished:
        outcome = outcome_from_report(item, call, report)
        try:
            entry = run_blocking(get_harness(item.config).triage.on_test_end(outcome))
        except Exception:
            log.exception("Failure triage crashed for test: %s", item.nodeid)
            return report
        if entry.explanation:
            report.sections.append((REPORT_SECTION, entry.explanation))

    return report


def pytest_sessionfinish(session: pytest.Session) -> None:
    """Write the JSON report, if one was requested."""
    harness = session.config.stash.get(harness_key, None)
    if harness is not None and isinstance(harness.sink, JsonReportSink):
        harness.sink.flush()


@pytest.fixture
def harness_config(request: pytest.FixtureRequest) -> HarnessConfig:
    """Session harness configuration."""
    return get_harness(request.config).config


@pytest.fixture
def diagnostic_capture(request: pytest.FixtureRequest) -> DiagnosticCapture:
    """Diagnostic capture shared with the failure triage."""
    return get_harness(request.config).capture


@pytest_asyncio.fixture
async def api_session(
    harness_config: HarnessConfig, diagnostic_capture: DiagnosticCapture
) -> AsyncGenerator[aiohttp.ClientSession, None]:
    """HTTP session whose exchanges are recorded for failure triage."""
    async with aiohttp.ClientSession(
        base_url=harness_config.api_base_url,
        headers={"Accept": "application/json"},
        trace_configs=[diagnostic_capture.trace_config()],
    ) as session:
        log.info("API session opened for %s", harness_config.api_base_url)
        yield session


@pytest.fixture
def browser(
    harness_config: HarnessConfig, diagnostic_capture: DiagnosticCapture
) -> Generator[WebDriver, None, None]:
    """Browser navigated to the base URL, quit after the test."""
    driver = create_driver(harness_config.browser, headless=harness_config.headless)
    diagnostic_capture.bind_browser(driver)
    try:
        log.info("Navigating to: %s", harness_config.base_url)
        driver.get(harness_config.base_url)
        yield driver
    finally:
        try:
            driver.quit()
        except WebDriverException as e:
            log.warning("Error while quitting WebDriver: %s", e.msg)
