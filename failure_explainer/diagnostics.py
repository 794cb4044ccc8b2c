"""Thread-scoped capture of diagnostic evidence for failed tests."""

import logging
import re
import threading
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import aiohttp
from selenium.webdriver.remote.webdriver import WebDriver
from yarl import URL

from failure_explainer.models.diagnostics import (
    DiagnosticSnapshot,
    RecordedRequest,
    RecordedResponse,
)

log = logging.getLogger(__name__)


class _Slot(threading.local):
    """Per-thread storage, one slot per worker thread."""

    test_id: str | None = None
    request: RecordedRequest | None = None
    response: RecordedResponse | None = None
    driver: WebDriver | None = None


class DiagnosticCapture:
    """Collects the last HTTP exchange or browser state for the calling thread.

    Nothing stored here is visible to other threads, so test cases running in
    parallel on separate workers never observe each other's evidence.
    """

    def __init__(self) -> None:
        self._slot = _Slot()

    def begin(self, test_id: str) -> None:
        """Open a fresh slot for the test case starting on this thread."""
        self.clear()
        self._slot.test_id = test_id

    def record_exchange(
        self, request: RecordedRequest, response: RecordedResponse | None
    ) -> None:
        """Remember the latest request/response pair for this thread."""
        self._slot.request = request
        self._slot.response = response
        log.debug(
            "Captured API request for %s:\n%s", self._slot.test_id, request.describe()
        )
        if response is not None:
            log.debug(
                "Captured API response for %s:\n%s",
                self._slot.test_id,
                response.describe(),
            )

    def bind_browser(self, driver: WebDriver) -> None:
        """Associate the browser driving the current test with this thread."""
        self._slot.driver = driver
        log.info(
            "WebDriver bound for %s on thread: %s",
            self._slot.test_id,
            threading.current_thread().name,
        )

    def current_snapshot(self) -> DiagnosticSnapshot:
        """Return the evidence captured so far on this thread."""
        if self._slot.driver is not None:
            return DiagnosticSnapshot(kind="browser", page_url=self._current_url())

        return DiagnosticSnapshot(
            kind="api", request=self._slot.request, response=self._slot.response
        )

    def capture_screenshot(self, name: str, directory: Path) -> Path | None:
        """Save a screenshot of the bound browser.

        Returns:
            Path of the saved file, or None when no screenshot could be taken

        """
        driver = self._slot.driver
        if driver is None:
            return None

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = directory / f"{re.sub(r'[^\w.-]', '_', name)}_{timestamp}.png"
        # A dead driver backend raises urllib3 errors, not WebDriverException
        try:
            directory.mkdir(parents=True, exist_ok=True)
            saved = driver.save_screenshot(str(path))
        except Exception as e:
            log.error("Failed to save screenshot for '%s': %s", name, e)
            return None

        if not saved:
            log.error("Failed to save screenshot for '%s'", name)
            return None

        log.info("Screenshot saved: %s", path)
        return path

    def clear(self) -> None:
        """Drop everything stored for this thread."""
        self._slot.test_id = None
        self._slot.request = None
        self._slot.response = None
        self._slot.driver = None

    def trace_config(self) -> aiohttp.TraceConfig:
        """Build an aiohttp trace config recording every exchange of a session."""
        trace_config = aiohttp.TraceConfig()
        trace_config.on_request_start.append(self._on_request_start)
        trace_config.on_request_chunk_sent.append(self._on_request_chunk_sent)
        trace_config.on_request_end.append(self._on_request_end)
        trace_config.on_request_exception.append(self._on_request_exception)
        return trace_config

    def _current_url(self) -> str | None:
        driver = self._slot.driver
        if driver is None:
            return None
        try:
            return driver.current_url
        except Exception as e:
            log.warning("Current URL unavailable for %s: %s", self._slot.test_id, e)
            return None

    async def _on_request_start(
        self,
        session: aiohttp.ClientSession,
        ctx: SimpleNamespace,
        params: aiohttp.TraceRequestStartParams,
    ) -> None:
        ctx.body = bytearray()

    async def _on_request_chunk_sent(
        self,
        session: aiohttp.ClientSession,
        ctx: SimpleNamespace,
        params: aiohttp.TraceRequestChunkSentParams,
    ) -> None:
        ctx.body.extend(params.chunk)

    async def _on_request_end(
        self,
        session: aiohttp.ClientSession,
        ctx: SimpleNamespace,
        params: aiohttp.TraceRequestEndParams,
    ) -> None:
        request = self._recorded_request(ctx, params.method, params.url, params.headers)
        try:
            # read() caches the body, the caller can still consume it
            body = (await params.response.read()).decode("utf-8", errors="replace")
        except (aiohttp.ClientError, TimeoutError) as e:
            log.warning("Response body unavailable: %r", e)
            body = ""

        response = RecordedResponse(
            status=params.response.status,
            headers=dict(params.response.headers),
            body=body,
        )
        self.record_exchange(request, response)

    async def _on_request_exception(
        self,
        session: aiohttp.ClientSession,
        ctx: SimpleNamespace,
        params: aiohttp.TraceRequestExceptionParams,
    ) -> None:
        request = self._recorded_request(ctx, params.method, params.url, params.headers)
        self.record_exchange(request, None)

    @staticmethod
    def _recorded_request(
        ctx: SimpleNamespace, method: str, url: URL, headers: Mapping[str, str]
    ) -> RecordedRequest:
        sent = getattr(ctx, "body", b"")
        return RecordedRequest(
            method=method,
            url=str(url),
            headers=dict(headers),
            body=sent.decode("utf-8", errors="replace") if sent else None,
        )
