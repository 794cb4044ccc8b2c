"""Failure triage: explain failed tests and record every outcome."""

import asyncio
import logging
from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from dataclasses import dataclass, replace
from pathlib import Path

from failure_explainer.diagnostics import DiagnosticCapture
from failure_explainer.explainers.base import Explainer
from failure_explainer.models.diagnostics import DiagnosticSnapshot
from failure_explainer.models.explanation import (
    Explanation,
    ExplanationResult,
    ExplanationUnavailable,
)
from failure_explainer.models.outcome import TestOutcome
from failure_explainer.models.report import ReportEntry
from failure_explainer.prompt import build_prompt
from failure_explainer.reporting import ReportSink

log = logging.getLogger(__name__)

DEGRADED_MESSAGE = "LLM Analysis could not be generated due to an error: {reason}"

type ExplainerSource = Callable[[], AbstractAsyncContextManager[Explainer]]


@dataclass(frozen=True, kw_only=True)
class FailureTriage:
    """Runs once per finished test case on the thread that ran it.

    Passed and skipped tests are recorded as they are. Failed tests get a
    screenshot (browser tests), a prompt built from the captured diagnostics
    and an explanation, which is written into the same report entry. The
    explainer is only opened for failures.
    """

    capture: DiagnosticCapture
    sink: ReportSink
    open_explainer: ExplainerSource
    screenshot_dir: Path = Path("target/screenshots")

    def on_test_start(self, test_id: str) -> None:
        """Prepare diagnostics for a test case starting on this thread."""
        log.info("=== Starting test: %s ===", test_id)
        self.capture.begin(test_id)

    async def on_test_end(self, outcome: TestOutcome) -> ReportEntry:
        """Record the outcome, explaining it first if the test failed.

        Diagnostics are cleared after the entry is written, whatever happens.
        """
        try:
            if outcome.status == "failed":
                entry = await self._triage_failure(outcome)
            else:
                entry = self._plain_entry(outcome)
            self.sink.write(entry)
        finally:
            self.capture.clear()

        log.info("=== Finished test: %s ===", outcome.name)
        return entry

    def _plain_entry(self, outcome: TestOutcome) -> ReportEntry:
        if outcome.status == "skipped":
            log.warning("TEST SKIPPED: %s", outcome.name)
        else:
            log.info("TEST PASSED: %s", outcome.name)

        return ReportEntry(
            test_id=outcome.test_id,
            name=outcome.name,
            status=outcome.status,
            message=outcome.failure.message if outcome.failure else None,
        )

    async def _triage_failure(self, outcome: TestOutcome) -> ReportEntry:
        log.error("TEST FAILED: %s - %s", outcome.name, outcome.failure_message)

        try:
            snapshot = self._collect_evidence(outcome)
        except Exception as e:
            log.exception("Failed to capture diagnostics for test: %s", outcome.name)
            unavailable = ExplanationUnavailable(
                reason=f"diagnostics could not be captured: {e!r}"
            )
            return self._failure_entry(outcome, DiagnosticSnapshot.empty(), unavailable)

        try:
            result = await self._explain(outcome, snapshot)
        except asyncio.CancelledError:
            cancelled = ExplanationUnavailable(reason="explanation request was cancelled")
            self.sink.write(self._failure_entry(outcome, snapshot, cancelled))
            raise

        return self._failure_entry(outcome, snapshot, result)

    def _collect_evidence(self, outcome: TestOutcome) -> DiagnosticSnapshot:
        snapshot = self.capture.current_snapshot()
        if snapshot.kind == "browser":
            snapshot = replace(
                snapshot,
                screenshot_path=self.capture.capture_screenshot(
                    outcome.name, self.screenshot_dir
                ),
            )
        return snapshot

    async def _explain(
        self, outcome: TestOutcome, snapshot: DiagnosticSnapshot
    ) -> ExplanationResult:
        try:
            prompt = build_prompt(outcome, snapshot)
            log.info("Requesting explanation for test: %s", outcome.name)
            async with self.open_explainer() as explainer:
                result = await explainer.explain(prompt)
        except Exception as e:
            log.exception("Failed to get explanation for test: %s", outcome.name)
            return ExplanationUnavailable(reason=str(e) or type(e).__name__)

        if isinstance(result, Explanation):
            log.info(
                "Explanation received for test: %s (%d attempt(s))",
                outcome.name,
                result.attempts,
            )
        return result

    @staticmethod
    def _failure_entry(
        outcome: TestOutcome,
        snapshot: DiagnosticSnapshot,
        result: ExplanationResult,
    ) -> ReportEntry:
        if isinstance(result, Explanation):
            explanation = result.text
        else:
            explanation = DEGRADED_MESSAGE.format(reason=result.reason)

        return ReportEntry(
            test_id=outcome.test_id,
            name=outcome.name,
            status="failed",
            message=outcome.failure_message,
            screenshot_path=(
                str(snapshot.screenshot_path) if snapshot.screenshot_path else None
            ),
            explanation=explanation,
            explanation_available=isinstance(result, Explanation),
        )
