"""Models for finished test cases."""

from dataclasses import dataclass
from typing import Literal

TestStatus = Literal["passed", "failed", "skipped"]


@dataclass(frozen=True, kw_only=True)
class FailureCause:
    """Why a test case failed."""

    message: str
    trace: str | None = None


@dataclass(frozen=True, kw_only=True)
class TestOutcome:
    """Outcome of a single finished test case.

    Created when the runner finishes a test case and consumed once by the
    triage orchestrator.
    """

    __test__ = False

    test_id: str
    name: str
    status: TestStatus
    failure: FailureCause | None = None

    @property
    def failure_message(self) -> str:
        """Return the failure message, or a placeholder when there is none."""
        if self.failure is None or not self.failure.message:
            return "No error message."
        return self.failure.message
