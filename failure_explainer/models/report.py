"""Models for report entries written to the report sink."""

from pydantic import Field

from failure_explainer.models.base import Model
from failure_explainer.models.outcome import TestStatus


class ReportEntry(Model):
    """One report entry per finished test case."""

    test_id: str = Field(..., description="Runner identifier of the test case")
    name: str = Field(..., description="Human-readable test name")
    status: TestStatus = Field(..., description="Final status of the test case")
    message: str | None = Field(default=None, description="Failure message")
    screenshot_path: str | None = Field(
        default=None, description="Path of the failure screenshot, if any"
    )
    explanation: str | None = Field(
        default=None,
        description="Generated explanation or degraded message (failures only)",
    )
    explanation_available: bool = Field(
        default=False, description="Whether the explanation was generated"
    )
