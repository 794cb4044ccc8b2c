"""Tests for diagnostic and outcome models."""

from pathlib import Path

from failure_explainer.models.diagnostics import (
    DiagnosticSnapshot,
    RecordedRequest,
    RecordedResponse,
)
from failure_explainer.models.outcome import FailureCause
from failure_explainer.testing.factories import TestOutcomeFactory


def test_request_describe_includes_body() -> None:
    """Renders method, URI, headers and body."""
    request = RecordedRequest(
        method="POST",
        url="https://api.test/posts",
        headers={"Accept": "application/json", "X-Trace": "1"},
        body='{"title": "x"}',
    )

    assert request.describe() == (
        "Method: POST\n"
        "URI: https://api.test/posts\n"
        "Headers: Accept=application/json; X-Trace=1; \n"
        'Body: {"title": "x"}\n'
    )


def test_request_describe_omits_missing_body() -> None:
    """Leaves out the body line when nothing was sent."""
    request = RecordedRequest(method="GET", url="https://api.test/posts/1")

    assert request.describe() == "Method: GET\nURI: https://api.test/posts/1\nHeaders: \n"


def test_response_describe() -> None:
    """Renders status, headers and body."""
    response = RecordedResponse(
        status=404, headers={"Content-Type": "application/json"}, body="{}"
    )

    assert response.describe() == (
        "Status Code: 404\nHeaders: Content-Type=application/json; \nBody: {}\n"
    )


def test_empty_snapshot_is_empty() -> None:
    """The empty snapshot carries no evidence."""
    snapshot = DiagnosticSnapshot.empty()

    assert snapshot.is_empty
    assert snapshot.kind == "api"


def test_browser_snapshot_is_not_empty() -> None:
    """A page URL or screenshot counts as evidence."""
    snapshot = DiagnosticSnapshot(
        kind="browser", page_url="https://app.test", screenshot_path=Path("a.png")
    )

    assert not snapshot.is_empty


def test_failure_message_placeholder_without_failure() -> None:
    """Falls back to a placeholder when the outcome has no failure cause."""
    outcome = TestOutcomeFactory.build(status="failed", failure=None)

    assert outcome.failure_message == "No error message."


def test_failure_message_placeholder_for_blank_message() -> None:
    """Blank messages are replaced by the placeholder too."""
    outcome = TestOutcomeFactory.build(
        status="failed", failure=FailureCause(message="")
    )

    assert outcome.failure_message == "No error message."


def test_failure_message_from_cause() -> None:
    """Uses the failure cause message when present."""
    outcome = TestOutcomeFactory.build(
        status="failed", failure=FailureCause(message="assert 1 == 2")
    )

    assert outcome.failure_message == "assert 1 == 2"
