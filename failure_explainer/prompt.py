"""Prompt templates for failure explanations."""

from failure_explainer.models.diagnostics import DiagnosticSnapshot
from failure_explainer.models.outcome import TestOutcome

UNAVAILABLE = "unavailable"

INSTRUCTION = (
    "Please provide a plain English explanation of what likely broke "
    "and suggest a fix."
)

API_TEMPLATE = (
    "The API test '{name}' failed. "
    "Error message: {message}. "
    "Last API Request: {request}. "
    "Last API Response: {response}. "
    "{instruction}"
)

UI_TEMPLATE = (
    "The UI test '{name}' failed. "
    "Error message: {message}. "
    "Current URL: {url}. "
    "{screenshot} "
    "{instruction}"
)


def build_prompt(outcome: TestOutcome, snapshot: DiagnosticSnapshot) -> str:
    """Build the explanation prompt for a failed test.

    The same outcome and snapshot always produce the same prompt.
    """
    if snapshot.kind == "browser":
        return UI_TEMPLATE.format(
            name=outcome.name,
            message=outcome.failure_message,
            url=snapshot.page_url or UNAVAILABLE,
            screenshot=(
                "A screenshot was captured."
                if snapshot.screenshot_path is not None
                else "No screenshot was captured."
            ),
            instruction=INSTRUCTION,
        )

    return API_TEMPLATE.format(
        name=outcome.name,
        message=outcome.failure_message,
        request=snapshot.request.describe() if snapshot.request else UNAVAILABLE,
        response=snapshot.response.describe() if snapshot.response else UNAVAILABLE,
        instruction=INSTRUCTION,
    )
