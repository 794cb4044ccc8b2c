"""Models for diagnostic evidence gathered about a failed test case."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal


def _format_headers(headers: Mapping[str, str]) -> str:
    return "".join(f"{name}={value}; " for name, value in headers.items())


@dataclass(frozen=True, kw_only=True)
class RecordedRequest:
    """An outbound HTTP request made by the system under test."""

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str | None = None

    def describe(self) -> str:
        """Render the request as plain text for prompts and logs."""
        text = (
            f"Method: {self.method}\n"
            f"URI: {self.url}\n"
            f"Headers: {_format_headers(self.headers)}\n"
        )
        if self.body is not None:
            text += f"Body: {self.body}\n"
        return text


@dataclass(frozen=True, kw_only=True)
class RecordedResponse:
    """The response received for a recorded request."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    def describe(self) -> str:
        """Render the response as plain text for prompts and logs."""
        return (
            f"Status Code: {self.status}\n"
            f"Headers: {_format_headers(self.headers)}\n"
            f"Body: {self.body}\n"
        )


@dataclass(frozen=True, kw_only=True)
class DiagnosticSnapshot:
    """Evidence captured for one test case on the calling thread.

    API tests carry the last request/response pair, browser tests carry the
    current page URL and, once taken, the path of a failure screenshot.
    """

    kind: Literal["api", "browser"] = "api"
    request: RecordedRequest | None = None
    response: RecordedResponse | None = None
    page_url: str | None = None
    screenshot_path: Path | None = None

    @classmethod
    def empty(cls) -> "DiagnosticSnapshot":
        """Return the snapshot used when nothing was captured."""
        return cls()

    @property
    def is_empty(self) -> bool:
        """Whether the snapshot holds no evidence at all."""
        return (
            self.request is None
            and self.response is None
            and self.page_url is None
            and self.screenshot_path is None
        )
