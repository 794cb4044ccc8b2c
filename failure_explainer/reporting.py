"""Report sinks recording one entry per finished test case."""

import json
import logging
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

from failure_explainer.models.report import ReportEntry

log = logging.getLogger(__name__)


class ReportSink(Protocol):
    """Destination for per-test report entries.

    Shared by every worker thread, so implementations must serialise writes.
    """

    def write(self, entry: ReportEntry) -> None:
        """Record the entry for one finished test case."""


class MemoryReportSink:
    """Keeps report entries in memory."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: list[ReportEntry] = []

    def write(self, entry: ReportEntry) -> None:
        """Record the entry for one finished test case."""
        with self._lock:
            self._entries.append(entry)

    @property
    def entries(self) -> Sequence[ReportEntry]:
        """Entries written so far, in write order."""
        with self._lock:
            return tuple(self._entries)


class JsonReportSink(MemoryReportSink):
    """Collects report entries and writes them to a JSON file on flush."""

    def __init__(self, path: Path) -> None:
        super().__init__()
        self.path = path

    def flush(self) -> None:
        """Write every entry collected so far to the report file."""
        output = format_report(self.entries)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(output, indent=2))
        log.info("Failure report written to %s (%d entries)", self.path, output["total"])


def format_report(entries: Sequence[ReportEntry]) -> dict[str, Any]:
    """Format report entries for JSON output."""
    return {
        "total": len(entries),
        "passed": sum(1 for e in entries if e.status == "passed"),
        "failed": sum(1 for e in entries if e.status == "failed"),
        "skipped": sum(1 for e in entries if e.status == "skipped"),
        "entries": [entry.model_dump(mode="json") for entry in entries],
    }


def load_report(path: Path) -> Sequence[ReportEntry]:
    """Load report entries from a JSON report file.

    Raises:
        FileNotFoundError: If the report does not exist
        ValueError: If the report is not valid JSON or has an unexpected shape

    """
    if not path.exists():
        raise FileNotFoundError(f"Report not found: {path}")

    data = json.loads(path.read_text())
    if not isinstance(data, dict) or not isinstance(data.get("entries"), list):
        raise ValueError(f"Report {path} has no 'entries' list")
    return [ReportEntry.model_validate(entry) for entry in data["entries"]]
