"""CLI entry point for inspecting failure reports and checking the explainer."""

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from failure_explainer.config import HarnessConfig
from failure_explainer.config_loader import (
    load_harness_config,
    resolve_explainer_settings,
)
from failure_explainer.explainers.loading import (
    ExplainerNotFoundError,
    load_explainer_manifest,
)
from failure_explainer.models.explanation import Explanation
from failure_explainer.models.report import ReportEntry
from failure_explainer.reporting import load_report

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
    "skipped": "⏭️",
}


def log_report_summary(log: logging.Logger, entries: Sequence[ReportEntry]) -> None:
    """Log a formatted summary of report entries with their explanations."""
    log.info("=" * 80)
    log.info("Test Report Summary:")
    log.info("=" * 80)

    for entry in entries:
        symbol = STATUS_SYMBOLS.get(entry.status, "?")
        log.info("%s %s: %s", symbol, entry.test_id, entry.status)
        if entry.message and entry.status == "failed":
            log.info("  Message: %s", entry.message)
        if entry.screenshot_path:
            log.info("  Screenshot: %s", entry.screenshot_path)
        if entry.explanation:
            log.info("  LLM Analysis: %s", entry.explanation)


def summarize(report_path: Path) -> int:
    """Summarize a report file and return exit code."""
    log = logging.getLogger("failure_explainer")

    entries = load_report(report_path)
    log_report_summary(log, entries)

    return 1 if any(entry.status == "failed" for entry in entries) else 0


async def explain(prompt: str, config_path: Path | None) -> int:
    """Send one prompt through the configured explainer and return exit code."""
    log = logging.getLogger("failure_explainer")

    config = load_harness_config(config_path) if config_path else HarnessConfig()
    log.info("Loading explainer: %s", config.explainer)
    try:
        manifest = load_explainer_manifest(config.explainer)
    except ExplainerNotFoundError as e:
        log.error("%s", e)
        log.error(
            "Set 'explainer' in the config to one of: %s", ", ".join(e.available)
        )
        return 2

    explainer_config = manifest.config_cls.model_validate(
        resolve_explainer_settings(config, os.environ)
    )

    async with manifest.explainer_factory(explainer_config) as explainer:
        result = await explainer.explain(prompt)

    if isinstance(result, Explanation):
        print(result.text)
        return 0

    log.error("Explanation unavailable: %s", result.reason)
    return 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Failure explainer utilities")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summary_parser = subparsers.add_parser(
        "summary", help="Summarize a JSON failure report"
    )
    summary_parser.add_argument("report", type=Path, help="Path to the JSON report")

    explain_parser = subparsers.add_parser(
        "explain", help="Send a prompt to the configured explainer"
    )
    explain_parser.add_argument("prompt", help="Prompt text")
    explain_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to the YAML harness configuration",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    if args.command == "summary":
        exit_code = summarize(args.report)
    else:
        exit_code = asyncio.run(explain(args.prompt, args.config))
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
