"""CLI entry point for deployment validation."""

import argparse
import asyncio
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from deploy_probe.client import open_session
from deploy_probe.models.result import Report
from deploy_probe.models.target import Target
from deploy_probe.models.thresholds import (
    InvalidThresholdConfigError,
    load_threshold_config,
)
from deploy_probe.probes import BasicHealthProbe, default_probes, quick_probes
from deploy_probe.report import format_output
from deploy_probe.suite import ValidationSuite

DEFAULT_BASE_URL = "http://localhost:5001"

EXIT_HEALTHY = 0
EXIT_UNHEALTHY = 1
EXIT_CONFIG_ERROR = 2

STATUS_SYMBOLS = {
    "pass": "✅",
    "warning": "⚠️",
    "fail": "❌",
}


def log_report_summary(log: logging.Logger, report: Report) -> None:
    """Log a formatted summary of the report."""
    counters = report.counters

    log.info("=" * 80)
    log.info("Deployment Validation Report: %s", report.base_url)
    log.info("=" * 80)

    for result in report.results:
        symbol = STATUS_SYMBOLS.get(result.classification, "?")
        log.info("%s %s (%.0fms)", symbol, result.name, result.elapsed_ms)
        for alert in result.alerts:
            log.info("  %s: %s", alert.level, alert.message)

    log.info("Overall Health: %s", report.overall_status.upper())
    log.info(
        "Passed: %d, Warnings: %d, Failed: %d (success rate %.1f%%)",
        counters.passed,
        counters.warnings,
        counters.failed,
        counters.success_rate,
    )

    if report.recommendations:
        log.info("Recommendations:")
        for recommendation in report.recommendations:
            log.info("  • %s", recommendation)
    else:
        log.info("System is operating optimally")


def parse_thresholds(thresholds_json: str) -> dict[str, Any]:
    """Parse the raw threshold configuration from JSON."""
    if not thresholds_json.strip():
        return {}
    try:
        raw = json.loads(thresholds_json)
    except json.JSONDecodeError as e:
        raise InvalidThresholdConfigError(f"Thresholds are not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise InvalidThresholdConfigError("Thresholds must be a JSON object")
    return raw


async def run(
    base_url: str,
    thresholds_json: str = "",
    timeout: float = 10.0,
    concurrency: int = 5,
    quick: bool = False,
    output_path: Path | None = None,
) -> int:
    """Run deployment validation and return exit code."""
    log = logging.getLogger("deploy_probe")

    try:
        thresholds = load_threshold_config(parse_thresholds(thresholds_json))
        target = Target(
            base_url=base_url, timeout=timeout, burst_concurrency=concurrency
        )
    except (InvalidThresholdConfigError, ValidationError) as e:
        log.error("%s", e)
        return EXIT_CONFIG_ERROR

    if quick:
        suite = ValidationSuite(
            probes=quick_probes(), thresholds=thresholds, inter_probe_delay=0.1
        )
    else:
        suite = ValidationSuite(
            probes=default_probes(),
            thresholds=thresholds,
            burst_probe=BasicHealthProbe,
        )

    log.info("Starting deployment validation for: %s", target.base_url)
    async with open_session(target) as session:
        report = await suite.run(session, target)

    log_report_summary(log, report)

    output = format_output(report)
    document = json.dumps(output, indent=2)
    print(document)

    if output_path is not None:
        output_path.write_text(document + "\n")
        log.info("Report saved to: %s", output_path)

    return EXIT_HEALTHY if report.overall_status == "healthy" else EXIT_UNHEALTHY


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Validate a deployed service with health and load probes"
    )
    parser.add_argument(
        "--base-url",
        default=os.environ.get("API_BASE_URL", DEFAULT_BASE_URL),
        help="Base URL of the service (default: $API_BASE_URL)",
    )
    parser.add_argument(
        "--thresholds",
        default="",
        help="JSON threshold configuration (latency, error rate, uptime, cost)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=10.0,
        help="Per-request timeout in seconds",
    )
    parser.add_argument(
        "--concurrency",
        type=int,
        default=5,
        help="Concurrent requests in the load burst",
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run only the essential probes, without the load burst",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Also write the JSON report to this file",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            base_url=args.base_url,
            thresholds_json=args.thresholds,
            timeout=args.timeout,
            concurrency=args.concurrency,
            quick=args.quick,
            output_path=args.output,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
