"""CLI entry point for running manifest test scripts."""

import argparse
import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from cargo_test_scripts.config import ExecutionConfig
from cargo_test_scripts.definition_loader import load_manifest, load_test_specs
from cargo_test_scripts.junit import render_report
from cargo_test_scripts.models.result import SuiteReport
from cargo_test_scripts.orchestrator import TestOrchestrator

SUBCOMMAND = "test-scripts"

OUTCOME_SYMBOLS = {
    "passed": "✅",
    "failure": "❌",
    "error": "❗",
}


def log_results_summary(log: logging.Logger, report: SuiteReport) -> None:
    """Log suite totals, with one line per test at debug level."""
    for test_report in report.test_reports:
        log.debug(
            "%s %s: %s (%.2fs)",
            OUTCOME_SYMBOLS[test_report.outcome],
            test_report.name,
            test_report.outcome,
            test_report.elapsed.total_seconds(),
        )
    log.info(
        "Ran %d test(s) in %.2fs: %d failure(s), %d error(s)",
        report.tests,
        report.elapsed.total_seconds(),
        report.failures,
        report.errors,
    )


def write_output(data: bytes, output: Path | None) -> None:
    """Write report bytes to a file, or to stdout when no path is given."""
    if output is None:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.flush()
    else:
        output.write_bytes(data)


async def run(
    manifest_path: Path,
    output: Path | None,
    config: ExecutionConfig | None = None,
) -> int:
    """Run the manifest's test scripts, write the report and return exit code."""
    log = logging.getLogger("cargo_test_scripts")
    config = config or ExecutionConfig()

    log.info("Loading manifest: %s", manifest_path)
    try:
        document = load_manifest(manifest_path)
    except OSError as e:
        log.error("Unable to read manifest: %s", e)
        return 1
    except ValueError as e:
        log.error("Unable to parse tests from manifest: %s", e)
        return 1

    try:
        specs = load_test_specs(document)
    except ValueError as e:
        log.error("Unable to parse tests from manifest: %s", e)
        return 1

    orchestrator = TestOrchestrator(config=config)
    report = await orchestrator.run_tests(specs)

    log_results_summary(log, report)

    try:
        write_output(render_report(report, suite_name=config.suite_name), output)
    except (OSError, UnicodeError) as e:
        log.error("Unable to write report: %s", e)
        return 1

    return 0


def parse_args(argv: Sequence[str]) -> argparse.Namespace:
    """Parse command line arguments.

    A leading ``test-scripts`` argument, as passed when the tool runs as
    ``cargo test-scripts``, is ignored.
    """
    if argv and argv[0] == SUBCOMMAND:
        argv = argv[1:]

    parser = argparse.ArgumentParser(
        prog="cargo-test-scripts",
        description="Run test scripts declared in a Cargo manifest",
    )
    parser.add_argument(
        "--manifest-path",
        type=Path,
        default=Path("Cargo.toml"),
        help="Path to the manifest declaring package.metadata.test-script",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write the JUnit report to this file instead of stdout",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log each step and test outcome",
    )
    return parser.parse_args(argv)


def main() -> None:
    """CLI entry point."""
    args = parse_args(sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(manifest_path=args.manifest_path, output=args.output)
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
