"""Sequential execution of test specifications into a suite report."""

import logging
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from cargo_test_scripts.config import ExecutionConfig
from cargo_test_scripts.models.definition import TestSpec
from cargo_test_scripts.models.result import StepError, SuiteReport, TestReport
from cargo_test_scripts.step_runner import DEFAULT_POLL_INTERVAL, run_step

log = logging.getLogger(__name__)


async def run_test(
    spec: TestSpec, *, poll_interval: float = DEFAULT_POLL_INTERVAL
) -> TestReport:
    """Run a specification's steps in order, stopping at the first error.

    The timeout is a deadline for the whole specification: every step is
    measured against the same start instant.
    """
    start = time.monotonic()
    error: StepError | None = None

    for command in spec.script:
        error = await run_step(
            command, start, spec.timeout, poll_interval=poll_interval
        )
        if error is not None:
            break

    return TestReport(
        name=spec.name,
        elapsed=timedelta(seconds=time.monotonic() - start),
        error=error,
    )


@dataclass(frozen=True, kw_only=True)
class TestOrchestrator:
    """Runs test specifications one after another."""

    __test__ = False

    config: ExecutionConfig = field(default_factory=ExecutionConfig)

    async def run_tests(self, specs: Sequence[TestSpec]) -> SuiteReport:
        """Run all specifications in list order and collect a suite report.

        Args:
            specs: Test specifications in declaration order

        Returns:
            Suite report with one testcase entry per specification

        """
        timestamp = datetime.now(UTC)
        start = time.monotonic()

        log.info("Running %d test script(s)...", len(specs))
        reports: list[TestReport] = []
        for spec in specs:
            report = await run_test(spec, poll_interval=self.config.poll_interval)
            log.debug(
                "Test completed: name=%s outcome=%s duration=%.3fs",
                report.name,
                report.outcome,
                report.elapsed.total_seconds(),
            )
            reports.append(report)

        return SuiteReport.from_reports(
            timestamp=timestamp,
            elapsed=timedelta(seconds=time.monotonic() - start),
            reports=reports,
        )
