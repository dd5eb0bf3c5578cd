"""Models for test script execution results."""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal


@dataclass(frozen=True, kw_only=True)
class Failure:
    """A step ran to completion and exited with a non-zero status.

    The message is the captured standard error with trailing whitespace trimmed.
    """

    message: str


@dataclass(frozen=True, kw_only=True)
class ScriptError:
    """A step could not be run to completion.

    Covers spawn failures, I/O errors while waiting and timeouts.
    """

    message: str


StepError = Failure | ScriptError


@dataclass(frozen=True, kw_only=True)
class TestReport:
    """Outcome and timing of one test specification."""

    __test__ = False

    name: str
    elapsed: timedelta
    error: StepError | None = None

    @property
    def outcome(self) -> Literal["passed", "failure", "error"]:
        """Classify the report by its error variant."""
        match self.error:
            case None:
                return "passed"
            case Failure():
                return "failure"
            case ScriptError():
                return "error"


@dataclass(frozen=True)
class Properties:
    """Empty properties placeholder leading the suite contents."""


@dataclass(frozen=True)
class TestCase:
    """Suite entry wrapping one test report."""

    __test__ = False

    report: TestReport


@dataclass(frozen=True)
class SystemOut:
    """Empty system-out marker."""


@dataclass(frozen=True)
class SystemErr:
    """Empty system-err marker."""


SuiteEntry = Properties | TestCase | SystemOut | SystemErr


@dataclass(frozen=True, kw_only=True)
class SuiteReport:
    """Aggregate of all test reports for one run.

    Only the contents are stored; counts are derived on each access so they
    always agree with the entries.
    """

    timestamp: datetime
    elapsed: timedelta
    contents: Sequence[SuiteEntry]

    @classmethod
    def from_reports(
        cls,
        *,
        timestamp: datetime,
        elapsed: timedelta,
        reports: Sequence[TestReport],
    ) -> "SuiteReport":
        """Frame test reports with the fixed leading and trailing entries."""
        return cls(
            timestamp=timestamp,
            elapsed=elapsed,
            contents=(
                Properties(),
                *(TestCase(report) for report in reports),
                SystemOut(),
                SystemErr(),
            ),
        )

    @property
    def test_reports(self) -> Sequence[TestReport]:
        """Test reports in suite order."""
        return [
            entry.report for entry in self.contents if isinstance(entry, TestCase)
        ]

    @property
    def tests(self) -> int:
        """Number of testcase entries."""
        return len(self.test_reports)

    @property
    def failures(self) -> int:
        """Number of testcases whose step exited unsuccessfully."""
        return sum(
            1 for report in self.test_reports if isinstance(report.error, Failure)
        )

    @property
    def errors(self) -> int:
        """Number of testcases that hit an infrastructure error or timeout."""
        return sum(
            1 for report in self.test_reports if isinstance(report.error, ScriptError)
        )
