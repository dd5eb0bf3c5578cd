"""Render suite reports as JUnit XML."""

import re
import socket
import xml.etree.ElementTree as ET
from datetime import UTC, timedelta

from cargo_test_scripts.models.result import (
    Failure,
    Properties,
    ScriptError,
    StepError,
    SuiteEntry,
    SuiteReport,
    SystemErr,
    SystemOut,
    TestCase,
    TestReport,
)

SUITE_NAME = "cargo-test-scripts"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Characters outside the XML 1.0 Char production
_INVALID_XML_CHARS = re.compile(
    r"[^\u0009\u000a\u000d\u0020-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]"
)


def render_report(
    report: SuiteReport,
    *,
    suite_name: str = SUITE_NAME,
    hostname: str | None = None,
) -> bytes:
    """Serialize a suite report to a UTF-8 encoded JUnit XML document.

    Args:
        report: Suite report to render
        suite_name: Value of the testsuite name attribute
        hostname: Host to report (defaults to the local hostname)

    Returns:
        XML document bytes, including the XML declaration

    Raises:
        OSError: If the local hostname cannot be determined

    """
    if hostname is None:
        hostname = socket.gethostname()

    root = ET.Element(
        "testsuite",
        {
            "name": suite_name,
            "timestamp": report.timestamp.astimezone(UTC).strftime(TIMESTAMP_FORMAT),
            "tests": str(report.tests),
            "time": format_seconds(report.elapsed),
            "failures": str(report.failures),
            "errors": str(report.errors),
            "hostname": hostname,
        },
    )
    for entry in report.contents:
        root.append(render_entry(entry))

    return ET.tostring(root, encoding="utf-8", xml_declaration=True)


def render_entry(entry: SuiteEntry) -> ET.Element:
    """Render one child of the testsuite element."""
    match entry:
        case Properties():
            return ET.Element("properties")
        case TestCase(report=report):
            return render_test_case(report)
        case SystemOut():
            return ET.Element("system-out")
        case SystemErr():
            return ET.Element("system-err")
    raise TypeError(f"Unsupported suite entry: {entry!r}")


def render_test_case(report: TestReport) -> ET.Element:
    """Render a test report as a testcase element."""
    element = ET.Element(
        "testcase",
        {
            "name": report.name,
            "classname": "",
            "time": format_seconds(report.elapsed),
        },
    )
    if report.error is not None:
        element.append(render_error(report.error))
    return element


def render_error(error: StepError) -> ET.Element:
    """Render a step error as its failure or error element."""
    match error:
        case Failure(message=message):
            return _message_element("failure", "error_code", message)
        case ScriptError(message=message):
            return _message_element("error", "script_error", message)
    raise TypeError(f"Unsupported step error: {error!r}")


def _message_element(tag: str, kind: str, message: str) -> ET.Element:
    element = ET.Element(tag, {"type": kind})
    element.text = _INVALID_XML_CHARS.sub("", message)
    return element


def format_seconds(duration: timedelta) -> str:
    """Format a duration as decimal seconds without an exponent."""
    return f"{duration.total_seconds():.6f}"
