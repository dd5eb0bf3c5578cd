"""Run a single script step as a child process and classify its outcome."""

import asyncio
import contextlib
import logging
import time
from datetime import timedelta

from cargo_test_scripts.models.result import Failure, ScriptError, StepError

log = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.01

_READ_CHUNK = 65536


async def run_step(
    command: str,
    test_start: float,
    timeout: timedelta | None = None,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL,
) -> StepError | None:
    """Run one command line and report how it ended.

    The command is split on whitespace; no shell quoting is applied.

    Args:
        command: Command line, executable first
        test_start: ``time.monotonic()`` instant the owning test started at
        timeout: Deadline measured from ``test_start`` (None waits forever)
        poll_interval: Seconds between exit checks when a timeout is set

    Returns:
        None on exit status 0, otherwise the error describing the step

    """
    log.debug("Running step: %s", command)
    error = await _run(command, test_start, timeout, poll_interval)
    log.debug("Step finished: %s -> %s", command, error or "ok")
    return error


async def _run(
    command: str,
    test_start: float,
    timeout: timedelta | None,
    poll_interval: float,
) -> StepError | None:
    args = command.split()
    if not args:
        return ScriptError(message="empty command line")

    try:
        process = await asyncio.create_subprocess_exec(
            *args,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        return ScriptError(message=str(e))

    if timeout is None:
        try:
            _, stderr = await process.communicate()
        except OSError as e:
            return ScriptError(message=str(e))
        return _classify(process.returncode, stderr)

    return await _wait_until_deadline(
        process, test_start, timeout.total_seconds(), poll_interval
    )


async def _wait_until_deadline(
    process: asyncio.subprocess.Process,
    test_start: float,
    timeout: float,
    poll_interval: float,
) -> StepError | None:
    """Poll the process exit status until it exits or the deadline passes.

    Only the process itself is waited for. Background children that keep the
    output pipes open do not hold the step up.
    """
    assert process.stdout is not None and process.stderr is not None
    stderr = bytearray()
    stdout_reader = asyncio.create_task(_drain(process.stdout, bytearray()))
    stderr_reader = asyncio.create_task(_drain(process.stderr, stderr))
    readers = (stdout_reader, stderr_reader)

    try:
        while process.returncode is None:
            remaining = timeout - (time.monotonic() - test_start)
            if remaining <= 0:
                log.debug("Step timed out, killing pid %d", process.pid)
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                return ScriptError(
                    message=f"timed out after {round(timeout * 1000)}ms"
                )
            await asyncio.sleep(min(poll_interval, remaining))

        if process.returncode != 0:
            # Collect what the process wrote, bounded by the remaining budget
            remaining = timeout - (time.monotonic() - test_start)
            await asyncio.wait({stderr_reader}, timeout=max(remaining, 0))
        return _classify(process.returncode, bytes(stderr))
    finally:
        for reader in readers:
            reader.cancel()
        await asyncio.gather(*readers, return_exceptions=True)


async def _drain(stream: asyncio.StreamReader, buffer: bytearray) -> None:
    while chunk := await stream.read(_READ_CHUNK):
        buffer.extend(chunk)


def _classify(returncode: int | None, stderr: bytes) -> StepError | None:
    if returncode == 0:
        return None
    return Failure(message=stderr.decode(errors="replace").rstrip())
