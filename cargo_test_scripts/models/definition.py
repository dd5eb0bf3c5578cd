"""Models for test script specifications read from the manifest."""

from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from pydantic import Field, field_validator

from cargo_test_scripts.models.base import Model

# Larger millisecond counts do not fit in a timedelta
_MAX_TIMEOUT_MS = timedelta.max // timedelta(milliseconds=1)


class TestSpec(Model):
    """A named, ordered list of command lines with an optional deadline."""

    __test__ = False

    name: str = Field(..., description="Test name reported as the testcase name")
    timeout: timedelta | None = Field(
        default=None,
        description="Deadline for the whole script, given in milliseconds",
    )
    script: Sequence[str] = Field(..., description="Command lines run in order")

    @field_validator("timeout", mode="before")
    @classmethod
    def timeout_from_millis(cls, value: Any) -> Any:
        if value is None or isinstance(value, timedelta):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("timeout must be an integer number of milliseconds")
        if value < 0:
            raise ValueError("timeout must not be negative")
        if value >= _MAX_TIMEOUT_MS:
            return timedelta.max
        return timedelta(milliseconds=value)

