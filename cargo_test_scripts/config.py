"""Configuration for test script execution."""

from pydantic import BaseModel, ConfigDict, Field

from cargo_test_scripts.junit import SUITE_NAME
from cargo_test_scripts.step_runner import DEFAULT_POLL_INTERVAL


class ExecutionConfig(BaseModel):
    """Settings for running a suite of test scripts."""

    model_config = ConfigDict(frozen=True)

    poll_interval: float = Field(
        default=DEFAULT_POLL_INTERVAL,
        gt=0,
        description="Seconds between completion checks of a timed step",
    )
    suite_name: str = Field(
        default=SUITE_NAME,
        description="Value of the testsuite name attribute",
    )
