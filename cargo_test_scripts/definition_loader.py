"""Load test script specifications from a Cargo manifest."""

import logging
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from cargo_test_scripts.models.definition import TestSpec

log = logging.getLogger(__name__)

TEST_SCRIPT_PATH = ("package", "metadata", "test-script")

_test_specs_adapter = TypeAdapter(list[TestSpec])


class MissingFieldError(ValueError):
    """Raised when a key on the path to the test scripts is absent."""

    def __init__(self, field: str) -> None:
        super().__init__(f"missing field '{field}'")
        self.field = field


def extract_path(document: Mapping[str, Any], path: Sequence[str]) -> Any:
    """Return the value found by following ``path`` through nested mappings.

    Sibling keys at every level are ignored.

    Raises:
        MissingFieldError: If a key along the path is absent
        ValueError: If an intermediate value is not a mapping

    """
    current: Any = document
    walked: list[str] = []
    for key in path:
        if not isinstance(current, Mapping):
            location = ".".join(walked) or "document"
            raise ValueError(
                f"Expected a table at '{location}', got {type(current).__name__}"
            )
        if key not in current:
            raise MissingFieldError(key)
        current = current[key]
        walked.append(key)
    return current


def load_test_specs(document: Mapping[str, Any]) -> Sequence[TestSpec]:
    """Decode the test script list of a parsed manifest.

    Args:
        document: Parsed manifest as nested mappings

    Returns:
        Test specifications in declaration order

    Raises:
        MissingFieldError: If package.metadata.test-script is absent
        ValueError: If any record is malformed

    """
    records = extract_path(document, TEST_SCRIPT_PATH)
    if not isinstance(records, list):
        raise ValueError(
            f"Invalid test specification list: expected an array, "
            f"got {type(records).__name__}"
        )

    try:
        specs = _test_specs_adapter.validate_python(records)
    except ValidationError as e:
        raise ValueError(f"Invalid test specification: {e}") from e

    log.debug("Loaded %d test specification(s)", len(specs))
    return specs


def load_manifest(manifest_path: Path) -> Mapping[str, Any]:
    """Read and parse a TOML manifest.

    Raises:
        OSError: If the manifest cannot be read
        ValueError: If the manifest is not valid TOML

    """
    content = manifest_path.read_text(encoding="utf-8")
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {manifest_path}: {e}") from e


def load_test_specs_from_manifest(manifest_path: Path) -> Sequence[TestSpec]:
    """Read a manifest file and decode its test scripts."""
    return load_test_specs(load_manifest(manifest_path))
