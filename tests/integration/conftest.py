"""Fixtures for integration tests running real processes."""

from pathlib import Path
from typing import Protocol

import pytest


class WriteScriptFn(Protocol):
    """Protocol for executable script creation function."""

    def __call__(self, name: str, body: str) -> Path:
        """Write an executable shell script and return its path."""


class WriteManifestFn(Protocol):
    """Protocol for manifest creation function."""

    def __call__(self, tests: str) -> Path:
        """Write a Cargo.toml with the given test-script tables."""


@pytest.fixture
def write_script(tmp_path: Path) -> WriteScriptFn:
    """Return a function that writes executable shell scripts."""

    def _write(name: str, body: str) -> Path:
        script = tmp_path / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(0o755)
        return script

    return _write


@pytest.fixture
def write_manifest(tmp_path: Path) -> WriteManifestFn:
    """Return a function that writes a Cargo manifest with test scripts."""

    def _write(tests: str) -> Path:
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            '[package]\nname = "demo"\nversion = "0.1.0"\nedition = "2021"\n\n'
            + tests
        )
        return manifest

    return _write
