"""Tests for definition loader."""

import tomllib
from datetime import timedelta
from pathlib import Path

import pytest

from cargo_test_scripts.definition_loader import (
    MissingFieldError,
    extract_path,
    load_manifest,
    load_test_specs,
    load_test_specs_from_manifest,
)


class TestExtractPath:
    """Tests for extract_path function."""

    def test_returns_nested_value(self) -> None:
        """Follows keys through nested mappings."""
        document = {"a": {"b": {"c": [1, 2]}}}

        assert extract_path(document, ("a", "b", "c")) == [1, 2]

    def test_ignores_sibling_keys(self) -> None:
        """Unrelated keys at every level are skipped."""
        document = {
            "workspace": {"members": []},
            "a": {"other": 1, "b": {"unrelated": "x", "c": "found"}},
        }

        assert extract_path(document, ("a", "b", "c")) == "found"

    def test_raises_missing_field_naming_key(self) -> None:
        """Names the first absent key."""
        with pytest.raises(MissingFieldError, match="missing field 'b'") as exc_info:
            extract_path({"a": {"x": 1}}, ("a", "b", "c"))

        assert exc_info.value.field == "b"

    def test_raises_for_non_mapping(self) -> None:
        """Raises ValueError when an intermediate value is not a table."""
        with pytest.raises(ValueError, match="Expected a table at 'a'"):
            extract_path({"a": [1, 2]}, ("a", "b"))


class TestLoadTestSpecs:
    """Tests for load_test_specs function."""

    def test_loads_specs_in_order(self) -> None:
        """Decodes every record and keeps declaration order."""
        document = tomllib.loads(
            """
[package]
name = "demo"
version = "0.1.0"

[[package.metadata.test-script]]
name = "first"
script = ["true"]

[[package.metadata.test-script]]
name = "second"
timeout = 1500
script = ["echo one", "echo two"]
"""
        )

        specs = load_test_specs(document)

        assert [spec.name for spec in specs] == ["first", "second"]
        assert specs[0].timeout is None
        assert specs[1].timeout == timedelta(milliseconds=1500)
        assert list(specs[1].script) == ["echo one", "echo two"]

    def test_ignores_unknown_keys(self) -> None:
        """Unknown keys in the manifest and in records are ignored."""
        document = {
            "dependencies": {"serde": "1"},
            "package": {
                "name": "demo",
                "metadata": {
                    "docs": {"all-features": True},
                    "test-script": [
                        {"name": "t", "script": [], "description": "ignored"}
                    ],
                },
            },
        }

        specs = load_test_specs(document)

        assert len(specs) == 1
        assert specs[0].name == "t"

    def test_allows_empty_script(self) -> None:
        """An empty script list is accepted."""
        specs = load_test_specs(
            {"package": {"metadata": {"test-script": [{"name": "t", "script": []}]}}}
        )

        assert list(specs[0].script) == []

    @pytest.mark.parametrize(
        ("document", "field"),
        [
            ({}, "package"),
            ({"package": {"name": "demo"}}, "metadata"),
            ({"package": {"metadata": {"docs": {}}}}, "test-script"),
        ],
    )
    def test_raises_for_missing_path(self, document: dict, field: str) -> None:
        """Names the missing key on the path."""
        with pytest.raises(MissingFieldError, match=f"missing field '{field}'"):
            load_test_specs(document)

    def test_raises_when_list_is_not_array(self) -> None:
        """Rejects a test-script value that is not a list."""
        with pytest.raises(ValueError, match="expected an array"):
            load_test_specs({"package": {"metadata": {"test-script": {"name": "t"}}}})

    def test_raises_for_missing_script(self) -> None:
        """The script field is required."""
        with pytest.raises(ValueError, match="Invalid test specification"):
            load_test_specs({"package": {"metadata": {"test-script": [{"name": "t"}]}}})

    def test_raises_for_malformed_record_without_partial_result(self) -> None:
        """One bad record aborts loading entirely."""
        document = {
            "package": {
                "metadata": {
                    "test-script": [
                        {"name": "good", "script": ["true"]},
                        {"name": "bad", "timeout": "10s", "script": ["true"]},
                    ]
                }
            }
        }

        with pytest.raises(ValueError, match="Invalid test specification"):
            load_test_specs(document)


class TestLoadManifest:
    """Tests for reading manifests from disk."""

    def test_loads_manifest_file(self, tmp_path: Path) -> None:
        """Reads and decodes test scripts from a Cargo.toml."""
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            """
[package]
name = "demo"

[[package.metadata.test-script]]
name = "smoke"
timeout = 10
script = ["sleep 5"]
"""
        )

        specs = load_test_specs_from_manifest(manifest)

        assert specs[0].name == "smoke"
        assert specs[0].timeout == timedelta(milliseconds=10)

    def test_accepts_largest_toml_timeout(self, tmp_path: Path) -> None:
        """The largest TOML integer is accepted as a timeout."""
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text(
            """
[[package.metadata.test-script]]
name = "forever"
timeout = 9223372036854775807
script = ["true"]
"""
        )

        specs = load_test_specs_from_manifest(manifest)

        assert specs[0].timeout == timedelta.max

    def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        """Propagates FileNotFoundError for an absent manifest."""
        with pytest.raises(FileNotFoundError):
            load_manifest(tmp_path / "Cargo.toml")

    def test_raises_for_invalid_toml(self, tmp_path: Path) -> None:
        """Raises ValueError for malformed TOML."""
        manifest = tmp_path / "Cargo.toml"
        manifest.write_text("[package\nname = ")

        with pytest.raises(ValueError, match="Invalid TOML"):
            load_manifest(manifest)
