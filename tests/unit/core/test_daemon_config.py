"""Unit tests for daemon configuration merging.

Tests for the key-level merge, canonical serialization and the
read-merge-write transaction.
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from dockhand.core.daemon_config import (
    ConfigWriteError,
    apply_upserts,
    load_daemon_config,
    merge,
    parse_document,
    save_daemon_config,
    serialize,
)
from dockhand.core.errors import CorruptConfigError


class TestMerge:
    """Tests for merge function."""

    def test_into_empty(self) -> None:
        """Merging into nothing yields exactly the upserts."""
        assert merge(None, [("mtu", 1442)]) == {"mtu": 1442}

    def test_preserves_unrelated_keys(self) -> None:
        """Unrelated keys survive with their values."""
        assert merge({"foo": "bar"}, [("mtu", 1500)]) == {"foo": "bar", "mtu": 1500}

    def test_existing_key_keeps_position(self) -> None:
        """Upserting an existing key replaces its value in place."""
        result = merge({"mtu": 1500, "debug": True}, [("mtu", 1442)])

        assert list(result.items()) == [("mtu", 1442), ("debug", True)]

    def test_new_keys_appended_in_order(self) -> None:
        """New keys follow existing ones in upsert order."""
        result = merge({"a": 1}, [("log-driver", "json-file"), ("log-opts", {})])
        assert list(result) == ["a", "log-driver", "log-opts"]

    def test_does_not_mutate_input(self) -> None:
        """The existing document is left untouched."""
        existing = {"foo": "bar"}
        merge(existing, [("mtu", 1500)])
        assert existing == {"foo": "bar"}


class TestParseDocument:
    """Tests for parse_document function."""

    def test_object(self) -> None:
        """A JSON object is parsed."""
        assert parse_document('{"mtu": 1500}') == {"mtu": 1500}

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Invalid JSON raises CorruptConfigError carrying the path."""
        path = tmp_path / "daemon.json"

        with pytest.raises(CorruptConfigError, match="Invalid JSON") as exc_info:
            parse_document("{mtu: 1500", path)

        assert exc_info.value.path == path

    def test_non_object(self) -> None:
        """A JSON array at top level is not a configuration document."""
        with pytest.raises(CorruptConfigError, match="found list"):
            parse_document("[1, 2]")


class TestSerialize:
    """Tests for serialize function."""

    def test_canonical_form(self) -> None:
        """Two-space indent and a trailing newline."""
        assert serialize({"mtu": 1500}) == '{\n  "mtu": 1500\n}\n'

    def test_non_ascii_kept(self) -> None:
        """Non-ASCII values are written as-is."""
        assert "Äther" in serialize({"label": "Äther"})


class TestLoadAndSave:
    """Tests for load_daemon_config and save_daemon_config."""

    def test_load_missing(self, daemon_config_path: Path) -> None:
        """A missing file loads as None."""
        assert load_daemon_config(daemon_config_path) is None

    def test_save_creates_parent(self, daemon_config_path: Path) -> None:
        """Saving creates the directory and writes canonical JSON."""
        save_daemon_config({"mtu": 1442}, daemon_config_path)

        assert daemon_config_path.read_text() == serialize({"mtu": 1442})
        assert daemon_config_path.stat().st_mode & 0o777 == 0o644

    def test_load_undecodable(self, daemon_config_path: Path) -> None:
        """Bytes that are not UTF-8 raise CorruptConfigError carrying the path."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_bytes(b'{"foo": "\xff"}')

        with pytest.raises(CorruptConfigError, match="Cannot decode") as exc_info:
            load_daemon_config(daemon_config_path)

        assert exc_info.value.path == daemon_config_path

    def test_save_keeps_existing_mode(self, daemon_config_path: Path) -> None:
        """Rewriting an existing file keeps its permission bits."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_text('{"mtu": 1500}')
        daemon_config_path.chmod(0o600)

        save_daemon_config({"mtu": 1442}, daemon_config_path)

        assert daemon_config_path.stat().st_mode & 0o777 == 0o600

    def test_save_leaves_no_temp_files(self, daemon_config_path: Path) -> None:
        """Only the target file remains after an atomic write."""
        save_daemon_config({"mtu": 1442}, daemon_config_path)
        assert [p.name for p in daemon_config_path.parent.iterdir()] == ["daemon.json"]

    def test_save_failure_cleans_up(self, daemon_config_path: Path) -> None:
        """A failed replace removes the temporary file and raises."""
        with (
            patch("dockhand.core.daemon_config.os.replace", side_effect=OSError("read-only")),
            pytest.raises(ConfigWriteError, match="read-only"),
        ):
            save_daemon_config({"mtu": 1442}, daemon_config_path)

        assert list(daemon_config_path.parent.iterdir()) == []

    def test_write_error_is_fatal(self) -> None:
        """Write errors abort a run."""
        assert ConfigWriteError("x").fatal is True


class TestApplyUpserts:
    """Tests for apply_upserts function."""

    def test_fresh_file(self, daemon_config_path: Path) -> None:
        """A missing file is created from the upserts alone."""
        outcome = apply_upserts([("mtu", 1442)], daemon_config_path)

        assert outcome.changed
        assert outcome.written
        assert json.loads(daemon_config_path.read_text()) == {"mtu": 1442}

    def test_preserves_existing_keys(self, daemon_config_path: Path) -> None:
        """Existing keys survive the merge."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_text('{"foo": "bar"}')

        apply_upserts([("mtu", 1500)], daemon_config_path)

        assert json.loads(daemon_config_path.read_text()) == {"foo": "bar", "mtu": 1500}

    def test_rerun_is_byte_identical(self, daemon_config_path: Path) -> None:
        """Merging the same upserts twice does not change the file."""
        upserts = [("log-driver", "json-file"), ("log-opts", {"max-size": "10m"})]
        apply_upserts(upserts, daemon_config_path)
        first = daemon_config_path.read_bytes()

        outcome = apply_upserts(upserts, daemon_config_path)

        assert not outcome.changed
        assert not outcome.written
        assert daemon_config_path.read_bytes() == first

    def test_unchanged_document_not_rewritten(self, daemon_config_path: Path) -> None:
        """An equal document keeps its original formatting."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_text('{"mtu":1500}')

        outcome = apply_upserts([("mtu", 1500)], daemon_config_path)

        assert not outcome.changed
        assert daemon_config_path.read_text() == '{"mtu":1500}'

    def test_corrupt_file_untouched(self, daemon_config_path: Path) -> None:
        """A corrupt document raises and is not overwritten."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_text("not json")

        with pytest.raises(CorruptConfigError):
            apply_upserts([("mtu", 1500)], daemon_config_path)

        assert daemon_config_path.read_text() == "not json"

    def test_float_value_replaced_by_integer(self, daemon_config_path: Path) -> None:
        """An equal number of another JSON type is rewritten with the upserted type."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_text('{"mtu": 1442.0}')

        outcome = apply_upserts([("mtu", 1442)], daemon_config_path)

        assert outcome.changed
        assert outcome.written
        assert daemon_config_path.read_text() == '{\n  "mtu": 1442\n}\n'

    def test_undecodable_file_untouched(self, daemon_config_path: Path) -> None:
        """A file that is not UTF-8 raises and is not overwritten."""
        daemon_config_path.parent.mkdir(parents=True)
        daemon_config_path.write_bytes(b'{"foo": "\xff"}')

        with pytest.raises(CorruptConfigError, match="Cannot decode"):
            apply_upserts([("mtu", 1500)], daemon_config_path)

        assert daemon_config_path.read_bytes() == b'{"foo": "\xff"}'

    def test_dry_run(self, daemon_config_path: Path) -> None:
        """Dry-run reports the change but writes nothing."""
        outcome = apply_upserts([("mtu", 1442)], daemon_config_path, dry_run=True)

        assert outcome.changed
        assert not outcome.written
        assert outcome.document == {"mtu": 1442}
        assert not daemon_config_path.exists()
