"""Daemon configuration merging.

The daemon configuration is a JSON object. Changes are applied as
key-level upserts on the parsed document, never by editing its text:
keys already present keep their position and value unless upserted, and
new keys are appended in upsert order. Serialization is canonical, so
merging the same upserts twice produces byte-identical files.
"""

import json
import logging
import os
import stat
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any

from dockhand.core.errors import ConvergeError, CorruptConfigError
from dockhand.core.paths import DAEMON_CONFIG_PATH

logger = logging.getLogger(__name__)

Upsert = tuple[str, Any]


class ConfigWriteError(ConvergeError):
    """Raised when the merged configuration cannot be written."""


@dataclass(frozen=True, slots=True)
class MergeOutcome:
    """Result of one read-merge-write transaction.

    Attributes:
        document: The merged document.
        changed: Whether the merged document differs from the existing one.
        written: Whether the file was written (False when unchanged or in dry-run).
    """

    document: dict[str, Any]
    changed: bool
    written: bool


def merge(existing: Mapping[str, Any] | None, upserts: Sequence[Upsert]) -> dict[str, Any]:
    """Apply top-level upserts to a configuration document.

    Args:
        existing: Parsed existing document, or None if there is none.
        upserts: Ordered (key, value) pairs to set.

    Returns:
        A new document; the input is not modified.
    """
    document: dict[str, Any] = dict(existing) if existing is not None else {}
    for key, value in upserts:
        document[key] = value
    return document


def parse_document(text: str, path: Path | None = None) -> dict[str, Any]:
    """Parse a serialized configuration document.

    Args:
        text: JSON text.
        path: Source of the text, used in error messages.

    Returns:
        The parsed top-level object.

    Raises:
        CorruptConfigError: If the text is not a JSON object.
    """
    source = path or "daemon configuration"
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise CorruptConfigError(f"Invalid JSON in {source}: {e}", path) from e

    if not isinstance(data, dict):
        msg = f"Expected a JSON object in {source}, found {type(data).__name__}"
        raise CorruptConfigError(msg, path)
    return data


def serialize(document: Mapping[str, Any]) -> str:
    """Serialize a document in canonical form (2-space indent, trailing newline)."""
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def load_daemon_config(path: Path | None = None) -> dict[str, Any] | None:
    """Load the daemon configuration.

    Args:
        path: Configuration file. If None, uses /etc/docker/daemon.json.

    Returns:
        The parsed document, or None if the file does not exist.

    Raises:
        CorruptConfigError: If the file cannot be read or parsed.
    """
    config_path = path or DAEMON_CONFIG_PATH
    try:
        text = config_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except UnicodeDecodeError as e:
        raise CorruptConfigError(f"Cannot decode {config_path}: {e}", config_path) from e
    except OSError as e:
        raise CorruptConfigError(f"Cannot read {config_path}: {e}", config_path) from e

    return parse_document(text, config_path)


def save_daemon_config(document: Mapping[str, Any], path: Path | None = None) -> Path:
    """Write the daemon configuration atomically.

    The document is written to a temporary file in the same directory and
    moved into place with os.replace(). An existing file keeps its
    permission bits; a new one is created 0644. The temporary file is
    cleaned up on failure.

    Args:
        document: Document to write.
        path: Configuration file. If None, uses /etc/docker/daemon.json.

    Returns:
        Path where the configuration was saved.

    Raises:
        ConfigWriteError: If the file cannot be written.
    """
    config_path = path or DAEMON_CONFIG_PATH

    tmp_path: Path | None = None
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            mode = stat.S_IMODE(config_path.stat().st_mode)
        except FileNotFoundError:
            mode = 0o644
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(serialize(document))
        os.chmod(tmp_path, mode)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigWriteError(f"Failed to write {config_path}: {e}") from e

    return config_path


def apply_upserts(
    upserts: Sequence[Upsert],
    path: Path | None = None,
    *,
    dry_run: bool = False,
) -> MergeOutcome:
    """Merge upserts into the configuration file in one transaction.

    A merge whose canonical serialization equals the existing document's
    does not rewrite the file. Comparing serialized text keeps `1442` and
    `1442.0` distinct.

    Args:
        upserts: Ordered (key, value) pairs to set.
        path: Configuration file. If None, uses /etc/docker/daemon.json.
        dry_run: Compute the merge without writing.

    Returns:
        MergeOutcome describing the merged document.

    Raises:
        CorruptConfigError: If the existing file cannot be read or parsed.
        ConfigWriteError: If the merged document cannot be written.
    """
    config_path = path or DAEMON_CONFIG_PATH
    existing = load_daemon_config(config_path)
    document = merge(existing, upserts)

    if existing is not None and serialize(document) == serialize(existing):
        logger.info("%s already holds %s", config_path, ", ".join(k for k, _ in upserts))
        return MergeOutcome(document=document, changed=False, written=False)

    if dry_run:
        logger.info("Dry-run: would write %s", config_path)
        return MergeOutcome(document=document, changed=True, written=False)

    save_daemon_config(document, config_path)
    logger.info("Wrote %s", config_path)
    return MergeOutcome(document=document, changed=True, written=True)
