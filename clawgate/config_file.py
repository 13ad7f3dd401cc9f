"""Gateway document file utilities.

Reading: uses tomllib (stdlib, Python >=3.11)
Writing: uses tomli-w, atomically (tempfile + rename)

Every helper here that returns a document returns a new one; callers'
dictionaries are never edited in place.
"""

from __future__ import annotations

import copy
import os
import shutil
import tempfile
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import structlog

from clawgate.errors import ConfigIssue, StorageError
from clawgate.schema import ROOT_ISSUE_PATH, validate_document

logger = structlog.get_logger(__name__)

Document = dict[str, Any]


@dataclass(frozen=True)
class ConfigSnapshot:
    """What was on disk at the start of a run."""

    path: Path
    exists: bool
    valid: bool
    config: Document = field(default_factory=dict)
    issues: list[ConfigIssue] = field(default_factory=list)


def read_config_snapshot(path: Path) -> ConfigSnapshot:
    """Load and validate the document at *path*.

    A missing file is a valid, empty snapshot. Syntax and schema problems are
    reported as issues. Anything else that stops the read raises StorageError.
    """
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return ConfigSnapshot(path=path, exists=False, valid=True)
    except OSError as e:
        raise StorageError(path, e) from e

    try:
        data = tomllib.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.warning("config.parse_failed", path=str(path), error=str(e))
        return ConfigSnapshot(
            path=path,
            exists=True,
            valid=False,
            issues=[ConfigIssue(path=ROOT_ISSUE_PATH, message=f"malformed TOML: {e}")],
        )

    issues = validate_document(data)
    if issues:
        logger.warning("config.schema_invalid", path=str(path), issue_count=len(issues))
    return ConfigSnapshot(path=path, exists=True, valid=not issues, config=data, issues=issues)


def load_config(path: Path) -> Document:
    """Load and parse a clawgate.toml file without validating it."""
    with open(path, "rb") as f:
        return tomllib.load(f)


def _strip_none(value: Any) -> Any:
    # TOML has no null; absent and None mean the same thing in the document.
    if isinstance(value, dict):
        return {k: _strip_none(v) for k, v in value.items() if v is not None}
    if isinstance(value, list):
        return [_strip_none(v) for v in value if v is not None]
    return value


def write_config_file(path: Path, data: Document, *, backup: bool = True) -> None:
    """Atomic write with tempfile + rename.

    Creates parent directories if needed. The previous document, if any, is
    kept next to the new one as ``<name>.bak``. Any OS-level failure is raised
    as StorageError; the original file is untouched in that case.
    """
    import tomli_w

    payload = tomli_w.dumps(_strip_none(data)).encode("utf-8")
    tmp_path: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent, suffix=".tmp", prefix=".clawgate_config_"
        )
        with os.fdopen(fd, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        if backup and path.is_file():
            shutil.copy2(path, path.with_name(path.name + ".bak"))
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as e:
        logger.error("config.write_failed", path=str(path), error=type(e).__name__)
        raise StorageError(path, e) from e
    finally:
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
    logger.info("config.written", path=str(path), bytes=len(payload))


# ---------------------------------------------------------------------------
# Pure document helpers
# ---------------------------------------------------------------------------


def get_section(data: Document, *keys: str) -> Document:
    """Return the table at *keys*, or an empty dict if any level is missing or not a table."""
    current: Any = data
    for key in keys:
        if not isinstance(current, dict):
            return {}
        current = current.get(key)
    return current if isinstance(current, dict) else {}


def merge_documents(base: Document, patch: Document) -> Document:
    """Deep-merge *patch* over *base* and return a new document.

    Tables merge recursively; every other value (arrays included) in *patch*
    replaces the one in *base*.
    """
    merged = copy.deepcopy(base)
    for key, value in patch.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_documents(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def _validate_dotted_key(dotted_key: str) -> list[str]:
    """Validate and split a dotted key. Raises ValueError on empty segments."""
    if not dotted_key or not dotted_key.strip():
        raise ValueError("Key must not be empty")
    keys = dotted_key.split(".")
    if any(not k for k in keys):
        raise ValueError(f"Key contains empty segments: {dotted_key!r}")
    return keys


def get_value(data: Document, dotted_key: str) -> Any:
    """Get a nested value by dotted key (e.g., 'gateway.auth.mode')."""
    keys = _validate_dotted_key(dotted_key)
    current: Any = data
    for key in keys:
        if isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
            continue
        if not isinstance(current, dict) or key not in current:
            raise KeyError(dotted_key)
        current = current[key]
    return current


def set_value(data: Document, dotted_key: str, value: Any) -> Document:
    """Return a copy of *data* with a nested value set by dotted key.

    Missing tables are created along the way. List items are addressed by
    index; an index one past the end appends. Raises ValueError for a key
    that cannot address a list.
    """
    keys = _validate_dotted_key(dotted_key)
    result = copy.deepcopy(data)
    current: Any = result
    for key in keys[:-1]:
        if isinstance(current, list):
            current = current[_list_index(current, key, dotted_key)]
            continue
        if not isinstance(current, dict):
            raise ValueError(f"Cannot set {dotted_key!r}: {key!r} is below a non-table value")
        if key not in current or not isinstance(current[key], (dict, list)):
            current[key] = {}
        current = current[key]
    last = keys[-1]
    if isinstance(current, list):
        index = _list_index(current, last, dotted_key, allow_append=True)
        if index == len(current):
            current.append(value)
        else:
            current[index] = value
        return result
    if not isinstance(current, dict):
        raise ValueError(f"Cannot set {dotted_key!r}: parent is not a table")
    current[last] = value
    return result


def _list_index(items: list, key: str, dotted_key: str, *, allow_append: bool = False) -> int:
    limit = len(items) + 1 if allow_append else len(items)
    if not key.isdigit() or int(key) >= limit:
        raise ValueError(f"Invalid list index {key!r} in {dotted_key!r} (list has {len(items)} item(s))")
    return int(key)


def delete_value(data: Document, dotted_key: str) -> Document:
    """Return a copy of *data* without the value at *dotted_key*.

    List items are addressed by index. Raises KeyError if the key does not exist.
    """
    keys = _validate_dotted_key(dotted_key)
    result = copy.deepcopy(data)
    current: Any = result
    for key in keys[:-1]:
        if isinstance(current, list) and key.isdigit() and int(key) < len(current):
            current = current[int(key)]
            continue
        if not isinstance(current, dict) or key not in current:
            raise KeyError(dotted_key)
        current = current[key]
    last = keys[-1]
    if isinstance(current, list) and last.isdigit() and int(last) < len(current):
        del current[int(last)]
        return result
    if not isinstance(current, dict) or last not in current:
        raise KeyError(dotted_key)
    del current[last]
    return result
