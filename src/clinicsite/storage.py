"""File persistence primitives shared by every JSON-backed store.

Writes go through a temp-file-then-rename so readers never observe a
half-written file. Mutations of content and post files are preceded by a
best-effort point-in-time copy of the previous file.
"""

from __future__ import annotations

import json
import logging
import os
import re
import time
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from clinicsite.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"


def now_iso() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a "Z" suffix."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def ensure_dir(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)


def dump_json(value: Any) -> str:
    """Serialize to the on-disk shape: 2-space indent, UTF-8 text."""
    return json.dumps(value, indent=2, ensure_ascii=False)


def read_json(path: Path, fallback_raw: str) -> Any:
    """Parse a JSON file, or ``fallback_raw`` when the file is missing.

    Raises:
        StoreUnavailableError: The file exists but is not valid JSON.
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raw = fallback_raw
    except UnicodeDecodeError as exc:
        raise StoreUnavailableError(path, f"not UTF-8 text ({exc.reason})") from exc
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StoreUnavailableError(path, f"invalid JSON ({exc})") from exc


def write_atomic(path: Path, data: str | bytes) -> None:
    """Replace ``path`` with ``data`` via a sibling temp file and rename.

    Bytes are written untouched; text is encoded as UTF-8.
    """
    tmp_path = path.with_name(path.name + TMP_SUFFIX)
    if isinstance(data, bytes):
        tmp_path.write_bytes(data)
    else:
        tmp_path.write_text(data, encoding="utf-8")
    os.replace(tmp_path, path)


def backup_before_write(path: Path, label: str, *, retention: int = 0) -> Path | None:
    """Copy the current contents of ``path`` to ``<label>.<millis>.json``.

    The copy lands in the same directory as ``path``. Failures are logged
    and never raised; a missing source simply means nothing to back up.

    Returns:
        The backup path, or None when no backup was written.
    """
    try:
        current = path.read_bytes()
        backup_path = path.parent / f"{label}.{int(time.time() * 1000)}.json"
        backup_path.write_bytes(current)
        logger.info("Backup written: %s", backup_path.name)
    except OSError as exc:
        logger.warning("Backup skipped for %s: %s", path.name, exc)
        return None

    if retention > 0:
        prune_backups(path.parent, label, keep=retention)
    return backup_path


def list_backups(directory: Path, label: str) -> list[Path]:
    """Return backup files for ``label`` ordered oldest first."""
    pattern = re.compile(rf"^{re.escape(label)}\.(\d+)\.json$")
    found: list[tuple[int, Path]] = []
    for entry in directory.iterdir():
        match = pattern.match(entry.name)
        if match:
            found.append((int(match.group(1)), entry))
    return [p for _, p in sorted(found)]


def prune_backups(directory: Path, label: str, *, keep: int) -> list[Path]:
    """Delete the oldest backups of ``label`` so that ``keep`` remain."""
    removed: list[Path] = []
    try:
        backups = list_backups(directory, label)
        for stale in backups[: max(len(backups) - keep, 0)]:
            stale.unlink()
            removed.append(stale)
    except OSError as exc:
        logger.warning("Backup pruning failed for %s: %s", label, exc)
    if removed:
        logger.info("Pruned %d old %s file(s)", len(removed), label)
    return removed
