"""Zip backups of the data and uploads directories, and restore from them.

Archives are named ``backup-YYYY-MM-DD-HH-mm.zip`` and hold top-level
``data/`` and ``uploads/`` folders. The fixed-width stamp makes the
lexicographically last file the most recent one.

Two restore flavours exist: :func:`restore_backup` for operators, which
extracts a trusted archive over the root directory, and
:func:`restore_uploaded_archive` for archives uploaded through the admin
dashboard, which only writes inside the data/uploads directories.
"""

from __future__ import annotations

import logging
import re
import zipfile
from datetime import datetime
from pathlib import Path

from pydantic import BaseModel

from clinicsite.audit import AuditLog
from clinicsite.config import SiteConfig

logger = logging.getLogger(__name__)

BACKUP_NAME_RE = re.compile(r"^backup-\d{4}-\d{2}-\d{2}-\d{2}-\d{2}\.zip$")


class UnsafeArchivePathError(ValueError):
    """An archive entry would be written outside its target directory."""


class RestoreSummary(BaseModel):
    """Counts from a guarded restore."""

    data_files: int = 0
    upload_files: int = 0
    skipped: list[str] = []

    def as_dict(self) -> dict[str, int]:
        return {"dataFiles": self.data_files, "uploadFiles": self.upload_files}


def backup_stamp(now: datetime | None = None) -> str:
    """Local-time stamp ``YYYY-MM-DD-HH-mm``."""
    return (now or datetime.now()).strftime("%Y-%m-%d-%H-%M")


def _add_folder(zf: zipfile.ZipFile, folder: Path, arc_root: str) -> int:
    if not folder.is_dir():
        logger.info("Skipping missing folder %s", folder)
        return 0
    count = 0
    for path in sorted(folder.rglob("*")):
        if path.is_file():
            zf.write(path, f"{arc_root}/{path.relative_to(folder).as_posix()}")
            count += 1
    return count


def create_backup(config: SiteConfig, now: datetime | None = None) -> Path:
    """Package the data and uploads directories into a timestamped zip.

    Returns:
        Path of the archive written into the backups directory.
    """
    config.backups_dir.mkdir(parents=True, exist_ok=True)
    out_file = config.backups_dir / f"backup-{backup_stamp(now)}.zip"
    with zipfile.ZipFile(out_file, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        data_count = _add_folder(zf, config.data_dir, "data")
        upload_count = _add_folder(zf, config.uploads_dir, "uploads")
    logger.info(
        "Backup created: %s (%d data, %d upload files)", out_file, data_count, upload_count
    )
    return out_file


def resolve_backup_file(config: SiteConfig, requested: str | Path | None = None) -> Path:
    """Pick the archive to restore.

    An explicit path is used as given (relative paths resolve against the
    root directory). Otherwise the newest ``backup-*.zip`` is chosen.

    Raises:
        FileNotFoundError: No backups directory, or no matching archive.
    """
    if requested:
        path = Path(requested).expanduser()
        return path if path.is_absolute() else config.root_dir / path

    if not config.backups_dir.is_dir():
        raise FileNotFoundError("No backups directory found.")
    names = sorted(p.name for p in config.backups_dir.iterdir() if BACKUP_NAME_RE.match(p.name))
    if not names:
        raise FileNotFoundError("No backup zip files found.")
    return config.backups_dir / names[-1]


def restore_backup(config: SiteConfig, requested: str | Path | None = None) -> Path:
    """Extract an operator-supplied archive over the root directory.

    Existing files are overwritten.

    Raises:
        FileNotFoundError: The archive could not be located.
        zipfile.BadZipFile: The archive is corrupt.
    """
    backup_file = resolve_backup_file(config, requested)
    if not backup_file.is_file():
        raise FileNotFoundError(f"Backup file not found: {backup_file}")
    with zipfile.ZipFile(backup_file) as zf:
        zf.extractall(config.root_dir)
    logger.info("Restore completed from: %s", backup_file)
    return backup_file


def safe_join(base_dir: Path, rel_path: str) -> Path:
    """Join ``rel_path`` under ``base_dir``, refusing anything that escapes it."""
    base = base_dir.resolve()
    dest = (base / rel_path.lstrip("/\\")).resolve()
    if dest != base and base not in dest.parents:
        raise UnsafeArchivePathError(rel_path)
    return dest


def _target_for(entry_name: str, config: SiteConfig) -> tuple[str, Path] | None:
    """Map an archive entry to ``(folder, destination)``, or None to skip it."""
    normalized = entry_name.replace("\\", "/").lstrip("/")
    for folder, base in (("data", config.data_dir), ("uploads", config.uploads_dir)):
        prefix = f"{folder}/"
        if normalized.startswith(prefix):
            sub_path = normalized[len(prefix):]
            if not sub_path:
                return None
            try:
                dest = safe_join(base, sub_path)
            except UnsafeArchivePathError:
                return None
            if dest == base.resolve():
                return None
            return folder, dest
    return None


def restore_uploaded_archive(
    zip_path: Path,
    config: SiteConfig,
    audit_log: AuditLog | None = None,
    user: str = "unknown",
) -> RestoreSummary:
    """Restore an uploaded archive with path-traversal protection.

    Only entries under ``data/`` or ``uploads/`` that resolve inside the
    matching directory are written; everything else is skipped. The
    uploaded archive is deleted afterwards whether or not the restore
    succeeded.

    Raises:
        zipfile.BadZipFile: The upload is not a readable zip archive.
    """
    summary = RestoreSummary()
    try:
        config.data_dir.mkdir(parents=True, exist_ok=True)
        config.uploads_dir.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(zip_path) as zf:
            for info in zf.infolist():
                if info.is_dir():
                    continue
                target = _target_for(info.filename, config)
                if target is None:
                    logger.warning("Skipping archive entry %r", info.filename)
                    summary.skipped.append(info.filename)
                    continue
                folder, dest = target
                dest.parent.mkdir(parents=True, exist_ok=True)
                dest.write_bytes(zf.read(info))
                if folder == "data":
                    summary.data_files += 1
                else:
                    summary.upload_files += 1

        if audit_log is not None:
            audit_log.record(
                "restore_backup",
                user=user,
                restoredData=summary.data_files,
                restoredUploads=summary.upload_files,
            )
        logger.info(
            "Restore completed: %d data, %d upload files, %d skipped",
            summary.data_files, summary.upload_files, len(summary.skipped),
        )
        return summary
    finally:
        try:
            Path(zip_path).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove uploaded archive %s: %s", zip_path, exc)
