"""Append-only audit trail for sensitive actions.

One JSON object per line so the file can be tailed or shipped to a log
collector. Writing is best-effort: a failed audit never fails the action
being audited.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from clinicsite.storage import now_iso

logger = logging.getLogger(__name__)


class AuditLog:
    """JSON-lines audit sink."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def record(self, event: str, **details: object) -> bool:
        """Append one event line.

        Returns:
            True if the line was written, False if the write failed.
        """
        entry: dict[str, object] = {"time": now_iso(), "event": event}
        entry.update(details)
        try:
            line = json.dumps(entry, ensure_ascii=False) + "\n"
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(line)
        except (OSError, TypeError, ValueError) as exc:
            logger.error("Audit write failed for %s: %s", event, exc)
            return False
        return True
