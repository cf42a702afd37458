"""Draft/published site content and the contact submission log.

Two independent copies of the site document live on disk: the draft the
admin edits and the published copy the public site reads. Publishing
copies the draft file byte for byte, so the live site shows exactly what
was drafted.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from clinicsite.config import SiteConfig
from clinicsite.content.defaults import default_content, ensure_defaults
from clinicsite.errors import ClinicSiteError, StoreUnavailableError
from clinicsite.posts.store import PostStore
from clinicsite.storage import (
    backup_before_write,
    dump_json,
    ensure_dir,
    read_json,
    write_atomic,
)
from clinicsite.users.store import UserStore

logger = logging.getLogger(__name__)

DRAFT_BACKUP_LABEL = "content.draft.backup"
PUBLISHED_BACKUP_LABEL = "content.published.backup"


class ContentStore:
    """File-backed store for site content and contact submissions."""

    def __init__(self, config: SiteConfig) -> None:
        self._config = config
        self._retention = config.storage.backup_retention

    @property
    def config(self) -> SiteConfig:
        return self._config

    # ── Private helpers ──────────────────────────────────────────

    def _read_document(self, path: Path) -> dict[str, Any]:
        doc = read_json(path, dump_json(default_content()))
        if not isinstance(doc, dict):
            raise StoreUnavailableError(path, "content document is not a JSON object")
        return ensure_defaults(doc)

    # ── Lifecycle ────────────────────────────────────────────────

    def initialize(self) -> None:
        """Create every data file that does not exist yet.

        Raises:
            BootstrapError: users.json is missing and no bootstrap
                password is configured. Callers must stop serving.
        """
        cfg = self._config
        ensure_dir(cfg.data_dir)
        ensure_dir(cfg.uploads_dir)

        UserStore(cfg.users_file).ensure_bootstrap(
            cfg.admin.bootstrap_username,
            cfg.admin.bootstrap_password,
            cfg.admin.bootstrap_email,
        )

        if cfg.content_file.exists():
            logger.info("Content file found")
        else:
            cfg.content_file.write_text(dump_json(default_content()), encoding="utf-8")
            logger.info("Content file created with default content")

        if cfg.published_content_file.exists():
            logger.info("Published content file found")
        else:
            cfg.published_content_file.write_bytes(cfg.content_file.read_bytes())
            logger.info("Published content file created from draft")

        if not cfg.contacts_file.exists():
            cfg.contacts_file.write_text(dump_json([]), encoding="utf-8")
            logger.info("Contacts file created")

        PostStore(cfg.data_dir, retention=self._retention).ensure_files()

    # ── Content ──────────────────────────────────────────────────

    def read_draft(self) -> dict[str, Any]:
        return self._read_document(self._config.content_file)

    def read_published(self) -> dict[str, Any]:
        return self._read_document(self._config.published_content_file)

    def write_draft(self, content: dict[str, Any]) -> None:
        """Replace the draft document.

        Only the top-level type is checked; schema correctness is the
        caller's responsibility.
        """
        if not isinstance(content, dict):
            raise TypeError("Invalid content format")
        path = self._config.content_file
        backup_before_write(path, DRAFT_BACKUP_LABEL, retention=self._retention)
        write_atomic(path, dump_json(content))

    def publish(self) -> None:
        """Copy the draft file verbatim over the published file."""
        draft = self._config.content_file.read_bytes()
        path = self._config.published_content_file
        backup_before_write(path, PUBLISHED_BACKUP_LABEL, retention=self._retention)
        write_atomic(path, draft)
        logger.info("Content published to live")

    def form_route(self) -> Any:
        """``contactSection.formRoute`` of the published document.

        Returns None when the published document cannot be read, so a
        broken content file never blocks a contact submission.
        """
        try:
            content = self.read_published()
        except (OSError, ClinicSiteError) as exc:
            logger.warning("Could not read form route from published content: %s", exc)
            return None
        section = content.get("contactSection")
        return section.get("formRoute") if isinstance(section, dict) else None

    # ── Contacts ─────────────────────────────────────────────────

    def read_contacts(self) -> list[Any]:
        path = self._config.contacts_file
        contacts = read_json(path, "[]")
        if not isinstance(contacts, list):
            raise StoreUnavailableError(path, "contacts file is not a JSON array")
        return contacts

    def append_contact(self, record: dict[str, Any]) -> None:
        """Append one submission and rewrite the whole list in place."""
        contacts = self.read_contacts()
        contacts.append(record)
        self._config.contacts_file.write_text(dump_json(contacts), encoding="utf-8")
