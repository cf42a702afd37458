"""Unified configuration loaded from .clinicsite.toml and env vars.

Loading order: defaults → TOML file → env vars.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".clinicsite.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG_PATH = Path.home() / ".config" / "clinicsite" / "config.toml"


class PathsConfig(BaseModel):
    """[paths] section.

    Blank directory values resolve under ``root_dir``.
    """

    root_dir: str = "."
    data_dir: str = ""
    uploads_dir: str = ""
    backups_dir: str = ""


class AdminConfig(BaseModel):
    """[admin] section, the bootstrap account used when users.json is missing."""

    bootstrap_username: str = "admin"
    bootstrap_password: str = ""
    bootstrap_email: str = ""


class SmtpConfig(BaseModel):
    """[smtp] section used by the email contact route."""

    host: str = ""
    port: int = 587
    user: str = ""
    password: str = ""
    from_addr: str = ""
    to_addr: str = ""

    @property
    def sender(self) -> str:
        return self.from_addr or self.user

    @property
    def is_configured(self) -> bool:
        return bool(self.host and self.user and self.password and self.sender)


class StorageConfig(BaseModel):
    """[storage] section.

    ``backup_retention`` caps the number of ``*.backup.<millis>.json``
    files kept per label; 0 keeps all of them.
    """

    backup_retention: int = 0


class LoggingConfig(BaseModel):
    """[logging] section."""

    level: str = "INFO"


class SiteConfig(BaseModel):
    """Top-level configuration for the site's data pipeline."""

    paths: PathsConfig = Field(default_factory=PathsConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)
    smtp: SmtpConfig = Field(default_factory=SmtpConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    # ── Resolved paths ───────────────────────────────────────────

    @property
    def root_dir(self) -> Path:
        return Path(self.paths.root_dir).expanduser().resolve()

    def _under_root(self, value: str, default: str) -> Path:
        if value:
            candidate = Path(value).expanduser()
            return candidate if candidate.is_absolute() else self.root_dir / candidate
        return self.root_dir / default

    @property
    def data_dir(self) -> Path:
        return self._under_root(self.paths.data_dir, "data")

    @property
    def uploads_dir(self) -> Path:
        return self._under_root(self.paths.uploads_dir, "uploads")

    @property
    def backups_dir(self) -> Path:
        return self._under_root(self.paths.backups_dir, "backups")

    @property
    def content_file(self) -> Path:
        return self.data_dir / "content.json"

    @property
    def published_content_file(self) -> Path:
        return self.data_dir / "content.published.json"

    @property
    def posts_file(self) -> Path:
        return self.data_dir / "posts.json"

    @property
    def published_posts_file(self) -> Path:
        return self.data_dir / "posts.published.json"

    @property
    def users_file(self) -> Path:
        return self.data_dir / "users.json"

    @property
    def contacts_file(self) -> Path:
        return self.data_dir / "contacts.json"

    @property
    def audit_file(self) -> Path:
        return self.data_dir / "audit.log"


def load_config(path: str | Path | None = None) -> SiteConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .clinicsite.toml in CWD
    3. ~/.config/clinicsite/config.toml

    Then overlay environment variables.

    Args:
        path: Explicit path to a TOML file.

    Returns:
        Merged SiteConfig.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG_PATH.exists():
            data = _load_toml(GLOBAL_CONFIG_PATH)
            logger.info("Loaded config from %s", GLOBAL_CONFIG_PATH)

    config = SiteConfig.model_validate(data) if data else SiteConfig()
    return _apply_env_vars(config)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: SiteConfig) -> SiteConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "CLINICSITE_ROOT": ("paths", "root_dir"),
        "CLINICSITE_DATA_DIR": ("paths", "data_dir"),
        "CLINICSITE_UPLOADS_DIR": ("paths", "uploads_dir"),
        "CLINICSITE_BACKUPS_DIR": ("paths", "backups_dir"),
        "ADMIN_BOOTSTRAP_USERNAME": ("admin", "bootstrap_username"),
        "ADMIN_BOOTSTRAP_PASSWORD": ("admin", "bootstrap_password"),
        "ADMIN_BOOTSTRAP_EMAIL": ("admin", "bootstrap_email"),
        "SMTP_HOST": ("smtp", "host"),
        "SMTP_USER": ("smtp", "user"),
        "SMTP_PASS": ("smtp", "password"),
        "SMTP_FROM": ("smtp", "from_addr"),
        "SMTP_TO": ("smtp", "to_addr"),
        "CLINICSITE_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    # Integer-typed env vars
    for env_var, (section, field) in {
        "SMTP_PORT": ("smtp", "port"),
        "CLINICSITE_BACKUP_RETENTION": ("storage", "backup_retention"),
    }.items():
        raw = os.environ.get(env_var)
        if raw is None or not raw.strip():
            continue
        try:
            data[section][field] = int(raw)
        except ValueError:
            logger.warning("Ignoring non-integer %s=%r", env_var, raw)

    return SiteConfig.model_validate(data)
