"""Tests for SiteConfig, TOML loading and env var overrides."""

from pathlib import Path
from unittest.mock import patch

import pytest
from clinicsite.config import SiteConfig, SmtpConfig, load_config

_ENV_KEYS = (
    "CLINICSITE_ROOT", "CLINICSITE_DATA_DIR", "CLINICSITE_UPLOADS_DIR",
    "CLINICSITE_BACKUPS_DIR", "ADMIN_BOOTSTRAP_USERNAME", "ADMIN_BOOTSTRAP_PASSWORD",
    "ADMIN_BOOTSTRAP_EMAIL", "SMTP_HOST", "SMTP_PORT", "SMTP_USER", "SMTP_PASS",
    "SMTP_FROM", "SMTP_TO", "CLINICSITE_LOG_LEVEL",
    "CLINICSITE_BACKUP_RETENTION",
)


class TestSiteConfigDefaults:
    def test_default_paths_resolve_under_root(self, tmp_path):
        cfg = SiteConfig.model_validate({"paths": {"root_dir": str(tmp_path)}})
        root = tmp_path.resolve()
        assert cfg.data_dir == root / "data"
        assert cfg.uploads_dir == root / "uploads"
        assert cfg.backups_dir == root / "backups"
        assert cfg.content_file == root / "data" / "content.json"
        assert cfg.published_posts_file == root / "data" / "posts.published.json"
        assert cfg.audit_file == root / "data" / "audit.log"

    def test_relative_dir_joins_root(self, tmp_path):
        cfg = SiteConfig.model_validate(
            {"paths": {"root_dir": str(tmp_path), "data_dir": "store"}}
        )
        assert cfg.data_dir == tmp_path.resolve() / "store"

    def test_absolute_dir_used_as_is(self, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        cfg = SiteConfig.model_validate({"paths": {"backups_dir": str(elsewhere)}})
        assert cfg.backups_dir == elsewhere

    def test_default_sections(self):
        cfg = SiteConfig()
        assert cfg.admin.bootstrap_username == "admin"
        assert cfg.smtp.port == 587
        assert cfg.storage.backup_retention == 0
        assert cfg.logging.level == "INFO"


class TestSmtpConfig:
    def test_sender_falls_back_to_user(self):
        assert SmtpConfig(user="bot@example.com").sender == "bot@example.com"
        assert SmtpConfig(user="u", from_addr="f@example.com").sender == "f@example.com"

    def test_is_configured_requires_credentials(self):
        assert SmtpConfig(host="smtp.example.com", user="u").is_configured is False
        assert SmtpConfig(host="smtp.example.com", user="u", password="p").is_configured is True


class TestLoadConfig:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch, tmp_path):
        """Remove env vars that _apply_env_vars reads so tests see TOML values."""
        for key in _ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        with patch("clinicsite.config.GLOBAL_CONFIG_PATH", tmp_path / "missing.toml"):
            yield

    def test_explicit_path(self, tmp_path: Path):
        path = tmp_path / "site.toml"
        path.write_text(
            '[smtp]\nhost = "smtp.example.com"\nport = 465\n\n[storage]\nbackup_retention = 5\n',
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.smtp.host == "smtp.example.com"
        assert cfg.smtp.port == 465
        assert cfg.storage.backup_retention == 5

    def test_missing_explicit_path_gives_defaults(self, tmp_path: Path):
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg == SiteConfig()

    def test_searches_cwd(self, tmp_path: Path, monkeypatch):
        (tmp_path / ".clinicsite.toml").write_text(
            '[logging]\nlevel = "DEBUG"\n', encoding="utf-8"
        )
        monkeypatch.chdir(tmp_path)
        assert load_config().logging.level == "DEBUG"

    def test_unknown_sections_are_ignored(self, tmp_path: Path):
        path = tmp_path / "site.toml"
        path.write_text(
            '[site]\nenvironment = "production"\n\n[logging]\nlevel = "WARNING"\n',
            encoding="utf-8",
        )
        cfg = load_config(path)
        assert cfg.logging.level == "WARNING"
        assert "site" not in cfg.model_dump()

    def test_invalid_toml_is_ignored(self, tmp_path: Path):
        path = tmp_path / "bad.toml"
        path.write_text("[smtp\nhost=", encoding="utf-8")
        assert load_config(path).smtp.host == ""

    def test_env_overrides_toml(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "site.toml"
        path.write_text('[smtp]\nhost = "from-toml"\n', encoding="utf-8")
        monkeypatch.setenv("SMTP_HOST", "from-env")
        monkeypatch.setenv("SMTP_PASS", "secret")
        monkeypatch.setenv("ADMIN_BOOTSTRAP_PASSWORD", "boot")

        cfg = load_config(path)

        assert cfg.smtp.host == "from-env"
        assert cfg.smtp.password == "secret"
        assert cfg.admin.bootstrap_password == "boot"

    def test_integer_env_vars(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SMTP_PORT", "2525")
        monkeypatch.setenv("CLINICSITE_BACKUP_RETENTION", "10")
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg.smtp.port == 2525
        assert cfg.storage.backup_retention == 10

    def test_non_integer_env_var_is_ignored(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("SMTP_PORT", "not-a-port")
        assert load_config(tmp_path / "nope.toml").smtp.port == 587

    def test_root_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("CLINICSITE_ROOT", str(tmp_path))
        cfg = load_config(tmp_path / "nope.toml")
        assert cfg.data_dir == tmp_path.resolve() / "data"
