"""Smoke tests for the CLI."""

import json
import zipfile
from pathlib import Path

import pytest
from typer.testing import CliRunner

from clinicsite import __version__
from clinicsite.cli import app

_ENV_KEYS = (
    "CLINICSITE_ROOT", "CLINICSITE_DATA_DIR", "CLINICSITE_UPLOADS_DIR",
    "CLINICSITE_BACKUPS_DIR", "ADMIN_BOOTSTRAP_PASSWORD",
)


@pytest.fixture
def runner() -> CliRunner:
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def _write_config(root: Path, password: str = "bootstrap-pw") -> Path:
    path = root / "site.toml"
    path.write_text(
        f'[paths]\nroot_dir = "{root.as_posix()}"\n\n'
        f'[admin]\nbootstrap_password = "{password}"\n',
        encoding="utf-8",
    )
    return path


class TestVersion:
    def test_version_flag(self, runner: CliRunner):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestInit:
    def test_creates_data_files(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(app, ["--config", str(_write_config(tmp_path)), "init"])

        assert result.exit_code == 0, result.output
        assert "Data directory ready" in result.output
        for name in ("content.json", "content.published.json", "posts.json", "users.json"):
            assert (tmp_path / "data" / name).exists()

    def test_missing_bootstrap_password_exits_1(self, runner: CliRunner, tmp_path: Path):
        config = _write_config(tmp_path, password="")
        result = runner.invoke(app, ["--config", str(config), "init"])

        assert result.exit_code == 1
        assert "ADMIN_BOOTSTRAP_PASSWORD" in result.output
        assert not (tmp_path / "data" / "users.json").exists()


class TestPublish:
    def test_copies_draft(self, runner: CliRunner, tmp_path: Path):
        config = str(_write_config(tmp_path))
        runner.invoke(app, ["--config", config, "init"])
        draft = tmp_path / "data" / "content.json"
        draft.write_text('{"siteInfo": {"title": "New"}}', encoding="utf-8")

        result = runner.invoke(app, ["--config", config, "publish"])

        assert result.exit_code == 0, result.output
        published = tmp_path / "data" / "content.published.json"
        assert published.read_bytes() == draft.read_bytes()
        audit = (tmp_path / "data" / "audit.log").read_text(encoding="utf-8").splitlines()
        assert json.loads(audit[-1])["event"] == "publish_content"

    def test_missing_draft_exits_1(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(app, ["--config", str(_write_config(tmp_path)), "publish"])
        assert result.exit_code == 1
        assert "Publish failed" in result.output


class TestBackupRestore:
    def test_backup_then_restore(self, runner: CliRunner, tmp_path: Path):
        config = str(_write_config(tmp_path))
        runner.invoke(app, ["--config", config, "init"])
        content = tmp_path / "data" / "content.json"
        original = content.read_bytes()

        result = runner.invoke(app, ["--config", config, "backup"])
        assert result.exit_code == 0, result.output
        archives = list((tmp_path / "backups").glob("backup-*.zip"))
        assert len(archives) == 1
        with zipfile.ZipFile(archives[0]) as zf:
            assert "data/content.json" in zf.namelist()

        content.write_text("{}", encoding="utf-8")
        result = runner.invoke(app, ["--config", config, "restore"])

        assert result.exit_code == 0, result.output
        assert content.read_bytes() == original

    def test_restore_without_backups_exits_1(self, runner: CliRunner, tmp_path: Path):
        result = runner.invoke(app, ["--config", str(_write_config(tmp_path)), "restore"])
        assert result.exit_code == 1
        assert "No backups directory found" in result.output

    def test_restore_corrupt_archive_exits_1(self, runner: CliRunner, tmp_path: Path):
        bad = tmp_path / "bad.zip"
        bad.write_bytes(b"nope")
        result = runner.invoke(
            app, ["--config", str(_write_config(tmp_path)), "restore", str(bad)]
        )
        assert result.exit_code == 1


class TestContacts:
    def test_lists_contacts(self, runner: CliRunner, tmp_path: Path):
        config = str(_write_config(tmp_path))
        runner.invoke(app, ["--config", config, "init"])
        (tmp_path / "data" / "contacts.json").write_text(
            json.dumps(
                [
                    {
                        "id": "c-1",
                        "firstName": "Ada",
                        "lastName": "Lovelace",
                        "email": "ada@example.com",
                        "phone": "555",
                        "concern": "support",
                        "createdAt": "2024-01-01T00:00:00.000Z",
                    }
                ]
            ),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["--config", config, "contacts"])

        assert result.exit_code == 0, result.output
        assert "Ada Lovelace" in result.output
        assert "1 total" in result.output

    def test_empty_inbox(self, runner: CliRunner, tmp_path: Path):
        config = str(_write_config(tmp_path))
        runner.invoke(app, ["--config", config, "init"])
        result = runner.invoke(app, ["--config", config, "contacts"])
        assert result.exit_code == 0
        assert "No contact requests found" in result.output

    def test_corrupt_contacts_file_exits_1(self, runner: CliRunner, tmp_path: Path):
        config = str(_write_config(tmp_path))
        runner.invoke(app, ["--config", config, "init"])
        (tmp_path / "data" / "contacts.json").write_text("{", encoding="utf-8")
        result = runner.invoke(app, ["--config", config, "contacts"])
        assert result.exit_code == 1
        assert "Server error" in result.output
