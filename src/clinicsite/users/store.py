"""JSON-backed admin credential store.

Records live in ``users.json`` as an object keyed by username. Passwords
are stored only as werkzeug password hashes.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from werkzeug.security import check_password_hash, generate_password_hash

from clinicsite.errors import BootstrapError, StoreUnavailableError
from clinicsite.results import FailureKind, Result
from clinicsite.storage import dump_json, now_iso, read_json, write_atomic

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, hashed: str) -> bool:
    if not hashed:
        return False
    try:
        return check_password_hash(hashed, password)
    except ValueError:
        # Hash written by an unsupported scheme
        logger.warning("Unrecognized password hash format")
        return False


def public_user(record: Any) -> dict[str, Any] | None:
    """Return the fields of a user record that are safe to expose."""
    if not isinstance(record, dict):
        return None
    return {
        "username": str(record.get("username") or ""),
        "email": str(record.get("email") or ""),
        "createdAt": record.get("createdAt") or None,
        "lastLoginAt": record.get("lastLoginAt") or None,
    }


class UserStore:
    """CRUD over the credentials file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    # ── Private helpers ──────────────────────────────────────────

    @staticmethod
    def _find(users: dict[str, Any], username: str) -> tuple[str, dict[str, Any]] | None:
        target = str(username or "").strip()
        if not target:
            return None
        if isinstance(users.get(target), dict):
            return target, users[target]
        for key, row in users.items():
            if isinstance(row, dict) and str(row.get("username") or "").strip() == target:
                return key, row
        return None

    # ── File I/O ─────────────────────────────────────────────────

    def read_users(self) -> dict[str, Any]:
        """Load all user records.

        Returns an empty dict when the file is missing.

        Raises:
            StoreUnavailableError: The file is corrupt or not a JSON object.
        """
        if not self._path.exists():
            logger.warning("Users file missing: %s", self._path)
            return {}
        users = read_json(self._path, "{}")
        if not isinstance(users, dict):
            raise StoreUnavailableError(self._path, "users file is not a JSON object")
        return users

    def write_users(self, users: dict[str, Any]) -> None:
        write_atomic(self._path, dump_json(users))

    def ensure_bootstrap(self, username: str, password: str, email: str = "") -> bool:
        """Create the credentials file with one account if it is missing.

        Returns:
            True if a file was created, False if one already existed.

        Raises:
            BootstrapError: The file is missing and no password was supplied.
        """
        if self._path.exists():
            return False
        if not password:
            raise BootstrapError(
                "ADMIN_BOOTSTRAP_PASSWORD is required when users.json is missing"
            )
        username = username or "admin"
        now = now_iso()
        users = {
            username: {
                "username": username,
                "email": email or "",
                "password": hash_password(password),
                "createdAt": now,
                "updatedAt": now,
                "lastLoginAt": None,
            }
        }
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self.write_users(users)
        logger.info("Users file created using bootstrap credentials")
        return True

    # ── Read operations ──────────────────────────────────────────

    def get(self, username: str) -> dict[str, Any] | None:
        """Return the record for ``username``, or None if not found."""
        entry = self._find(self.read_users(), username)
        return entry[1] if entry else None

    # ── Write operations ─────────────────────────────────────────

    def update_last_login(self, username: str, when: str | None = None) -> None:
        """Stamp ``lastLoginAt``. Failures are logged, not raised."""
        try:
            users = self.read_users()
            entry = self._find(users, username)
            if entry is None:
                return
            users[entry[0]]["lastLoginAt"] = when or now_iso()
            self.write_users(users)
        except (OSError, StoreUnavailableError) as exc:
            logger.error("Failed to update last login: %s", exc)

    def authenticate(self, username: str, password: str) -> Result:
        """Check a login attempt.

        Success carries the public user record. Unknown users and wrong
        passwords fail with the same message.
        """
        if not username or not password:
            return Result.fail("Username and password required")
        record = self.get(username)
        if record is None or not verify_password(password, str(record.get("password") or "")):
            return Result.fail("Invalid credentials", FailureKind.UNAUTHORIZED)
        self.update_last_login(str(record.get("username") or username))
        return Result.ok(public_user(self.get(username) or record))

    def update_credentials(
        self,
        current_username: str,
        current_password: str,
        new_username: str | None = None,
        new_password: str | None = None,
    ) -> Result:
        """Change the username and/or password of an account.

        Success data: ``{"user": <public user>, "usernameChanged": bool}``.
        """
        users = self.read_users()
        entry = self._find(users, current_username)
        if entry is None:
            return Result.not_found("Account not found")
        old_key, old_user = entry

        if not verify_password(str(current_password or ""), str(old_user.get("password") or "")):
            return Result.fail("Current password is incorrect", FailureKind.UNAUTHORIZED)

        username = str(new_username or old_key).strip()
        if not username:
            return Result.fail("Username is required")

        existing = self._find(users, username)
        if existing is not None and existing[0] != old_key:
            return Result.fail("Username is already in use", FailureKind.CONFLICT)

        now = now_iso()
        updated = {
            **old_user,
            "username": username,
            "password": hash_password(new_password) if new_password else old_user.get("password"),
            "updatedAt": now,
            "createdAt": old_user.get("createdAt") or now,
            "lastLoginAt": old_user.get("lastLoginAt") or None,
        }
        if username != old_key:
            del users[old_key]
        users[username] = updated
        self.write_users(users)

        return Result.ok({"user": public_user(updated), "usernameChanged": username != old_key})
