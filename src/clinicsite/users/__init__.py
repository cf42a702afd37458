"""Admin credential records."""

from clinicsite.users.store import UserStore, hash_password, public_user, verify_password

__all__ = [
    "UserStore",
    "hash_password",
    "public_user",
    "verify_password",
]
