"""Content domain: draft/published site document and contact log."""

from clinicsite.content.defaults import DEFAULT_CONTENT, default_content, ensure_defaults
from clinicsite.content.store import ContentStore

__all__ = [
    "DEFAULT_CONTENT",
    "ContentStore",
    "default_content",
    "ensure_defaults",
]
