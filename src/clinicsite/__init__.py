"""clinicsite: content pipeline for a clinic marketing website.

Draft/published site content, posts, contact-form routing, audit trail,
and archive backup/restore, all persisted as flat JSON files.
"""

__version__ = "0.1.0"
