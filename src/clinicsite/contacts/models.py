"""Contact form submission models."""

from __future__ import annotations

import secrets
import string
import time
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_BASE36 = string.digits + string.ascii_lowercase


class Concern(StrEnum):
    """Primary concern selected on the contact form."""

    DIAGNOSIS = "diagnosis"
    TREATMENT = "treatment"
    GENETIC = "genetic"
    SUPPORT = "support"


class ContactSubmission(BaseModel):
    """One stored contact request. Append-only once written."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    first_name: str
    last_name: str
    email: str
    phone: str
    concern: Concern
    message: str = ""
    created_at: str

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def generate_contact_id() -> str:
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"c-{int(time.time() * 1000)}-{suffix}"
