"""
Connection record — the per-user set of third-party credentials.

Attributes are snake_case in Python; the camelCase aliases are the field
names used at the storage boundary::

    {"userId": "...", "apiKey": "...", "githubToken": "...", "mondayToken": "..."}
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

CREDENTIAL_FIELDS = ("api_key", "github_token", "monday_token")


class ConnectionUpdate(BaseModel):
    """A partial update: only fields that are explicitly set are applied."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    api_key: Optional[str] = None
    github_token: Optional[str] = None
    monday_token: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class Connection(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    user_id: str
    api_key: Optional[str] = None
    github_token: Optional[str] = None
    monday_token: Optional[str] = None

    @classmethod
    def empty(cls, user_id: str) -> "Connection":
        return cls(user_id=user_id)

    def merge(self, update: ConnectionUpdate) -> "Connection":
        """Return a copy with the update's set fields applied; siblings untouched."""
        return self.model_copy(update=update.changes())

    def without(self, *fields: str) -> "Connection":
        """Return a copy with the named credential fields removed."""
        unknown = set(fields) - set(CREDENTIAL_FIELDS)
        if unknown:
            raise ValueError(f"Cannot remove fields: {sorted(unknown)}")
        return self.model_copy(update={f: None for f in fields})

    def has(self, field: str) -> bool:
        return bool(getattr(self, field, None))

    def to_record(self) -> dict:
        """Storage shape: camelCase keys, absent fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)

    @classmethod
    def from_record(cls, record: dict) -> "Connection":
        return cls.model_validate(record)
