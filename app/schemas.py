from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class LinkCreate(BaseModel):
    # Non-strings reach crud and fail the URL check there
    url: Any = None
    code: str | None = None

class LinkOut(BaseModel):
    id: int
    code: str
    target_url: str
    clicks: int
    last_clicked: datetime | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    @field_validator("last_clicked", "created_at")
    @classmethod
    def assume_utc(cls, value: datetime | None) -> datetime | None:
        # SQLite hands back now() as naive UTC
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

class ErrorOut(BaseModel):
    error: str

class MessageOut(BaseModel):
    ok: bool
    detail: str

class HealthOut(BaseModel):
    ok: bool
    version: str
    database: str
    uptime: str | None = None
    timestamp: str | None = None
    error: str | None = None
