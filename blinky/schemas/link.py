from datetime import datetime
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LinkCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    original_url: str = Field(alias="originalUrl", max_length=2048)
    custom_code: str | None = Field(default=None, alias="customCode", pattern=r"^[A-Za-z0-9_-]{1,64}$")

    @field_validator("original_url")
    @classmethod
    def must_be_http_url(cls, v: str) -> str:
        v = v.strip()
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("must be an absolute http(s) URL")
        return v


class LinkOut(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: int
    short_code: str = Field(serialization_alias="shortCode")
    original_url: str = Field(serialization_alias="originalUrl")
    clicks: int
    favicon: str | None = None
    user_id: str = Field(serialization_alias="userId")
    created_at: datetime = Field(serialization_alias="createdAt")

    @field_validator("user_id", mode="before")
    @classmethod
    def stringify_user_id(cls, v):
        return str(v)


class LinkStatsOut(BaseModel):
    clicks: int
    last_clicked: datetime | None = Field(default=None, serialization_alias="lastClicked")
