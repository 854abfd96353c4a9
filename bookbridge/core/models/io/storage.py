"""Object storage I/O models."""

from __future__ import annotations

from pydantic import BaseModel


class StoredObjectRead(BaseModel):
    """Schema describing an uploaded object."""

    bucket: str
    key: str
    size: int
    content_type: str
    public_url: str
