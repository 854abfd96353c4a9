"""Ask-AI I/O models."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class AskRequest(BaseModel):
    """A study doubt sent to the assistant."""

    model_config = ConfigDict(str_strip_whitespace=True)

    question: str = Field(min_length=1, max_length=2000)


class AskResponse(BaseModel):
    """The assistant's answer."""

    answer: str
