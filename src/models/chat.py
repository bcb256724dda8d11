"""Chat message models and the strict schema for model answers."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class DocumentReference(BaseModel):
    """A cited excerpt of the source document.

    Models cite pages as numbers or as labels such as "iv" or "3-4"; both
    are kept as given.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    page: int | str | None = None
    text: str


class ChatMessage(BaseModel):
    """One turn of a conversation. History is supplied by the caller each call."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str
    references: list[DocumentReference] = Field(default_factory=list)


class ChatAnswer(BaseModel):
    """Expected JSON shape of the generative model's reply.

    Anything that does not validate against this schema is treated as an
    invalid model response; no partial recovery is attempted.
    """

    model_config = ConfigDict(extra="ignore")

    content: str = Field(min_length=1)
    references: list[DocumentReference] = Field(default_factory=list)

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("content must not be blank")
        return value
