"""Artifact schema: one detected block of generated content."""

from __future__ import annotations

import hashlib
from datetime import datetime
from typing import Any
from zoneinfo import ZoneInfo

from pydantic import ConfigDict, Field, model_validator

from .base import SchemaBase


def _now_iso() -> str:
    return datetime.now(ZoneInfo("UTC")).isoformat()


class Artifact(SchemaBase):
    """A validated, classified and titled block of content.

    Instances are frozen; a re-detection produces a new record rather than
    editing an existing one.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(min_length=1)
    title: str = Field(min_length=1)
    language: str = Field(default="text")
    timestamp: str = Field(default_factory=_now_iso)  # ISO-8601
    content_length: int = Field(default=0, alias="contentLength")

    @model_validator(mode="before")
    @classmethod
    def _fill_content_length(cls, data: Any) -> Any:
        if isinstance(data, dict):
            content = data.get("content")
            has_length = data.get("content_length") is not None or data.get("contentLength") is not None
            if isinstance(content, str) and not has_length:
                data = {**data, "content_length": len(content.strip())}
        return data

    @property
    def artifact_id(self) -> str:
        """Derived identity: language plus a digest of content and title."""
        digest = hashlib.sha1(f"{self.content}\x00{self.title}".encode("utf-8")).hexdigest()[:12]
        return f"{self.language}_{digest}"
