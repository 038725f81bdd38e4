"""Outbound events emitted toward the host."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import Field

from .base import SchemaBase


class SyncedFile(SchemaBase):
    filename: str


class ArtifactSynced(SchemaBase):
    action: Literal["artifactSynced"] = "artifactSynced"
    data: SyncedFile


class SyncError(SchemaBase):
    action: Literal["syncError"] = "syncError"
    error: str


class SyncComplete(SchemaBase):
    action: Literal["syncComplete"] = "syncComplete"
    count: int = Field(ge=0)


OutboundEvent = Union[ArtifactSynced, SyncError, SyncComplete]
