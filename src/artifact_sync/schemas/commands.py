"""Inbound command envelope.

Requests are tagged by ``action`` and parsed into one of the models below via
``COMMAND_ADAPTER``.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import Field, TypeAdapter

from .artifact import Artifact
from .base import SchemaBase


class ToggleMonitoring(SchemaBase):
    action: Literal["toggleMonitoring"]
    enabled: bool


class UpdateProjectPath(SchemaBase):
    action: Literal["updateProjectPath"]
    path: str


class UpdateSettings(SchemaBase):
    action: Literal["updateSettings"]
    settings: Dict[str, Any] = Field(default_factory=dict)


class DetectArtifacts(SchemaBase):
    action: Literal["detectArtifacts"]


class DebugDetection(SchemaBase):
    action: Literal["debugDetection"]


class SaveArtifact(SchemaBase):
    action: Literal["saveArtifact"]
    artifact: Artifact


class SyncAll(SchemaBase):
    action: Literal["syncAll", "saveAll"]


class Ping(SchemaBase):
    action: Literal["ping"]


Command = Annotated[
    Union[
        ToggleMonitoring,
        UpdateProjectPath,
        UpdateSettings,
        DetectArtifacts,
        DebugDetection,
        SaveArtifact,
        SyncAll,
        Ping,
    ],
    Field(discriminator="action"),
]

COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)
