"""Configuration loader for Artifact Sync."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import Field, ValidationError

from artifact_sync.detection.deduplicator import Deduplicator
from artifact_sync.detection.revealer import RecoveryAction, Revealer, RevealPolicy
from artifact_sync.detection.validator import Validator
from artifact_sync.runtime.pipeline import ArtifactPipeline
from artifact_sync.schemas import SchemaBase, Settings, SyncErrorCode, SyncErrorRecord, SyncErrorSource
from artifact_sync.schemas.base import Severity

CONFIG_ENV_VAR = "ARTIFACT_SYNC_CONFIG"


class DetectionConfig(SchemaBase):
    min_length: int = Field(default=50, ge=1)
    css_threshold: float = Field(default=0.7, gt=0, le=1)
    similarity_threshold: float = Field(default=0.9, gt=0, le=1)
    similarity_window: Optional[int] = Field(default=None, ge=1)
    length_tolerance: float = Field(default=0.2, ge=0, le=1)


class RevealConfig(SchemaBase):
    size_threshold: int = Field(default=200, ge=0)
    action_timeout: float = Field(default=1.0, gt=0)
    click_settle: float = Field(default=0.3, ge=0)
    relax_settle: float = Field(default=0.1, ge=0)
    scroll_settle: float = Field(default=0.2, ge=0)
    restore_delay: float = Field(default=1.5, ge=0)
    max_toggle_clicks: int = Field(default=3, ge=0)


class MonitorConfig(SchemaBase):
    startup_delay: float = Field(default=1.0, ge=0)
    debounce_delay: float = Field(default=0.5, ge=0)


class SyncConfig(SchemaBase):
    timeout: float = Field(default=30, gt=0)
    health_timeout: float = Field(default=5, gt=0)
    pace_delay: float = Field(default=0.1, ge=0)


class ServerConfig(SchemaBase):
    host: str = "127.0.0.1"
    port: int = Field(default=8765, ge=1, le=65535)


@dataclass(frozen=True)
class ArtifactSyncConfig:
    settings: Settings = field(default_factory=Settings)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    reveal: RevealConfig = field(default_factory=RevealConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    source: Optional[Path] = None

    def reveal_policy(self) -> RevealPolicy:
        reveal = self.reveal
        return RevealPolicy(
            actions=(
                RecoveryAction("click_toggles", reveal.click_settle, reveal.action_timeout),
                RecoveryAction("relax_clipping", reveal.relax_settle, reveal.action_timeout),
                RecoveryAction("scroll_ancestor", reveal.scroll_settle, reveal.action_timeout),
            ),
            size_threshold=reveal.size_threshold,
            restore_delay=reveal.restore_delay,
            max_toggle_clicks=reveal.max_toggle_clicks,
        )

    def build_pipeline(self) -> ArtifactPipeline:
        detection = self.detection
        return ArtifactPipeline(
            revealer=Revealer(self.reveal_policy()),
            validator=Validator(min_length=detection.min_length, css_threshold=detection.css_threshold),
            deduplicator=Deduplicator(
                threshold=detection.similarity_threshold,
                window=detection.similarity_window,
                length_tolerance=detection.length_tolerance,
            ),
        )


_SECTIONS = {
    "settings": Settings,
    "detection": DetectionConfig,
    "reveal": RevealConfig,
    "monitor": MonitorConfig,
    "sync": SyncConfig,
    "server": ServerConfig,
}


def load_sync_config(path: Optional[Path] = None) -> Tuple[Optional[ArtifactSyncConfig], Optional[SyncErrorRecord]]:
    """Load configuration from ``path`` or ``$ARTIFACT_SYNC_CONFIG``.

    A missing file (or no path at all) yields the defaults.

    Returns:
        Tuple of (config, error); exactly one is None.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else None
    if path is None:
        return ArtifactSyncConfig(), None
    path = Path(path)
    if not path.exists():
        return ArtifactSyncConfig(source=path), None

    try:
        payload = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:
        return None, _error(f"Failed to parse config {path.name}", {"error": str(exc)})
    except OSError as exc:
        return None, _error(f"Could not read config {path.name}", {"error": str(exc)})

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        return None, _error(f"Config {path.name} must be a mapping")

    unknown = sorted(set(payload) - set(_SECTIONS))
    if unknown:
        return None, _error(f"Unknown config sections: {', '.join(unknown)}")

    sections: Dict[str, Any] = {}
    for name, model in _SECTIONS.items():
        raw = payload.get(name) or {}
        if not isinstance(raw, dict):
            return None, _error(f"Config section '{name}' must be a mapping")
        try:
            sections[name] = model.model_validate(raw)
        except ValidationError as exc:
            return None, _error(f"Invalid '{name}' section in {path.name}", {"errors": exc.errors()})

    return ArtifactSyncConfig(source=path, **sections), None


def _error(message: str, details=None) -> SyncErrorRecord:
    return SyncErrorRecord(
        error_id="config_error",
        code=SyncErrorCode.CONFIG,
        message=message,
        source=SyncErrorSource.CONFIG_LOADER,
        severity=Severity.ERROR,
        details=details,
    )
