"""Structured error records for scans, config loading and persistence."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

from pydantic import Field

from .base import SchemaBase, Severity


class SyncErrorCode(str, Enum):
    CONFIG = "config"
    SCAN = "scan"
    EXTRACTION = "extraction"
    VALIDATION = "validation"
    NETWORK = "network"
    PERSISTENCE = "persistence"
    COMMAND = "command"
    UNKNOWN = "unknown"


class SyncErrorSource(str, Enum):
    CONFIG_LOADER = "config_loader"
    SCANNER = "scanner"
    REVEALER = "revealer"
    PIPELINE = "pipeline"
    SYNC_CLIENT = "sync_client"
    COMMAND_HANDLER = "command_handler"
    SERVER = "server"


class SyncErrorRecord(SchemaBase):
    error_id: str
    code: SyncErrorCode
    message: str
    source: SyncErrorSource
    severity: Severity = Field(default=Severity.ERROR)
    details: Optional[Dict[str, Any]] = Field(default=None)
    timestamp: Optional[str] = Field(default=None)


def make_error(
    code: SyncErrorCode,
    source: SyncErrorSource,
    message: str,
    *,
    severity: Severity = Severity.ERROR,
    details: Optional[Dict[str, Any]] = None,
) -> SyncErrorRecord:
    """Build an error record stamped with the current UTC time."""
    return SyncErrorRecord(
        error_id=f"{source.value}_{code.value}",
        code=code,
        message=message,
        source=source,
        severity=severity,
        details=details,
        timestamp=datetime.now(ZoneInfo("UTC")).isoformat(),
    )
