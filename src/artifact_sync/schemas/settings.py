"""Host-owned settings the detection engine reads for each scan."""

from __future__ import annotations

from typing import List
from urllib.parse import urlparse

from pydantic import Field

from .base import SchemaBase

DEFAULT_SERVER_URL = "http://localhost:8765"


class Settings(SchemaBase):
    is_enabled: bool = Field(default=False, alias="isEnabled")
    project_path: str = Field(default="", alias="projectPath")
    server_url: str = Field(default=DEFAULT_SERVER_URL, alias="serverUrl")
    allowed_hosts: List[str] = Field(default_factory=lambda: ["claude.ai"], alias="allowedHosts")
    auto_sync: bool = Field(default=False, alias="autoSync")

    def allows_url(self, url: str | None) -> bool:
        """Return True when a document at ``url`` may be scanned.

        Documents without a URL (local snapshots) are always allowed, as is
        any URL when ``allowed_hosts`` is empty.
        """
        if not url or not self.allowed_hosts:
            return True
        host = (urlparse(url).hostname or "").lower()
        for allowed in self.allowed_hosts:
            allowed = allowed.lower().lstrip(".")
            if host == allowed or host.endswith("." + allowed):
                return True
        return False
