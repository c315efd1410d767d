"""Custom exceptions for plugindesk."""

from __future__ import annotations

from pathlib import Path


class PluginDeskError(Exception):
    """Base exception for all plugindesk errors."""


class ParseError(PluginDeskError, ValueError):
    """Raised when a project file does not contain valid structured data."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot parse {path}: {reason}")


class ManifestPointerError(ParseError):
    """Raised when a descriptor carries no usable manifest location."""


class ScanCancelledError(PluginDeskError):
    """Raised when a scan is cancelled through its cancellation token."""
