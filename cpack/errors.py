"""
cpack errors.

Library code raises these; only the CLI turns them into exit codes.
"""

from __future__ import annotations


class PackError(Exception):
    """Base class for every error raised while generating an artifact."""


class AcquisitionError(PackError):
    """An input could not be opened, or its filter process could not be started."""

    def __init__(self, target: str, reason: str) -> None:
        self.target = target
        self.reason = reason
        super().__init__(f"Cannot open [{target}]: {reason}")


class MalformedArgumentsError(PackError, ValueError):
    """The argument list cannot be scanned (e.g. a dangling filter flag)."""


class ConfigError(PackError, ValueError):
    """An environment setting has an unusable value."""
