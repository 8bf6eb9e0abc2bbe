"""Exception hierarchy for statsdump.

    StatsdumpError
    ├── SourceUnavailableError
    └── ConfigError
"""

from typing import Optional


class StatsdumpError(Exception):
    """Base class for all statsdump errors."""


class SourceUnavailableError(StatsdumpError):
    """An OS data source could not be opened or parsed."""

    def __init__(self, source: str, reason: Optional[str] = None):
        self.source = source
        self.reason = reason
        message = f"cannot read {source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ConfigError(StatsdumpError):
    """The settings file is unreadable or holds an invalid value."""
