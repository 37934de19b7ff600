"""Exception types raised by the logo analysis pipeline."""

from __future__ import annotations


class LogoSoupError(Exception):
    """Base class for analysis errors."""


class DecodeFailure(LogoSoupError):
    """Raised when an image cannot be read, rasterized, or decoded."""

    def __init__(self, source: object, reason: str) -> None:
        super().__init__(f"Unable to decode {source}: {reason}")
        self.source = source
        self.reason = reason


class DegenerateContent(LogoSoupError):
    """Raised when content detection yields a zero-width or zero-height box."""


class ConfigError(LogoSoupError, ValueError):
    """Raised for invalid analysis or layout settings."""
