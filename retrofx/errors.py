from __future__ import annotations


class RetroFxError(Exception):
    """Base error for the retrofx library."""


class InvalidConfigError(RetroFxError):
    """Raised when a sound config, input or setting cannot be parsed or validated."""


class InvalidTemplateError(InvalidConfigError):
    """Raised when a template name or ordinal is not recognized."""


class AudioWriteError(RetroFxError):
    """Raised when rendered audio cannot be written to its container."""
