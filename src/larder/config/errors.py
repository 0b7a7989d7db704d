"""Configuration error definitions."""

from __future__ import annotations

from larder.domain.errors import LarderError


class ConfigurationError(LarderError):
    """Raised when configuration values are invalid."""


class MissingConfigurationError(ConfigurationError):
    """Raised when a required setting is absent or blank everywhere it is looked up."""
