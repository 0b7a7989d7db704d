"""Domain port definitions for adapters."""

from __future__ import annotations

from .remote import RemoteGateway

__all__ = ["RemoteGateway"]
