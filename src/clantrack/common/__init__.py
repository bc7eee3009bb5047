"""Helpers shared by adapters and application services."""

from __future__ import annotations

from .retry import backoff_delay, retry_async

__all__ = ["backoff_delay", "retry_async"]
