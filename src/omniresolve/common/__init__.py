"""Helpers shared across layers."""

from __future__ import annotations

from .sanitizer import DEFAULT_SANITIZER_CONFIG, REDACTED_VALUE, Sanitizer, SanitizerConfig

__all__ = ["DEFAULT_SANITIZER_CONFIG", "REDACTED_VALUE", "Sanitizer", "SanitizerConfig"]
