"""Public domain model surface."""

from __future__ import annotations

from omniresolve.domain.model.room import Room

__all__ = ["Room"]
