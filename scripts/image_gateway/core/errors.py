"""Exceptions raised inside the gateway core."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Request shape, quality value or image bytes cannot be processed."""
