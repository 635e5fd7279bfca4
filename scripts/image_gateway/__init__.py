"""Image operation gateway public surface."""

from .api import compress, describe, dispatch, generate, remove_background
from .core import CanonicalError, ImageOperationRequest, ImageOperationResult

__all__ = [
    "compress",
    "describe",
    "dispatch",
    "generate",
    "remove_background",
    "CanonicalError",
    "ImageOperationRequest",
    "ImageOperationResult",
]
