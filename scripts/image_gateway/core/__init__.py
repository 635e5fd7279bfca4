"""Core contracts and helpers."""

from .contracts import (
    CanonicalError,
    CompressPayload,
    DescribePayload,
    GeneratePayload,
    ImageOperationRequest,
    ImageOperationResult,
    RemoveBackgroundPayload,
)

__all__ = [
    "CanonicalError",
    "CompressPayload",
    "DescribePayload",
    "GeneratePayload",
    "ImageOperationRequest",
    "ImageOperationResult",
    "RemoveBackgroundPayload",
]
