"""Core data contracts for the image operation gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional, Sequence, Union


OperationType = Literal["compress", "generate", "describe", "remove_background"]
ResultStatus = Literal["ok", "failed"]
ErrorKind = Literal[
    "invalid_input",
    "missing_credential",
    "provider_unavailable",
    "provider_rejected",
    "unknown",
]
SizeTag = Literal["1K", "2K", "4K"]
FailureReason = Literal["http", "transport", "timeout", "malformed", "empty", "cancelled"]

OPERATIONS: Sequence[str] = ("compress", "generate", "describe", "remove_background")
SIZE_TAGS: Sequence[str] = ("1K", "2K", "4K")


@dataclass(frozen=True)
class CompressPayload:
    image_bytes: bytes = field(repr=False)
    quality: int = 80
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class GeneratePayload:
    prompt: str
    size: str = "2K"


@dataclass(frozen=True)
class DescribePayload:
    image_bytes: bytes = field(repr=False)
    image_format: str = "jpeg"


@dataclass(frozen=True)
class RemoveBackgroundPayload:
    image_bytes: bytes = field(repr=False)


OperationPayload = Union[CompressPayload, GeneratePayload, DescribePayload, RemoveBackgroundPayload]


@dataclass(frozen=True)
class ImageOperationRequest:
    operation: OperationType
    payload: OperationPayload


@dataclass(frozen=True)
class CompressData:
    image_bytes: bytes = field(repr=False)
    mime_type: str
    byte_size: int
    original_size: int
    byte_delta: int
    width: int
    height: int


@dataclass(frozen=True)
class GenerateData:
    urls: Sequence[str]
    model: Optional[str] = None


@dataclass(frozen=True)
class DescribeData:
    description: str
    used_fallback: bool = False


@dataclass(frozen=True)
class RemoveBackgroundData:
    image_bytes: bytes = field(repr=False)
    mime_type: str
    byte_size: int


OperationData = Union[CompressData, GenerateData, DescribeData, RemoveBackgroundData]


@dataclass(frozen=True)
class CanonicalError:
    """Provider-agnostic failure.

    ``message`` is always safe to show to an end user. ``provider_detail`` keeps
    the upstream payload for diagnostics only.
    """

    kind: ErrorKind
    message: str
    provider_detail: Optional[Mapping[str, Any]] = None


@dataclass(frozen=True)
class ProviderFailure:
    """Tagged failure value returned by an adapter instead of raising.

    ``code`` and ``message`` come from the provider's error body when one could
    be parsed; ``payload`` keeps that body (sanitized) for diagnostics.
    """

    reason: FailureReason
    status_code: Optional[int] = None
    code: Optional[str] = None
    message: Optional[str] = None
    payload: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ImageOperationResult:
    operation: str
    status: ResultStatus
    data: Optional[OperationData] = None
    error: Optional[CanonicalError] = None

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @classmethod
    def success(cls, operation: str, data: OperationData) -> "ImageOperationResult":
        return cls(operation=operation, status="ok", data=data)

    @classmethod
    def failure(cls, operation: str, error: CanonicalError) -> "ImageOperationResult":
        return cls(operation=operation, status="failed", error=error)
