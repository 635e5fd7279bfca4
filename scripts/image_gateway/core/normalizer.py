"""Translate adapter failures into canonical errors.

Known provider codes get a friendlier message; anything unmapped becomes
``unknown`` and keeps the provider's own message. There is no success path.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from .contracts import CanonicalError, ErrorKind, ProviderFailure


_ADAPTER_LABELS: Dict[str, str] = {
    "ark-images": "Image generation",
    "ark-vision": "Image description",
    "remove-bg": "Background removal",
}

_UNSUPPORTED_MODEL_HINT = "image generation is only supported by certain models"

UNSUPPORTED_MODEL_MESSAGE = (
    "The configured model does not support image generation. Create an inference "
    "endpoint for an image generation model (for example a Seedream model) in the "
    "Ark console and set ARK_IMAGE_MODEL to it."
)
TRY_AGAIN_MESSAGE = "The service is temporarily unavailable, please try again later."

_CODE_MESSAGES: Dict[str, Tuple[ErrorKind, str]] = {
    "InternalServiceError": ("provider_unavailable", TRY_AGAIN_MESSAGE),
    "ServerOverloaded": ("provider_unavailable", TRY_AGAIN_MESSAGE),
    "InvalidEndpoint.ClosedEndpoint": (
        "provider_rejected",
        "The endpoint is closed or unavailable, please check the endpoint configuration.",
    ),
    "AuthenticationError": (
        "provider_rejected",
        "The provider rejected the API key, please check the configured credential.",
    ),
    "auth_failed": (
        "provider_rejected",
        "The provider rejected the API key, please check the configured credential.",
    ),
    "insufficient_credits": (
        "provider_rejected",
        "The background removal account has run out of credits.",
    ),
    "unknown_foreground": (
        "provider_rejected",
        "No foreground could be detected in this image.",
    ),
    "rate_limit_exceeded": ("provider_unavailable", TRY_AGAIN_MESSAGE),
}

_CODE_PREFIXES: Tuple[Tuple[str, ErrorKind, str], ...] = (
    ("RateLimitExceeded", "provider_unavailable", TRY_AGAIN_MESSAGE),
    ("QuotaExceeded", "provider_unavailable", TRY_AGAIN_MESSAGE),
)


def _label(adapter_name: str) -> str:
    return _ADAPTER_LABELS.get(adapter_name, adapter_name)


def _lookup_code(failure: ProviderFailure) -> Optional[Tuple[ErrorKind, str]]:
    code = failure.code
    if not code:
        return None
    if code == "InvalidParameter" and _UNSUPPORTED_MODEL_HINT in (failure.message or ""):
        return "provider_rejected", UNSUPPORTED_MODEL_MESSAGE
    if code in _CODE_MESSAGES:
        return _CODE_MESSAGES[code]
    for prefix, kind, message in _CODE_PREFIXES:
        if code.startswith(prefix):
            return kind, message
    return None


def _detail(failure: ProviderFailure, adapter_name: str) -> Dict[str, Any]:
    return {
        "adapter": adapter_name,
        "reason": failure.reason,
        "status_code": failure.status_code,
        "code": failure.code,
        "message": failure.message,
        "payload": dict(failure.payload),
    }


def normalize(failure: ProviderFailure, adapter_name: str) -> CanonicalError:
    label = _label(adapter_name)
    detail = _detail(failure, adapter_name)

    if failure.reason == "cancelled":
        return CanonicalError("provider_unavailable", f"{label} request was cancelled.", detail)
    if failure.reason == "timeout":
        return CanonicalError(
            "provider_unavailable",
            f"{label} timed out waiting for the provider, please try again later.",
            detail,
        )
    if failure.reason == "transport":
        return CanonicalError(
            "provider_unavailable",
            f"Could not reach the {label.lower()} service, please try again later.",
            detail,
        )
    if failure.reason == "empty":
        return CanonicalError("provider_rejected", f"{label} failed: no image data returned.", detail)
    if failure.reason == "malformed":
        # Decoder text stays in provider_detail only.
        return CanonicalError(
            "provider_unavailable",
            f"The {label.lower()} service returned an unreadable response, please try again later.",
            detail,
        )

    mapped = _lookup_code(failure)
    if mapped is not None:
        kind, message = mapped
        return CanonicalError(kind, message, detail)

    if failure.message:
        return CanonicalError("unknown", failure.message, detail)
    if failure.status_code is not None:
        return CanonicalError("unknown", f"API error: {failure.status_code}", detail)
    return CanonicalError("unknown", f"{label} failed.", detail)
