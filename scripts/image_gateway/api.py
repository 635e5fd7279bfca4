"""Public API for the image operation gateway."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from image_gateway.core.cancel import CancelToken
from image_gateway.core.capabilities import get_capabilities
from image_gateway.core.config import GatewaySettings
from image_gateway.core.contracts import (
    SIZE_TAGS,
    CanonicalError,
    CompressData,
    CompressPayload,
    DescribePayload,
    GeneratePayload,
    ImageOperationRequest,
    ImageOperationResult,
    OperationPayload,
    RemoveBackgroundPayload,
)
from image_gateway.core.credentials import CredentialResolver, default_resolver
from image_gateway.core.errors import InvalidInputError
from image_gateway.core.normalizer import normalize
from image_gateway.core.recompress import recompress, validate_quality
from image_gateway.providers import build_adapter, get_adapter
from image_gateway.providers.base import ProviderAdapter, ProviderFailure


logger = logging.getLogger(__name__)


def _require_bytes(value: object, label: str) -> None:
    if not isinstance(value, (bytes, bytearray)) or not value:
        raise InvalidInputError(f"{label} is missing or empty.")


def validate_payload(payload: OperationPayload) -> None:
    """Field-level checks, run after the payload type is known to match."""
    if isinstance(payload, CompressPayload):
        _require_bytes(payload.image_bytes, "Image data")
        validate_quality(payload.quality)
    elif isinstance(payload, GeneratePayload):
        if not isinstance(payload.prompt, str) or not payload.prompt.strip():
            raise InvalidInputError("Prompt cannot be empty.")
        if payload.size not in SIZE_TAGS:
            raise InvalidInputError(f"Size must be one of {', '.join(SIZE_TAGS)}; got {payload.size!r}.")
    elif isinstance(payload, DescribePayload):
        _require_bytes(payload.image_bytes, "Image data")
        if not isinstance(payload.image_format, str) or not payload.image_format.strip():
            raise InvalidInputError("Image format is missing.")
    elif isinstance(payload, RemoveBackgroundPayload):
        _require_bytes(payload.image_bytes, "Image data")


def _invalid(operation: str, message: str) -> ImageOperationResult:
    logger.info("Rejected %s request: %s", operation, message)
    return ImageOperationResult.failure(operation, CanonicalError("invalid_input", message))


def _run_compress(payload: CompressPayload) -> ImageOperationResult:
    try:
        output = recompress(bytes(payload.image_bytes), payload.mime_type, payload.quality)
    except InvalidInputError as exc:
        return _invalid("compress", str(exc))
    original_size = len(payload.image_bytes)
    logger.info(
        "Recompressed %s at quality %d: %d -> %d bytes",
        payload.mime_type,
        payload.quality,
        original_size,
        output.byte_size,
    )
    return ImageOperationResult.success(
        "compress",
        CompressData(
            image_bytes=output.image_bytes,
            mime_type=output.mime_type,
            byte_size=output.byte_size,
            original_size=original_size,
            byte_delta=output.byte_size - original_size,
            width=output.width,
            height=output.height,
        ),
    )


def dispatch(
    request: ImageOperationRequest,
    *,
    resolver: Optional[CredentialResolver] = None,
    adapters: Optional[Mapping[str, ProviderAdapter]] = None,
    settings: Optional[GatewaySettings] = None,
    cancel: Optional[CancelToken] = None,
) -> ImageOperationResult:
    """Validate ``request``, run it on the matching backend and return a canonical result.

    ``adapters`` overrides the registry per operation; ``settings`` builds fresh
    adapters instead of the shared ones.
    """
    operation = getattr(request, "operation", None)
    capabilities = get_capabilities(operation)
    if capabilities is None:
        return _invalid(str(operation), f"Unsupported operation: {operation!r}.")
    payload = getattr(request, "payload", None)
    if not isinstance(payload, capabilities.payload_type):
        return _invalid(
            capabilities.name,
            f"Payload {type(payload).__name__} does not match operation '{capabilities.name}'.",
        )
    try:
        validate_payload(payload)
    except InvalidInputError as exc:
        return _invalid(capabilities.name, str(exc))

    if not capabilities.remote:
        return _run_compress(payload)

    adapter_name = capabilities.adapter or capabilities.name
    resolver = resolver or default_resolver()
    credential = resolver.get(adapter_name)
    if not credential:
        logger.warning("No credential configured for %s; skipping %s", adapter_name, capabilities.name)
        return ImageOperationResult.failure(
            capabilities.name,
            CanonicalError(
                "missing_credential",
                f"No API key is configured for {adapter_name}.",
            ),
        )

    if adapters is not None and capabilities.name in adapters:
        adapter = adapters[capabilities.name]
    elif settings is not None:
        adapter = build_adapter(capabilities.name, settings)
    else:
        adapter = get_adapter(capabilities.name)

    outcome = adapter.invoke(payload, credential, cancel=cancel)
    if isinstance(outcome, ProviderFailure):
        error = normalize(outcome, adapter_name)
        logger.warning(
            "%s via %s failed: %s (reason=%s status=%s code=%s)",
            capabilities.name,
            adapter_name,
            error.kind,
            outcome.reason,
            outcome.status_code,
            outcome.code,
        )
        return ImageOperationResult.failure(capabilities.name, error)

    logger.info("%s via %s succeeded", capabilities.name, adapter_name)
    return ImageOperationResult.success(capabilities.name, outcome.data)


def compress(
    *,
    image_bytes: bytes,
    quality: int = 80,
    mime_type: str = "image/jpeg",
) -> ImageOperationResult:
    request = ImageOperationRequest(
        operation="compress",
        payload=CompressPayload(image_bytes=image_bytes, quality=quality, mime_type=mime_type),
    )
    return dispatch(request)


def generate(
    *,
    prompt: str,
    size: str = "2K",
    resolver: Optional[CredentialResolver] = None,
    cancel: Optional[CancelToken] = None,
) -> ImageOperationResult:
    request = ImageOperationRequest(operation="generate", payload=GeneratePayload(prompt=prompt, size=size))
    return dispatch(request, resolver=resolver, cancel=cancel)


def describe(
    *,
    image_bytes: bytes,
    image_format: str,
    resolver: Optional[CredentialResolver] = None,
    cancel: Optional[CancelToken] = None,
) -> ImageOperationResult:
    request = ImageOperationRequest(
        operation="describe",
        payload=DescribePayload(image_bytes=image_bytes, image_format=image_format),
    )
    return dispatch(request, resolver=resolver, cancel=cancel)


def remove_background(
    *,
    image_bytes: bytes,
    resolver: Optional[CredentialResolver] = None,
    cancel: Optional[CancelToken] = None,
) -> ImageOperationResult:
    request = ImageOperationRequest(
        operation="remove_background",
        payload=RemoveBackgroundPayload(image_bytes=image_bytes),
    )
    return dispatch(request, resolver=resolver, cancel=cancel)
