"""Sanitize provider payloads before they are kept as diagnostics."""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping


_MAX_INLINE_CHARS = 2000
_OMITTED_KEYS = {"b64_json", "image", "image_bytes", "image_file", "data_uri"}
_SECRET_KEYS = {"authorization", "x-api-key", "api_key", "apikey"}


def _sanitize_string(value: str) -> str:
    if value.startswith("data:") and ";base64," in value:
        header = value.split(",", 1)[0]
        return f"{header},<omitted>"
    if len(value) > _MAX_INLINE_CHARS:
        return value[:_MAX_INLINE_CHARS].rstrip() + "..."
    return value


def sanitize_payload(payload: Any) -> Any:
    if payload is None:
        return None
    if isinstance(payload, (int, float, bool)):
        return payload
    if isinstance(payload, str):
        return _sanitize_string(payload)
    if isinstance(payload, (bytes, bytearray)):
        return f"<bytes:{len(payload)}>"
    if isinstance(payload, Mapping):
        sanitized: MutableMapping[str, Any] = {}
        for key, value in payload.items():
            lowered = str(key).lower()
            if lowered in _SECRET_KEYS:
                sanitized[str(key)] = "<redacted>"
                continue
            if lowered in _OMITTED_KEYS:
                sanitized[str(key)] = "<omitted>"
                continue
            sanitized[str(key)] = sanitize_payload(value)
        return sanitized
    if isinstance(payload, (list, tuple)):
        return [sanitize_payload(item) for item in payload]
    return _sanitize_string(str(payload))
