"""Provider adapter registry, keyed by operation."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from image_gateway.core.config import GatewaySettings
from .base import ProviderAdapter, ProviderFailure, ProviderResponse


_ADAPTERS: Dict[str, ProviderAdapter] = {}
_LOCK = threading.Lock()


def build_adapter(operation: str, settings: Optional[GatewaySettings] = None) -> ProviderAdapter:
    key = operation.strip().lower()
    if key == "generate":
        from .ark_images import TextToImageAdapter
        return TextToImageAdapter(settings)
    if key == "describe":
        from .ark_vision import VisionDescribeAdapter
        return VisionDescribeAdapter(settings)
    if key == "remove_background":
        from .removebg import BackgroundMatteAdapter
        return BackgroundMatteAdapter(settings)
    raise ValueError(f"No adapter registered for operation '{operation}'.")


def get_adapter(operation: str) -> ProviderAdapter:
    key = operation.strip().lower()
    with _LOCK:
        adapter = _ADAPTERS.get(key)
        if adapter is None:
            adapter = build_adapter(key)
            _ADAPTERS[key] = adapter
        return adapter


__all__ = ["build_adapter", "get_adapter", "ProviderAdapter", "ProviderFailure", "ProviderResponse"]
