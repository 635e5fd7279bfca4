"""Operation table: which payload, backend and credential each operation uses."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Type

from .contracts import (
    CompressPayload,
    DescribePayload,
    GeneratePayload,
    OperationPayload,
    RemoveBackgroundPayload,
)


@dataclass(frozen=True)
class OperationCapabilities:
    name: str
    payload_type: Type[OperationPayload]
    remote: bool
    adapter: Optional[str] = None


_OPERATIONS: Dict[str, OperationCapabilities] = {
    "compress": OperationCapabilities(
        name="compress",
        payload_type=CompressPayload,
        remote=False,
    ),
    "generate": OperationCapabilities(
        name="generate",
        payload_type=GeneratePayload,
        remote=True,
        adapter="ark-images",
    ),
    "describe": OperationCapabilities(
        name="describe",
        payload_type=DescribePayload,
        remote=True,
        adapter="ark-vision",
    ),
    "remove_background": OperationCapabilities(
        name="remove_background",
        payload_type=RemoveBackgroundPayload,
        remote=True,
        adapter="remove-bg",
    ),
}


def get_capabilities(operation: str) -> Optional[OperationCapabilities]:
    if not isinstance(operation, str):
        return None
    return _OPERATIONS.get(operation.strip().lower())
