"""Provider adapter interfaces."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Protocol, Union

from image_gateway.core.cancel import CancelToken
from image_gateway.core.contracts import OperationData, OperationPayload, ProviderFailure


@dataclass(frozen=True)
class ProviderResponse:
    data: OperationData
    status_code: Optional[int] = None
    raw_request: Mapping[str, Any] = field(default_factory=dict)
    raw_response: Mapping[str, Any] = field(default_factory=dict)


ProviderResult = Union[ProviderResponse, ProviderFailure]


class ProviderAdapter(Protocol):
    name: str

    def invoke(
        self,
        payload: OperationPayload,
        credential: str,
        *,
        cancel: Optional[CancelToken] = None,
    ) -> ProviderResult:
        ...
