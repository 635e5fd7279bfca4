"""remove.bg style background matting adapter.

A 2xx response body is the processed image itself. Anything else is an error,
even when the error body arrives with an image content type.
"""

from __future__ import annotations

import logging
from typing import Optional

import requests

from image_gateway.core.cancel import CancelToken
from image_gateway.core.config import GatewaySettings
from image_gateway.core.contracts import RemoveBackgroundData, RemoveBackgroundPayload
from .base import ProviderFailure, ProviderResponse, ProviderResult
from .transport import SessionFactory, http_failure, is_success, post


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_MIME = "image/png"


class BackgroundMatteAdapter:
    name = "remove-bg"

    def __init__(
        self,
        settings: Optional[GatewaySettings] = None,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        self.settings = settings or GatewaySettings.from_environ()
        self.session_factory = session_factory

    def invoke(
        self,
        payload: RemoveBackgroundPayload,
        credential: str,
        *,
        cancel: Optional[CancelToken] = None,
    ) -> ProviderResult:
        response = post(
            self.settings.remove_bg_url,
            label="Background removal",
            timeout=self.settings.request_timeout,
            cancel=cancel,
            session_factory=self.session_factory,
            headers={"X-Api-Key": credential},
            files={"image_file": ("image", payload.image_bytes, "application/octet-stream")},
            data={"size": "auto"},
        )
        if isinstance(response, ProviderFailure):
            return response
        if not is_success(response):
            return http_failure(response)

        content = response.content or b""
        if not content:
            return ProviderFailure(
                reason="malformed",
                status_code=response.status_code,
                message="Background removal returned an empty body.",
            )
        content_type = response.headers.get("content-type") or DEFAULT_OUTPUT_MIME
        mime_type = content_type.split(";", 1)[0].strip() or DEFAULT_OUTPUT_MIME
        logger.info("Background removal returned %d bytes (%s)", len(content), mime_type)
        return ProviderResponse(
            data=RemoveBackgroundData(image_bytes=content, mime_type=mime_type, byte_size=len(content)),
            status_code=response.status_code,
            raw_request={"size": "auto", "image_file": f"<bytes:{len(payload.image_bytes)}>"},
            raw_response={"content_type": content_type, "bytes": len(content)},
        )
