"""Volcengine Ark text-to-image adapter."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

import requests

from image_gateway.core.cancel import CancelToken
from image_gateway.core.config import GatewaySettings
from image_gateway.core.contracts import GenerateData, GeneratePayload
from image_gateway.core.redact import sanitize_payload
from .base import ProviderFailure, ProviderResponse, ProviderResult
from .transport import SessionFactory, http_failure, is_success, parse_json, post


logger = logging.getLogger(__name__)


def _extract_urls(body: Mapping[str, Any]) -> List[str]:
    urls: List[str] = []
    data = body.get("data")
    if not isinstance(data, list):
        return urls
    for item in data:
        if isinstance(item, Mapping):
            url = item.get("url")
            if isinstance(url, str) and url:
                urls.append(url)
    return urls


class TextToImageAdapter:
    name = "ark-images"

    def __init__(
        self,
        settings: Optional[GatewaySettings] = None,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        self.settings = settings or GatewaySettings.from_environ()
        self.session_factory = session_factory

    def build_request(self, payload: GeneratePayload) -> Dict[str, Any]:
        return {
            "model": self.settings.ark_image_model,
            "prompt": payload.prompt,
            "sequential_image_generation": "disabled",
            "response_format": "url",
            "size": payload.size,
            "stream": False,
            "watermark": self.settings.ark_image_watermark,
        }

    def invoke(
        self,
        payload: GeneratePayload,
        credential: str,
        *,
        cancel: Optional[CancelToken] = None,
    ) -> ProviderResult:
        body = self.build_request(payload)
        response = post(
            self.settings.ark_images_url,
            label="Ark image generation",
            timeout=self.settings.request_timeout,
            cancel=cancel,
            session_factory=self.session_factory,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {credential}",
            },
            json=body,
        )
        if isinstance(response, ProviderFailure):
            return response
        if not is_success(response):
            return http_failure(response)

        parsed, error = parse_json(response)
        if not isinstance(parsed, Mapping):
            return ProviderFailure(
                reason="malformed",
                status_code=response.status_code,
                message=error or "Image generation response was not a JSON object.",
            )

        urls = _extract_urls(parsed)
        if not urls:
            return ProviderFailure(
                reason="empty",
                status_code=response.status_code,
                message="no image data returned",
                payload=sanitize_payload(parsed),
            )
        logger.info("Ark image generation returned %d image(s)", len(urls))
        return ProviderResponse(
            data=GenerateData(urls=urls, model=parsed.get("model") or body["model"]),
            status_code=response.status_code,
            raw_request=sanitize_payload(body),
            raw_response=sanitize_payload(parsed),
        )
