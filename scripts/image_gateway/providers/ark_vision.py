"""Volcengine Ark multimodal chat adapter used to describe images."""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Mapping, Optional

import requests

from image_gateway.core.cancel import CancelToken
from image_gateway.core.config import GatewaySettings
from image_gateway.core.contracts import DescribeData, DescribePayload
from image_gateway.core.redact import sanitize_payload
from image_gateway.core.utils import normalize_format
from .base import ProviderFailure, ProviderResponse, ProviderResult
from .transport import SessionFactory, http_failure, is_success, parse_json, post


logger = logging.getLogger(__name__)

DESCRIBE_INSTRUCTION = (
    "Describe this image in detail, including: "
    "1. the main content and scene of the image "
    "2. the objects, people or text in the image "
    "3. the style and color palette of the image."
)
FALLBACK_DESCRIPTION = "Unable to recognize the image content."


def build_data_uri(image_bytes: bytes, image_format: str) -> str:
    fmt = normalize_format(image_format, default="jpeg")
    encoded = base64.b64encode(image_bytes).decode("ascii")
    return f"data:image/{fmt};base64,{encoded}"


def extract_description(body: Mapping[str, Any]) -> Optional[str]:
    choices = body.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, Mapping):
        return None
    message = first.get("message")
    if not isinstance(message, Mapping):
        return None
    content = message.get("content")
    if isinstance(content, str):
        return content.strip() or None
    if isinstance(content, list):
        texts = [
            str(part.get("text"))
            for part in content
            if isinstance(part, Mapping) and part.get("type") == "text" and part.get("text")
        ]
        joined = "\n".join(texts).strip()
        return joined or None
    return None


class VisionDescribeAdapter:
    name = "ark-vision"

    def __init__(
        self,
        settings: Optional[GatewaySettings] = None,
        session_factory: SessionFactory = requests.Session,
    ) -> None:
        self.settings = settings or GatewaySettings.from_environ()
        self.session_factory = session_factory

    def build_request(self, payload: DescribePayload) -> Dict[str, Any]:
        return {
            "model": self.settings.ark_vision_model,
            "messages": [
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": DESCRIBE_INSTRUCTION},
                        {
                            "type": "image_url",
                            "image_url": {"url": build_data_uri(payload.image_bytes, payload.image_format)},
                        },
                    ],
                }
            ],
        }

    def invoke(
        self,
        payload: DescribePayload,
        credential: str,
        *,
        cancel: Optional[CancelToken] = None,
    ) -> ProviderResult:
        body = self.build_request(payload)
        logger.debug(
            "Describing %d byte %s image with %s",
            len(payload.image_bytes),
            normalize_format(payload.image_format, default="jpeg"),
            self.settings.ark_vision_model,
        )
        response = post(
            self.settings.ark_chat_url,
            label="Ark vision",
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
                message=error or "Vision response was not a JSON object.",
            )

        description = extract_description(parsed)
        used_fallback = description is None
        if used_fallback:
            logger.info("Ark vision returned no text; using fallback description")
        return ProviderResponse(
            data=DescribeData(
                description=description if description is not None else FALLBACK_DESCRIPTION,
                used_fallback=used_fallback,
            ),
            status_code=response.status_code,
            raw_request=sanitize_payload(body),
            raw_response=sanitize_payload(parsed),
        )
