"""Endpoint, model and timeout settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional


DEFAULT_ARK_BASE_URL = "https://ark.cn-beijing.volces.com/api/v3"
DEFAULT_ARK_IMAGE_MODEL = "doubao-seedream-4-0-250828"
DEFAULT_ARK_VISION_MODEL = "doubao-1-5-vision-pro-32k-250115"
DEFAULT_REMOVE_BG_URL = "https://api.remove.bg/v1.0/removebg"
DEFAULT_REQUEST_TIMEOUT = 60.0

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def _parse_timeout(value: Optional[str], default: float) -> float:
    if not value:
        return default
    try:
        parsed = float(value)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


@dataclass(frozen=True)
class GatewaySettings:
    ark_base_url: str = DEFAULT_ARK_BASE_URL
    ark_image_model: str = DEFAULT_ARK_IMAGE_MODEL
    ark_vision_model: str = DEFAULT_ARK_VISION_MODEL
    ark_image_watermark: bool = True
    remove_bg_url: str = DEFAULT_REMOVE_BG_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def ark_images_url(self) -> str:
        return f"{self.ark_base_url.rstrip('/')}/images/generations"

    @property
    def ark_chat_url(self) -> str:
        return f"{self.ark_base_url.rstrip('/')}/chat/completions"

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "GatewaySettings":
        env = os.environ if environ is None else environ
        return cls(
            ark_base_url=env.get("ARK_BASE_URL") or DEFAULT_ARK_BASE_URL,
            ark_image_model=env.get("ARK_IMAGE_MODEL") or DEFAULT_ARK_IMAGE_MODEL,
            ark_vision_model=env.get("ARK_VISION_MODEL") or DEFAULT_ARK_VISION_MODEL,
            ark_image_watermark=_parse_bool(env.get("ARK_IMAGE_WATERMARK"), True),
            remove_bg_url=env.get("REMOVE_BG_URL") or DEFAULT_REMOVE_BG_URL,
            request_timeout=_parse_timeout(env.get("IMAGE_GATEWAY_TIMEOUT"), DEFAULT_REQUEST_TIMEOUT),
        )
