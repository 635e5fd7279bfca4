"""Utility helpers for the image operation gateway."""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def ensure_out_dir(out_dir: Optional[Path]) -> Path:
    if out_dir is None:
        root = Path(os.getenv("IMAGE_OPS_OUTPUTS", "outputs"))
        out_dir = root / "image_ops" / utc_timestamp()
    out_dir = Path(out_dir).expanduser().resolve()
    out_dir.mkdir(parents=True, exist_ok=True)
    return out_dir


def normalize_format(value: Optional[str], default: Optional[str] = None) -> Optional[str]:
    """Reduce ``image/JPG``, ``.jpg`` or ``jpeg`` style values to a bare format name."""
    if not value:
        return default
    lowered = value.strip().lower()
    if lowered.startswith("image/"):
        lowered = lowered.split("/", 1)[1]
    lowered = lowered.lstrip(".").split(";", 1)[0].strip()
    if lowered in {"jpg", "jpeg", "pjpeg"}:
        return "jpeg"
    return lowered or default


def extension_from_mime(mime_type: Optional[str], fallback: str = "jpg") -> str:
    fmt = normalize_format(mime_type)
    if fmt == "jpeg":
        return "jpg"
    if fmt:
        return fmt
    return fallback


def mime_from_path(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix == ".png":
        return "image/png"
    if suffix in {".jpg", ".jpeg"}:
        return "image/jpeg"
    if suffix == ".webp":
        return "image/webp"
    if suffix == ".gif":
        return "image/gif"
    if suffix == ".bmp":
        return "image/bmp"
    return "application/octet-stream"
