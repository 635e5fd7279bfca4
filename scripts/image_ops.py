#!/usr/bin/env python3
"""Run image gateway operations from the command line.

Usage:
  python scripts/image_ops.py compress photo.jpg --quality 60
  python scripts/image_ops.py generate "a cat" --size 2K
  python scripts/image_ops.py describe photo.png
  python scripts/image_ops.py remove-bg portrait.jpg --out outputs/cutouts
  python scripts/image_ops.py credentials

Notes:
- Loads the nearest .env above this script (existing variables win).
- Result bytes are written to --out (default: outputs/image_ops/<timestamp>).
"""

from __future__ import annotations

import argparse
import logging
import sys
import threading
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from image_gateway.api import dispatch
from image_gateway.core.cancel import CancelToken
from image_gateway.core.contracts import (
    SIZE_TAGS,
    CompressData,
    CompressPayload,
    DescribeData,
    DescribePayload,
    GenerateData,
    GeneratePayload,
    ImageOperationRequest,
    ImageOperationResult,
    RemoveBackgroundData,
    RemoveBackgroundPayload,
)
from image_gateway.core.credentials import CredentialResolver
from image_gateway.core.utils import ensure_out_dir, extension_from_mime, mime_from_path, normalize_format


def _find_repo_dotenv() -> Path | None:
    current = Path(__file__).resolve()
    for parent in (current.parent, *current.parents):
        dotenv_path = parent / ".env"
        if dotenv_path.exists():
            return dotenv_path
    return None


def _load_repo_dotenv() -> Path | None:
    dotenv_path = _find_repo_dotenv()
    if dotenv_path is not None:
        load_dotenv(dotenv_path=dotenv_path, override=False)
        return dotenv_path
    load_dotenv(override=False)
    return None


def _format_bytes(size: int) -> str:
    if abs(size) < 1024:
        return f"{size} B"
    if abs(size) < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.2f} MB"


def _output_path(out_dir: Path, source: Optional[Path], prefix: str, mime_type: str) -> Path:
    stem = source.stem if source is not None else "image"
    return out_dir / f"{prefix}_{stem}.{extension_from_mime(mime_type)}"


def _build_request(args: argparse.Namespace) -> ImageOperationRequest:
    if args.command == "generate":
        return ImageOperationRequest(
            operation="generate",
            payload=GeneratePayload(prompt=args.prompt, size=args.size),
        )
    source = Path(args.path).expanduser().resolve()
    image_bytes = source.read_bytes()
    if args.command == "compress":
        return ImageOperationRequest(
            operation="compress",
            payload=CompressPayload(
                image_bytes=image_bytes,
                quality=args.quality,
                mime_type=args.mime_type or mime_from_path(source),
            ),
        )
    if args.command == "describe":
        image_format = args.format or normalize_format(mime_from_path(source), default="jpeg")
        return ImageOperationRequest(
            operation="describe",
            payload=DescribePayload(image_bytes=image_bytes, image_format=image_format),
        )
    return ImageOperationRequest(
        operation="remove_background",
        payload=RemoveBackgroundPayload(image_bytes=image_bytes),
    )


def _report(result: ImageOperationResult, args: argparse.Namespace) -> int:
    if not result.ok:
        error = result.error
        print(f"{result.operation} failed [{error.kind}]: {error.message}", file=sys.stderr)
        if args.verbose and error.provider_detail:
            print(f"  detail: {dict(error.provider_detail)}", file=sys.stderr)
        return 1

    data = result.data
    source = Path(args.path) if getattr(args, "path", None) else None
    if isinstance(data, GenerateData):
        for url in data.urls:
            print(url)
        return 0
    if isinstance(data, DescribeData):
        print(data.description)
        return 0

    out_dir = ensure_out_dir(Path(args.out) if args.out else None)
    if isinstance(data, CompressData):
        path = _output_path(out_dir, source, "compressed", data.mime_type)
        path.write_bytes(data.image_bytes)
        ratio = (data.byte_size / data.original_size * 100) if data.original_size else 0.0
        print(f"{path}")
        print(
            f"  {data.width}x{data.height} {_format_bytes(data.original_size)} -> "
            f"{_format_bytes(data.byte_size)} ({ratio:.1f}%)"
        )
        return 0
    if isinstance(data, RemoveBackgroundData):
        path = _output_path(out_dir, source, "no-bg", data.mime_type)
        path.write_bytes(data.image_bytes)
        print(f"{path}")
        print(f"  {_format_bytes(data.byte_size)}")
        return 0
    return 0


def _print_credentials(resolver: CredentialResolver) -> int:
    for row in resolver.diagnostics():
        names = " or ".join(row.env_vars) or "-"
        if row.present:
            print(f"{row.adapter}: set via {row.source} ({row.prefix})")
        else:
            print(f"{row.adapter}: missing (set {names})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Image operation gateway CLI.")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compress_parser = subparsers.add_parser("compress", help="Re-encode an image locally")
    compress_parser.add_argument("path", help="Input image path")
    compress_parser.add_argument("--quality", type=int, default=80, help="Quality 1-100 (default: 80)")
    compress_parser.add_argument("--mime-type", default=None, help="Override the detected MIME type")
    compress_parser.add_argument("--out", default=None, help="Output directory")

    generate_parser = subparsers.add_parser("generate", help="Generate an image from a prompt")
    generate_parser.add_argument("prompt", help="Prompt text")
    generate_parser.add_argument("--size", default="2K", choices=list(SIZE_TAGS), help="Output size")
    generate_parser.add_argument("--timeout", type=float, default=None, help="Abort after N seconds")

    describe_parser = subparsers.add_parser("describe", help="Describe an image")
    describe_parser.add_argument("path", help="Input image path")
    describe_parser.add_argument("--format", default=None, help="Declared image format (png, jpeg, ...)")
    describe_parser.add_argument("--timeout", type=float, default=None, help="Abort after N seconds")

    remove_parser = subparsers.add_parser("remove-bg", help="Remove an image background")
    remove_parser.add_argument("path", help="Input image path")
    remove_parser.add_argument("--out", default=None, help="Output directory")
    remove_parser.add_argument("--timeout", type=float, default=None, help="Abort after N seconds")

    subparsers.add_parser("credentials", help="Show which provider keys are configured")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    _load_repo_dotenv()
    resolver = CredentialResolver.from_environ()

    if args.command == "credentials":
        return _print_credentials(resolver)

    try:
        request = _build_request(args)
    except OSError as exc:
        print(f"Could not read {args.path}: {exc}", file=sys.stderr)
        return 1

    cancel = CancelToken()
    timer = None
    timeout = getattr(args, "timeout", None)
    if timeout:
        timer = threading.Timer(timeout, cancel.cancel)
        timer.daemon = True
        timer.start()
    try:
        result = dispatch(request, resolver=resolver, cancel=cancel)
    except KeyboardInterrupt:
        cancel.cancel()
        print("\nCancelled.")
        return 1
    finally:
        if timer is not None:
            timer.cancel()
    return _report(result, args)


if __name__ == "__main__":
    raise SystemExit(main())
