"""HTTP transport shared by the remote adapters.

Each call uses its own ``requests.Session`` so adapters stay stateless. Any
failure is returned as a ``ProviderFailure``; nothing here raises.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Mapping, Optional, Tuple, Union

import requests

from image_gateway.core.cancel import CancelToken
from image_gateway.core.redact import sanitize_payload
from .base import ProviderFailure


logger = logging.getLogger(__name__)

SessionFactory = Callable[[], requests.Session]

_MAX_DETAIL_CHARS = 500


def _summarize_text(response: Any) -> str:
    detail = getattr(response, "text", "") or ""
    detail = detail.strip().replace("\n", " ")
    if len(detail) > _MAX_DETAIL_CHARS:
        detail = detail[:_MAX_DETAIL_CHARS].rstrip() + "..."
    return detail


def parse_json(response: Any) -> Tuple[Optional[Any], Optional[str]]:
    """Return ``(body, None)`` or ``(None, reason)`` when the body is not JSON."""
    try:
        return response.json(), None
    except ValueError as exc:
        return None, str(exc)


def _extract_error(body: Any) -> Tuple[Optional[str], Optional[str]]:
    if not isinstance(body, Mapping):
        return None, None
    error = body.get("error")
    if isinstance(error, Mapping):
        code = error.get("code")
        message = error.get("message")
        return (str(code) if code else None), (str(message) if message else None)
    if isinstance(error, str):
        return None, error
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], Mapping):
        first = errors[0]
        code = first.get("code")
        message = first.get("title") or first.get("detail")
        return (str(code) if code else None), (str(message) if message else None)
    message = body.get("message")
    return None, (str(message) if message else None)


def http_failure(response: Any) -> ProviderFailure:
    """Build a failure from a non-2xx response, whatever its content type."""
    body, _ = parse_json(response)
    code, message = _extract_error(body)
    if isinstance(body, Mapping):
        payload = sanitize_payload(body)
    else:
        payload = {"body": _summarize_text(response)}
    return ProviderFailure(
        reason="http",
        status_code=response.status_code,
        code=code,
        message=message,
        payload=payload,
    )


def is_success(response: Any) -> bool:
    return 200 <= int(response.status_code) < 300


def _post_cancellable(
    session: requests.Session,
    url: str,
    cancel: CancelToken,
    **kwargs: Any,
) -> Optional[requests.Response]:
    """Run ``session.post`` on a worker thread; ``None`` means the token fired first.

    The worker is left to finish on its own once abandoned; the session is closed
    by the caller so its pooled connection is dropped.
    """
    future: Future = Future()
    wake = threading.Event()

    def _run() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(session.post(url, **kwargs))
        except BaseException as exc:
            future.set_exception(exc)

    future.add_done_callback(lambda _: wake.set())
    unregister = cancel.on_cancel(wake.set)
    worker = threading.Thread(target=_run, name="image-gateway-http", daemon=True)
    worker.start()
    try:
        wake.wait()
    finally:
        unregister()
    if cancel.cancelled:
        return None
    return future.result()


def post(
    url: str,
    *,
    label: str,
    timeout: float,
    cancel: Optional[CancelToken] = None,
    session_factory: SessionFactory = requests.Session,
    **kwargs: Any,
) -> Union[requests.Response, ProviderFailure]:
    if cancel is not None and cancel.cancelled:
        return ProviderFailure(reason="cancelled", message=f"{label} request cancelled before sending.")

    session = session_factory()
    try:
        logger.debug("%s POST %s", label, url)
        if cancel is None:
            response = session.post(url, timeout=timeout, **kwargs)
        else:
            response = _post_cancellable(session, url, cancel, timeout=timeout, **kwargs)
            if response is None:
                logger.info("%s request cancelled in flight", label)
                return ProviderFailure(reason="cancelled", message=f"{label} request cancelled.")
    except requests.Timeout as exc:
        logger.warning("%s request timed out after %.1fs", label, timeout)
        return ProviderFailure(reason="timeout", message=str(exc))
    except requests.RequestException as exc:
        if cancel is not None and cancel.cancelled:
            return ProviderFailure(reason="cancelled", message=f"{label} request cancelled.")
        logger.warning("%s transport error: %s", label, exc)
        return ProviderFailure(reason="transport", message=str(exc))
    finally:
        session.close()

    if cancel is not None and cancel.cancelled:
        return ProviderFailure(reason="cancelled", message=f"{label} request cancelled.")
    logger.debug("%s responded %s", label, response.status_code)
    return response
