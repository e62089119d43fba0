"""Thin JSON client for the club backend's kiosk endpoints.

Requests go to ``KIOSK_API_BASE_URL`` with ``accept: application/json`` and,
when configured, the shared ``x-kiosk-key`` header. Non-2xx responses and
transport failures surface as :class:`ApiError` carrying the HTTP status (0
when no response was received) and the backend's message.

Retries and caching are left to the caller.
"""

from __future__ import annotations

import json
import urllib.error
import urllib.request
from collections.abc import Mapping
from typing import Any

from .config import KioskSettings, load_settings
from .logging_setup import get_logger

_logger = get_logger("kiosk_pix.http")


class ApiError(RuntimeError):
    """A failed backend call.

    Attributes
    ----------
    status:
        HTTP status code, or ``0`` when the request never got a response
        (missing configuration, network failure).
    message:
        Human-readable message; the backend's ``mensagem``/``message`` when
        it sent one.
    details:
        The decoded response body, when any.
    """

    def __init__(self, status: int, message: str, details: Any = None) -> None:
        super().__init__(f"{status}: {message}" if status else message)
        self.status = status
        self.message = message
        self.details = details


def join_url(base: str, path: str) -> str:
    if not base:
        return path
    base_trim = base[:-1] if base.endswith("/") else base
    path_trim = path if path.startswith("/") else f"/{path}"
    return f"{base_trim}{path_trim}"


def _decode_body(raw: bytes, content_type: str) -> Any:
    if "application/json" in content_type:
        try:
            return json.loads(raw.decode("utf-8"))
        except ValueError:
            return None
    return raw.decode("utf-8", errors="replace")


def _error_message(status: int, payload: Any) -> str:
    if isinstance(payload, Mapping):
        for key in ("mensagem", "message"):
            val = payload.get(key)
            if val:
                return str(val)
    return f"Erro HTTP {status}"


def api_fetch(
    path: str,
    *,
    method: str = "GET",
    json_body: Any = None,
    settings: KioskSettings | None = None,
) -> Any:
    """Call ``path`` on the kiosk backend and return the decoded body.

    Parameters
    ----------
    path:
        Path (with query string) relative to the configured base URL.
    method:
        HTTP method.
    json_body:
        When not ``None``, serialized as the JSON request body.
    settings:
        Explicit settings; defaults to :func:`~kiosk_pix.config.load_settings`.
    """

    settings = settings or load_settings()
    if not settings.api_base_url:
        raise ApiError(0, "KIOSK_API_BASE_URL não configurado")

    url = join_url(settings.api_base_url, path)
    data = json.dumps(json_body).encode("utf-8") if json_body is not None else None
    req = urllib.request.Request(url, data=data, method=method)
    req.add_header("Accept", "application/json")
    if settings.kiosk_key:
        req.add_header("X-Kiosk-Key", settings.kiosk_key)
    if data is not None:
        req.add_header("Content-Type", "application/json")

    _logger.debug("%s %s", method, url)
    try:
        with urllib.request.urlopen(req, timeout=settings.http_timeout) as resp:
            content_type = resp.headers.get("content-type") or ""
            return _decode_body(resp.read(), content_type)
    except urllib.error.HTTPError as e:
        content_type = (e.headers.get("content-type") if e.headers else None) or ""
        try:
            payload = _decode_body(e.read(), content_type)
        except OSError:
            payload = None
        message = _error_message(e.code, payload)
        _logger.warning("%s %s failed: %s %s", method, url, e.code, message)
        raise ApiError(e.code, message, payload) from e
    except urllib.error.URLError as e:
        _logger.warning("%s %s unreachable: %s", method, url, e.reason)
        raise ApiError(0, f"Falha de conexão: {e.reason}") from e
    except TimeoutError as e:
        _logger.warning("%s %s timed out", method, url)
        raise ApiError(0, "Tempo de resposta esgotado") from e


__all__ = ["ApiError", "api_fetch", "join_url"]
