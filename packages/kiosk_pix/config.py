"""Runtime settings for the kiosk, read from the environment.

The CLI loads a local ``.env`` through ``python-dotenv`` before calling
:func:`load_settings`; library callers may construct :class:`KioskSettings`
directly instead.

Variables
---------
- ``KIOSK_API_BASE_URL``: base URL of the club backend (required for API calls).
- ``KIOSK_KEY``: shared kiosk key sent as ``x-kiosk-key``.
- ``KIOSK_POINT_ID``: the club location this kiosk serves.
- ``KIOSK_PIX_CITY``: payee city written into payment codes.
- ``KIOSK_HTTP_TIMEOUT``: request timeout in seconds.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_PIX_CITY = "PORTO ALEGRE"
DEFAULT_HTTP_TIMEOUT = 15.0


def _env_str(key: str) -> str | None:
    val = os.getenv(key)
    if val is None:
        return None
    val = val.strip()
    return val or None


def _env_timeout(key: str) -> float:
    raw = _env_str(key)
    if raw is None:
        return DEFAULT_HTTP_TIMEOUT
    try:
        value = float(raw)
    except ValueError:
        return DEFAULT_HTTP_TIMEOUT
    return value if value > 0 else DEFAULT_HTTP_TIMEOUT


@dataclass(frozen=True, slots=True)
class KioskSettings:
    """Resolved kiosk configuration."""

    api_base_url: str | None = None
    kiosk_key: str | None = None
    point_id: str | None = None
    pix_city: str = DEFAULT_PIX_CITY
    http_timeout: float = DEFAULT_HTTP_TIMEOUT


def load_settings() -> KioskSettings:
    """Build :class:`KioskSettings` from the current process environment."""

    return KioskSettings(
        api_base_url=_env_str("KIOSK_API_BASE_URL"),
        kiosk_key=_env_str("KIOSK_KEY"),
        point_id=_env_str("KIOSK_POINT_ID"),
        pix_city=_env_str("KIOSK_PIX_CITY") or DEFAULT_PIX_CITY,
        http_timeout=_env_timeout("KIOSK_HTTP_TIMEOUT"),
    )


__all__ = ["DEFAULT_HTTP_TIMEOUT", "DEFAULT_PIX_CITY", "KioskSettings", "load_settings"]
