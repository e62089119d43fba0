"""Pay-a-tab flow: turn a point's tab into a Pix payment code.

Composes the backend lookups from :mod:`kiosk_pix.kiosk` with the codec in
:mod:`kiosk_pix.pix`. The tab total is recomputed from its items, which is
what the athlete sees listed on screen.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from .config import DEFAULT_PIX_CITY, KioskSettings, load_settings
from .kiosk import get_point, get_tab_by_number
from .logging_setup import get_logger
from .models import KioskItem, KioskPoint, KioskTab, PaymentCodeRequest
from .pix import build_payment_code

DEFAULT_PAYEE_NAME = "Carlão BT Online"

_logger = get_logger("kiosk_pix.checkout")


@dataclass(frozen=True, slots=True)
class TabCheckout:
    """A tab ready to pay: its items, the computed total and the Pix payload.

    ``payload`` is ``None`` when the point has no Pix key or the total is zero.
    """

    point: KioskPoint
    tab: KioskTab
    items: tuple[KioskItem, ...]
    total: float
    request: PaymentCodeRequest | None
    payload: str | None


def tab_total(items: Sequence[KioskItem]) -> float:
    return round(sum(item.total_price or 0 for item in items), 2)


def tab_reference(tab: KioskTab) -> str:
    return f"CARD{tab.number}"


def payment_request_for_tab(
    point: KioskPoint,
    tab: KioskTab,
    items: Sequence[KioskItem],
    *,
    city: str = DEFAULT_PIX_CITY,
) -> PaymentCodeRequest | None:
    """Build the payment request for ``tab``, or ``None`` when ``point`` has no Pix key."""

    key = str(point.pix_key).strip() if point.pix_key else ""
    if not key:
        return None
    return PaymentCodeRequest(
        payee_key=key,
        amount=tab_total(items),
        payee_name=point.name or DEFAULT_PAYEE_NAME,
        payee_city=city,
        reference=tab_reference(tab),
    )


def checkout_tab(point_id: str, number: int, *, settings: KioskSettings | None = None) -> TabCheckout:
    """Fetch point and tab ``number`` from the backend and build its payment code."""

    settings = settings or load_settings()
    point = get_point(point_id, settings=settings)
    tab, items = get_tab_by_number(point_id, number, settings=settings)
    total = tab_total(items)

    request = payment_request_for_tab(point, tab, items, city=settings.pix_city)
    payload: str | None = None
    if request is None:
        _logger.info("point %s has no Pix key; payment code unavailable", point_id)
    elif total <= 0:
        _logger.info("tab %s has nothing to pay", tab.number)
    else:
        payload = build_payment_code(request)
        _logger.info("payment code ready for tab %s total=%.2f", tab.number, total)

    return TabCheckout(
        point=point,
        tab=tab,
        items=tuple(items),
        total=total,
        request=request,
        payload=payload,
    )


__all__ = [
    "DEFAULT_PAYEE_NAME",
    "TabCheckout",
    "checkout_tab",
    "payment_request_for_tab",
    "tab_reference",
    "tab_total",
]
