"""Kiosk backend endpoints: athletes, tabs ("comandas") and items.

Each function wraps one REST call via :func:`kiosk_pix.http.api_fetch` and
validates the response into the pydantic models from :mod:`kiosk_pix.models`.
Request bodies keep the backend's Portuguese field names.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import NamedTuple
from urllib.parse import quote, urlencode

from .config import KioskSettings
from .http import api_fetch
from .models import KioskAthlete, KioskItem, KioskPoint, KioskProduct, KioskTab, RecognitionCandidate

FACE_MODEL_VERSION = "mediapipe-image-embedder-v1"

_NON_DIGIT_RE = re.compile(r"\D")


def normalize_phone(value: str) -> str:
    """Keep only the digits of a typed phone number."""

    return _NON_DIGIT_RE.sub("", value or "")


def _query(**params: object) -> str:
    return urlencode({k: v for k, v in params.items() if v is not None})


def find_athlete_by_phone(point_id: str, phone: str, *, settings: KioskSettings | None = None) -> KioskAthlete:
    res = api_fetch(
        "/api/kiosk/atleta/por-telefone",
        method="POST",
        json_body={"pointId": point_id, "telefone": normalize_phone(phone)},
        settings=settings,
    )
    return KioskAthlete.model_validate(res["atleta"])


def recognize_athlete(
    point_id: str,
    embedding: Sequence[float],
    *,
    top_k: int = 5,
    threshold: float = 0.5,
    model_version: str = FACE_MODEL_VERSION,
    settings: KioskSettings | None = None,
) -> list[RecognitionCandidate]:
    """Match a face embedding against enrolled athletes, best score first."""

    res = api_fetch(
        "/api/kiosk/atleta/reconhecer",
        method="POST",
        json_body={
            "pointId": point_id,
            "embedding": [float(x) for x in embedding],
            "topK": top_k,
            "threshold": threshold,
            "modelVersion": model_version,
        },
        settings=settings,
    )
    candidates = [RecognitionCandidate.model_validate(c) for c in res.get("candidatos") or []]
    return sorted(candidates, key=lambda c: c.score, reverse=True)


def open_or_create_tab(point_id: str, athlete_id: str, *, settings: KioskSettings | None = None) -> KioskTab:
    res = api_fetch(
        "/api/kiosk/comanda/obter-ou-criar",
        method="POST",
        json_body={"pointId": point_id, "atletaId": athlete_id},
        settings=settings,
    )
    return KioskTab.model_validate(res["card"])


def _tab_with_items(res: dict) -> tuple[KioskTab, list[KioskItem]]:
    tab = KioskTab.model_validate(res["card"])
    items = [KioskItem.model_validate(i) for i in res.get("itens") or []]
    return tab, items


def get_tab(point_id: str, card_id: str, *, settings: KioskSettings | None = None) -> tuple[KioskTab, list[KioskItem]]:
    res = api_fetch(
        f"/api/kiosk/comanda/{quote(card_id, safe='')}?{_query(pointId=point_id, incluirItens='true')}",
        settings=settings,
    )
    return _tab_with_items(res)


def get_tab_by_number(
    point_id: str, number: int, *, settings: KioskSettings | None = None
) -> tuple[KioskTab, list[KioskItem]]:
    res = api_fetch(
        f"/api/kiosk/comanda/por-numero/{int(number)}?{_query(pointId=point_id, incluirItens='true')}",
        settings=settings,
    )
    return _tab_with_items(res)


def add_item(
    point_id: str,
    card_id: str,
    *,
    barcode: str | None = None,
    product_id: str | None = None,
    quantity: int = 1,
    settings: KioskSettings | None = None,
) -> tuple[KioskItem, float]:
    """Add one line to a tab by scanned barcode or by product id.

    Returns the created item and the tab's new total.
    """

    if (barcode is None) == (product_id is None):
        raise ValueError("add_item requires exactly one of barcode or product_id")
    if quantity <= 0:
        raise ValueError("quantity must be positive")

    body: dict[str, object] = {"quantidade": quantity}
    if barcode is not None:
        body["barcode"] = barcode.strip()
    else:
        body["produtoId"] = product_id

    res = api_fetch(
        f"/api/kiosk/comanda/{quote(card_id, safe='')}/adicionar-item?{_query(pointId=point_id)}",
        method="POST",
        json_body=body,
        settings=settings,
    )
    return KioskItem.model_validate(res["item"]), float(res["cardValorTotal"])


def get_point(point_id: str, *, settings: KioskSettings | None = None) -> KioskPoint:
    """Return the point itself; the backend sends it unwrapped."""

    res = api_fetch(f"/api/kiosk/point/{quote(point_id, safe='')}", settings=settings)
    return KioskPoint.model_validate(res)


class ProductCatalog(NamedTuple):
    """Products a point sells; ``quick`` is the short list shown as shortcuts."""

    quick: list[KioskProduct]
    products: list[KioskProduct]


def list_products(point_id: str, *, settings: KioskSettings | None = None) -> ProductCatalog:
    res = api_fetch(f"/api/kiosk/produtos?{_query(pointId=point_id)}", settings=settings)
    return ProductCatalog(
        quick=[KioskProduct.model_validate(p) for p in res.get("rapidos") or []],
        products=[KioskProduct.model_validate(p) for p in res.get("produtos") or []],
    )


def enroll_face(
    point_id: str,
    athlete_id: str,
    embedding: Sequence[float],
    *,
    model_version: str = FACE_MODEL_VERSION,
    settings: KioskSettings | None = None,
) -> None:
    """Store a face embedding for ``athlete_id`` so later visits can be recognized."""

    if not embedding:
        raise ValueError("embedding must not be empty")
    api_fetch(
        "/api/kiosk/atleta/cadastrar-face",
        method="POST",
        json_body={
            "pointId": point_id,
            "atletaId": athlete_id,
            "embedding": [float(x) for x in embedding],
            "modelVersion": model_version,
        },
        settings=settings,
    )


__all__ = [
    "FACE_MODEL_VERSION",
    "ProductCatalog",
    "add_item",
    "enroll_face",
    "find_athlete_by_phone",
    "get_point",
    "get_tab",
    "get_tab_by_number",
    "list_products",
    "normalize_phone",
    "open_or_create_tab",
    "recognize_athlete",
]
