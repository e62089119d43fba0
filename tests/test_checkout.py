import pytest

import kiosk_pix.checkout as checkout_mod
from kiosk_pix import decode_payment_code
from kiosk_pix.checkout import (
    DEFAULT_PAYEE_NAME,
    checkout_tab,
    payment_request_for_tab,
    tab_reference,
    tab_total,
)
from kiosk_pix.config import KioskSettings
from kiosk_pix.models import KioskItem, KioskPoint, KioskTab


def _tab(number: int = 7) -> KioskTab:
    return KioskTab.model_validate(
        {"id": "c1", "pointId": "p1", "numeroCard": number, "status": "ABERTA", "valorTotal": 0}
    )


def _item(total: float, idx: int = 1) -> KioskItem:
    return KioskItem.model_validate(
        {
            "id": f"i{idx}",
            "produtoId": f"prod-{idx}",
            "quantidade": 1,
            "precoUnitario": total,
            "precoTotal": total,
        }
    )


def _point(pix_key: str | None = "pix@arena.com.br", name: str | None = "Arena Beira-Rio") -> KioskPoint:
    return KioskPoint.model_validate({"id": "p1", "nome": name, "pixChave": pix_key})


def test_tab_total_and_reference():
    assert tab_total([_item(30.0, 1), _item(12.5, 2)]) == 42.5
    assert tab_total([_item(0.1, 1), _item(0.2, 2)]) == 0.3
    assert tab_total([]) == 0
    assert tab_reference(_tab(123)) == "CARD123"


def test_payment_request_for_tab():
    req = payment_request_for_tab(_point(pix_key="  pix@arena.com.br "), _tab(), [_item(30.0, 1), _item(12.5, 2)])
    assert req is not None
    assert req.payee_key == "pix@arena.com.br"
    assert req.amount == 42.5
    assert req.payee_name == "Arena Beira-Rio"
    assert req.payee_city == "PORTO ALEGRE"
    assert req.reference == "CARD7"


def test_payment_request_defaults_name_when_point_has_none():
    req = payment_request_for_tab(_point(name=None), _tab(), [_item(5.0)], city="Canoas")
    assert req is not None
    assert req.payee_name == DEFAULT_PAYEE_NAME
    assert req.payee_city == "Canoas"


@pytest.mark.parametrize("pix_key", [None, "", "   "])
def test_payment_request_requires_pix_key(pix_key):
    assert payment_request_for_tab(_point(pix_key=pix_key), _tab(), [_item(5.0)]) is None


def _stub_backend(monkeypatch: pytest.MonkeyPatch, point: KioskPoint, items: list[KioskItem]) -> None:
    monkeypatch.setattr(checkout_mod, "get_point", lambda point_id, settings=None: point)
    monkeypatch.setattr(checkout_mod, "get_tab_by_number", lambda point_id, number, settings=None: (_tab(number), items))


def test_checkout_tab_builds_verifiable_payload(monkeypatch):
    _stub_backend(monkeypatch, _point(name=None), [_item(30.0, 1), _item(12.5, 2)])

    result = checkout_tab("p1", 7, settings=KioskSettings(pix_city="Porto Alegre"))

    assert result.total == 42.5
    assert result.payload is not None
    decoded = decode_payment_code(result.payload)
    assert decoded.payee_key == "pix@arena.com.br"
    assert decoded.amount == "42.50"
    assert decoded.payee_name == "Carlao BT Online"
    assert decoded.payee_city == "Porto Alegre"
    assert decoded.reference == "CARD7"


def test_checkout_tab_without_pix_key(monkeypatch):
    _stub_backend(monkeypatch, _point(pix_key=None), [_item(10.0)])
    result = checkout_tab("p1", 7, settings=KioskSettings())
    assert result.request is None
    assert result.payload is None
    assert result.total == 10.0


def test_checkout_tab_with_nothing_to_pay(monkeypatch):
    _stub_backend(monkeypatch, _point(), [])
    result = checkout_tab("p1", 7, settings=KioskSettings())
    assert result.request is not None
    assert result.payload is None
