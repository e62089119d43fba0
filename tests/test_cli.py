from pathlib import Path

from typer.testing import CliRunner

import kiosk_pix.checkout as checkout_mod
from kiosk_pix import PaymentCodeRequest, build_payment_code
from kiosk_pix.checkout import TabCheckout
from kiosk_pix.cli import app
from kiosk_pix.http import ApiError
from kiosk_pix.models import KioskItem, KioskPoint, KioskTab

runner = CliRunner()

SCENARIO_ARGS = [
    "--key",
    "11999998888",
    "--amount",
    "42.5",
    "--name",
    "João Ação Ltda",
    "--city",
    "São Paulo",
    "--reference",
    "CARD123",
]


def _scenario_payload() -> str:
    return build_payment_code(
        PaymentCodeRequest(
            payee_key="11999998888",
            amount=42.5,
            payee_name="João Ação Ltda",
            payee_city="São Paulo",
            reference="CARD123",
        )
    )


def test_payload_command_prints_payment_code():
    result = runner.invoke(app, ["payload", *SCENARIO_ARGS])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip() == _scenario_payload()


def test_payload_command_uses_city_from_environment(monkeypatch):
    monkeypatch.setenv("KIOSK_PIX_CITY", "Canoas")
    result = runner.invoke(app, ["payload", "--key", "k@x.com", "--amount", "1"])
    assert result.exit_code == 0, result.output
    assert "6006Canoas" in result.stdout


def test_payload_command_rejects_non_ascii_key():
    result = runner.invoke(app, ["payload", "--key", "joão@x.com", "--amount", "1"])
    assert result.exit_code == 1


def test_qr_command_prints_data_url():
    result = runner.invoke(app, ["qr", *SCENARIO_ARGS])
    assert result.exit_code == 0, result.output
    assert result.stdout.strip().startswith("data:image/png;base64,")


def test_qr_command_writes_png(tmp_path: Path):
    out = tmp_path / "pix.png"
    result = runner.invoke(app, ["qr", *SCENARIO_ARGS, "--out", str(out)])
    assert result.exit_code == 0, result.output
    assert out.read_bytes().startswith(b"\x89PNG")


def test_verify_command_accepts_valid_payload():
    result = runner.invoke(app, ["verify", _scenario_payload()])
    assert result.exit_code == 0, result.output
    assert "CRC OK" in result.stdout


def test_verify_command_rejects_bad_checksum():
    payload = _scenario_payload()
    bad = payload[:-4] + ("0000" if payload[-4:] != "0000" else "FFFF")
    result = runner.invoke(app, ["verify", bad])
    assert result.exit_code == 1


def _checkout_result(payload: str | None, pix_key: str | None = "pix@arena.com.br") -> TabCheckout:
    item = KioskItem.model_validate(
        {
            "id": "i1",
            "produtoId": "prod-1",
            "quantidade": 1,
            "precoUnitario": 42.5,
            "precoTotal": 42.5,
            "produto": {"id": "prod-1", "nome": "Raquete aluguel", "precoVenda": 42.5},
        }
    )
    tab = KioskTab.model_validate({"id": "c1", "pointId": "p1", "numeroCard": 7, "status": "ABERTA", "valorTotal": 42.5})
    point = KioskPoint.model_validate({"id": "p1", "nome": "Arena", "pixChave": pix_key})
    request = None
    if pix_key:
        request = PaymentCodeRequest(pix_key, 42.5, "Arena", "PORTO ALEGRE", "CARD7")
    return TabCheckout(point=point, tab=tab, items=(item,), total=42.5, request=request, payload=payload)


def test_checkout_command_prints_payload(monkeypatch):
    payload = _scenario_payload()
    seen: dict[str, object] = {}

    def fake_checkout(point_id, number, settings=None):
        seen.update(point_id=point_id, number=number)
        return _checkout_result(payload)

    monkeypatch.setenv("KIOSK_POINT_ID", "p1")
    monkeypatch.setattr(checkout_mod, "checkout_tab", fake_checkout)

    result = runner.invoke(app, ["checkout", "--number", "7"])

    assert result.exit_code == 0, result.output
    assert seen == {"point_id": "p1", "number": 7}
    assert payload in result.stdout
    assert "42.50" in result.stdout


def test_checkout_command_without_point_id():
    result = runner.invoke(app, ["checkout", "--number", "7"])
    assert result.exit_code == 1


def test_checkout_command_without_pix_key(monkeypatch):
    monkeypatch.setattr(checkout_mod, "checkout_tab", lambda point_id, number, settings=None: _checkout_result(None, None))
    result = runner.invoke(app, ["checkout", "--number", "7", "--point-id", "p1"])
    assert result.exit_code == 1


def test_checkout_command_reports_api_errors(monkeypatch):
    def failing(point_id, number, settings=None):
        raise ApiError(404, "Comanda não encontrada")

    monkeypatch.setattr(checkout_mod, "checkout_tab", failing)
    result = runner.invoke(app, ["checkout", "--number", "99", "--point-id", "p1"])
    assert result.exit_code == 1


def test_payload_command_handles_amount_beyond_decimal_precision():
    result = runner.invoke(app, ["payload", "--key", "k@x.com", "--amount", "1e30"])
    assert result.exit_code == 0, result.output
    assert "5434" + "1" + "0" * 30 + ".00" in result.stdout
