"""Command-line interface for ``kiosk_pix``.

A Typer app for building, rendering and checking static Pix payment codes, and
for producing the payment code of a kiosk tab straight from the backend.
Environment variables (``KIOSK_API_BASE_URL``, ``KIOSK_KEY``,
``KIOSK_POINT_ID``...) are loaded from a local ``.env`` with
``python-dotenv`` before any command runs.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config import load_settings
from .logging_setup import configure_logging
from .models import PaymentCodeRequest
from .pix import PaymentCodeError, build_payment_code

app = typer.Typer(
    name="kiosk-pix",
    no_args_is_help=True,
    add_completion=False,
    help="Static Pix payment codes for the club kiosk.",
)
console = Console()
err_console = Console(stderr=True)


KeyOption = Annotated[str, typer.Option("--key", help="Payee Pix key (e-mail, phone, CPF/CNPJ or random key).")]
AmountOption = Annotated[float, typer.Option("--amount", help="Amount in BRL; negative values encode as 0.00.")]
NameOption = Annotated[str, typer.Option("--name", help="Payee name (sanitized to 25 chars).")]
CityOption = Annotated[
    str | None, typer.Option("--city", help="Payee city (sanitized to 15 chars). Defaults to KIOSK_PIX_CITY.")
]
ReferenceOption = Annotated[str, typer.Option("--reference", help="Transaction reference, e.g. CARD123.")]


def _request_from_options(key: str, amount: float, name: str, city: str | None, reference: str) -> PaymentCodeRequest:
    return PaymentCodeRequest(
        payee_key=key,
        amount=amount,
        payee_name=name,
        payee_city=city if city is not None else load_settings().pix_city,
        reference=reference,
    )


def _build_or_exit(request: PaymentCodeRequest) -> str:
    try:
        return build_payment_code(request)
    except PaymentCodeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


@app.command("payload")
def payload_cmd(
    key: KeyOption,
    amount: AmountOption = 0.0,
    name: NameOption = "",
    city: CityOption = None,
    reference: ReferenceOption = "",
) -> None:
    """Print the payment code text for the given payee and amount."""

    payload = _build_or_exit(_request_from_options(key, amount, name, city, reference))
    typer.echo(payload)


@app.command("qr")
def qr_cmd(
    key: KeyOption,
    amount: AmountOption = 0.0,
    name: NameOption = "",
    city: CityOption = None,
    reference: ReferenceOption = "",
    out: Annotated[Path | None, typer.Option("--out", help="Write a PNG here instead of printing a data URL.")] = None,
) -> None:
    """Render the payment code as a QR image."""

    from .qr import render_data_url, render_png

    payload = _build_or_exit(_request_from_options(key, amount, name, city, reference))
    if out is None:
        typer.echo(render_data_url(payload))
        return
    render_png(payload, out)
    console.print(f"[green]Wrote[/green] {out}")


@app.command("verify")
def verify_cmd(
    payload: Annotated[str, typer.Argument(help="Payment code text to check.")],
) -> None:
    """Parse a payment code, check its CRC and show its fields."""

    from .reader import decode_payment_code

    try:
        decoded = decode_payment_code(payload)
    except PaymentCodeError as e:
        err_console.print(f"[red]Invalid:[/red] {e}")
        raise typer.Exit(1) from e

    table = Table(title="Payment code", show_header=True)
    table.add_column("Tag")
    table.add_column("Len", justify="right")
    table.add_column("Value")
    for f in decoded.fields:
        table.add_row(f.tag, f"{len(f.value):02d}", f.value)
    console.print(table)
    console.print(
        f"key={decoded.payee_key} amount={decoded.amount or '-'} "
        f"name={decoded.payee_name} city={decoded.payee_city} ref={decoded.reference or '-'}"
    )
    console.print(f"[green]CRC OK[/green] ({decoded.checksum})")


@app.command("checkout")
def checkout_cmd(
    number: Annotated[int, typer.Option("--number", help="Tab (comanda) number.")],
    point_id: Annotated[
        str | None, typer.Option("--point-id", help="Point id. Defaults to KIOSK_POINT_ID.")
    ] = None,
    out: Annotated[Path | None, typer.Option("--out", help="Also write the QR PNG here.")] = None,
) -> None:
    """Fetch a tab from the backend and print its Pix payment code."""

    from .checkout import checkout_tab
    from .http import ApiError

    settings = load_settings()
    point_id = point_id or settings.point_id
    if not point_id:
        err_console.print("[red]Error:[/red] KIOSK_POINT_ID is not set and --point-id was not given.")
        raise typer.Exit(1)

    try:
        result = checkout_tab(point_id, number, settings=settings)
    except ApiError as e:
        err_console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1) from e

    table = Table(title=f"Comanda #{result.tab.number}")
    table.add_column("Item")
    table.add_column("Qtd", justify="right")
    table.add_column("Total", justify="right")
    for item in result.items:
        label = item.product.name if item.product else item.product_id
        table.add_row(label, str(item.quantity), f"{item.total_price:.2f}")
    console.print(table)
    console.print(f"Total: R$ {result.total:.2f}")

    if result.payload is None:
        reason = "point has no Pix key" if result.request is None else "nothing to pay"
        err_console.print(f"[yellow]No payment code:[/yellow] {reason}")
        raise typer.Exit(1)

    typer.echo(result.payload)
    if out is not None:
        from .qr import render_png

        render_png(result.payload, out)
        console.print(f"[green]Wrote[/green] {out}")


@app.callback()
def _root(
    log_level: Annotated[str | None, typer.Option("--log-level", help="Override KIOSK_LOG_LEVEL.")] = None,
) -> None:
    """Load ``.env`` from the working directory and configure logging."""

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging(log_level)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
