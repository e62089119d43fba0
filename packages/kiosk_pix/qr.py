"""Render payment codes as QR images.

The codec only produces text; this adapter turns it into a PNG (or a
``data:`` URL for embedding in a web view) using ``qrcode`` with the Pillow
backend. Error correction level M and a one-module border match what the
kiosk screen displays.
"""

from __future__ import annotations

import base64
from io import BytesIO
from os import PathLike
from pathlib import Path

import qrcode
from qrcode.constants import ERROR_CORRECT_M

DEFAULT_BOX_SIZE = 8
DEFAULT_BORDER = 1


def render_png_bytes(payload: str, *, box_size: int = DEFAULT_BOX_SIZE, border: int = DEFAULT_BORDER) -> bytes:
    """Return PNG bytes of a QR code encoding ``payload``."""

    if not payload:
        raise ValueError("cannot render an empty payload")
    qr = qrcode.QRCode(error_correction=ERROR_CORRECT_M, box_size=box_size, border=border)
    qr.add_data(payload)
    qr.make(fit=True)
    img = qr.make_image(fill_color="black", back_color="white")
    bio = BytesIO()
    img.save(bio, format="PNG")
    return bio.getvalue()


def render_data_url(payload: str, *, box_size: int = DEFAULT_BOX_SIZE, border: int = DEFAULT_BORDER) -> str:
    """Return ``data:image/png;base64,...`` for ``payload``."""

    png = render_png_bytes(payload, box_size=box_size, border=border)
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def render_png(
    payload: str,
    path: str | PathLike[str],
    *,
    box_size: int = DEFAULT_BOX_SIZE,
    border: int = DEFAULT_BORDER,
) -> Path:
    """Write the QR PNG for ``payload`` to ``path`` and return the path."""

    p = Path(path)
    p.write_bytes(render_png_bytes(payload, box_size=box_size, border=border))
    return p


__all__ = ["render_data_url", "render_png", "render_png_bytes"]
