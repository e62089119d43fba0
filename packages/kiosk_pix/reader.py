"""Read payment codes back into fields.

Mirrors what a scanning app does with a Pix payload: walk the top-level TLVs,
expand the nested merchant-account (26) and additional-data (62) groups, and
recompute the CRC over everything up to and including ``6304``.
"""

from __future__ import annotations

from .models import DecodedPaymentCode, TLVField
from .pix import CRC_TRAILER, PaymentCodeError, crc16


def parse_tlv(text: str) -> list[TLVField]:
    """Split a flat TLV sequence into fields, in order.

    Raises :class:`~kiosk_pix.pix.PaymentCodeError` when a header is short,
    a length is not two digits, or a value runs past the end of ``text``.
    """

    fields: list[TLVField] = []
    pos = 0
    while pos < len(text):
        header = text[pos : pos + 4]
        if len(header) < 4:
            raise PaymentCodeError(f"truncated TLV header at offset {pos}")
        tag, length = header[:2], header[2:]
        if not (length.isascii() and length.isdigit()):
            raise PaymentCodeError(f"invalid length {length!r} for tag {tag} at offset {pos}")
        start = pos + 4
        end = start + int(length)
        if end > len(text):
            raise PaymentCodeError(f"value for tag {tag} overruns payload at offset {pos}")
        fields.append(TLVField(tag, text[start:end]))
        pos = end
    return fields


def _nested(fields: list[TLVField], tag: str) -> dict[str, str]:
    for f in fields:
        if f.tag == tag:
            return {inner.tag: inner.value for inner in parse_tlv(f.value)}
    return {}


def verify_checksum(payload: str) -> bool:
    """Return True when the last four characters are the CRC of the rest."""

    if len(payload) < 8 or payload[-8:-4] != CRC_TRAILER:
        return False
    return crc16(payload[:-4]) == payload[-4:].upper()


def decode_payment_code(payload: str) -> DecodedPaymentCode:
    """Parse and verify a static payment code.

    Raises :class:`~kiosk_pix.pix.PaymentCodeError` on structural errors, a
    missing ``6304`` trailer, or a checksum mismatch.
    """

    payload = payload.strip()
    if not payload.isascii():
        raise PaymentCodeError("payment code must be ASCII")

    fields = parse_tlv(payload)
    if not fields or fields[-1].tag != "63" or len(fields[-1].value) != 4:
        raise PaymentCodeError("payment code must end with a 4-digit CRC field (6304)")
    if fields[0] != TLVField("00", "01"):
        raise PaymentCodeError("payment code must start with payload format indicator 000201")

    expected = crc16(payload[:-4])
    checksum = fields[-1].value.upper()
    if checksum != expected:
        raise PaymentCodeError(f"checksum mismatch: payload has {checksum}, computed {expected}")

    top = {f.tag: f.value for f in fields}
    account = _nested(fields, "26")
    additional = _nested(fields, "62")

    return DecodedPaymentCode(
        fields=tuple(fields),
        gui=account.get("00", ""),
        payee_key=account.get("01", ""),
        amount=top.get("54"),
        payee_name=top.get("59", ""),
        payee_city=top.get("60", ""),
        reference=additional.get("05"),
        checksum=checksum,
    )


__all__ = ["decode_payment_code", "parse_tlv", "verify_checksum"]
