"""Static Pix payment code (BR Code) builder.

Serializes a :class:`~kiosk_pix.models.PaymentCodeRequest` into the EMV-style
tag/length/value string that banking apps read from a Pix QR code. The
pipeline is a set of pure functions composed in a fixed order:

    sanitize_name / sanitize_city   free text -> restricted ASCII field
    format_amount                   number -> "123.45"
    tlv                             tag + 2-digit length + value
    assemble                        ordered top-level fields, ending in "6304"
    crc16                           CRC-16/CCITT-FALSE over the assembled text

Field order and the checksum are an external contract: third-party scanners
reject a payload whose lengths or CRC disagree with its content.
"""

from __future__ import annotations

import math
import re
import unicodedata
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

from .logging_setup import get_logger
from .models import PaymentCodeRequest

PIX_GUI = "br.gov.bcb.pix"

NAME_MAX_LEN = 25
CITY_MAX_LEN = 15
REFERENCE_MAX_LEN = 25
AMOUNT_MAX_LEN = 99

NAME_FALLBACK = "PAGAMENTO"
CITY_FALLBACK = "BRASIL"
REFERENCE_FALLBACK = "***"

# Tag 63 with its fixed length, written before the checksum value is known.
CRC_TRAILER = "6304"

_CRC_POLY = 0x1021
_CRC_INIT = 0xFFFF

_DISALLOWED_RE = re.compile(r"[^\w\s\-.]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s", re.ASCII)

_logger = get_logger("kiosk_pix.pix")


class PaymentCodeError(ValueError):
    """Raised when a payment code cannot be built or read."""


# ---------------------------------------------------------------------------
# Field sanitizer
# ---------------------------------------------------------------------------


def _sanitize(text: str | None, *, max_len: int, fallback: str) -> str:
    decomposed = unicodedata.normalize("NFD", text or "")
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    cleaned = _DISALLOWED_RE.sub("", stripped)
    # Tabs/newlines survive the filter above; keep them out of the payload.
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    # Strip again: truncation may expose a trailing space.
    cleaned = cleaned[:max_len].strip()
    return cleaned or fallback


def sanitize_name(text: str | None) -> str:
    """Merchant name (tag 59): accents stripped, at most 25 chars, never empty."""

    return _sanitize(text, max_len=NAME_MAX_LEN, fallback=NAME_FALLBACK)


def sanitize_city(text: str | None) -> str:
    """Merchant city (tag 60): accents stripped, at most 15 chars, never empty."""

    return _sanitize(text, max_len=CITY_MAX_LEN, fallback=CITY_FALLBACK)


# ---------------------------------------------------------------------------
# Amount formatter
# ---------------------------------------------------------------------------


def _to_decimal(amount: object) -> Decimal:
    # bool is an int subclass; a flag is not an amount.
    if amount is None or isinstance(amount, bool):
        return Decimal(0)
    if isinstance(amount, Decimal):
        d = amount
    elif isinstance(amount, int):
        d = Decimal(amount)
    elif isinstance(amount, float):
        if not math.isfinite(amount):
            return Decimal(0)
        # str() gives the shortest repr, so 3.005 rounds as written.
        d = Decimal(str(amount))
    elif isinstance(amount, str):
        try:
            d = Decimal(amount.strip())
        except InvalidOperation:
            return Decimal(0)
    else:
        return Decimal(0)
    if not d.is_finite():
        return Decimal(0)
    return d


def format_amount(amount: object) -> str:
    """Format ``amount`` for tag 54: two decimals, ASCII dot, never negative.

    Rounds half away from zero at the second decimal (``3.005`` -> ``"3.01"``).
    Negative, non-finite, missing or unparseable input formats as ``"0.00"``.
    Amounts whose text would not fit a TLV value (over 99 chars) raise
    :class:`PaymentCodeError`.
    """

    d = _to_decimal(amount)
    # Covers -0.0 too, which would otherwise print as "-0.00".
    if d <= 0:
        d = Decimal(0)
    # Integer digits plus ".00" must fit in a TLV value.
    if d.adjusted() > AMOUNT_MAX_LEN - 4:
        raise PaymentCodeError(f"amount too large to encode: {d:E}")
    with localcontext() as ctx:
        # Room for every integer digit, two decimals and a rounding carry.
        ctx.prec = max(ctx.prec, d.adjusted() + 4)
        q = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    return f"{q:.2f}"


# ---------------------------------------------------------------------------
# TLV encoder
# ---------------------------------------------------------------------------


def tlv(tag: str, value: str) -> str:
    """Encode one field as ``tag + LL + value``.

    ``LL`` is the character count of ``value``, zero-padded to two digits.
    Nested groups are built by passing a concatenation of inner ``tlv`` calls
    as ``value``.
    """

    if len(tag) != 2 or not tag.isascii() or not tag.isdigit():
        raise PaymentCodeError(f"TLV tag must be exactly 2 digits: {tag!r}")
    if len(value) > 99:
        raise PaymentCodeError(f"TLV value for tag {tag} is {len(value)} chars; maximum is 99")
    return f"{tag}{len(value):02d}{value}"


# ---------------------------------------------------------------------------
# Payload assembler
# ---------------------------------------------------------------------------


def _reference(reference: str | None) -> str:
    return (reference or REFERENCE_FALLBACK)[:REFERENCE_MAX_LEN]


def assemble(request: PaymentCodeRequest) -> str:
    """Return the payload up to and including the ``6304`` trailer, without CRC."""

    merchant_account = tlv("26", tlv("00", PIX_GUI) + tlv("01", request.payee_key or ""))
    additional_data = tlv("62", tlv("05", _reference(request.reference)))

    return (
        tlv("00", "01")
        + tlv("01", "11")
        + merchant_account
        + tlv("52", "0000")
        + tlv("53", "986")
        + tlv("54", format_amount(request.amount))
        + tlv("58", "BR")
        + tlv("59", sanitize_name(request.payee_name))
        + tlv("60", sanitize_city(request.payee_city))
        + additional_data
        + CRC_TRAILER
    )


# ---------------------------------------------------------------------------
# Checksum engine
# ---------------------------------------------------------------------------


def crc16(payload: str) -> str:
    """CRC-16/CCITT-FALSE of ``payload`` as four uppercase hex digits.

    Polynomial 0x1021, initial value 0xFFFF, no reflection, no final XOR.
    ``payload`` must be ASCII.
    """

    try:
        data = payload.encode("ascii")
    except UnicodeEncodeError as exc:
        raise PaymentCodeError("checksum input must be ASCII") from exc

    crc = _CRC_INIT
    for byte in data:
        crc ^= byte << 8
        for _ in range(8):
            if crc & 0x8000:
                crc = ((crc << 1) ^ _CRC_POLY) & 0xFFFF
            else:
                crc = (crc << 1) & 0xFFFF
    return f"{crc:04X}"


def build_payment_code(request: PaymentCodeRequest) -> str:
    """Build the final payment code string: assembled payload plus its CRC.

    Name, city and amount are repaired silently. The payee key and the
    reference are the caller's responsibility: non-ASCII values raise
    :class:`PaymentCodeError` instead of being rewritten.
    """

    key = request.payee_key or ""
    if not key.isascii():
        raise PaymentCodeError("payee key must be ASCII")
    if not (request.reference or "").isascii():
        raise PaymentCodeError("reference must be ASCII")
    if not key:
        _logger.warning("building payment code with an empty payee key")

    unchecked = assemble(request)
    payload = unchecked + crc16(unchecked)
    _logger.debug("built payment code ref=%s len=%d", _reference(request.reference), len(payload))
    return payload


__all__ = [
    "CITY_FALLBACK",
    "NAME_FALLBACK",
    "PIX_GUI",
    "PaymentCodeError",
    "assemble",
    "build_payment_code",
    "crc16",
    "format_amount",
    "sanitize_city",
    "sanitize_name",
    "tlv",
]
