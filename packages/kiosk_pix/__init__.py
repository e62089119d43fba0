"""Public interface for the ``kiosk_pix`` package.

Re-exports the payment code codec, its reader and the input/output models.
Backend, checkout and QR helpers are imported from their own modules
(``kiosk_pix.kiosk``, ``kiosk_pix.checkout``, ``kiosk_pix.qr``).
"""

from .models import DecodedPaymentCode, PaymentCodeRequest, TLVField
from .pix import (
    PaymentCodeError,
    assemble,
    build_payment_code,
    crc16,
    format_amount,
    sanitize_city,
    sanitize_name,
    tlv,
)
from .reader import decode_payment_code, parse_tlv, verify_checksum

__all__ = [
    # Codec
    "assemble",
    "build_payment_code",
    "crc16",
    "format_amount",
    "sanitize_city",
    "sanitize_name",
    "tlv",
    # Reader
    "decode_payment_code",
    "parse_tlv",
    "verify_checksum",
    # Models / errors
    "DecodedPaymentCode",
    "PaymentCodeError",
    "PaymentCodeRequest",
    "TLVField",
]
