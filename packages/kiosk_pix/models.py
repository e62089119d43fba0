"""Data models for ``kiosk_pix``.

Two families live here:

- Payment code records (:class:`PaymentCodeRequest`, :class:`TLVField`,
  :class:`DecodedPaymentCode`) used by the pure codec in :mod:`kiosk_pix.pix`
  and the reader in :mod:`kiosk_pix.reader`. These are frozen dataclasses.
- Kiosk backend DTOs (:class:`KioskAthlete`, :class:`KioskTab`, ...) validated
  with pydantic. Field names are Pythonic; aliases match the backend's JSON
  keys (``nome``, ``numeroCard``, ``precoTotal``...). Unknown keys are kept so
  newer backend fields never break parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Payment code records
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PaymentCodeRequest:
    """Input to :func:`kiosk_pix.pix.build_payment_code`.

    Attributes
    ----------
    payee_key:
        Pix key (e-mail, phone, CPF/CNPJ or random key). Embedded verbatim;
        must be ASCII.
    amount:
        Value in reais. Negative, non-finite or missing values encode as zero.
    payee_name:
        Free text; sanitized to at most 25 characters.
    payee_city:
        Free text; sanitized to at most 15 characters.
    reference:
        Transaction reference (txid), e.g. ``"CARD123"``. Truncated to 25
        characters; must be ASCII. Empty becomes ``"***"``.
    """

    payee_key: str
    amount: float | int | str | None
    payee_name: str
    payee_city: str
    reference: str = ""


class TLVField(NamedTuple):
    """A single tag/value pair read from or written to a payload."""

    tag: str
    value: str


@dataclass(frozen=True, slots=True)
class DecodedPaymentCode:
    """A parsed and checksum-verified payment code.

    ``fields`` holds the top-level TLVs in wire order, including the trailing
    ``63`` checksum field.
    """

    fields: tuple[TLVField, ...]
    gui: str
    payee_key: str
    amount: str | None
    payee_name: str
    payee_city: str
    reference: str | None
    checksum: str

    def get(self, tag: str) -> str | None:
        for f in self.fields:
            if f.tag == tag:
                return f.value
        return None


# ---------------------------------------------------------------------------
# Kiosk backend DTOs
# ---------------------------------------------------------------------------


class _KioskModel(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, str_strip_whitespace=True)


class KioskAthlete(_KioskModel):
    id: str
    name: str = Field(alias="nome")
    phone: str | None = Field(default=None, alias="telefone")


class RecognitionCandidate(KioskAthlete):
    score: float


class KioskTab(_KioskModel):
    """An athlete's running tab ("comanda") at a point."""

    id: str
    point_id: str = Field(alias="pointId")
    number: int = Field(alias="numeroCard")
    status: str
    total: float = Field(alias="valorTotal")


class KioskProduct(_KioskModel):
    id: str
    name: str = Field(alias="nome")
    price: float = Field(alias="precoVenda")
    category: str | None = Field(default=None, alias="categoria")


class KioskItem(_KioskModel):
    id: str
    product_id: str = Field(alias="produtoId")
    quantity: int = Field(alias="quantidade")
    unit_price: float = Field(alias="precoUnitario")
    total_price: float = Field(alias="precoTotal")
    product: KioskProduct | None = Field(default=None, alias="produto")


class KioskPoint(_KioskModel):
    """A club location; ``pix_key`` is absent when the point does not take Pix."""

    id: str
    name: str | None = Field(default=None, alias="nome")
    pix_key: str | None = Field(default=None, alias="pixChave")

    @field_validator("pix_key")
    @classmethod
    def _blank_key_is_none(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v or None


__all__ = [
    "DecodedPaymentCode",
    "KioskAthlete",
    "KioskItem",
    "KioskPoint",
    "KioskProduct",
    "KioskTab",
    "PaymentCodeRequest",
    "RecognitionCandidate",
    "TLVField",
]
