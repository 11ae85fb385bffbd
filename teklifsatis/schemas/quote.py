"""
Urun teklifi Pydantic semalari.
Sayisal kurallar (adet > 0, iskonto 0-100, ...) servis katmaninda kontrol edilir.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict


class QuoteLineCreate(BaseModel):
    """Teklif kalemi olusturma semasi."""
    product_ref: str | None = None
    product_name: str = Field(min_length=1, max_length=255)
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal = Decimal("0")


class QuoteLineResponse(BaseModel):
    id: uuid.UUID
    product_ref: str | None
    product_name: str
    quantity: int
    unit_price: Decimal
    discount_percent: Decimal

    model_config = ConfigDict(from_attributes=True)


class QuoteCreate(BaseModel):
    """Teklif olusturma semasi."""
    customer_name: str = Field(min_length=1, max_length=255)
    customer_email: str | None = None
    currency: str = "TRY"
    payment_term: str = "Peşin"
    notes: str | None = None
    lines: list[QuoteLineCreate] = []


class QuoteTotals(BaseModel):
    subtotal: Decimal
    vat: Decimal
    grand_total: Decimal
    currency: str


class QuoteResponse(BaseModel):
    """Teklif response semasi."""
    id: uuid.UUID
    quote_number: str
    customer_name: str
    customer_email: str | None
    currency: str
    payment_term: str
    status: str
    notes: str | None
    created_at: datetime
    sent_at: datetime | None
    approved_at: datetime | None
    sale_id: uuid.UUID | None
    sent_quote_id: uuid.UUID | None
    lines: list[QuoteLineResponse] = []

    model_config = ConfigDict(from_attributes=True)


class QuoteSendRequest(BaseModel):
    """Gonderim istegi. Alici bossa teklifteki musteri emaili kullanilir."""
    recipient_email: str | None = None
    cc: list[str] = []
    sender_name: str | None = None


class QuoteSendResponse(BaseModel):
    """
    Gonderim sonucu.
    Email gonderilemese bile teklif "Gönderildi" durumuna gecer ve
    arsiv kaydi olusur; email_error kullaniciya gosterilir.
    """
    quote: QuoteResponse
    sent_quote_id: uuid.UUID
    pdf_filename: str
    email_sent: bool
    email_error: str | None = None
