"""
Servis kaydi ve toplu teklif Pydantic semalari.
"""
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, ConfigDict


class TicketItemCreate(BaseModel):
    """Servis kaydina parca veya hizmet ekleme."""
    kind: Literal["part", "service"]
    name: str = Field(min_length=1, max_length=255)
    quantity: int = 1
    price: Decimal = Decimal("0.00")
    list_price: Decimal | None = None
    discount_percent: Decimal | None = None


class TicketItemResponse(BaseModel):
    id: uuid.UUID
    kind: str
    name: str
    quantity: int
    price: Decimal
    list_price: Decimal | None
    discount_percent: Decimal | None

    model_config = ConfigDict(from_attributes=True)


class TicketCreate(BaseModel):
    customer_name: str | None = None
    product_model: str | None = None
    document_number: str | None = None
    received_by: str | None = None
    notes: str | None = None
    status: str | None = None
    currency: str | None = None
    grand_total_override: Decimal | None = None
    grand_total_discount: Decimal | None = None


class TicketStatusUpdate(BaseModel):
    status: str


class TicketPricingUpdate(BaseModel):
    """
    Teklif fiyatlandirma ayarlari.
    grand_total_override None yapilirsa kalem kalem hesaba donulur.
    """
    currency: str | None = None
    grand_total_override: Decimal | None = None
    grand_total_discount: Decimal | None = None


class TicketResponse(BaseModel):
    id: uuid.UUID
    ticket_number: str
    customer_name: str | None
    product_model: str | None
    document_number: str | None
    received_by: str | None
    notes: str | None
    status: str
    currency: str | None
    grand_total_override: Decimal | None
    grand_total_discount: Decimal | None
    received_at: datetime | None
    items: list[TicketItemResponse] = []

    model_config = ConfigDict(from_attributes=True)


class BulkQuoteItem(BaseModel):
    ticket_id: uuid.UUID
    note: str | None = None


class BulkQuoteRequest(BaseModel):
    """
    Secilen servis kayitlarindan tek teklif belgesi.
    recipient_email ";" ile ayrilmis birden fazla adres alabilir.
    """
    items: list[BulkQuoteItem] = []
    recipient_email: str | None = None
    cc: list[str] = []
    notes: str | None = None
    sender_name: str | None = None


class BulkQuoteResponse(BaseModel):
    sent_quote_id: uuid.UUID
    pdf_filename: str
    email_sent: bool
    email_error: str | None = None
    # Durumu "Onay Bekliyor" yapilan ve yapilamayan kayitlar
    updated_ticket_ids: list[uuid.UUID] = []
    failed_ticket_ids: list[uuid.UUID] = []
