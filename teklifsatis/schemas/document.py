"""
Belge (PDF) modeli semalari.

PartLine / ServiceLine: belgeye giren kalemlerin tipli hali.
RenderLine: tabloda gosterilecek, metne cevrilmis satir.
LineGroup: bir urun/servis kaydina ait kalem grubu.
QuoteDocument: PDF olusturucuya verilen belgenin tamami.
"""
from datetime import date
from decimal import Decimal
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class PartLine(BaseModel):
    """Degisen parca kalemi. price = satir toplami (indirimli)."""
    kind: Literal["part"] = "part"
    name: str
    quantity: int = 1
    price: Decimal = Decimal("0.00")
    # Birim liste fiyati; indirim varsa belgede gosterilir
    list_price: Decimal | None = None
    discount_percent: Decimal = Decimal("0")


class ServiceLine(BaseModel):
    """Hizmet kalemi. price = satir toplami (indirimli)."""
    kind: Literal["service"] = "service"
    name: str
    quantity: int = 1
    price: Decimal = Decimal("0.00")
    list_price: Decimal | None = None
    discount_percent: Decimal = Decimal("0")


DocumentLine = Annotated[Union[PartLine, ServiceLine], Field(discriminator="kind")]


class RenderLine(BaseModel):
    """Tabloda bir satir. Tum alanlar gosterime hazir metin."""
    kind: Literal["part", "service"] = "service"
    name: str
    quantity: str = "1"
    list_price: str = "0.00"
    discount: str = "0"
    net_price: str = "0.00"
    total_price: str = "0.00"


class DocumentTotals(BaseModel):
    subtotal: Decimal
    vat: Decimal
    grand_total: Decimal


class LineGroup(BaseModel):
    """
    Belgedeki bir kalem grubu.

    mode = "detailed": kalem toplamlari ile hesaplanir, tum kolonlar gosterilir.
    mode = "grand_total": anlasilan toplam (ve istege bagli indirim) kullanilir,
    kalemler sadece ad ve adet ile listelenir.
    """
    title: str
    reference: str | None = None
    mode: Literal["detailed", "grand_total"] = "detailed"
    currency: str = "TRY"
    lines: list[DocumentLine] = []
    override_total: Decimal | None = None
    override_discount: Decimal = Decimal("0")
    subtotal: Decimal = Decimal("0.00")
    note: str | None = None


class QuoteDocument(BaseModel):
    """PDF olusturucuya verilen belge."""
    title: str = "TEKLİF BELGESİ"
    customer_name: str
    document_number: str | None = None
    document_date: date
    currency: str = "TRY"
    groups: list[LineGroup] = []
    totals: DocumentTotals
    notes: str | None = None
    sender_name: str | None = None
