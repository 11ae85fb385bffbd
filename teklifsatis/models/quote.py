"""
Urun fiyat teklifi modeli.
Musteriye gonderilen teklifleri temsil eder.
Onaylandiginda bir satis (Sale) kaydi olusturur.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, ForeignKey, Numeric, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teklifsatis.database import Base
from teklifsatis.services.status import QuoteStatus


class Quote(Base):
    """
    Teklif modeli.
    Teklif kalemleri (QuoteLine) ile birlikte calisir, kalemler teklifle silinir.
    """

    __tablename__ = "quotes"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    # TEK-2026-001 gibi
    quote_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    customer_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    customer_email: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    # TRY, USD, EUR
    currency: Mapped[str] = mapped_column(
        String(3), default="TRY"
    )
    # Serbest metin: "Peşin", "30 gün", ...
    payment_term: Mapped[str] = mapped_column(
        String(50), default="Peşin"
    )
    # Durum: Taslak, Gönderildi, Onaylandı
    status: Mapped[str] = mapped_column(
        String(20), default=QuoteStatus.DRAFT
    )
    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    approved_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Onaylandiginda olusan satis. Satis teklif silinse de kalir.
    sale_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("sales.id", ondelete="SET NULL"), nullable=True
    )
    # Son gonderimin arsiv kaydi
    sent_quote_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("sent_quotes.id", ondelete="SET NULL"), nullable=True
    )

    # Iliskiler
    lines: Mapped[list["QuoteLine"]] = relationship(
        back_populates="quote", cascade="all, delete-orphan", order_by="QuoteLine.position"
    )
    sale: Mapped["Sale | None"] = relationship()
    sent_quote: Mapped["SentQuote | None"] = relationship(foreign_keys=[sent_quote_id])


class QuoteLine(Base):
    """
    Teklif kalemi.
    Ornek: 2 adet "Havali Tornavida" x 100 TL, %10 iskonto -> 180 TL
    """

    __tablename__ = "quote_lines"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    quote_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Katalog urunu referansi (istege bagli, serbest metin kalem olabilir)
    product_ref: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    product_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    quantity: Mapped[int] = mapped_column(
        Integer, nullable=False
    )
    # Birim liste fiyati
    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    discount_percent: Mapped[Decimal] = mapped_column(
        Numeric(5, 2), default=Decimal("0")
    )
    # Kalemlerin teklifteki sirasi
    position: Mapped[int] = mapped_column(
        Integer, default=0
    )

    quote: Mapped["Quote"] = relationship(back_populates="lines")
