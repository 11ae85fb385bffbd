"""
Teknik servis kaydi modeli.
Servise gelen urun, yapilan islemler (degisen parcalar ve hizmetler)
ve fiyatlandirma ayarlari.
"""
import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, Text, DateTime, ForeignKey, Numeric, Integer
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from teklifsatis.database import Base
from teklifsatis.services.status import TicketStatus


class ServiceTicket(Base):
    __tablename__ = "service_tickets"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    # KTNTS-01 gibi
    ticket_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    customer_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    product_model: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    # Belge no: teklif PDF'inde belge numarasi olarak kullanilir
    document_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    received_by: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    notes: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    status: Mapped[str] = mapped_column(
        String(30), default=TicketStatus.OPENED
    )

    # Teklif ayarlari
    currency: Mapped[str | None] = mapped_column(
        String(3), nullable=True
    )
    # Doluysa kalem kalem hesap yerine bu toplam kullanilir
    grand_total_override: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    grand_total_discount: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )

    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    items: Mapped[list["TicketItem"]] = relationship(
        back_populates="ticket", cascade="all, delete-orphan", order_by="TicketItem.position"
    )


class TicketItem(Base):
    """
    Servis kaydindaki islem kalemi.
    kind = "part" (degisen parca) veya "service" (hizmet).
    """

    __tablename__ = "ticket_items"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    ticket_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("service_tickets.id", ondelete="CASCADE"), nullable=False, index=True
    )
    kind: Mapped[str] = mapped_column(
        String(10), nullable=False
    )
    name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    quantity: Mapped[int] = mapped_column(
        Integer, default=1
    )
    # Birim fiyat (liste fiyati yoksa temel fiyat olarak kullanilir)
    price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00")
    )
    list_price: Mapped[Decimal | None] = mapped_column(
        Numeric(12, 2), nullable=True
    )
    discount_percent: Mapped[Decimal | None] = mapped_column(
        Numeric(5, 2), nullable=True
    )
    position: Mapped[int] = mapped_column(
        Integer, default=0
    )

    ticket: Mapped["ServiceTicket"] = relationship(back_populates="items")
