import uuid
from datetime import datetime

from sqlalchemy import String, Text, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from teklifsatis.database import Base


class SentQuote(Base):
    """
    Gonderilen teklif arsiv kaydi.
    Gonderim aninda olusturulur ve bir daha degistirilmez.
    """

    __tablename__ = "sent_quotes"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    recipient_email: Mapped[str | None] = mapped_column(
        String(500), nullable=True
    )
    document_number: Mapped[str | None] = mapped_column(
        String(50), nullable=True
    )
    pdf_filename: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    sent_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    customer_name: Mapped[str | None] = mapped_column(
        String(255), nullable=True
    )
    sender_name: Mapped[str | None] = mapped_column(
        String(100), nullable=True
    )
    # "product" (urun teklifi) veya "service" (toplu servis teklifi)
    quote_type: Mapped[str] = mapped_column(
        String(20), default="service"
    )
    product_quote_id: Mapped[uuid.UUID | None] = mapped_column(
        nullable=True
    )
    # Virgulle ayrilmis servis kaydi ID'leri
    service_ticket_ids: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
    # Belgedeki kalemlerin metin hali (satir basina bir kalem)
    line_items: Mapped[str | None] = mapped_column(
        Text, nullable=True
    )
