import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teklifsatis.database import Base


class IncomingPayment(Base):
    """
    Gelen odeme modeli.
    Banka hesabina gelen bir odemeyi temsil eder; bir satisa baglanabilir.
    """

    __tablename__ = "incoming_payments"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    # Odemenin geldigi hesap ve gonderen
    target_account: Mapped[str] = mapped_column(
        String(100), default=""
    )
    sender: Mapped[str] = mapped_column(
        String(255), default=""
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    received_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    sale_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("sales.id", ondelete="SET NULL"), nullable=True, index=True
    )

    sale: Mapped["Sale | None"] = relationship()
