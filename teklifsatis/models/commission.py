import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, Integer, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teklifsatis.database import Base


class CommissionRecord(Base):
    """
    Prim (komisyon) kaydi.
    Tamamlanan her satis icin satis temsilcisine bir kez yazilir, sonra degismez.
    """

    __tablename__ = "commission_records"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    salesperson_id: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )
    # unique: bir satis icin en fazla bir prim
    sale_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    accrued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False
    )
    # Donem (raporlama icin)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    sale: Mapped["Sale"] = relationship()
