import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import String, DateTime, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column, validates

from teklifsatis.database import Base
from teklifsatis.exceptions import ValidationError


class Sale(Base):
    """
    Satis modeli.
    Onaylanan tekliften (veya elle) olusur, odemeler bu kayda islenir.
    Odenen tutar satis tutarina ulastiginda satis tamamlanir.
    """

    __tablename__ = "sales"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True, default=uuid.uuid4
    )
    customer_name: Mapped[str] = mapped_column(
        String(255), nullable=False
    )
    # ABC-20260105-001 gibi
    sale_number: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True, index=True
    )
    sale_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    due_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    # KDV dahil toplam, bir kez atanir
    amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False
    )
    # Sadece odeme islenirken artar
    paid_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), default=Decimal("0.00")
    )
    # false -> true tek yonlu
    is_completed: Mapped[bool] = mapped_column(
        Boolean, default=False
    )
    salesperson_id: Mapped[str] = mapped_column(
        String(100), nullable=False, index=True
    )

    @validates("amount")
    def _validate_amount(self, key, value):
        # Satis tutari olustuktan sonra degistirilemez
        if self.amount is not None and Decimal(self.amount) != Decimal(value):
            raise ValidationError("Satis tutari degistirilemez")
        return value

    @property
    def remaining_amount(self) -> Decimal:
        """Kalan borc miktari."""
        remaining = Decimal(self.amount) - Decimal(self.paid_amount or 0)
        return max(remaining, Decimal("0.00"))
