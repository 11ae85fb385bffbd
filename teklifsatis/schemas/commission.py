import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class CommissionResponse(BaseModel):
    id: uuid.UUID
    salesperson_id: str
    sale_id: uuid.UUID
    amount: Decimal
    accrued_at: datetime
    month: int
    year: int

    model_config = ConfigDict(from_attributes=True)


class CommissionSummary(BaseModel):
    """Satis temsilcisi bazinda prim toplami."""
    salesperson_id: str
    commission_count: int
    total_commission: Decimal
    last_accrued_at: datetime | None


class CommissionDetail(BaseModel):
    """Prim kaydi ve bagli satisin ozeti."""
    commission_id: uuid.UUID
    sale_id: uuid.UUID
    sale_number: str
    customer_name: str
    sale_amount: Decimal
    commission_amount: Decimal
    accrued_at: datetime
    month: int
    year: int
