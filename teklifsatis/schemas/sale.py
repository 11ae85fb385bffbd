import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, ConfigDict


class SaleCreate(BaseModel):
    """
    Teklif olmadan elle satis girisi.
    sale_number bos birakilirsa otomatik uretilir.
    """
    customer_name: str = Field(min_length=1, max_length=255)
    amount: Decimal
    sale_number: str | None = None
    due_date: datetime | None = None


class SaleResponse(BaseModel):
    id: uuid.UUID
    sale_number: str
    customer_name: str
    sale_date: datetime
    due_date: datetime | None
    amount: Decimal
    paid_amount: Decimal
    remaining_amount: Decimal
    is_completed: bool
    salesperson_id: str

    model_config = ConfigDict(from_attributes=True)


class SalePaymentCreate(BaseModel):
    """Satisa dogrudan odeme isleme."""
    amount: Decimal


class SalePaymentResponse(BaseModel):
    """
    Odeme sonucu.
    commission_id: bu odeme satisi tamamladiysa yazilan prim kaydi.
    """
    sale: SaleResponse
    newly_completed: bool
    commission_id: uuid.UUID | None = None
