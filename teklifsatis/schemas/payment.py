import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


class IncomingPaymentCreate(BaseModel):
    """Bankaya gelen odeme. sale_id verilirse odeme satisa islenir."""
    target_account: str = ""
    sender: str = ""
    amount: Decimal
    received_at: datetime | None = None
    sale_id: uuid.UUID | None = None


class IncomingPaymentResponse(BaseModel):
    id: uuid.UUID
    target_account: str
    sender: str
    amount: Decimal
    received_at: datetime
    sale_id: uuid.UUID | None

    model_config = ConfigDict(from_attributes=True)
