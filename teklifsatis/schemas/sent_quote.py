import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict

from teklifsatis.schemas.document import RenderLine


class SentQuoteResponse(BaseModel):
    id: uuid.UUID
    recipient_email: str | None
    document_number: str | None
    pdf_filename: str
    sent_at: datetime
    customer_name: str | None
    sender_name: str | None
    quote_type: str
    product_quote_id: uuid.UUID | None
    service_ticket_ids: str | None
    line_items: str | None

    model_config = ConfigDict(from_attributes=True)


class SentQuoteLines(BaseModel):
    """Arsivdeki kalem metninin tabloya cevrilmis hali."""
    sent_quote_id: uuid.UUID
    lines: list[RenderLine]
