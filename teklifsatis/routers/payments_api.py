"""
Gelen Odeme REST API Router'i.

Endpoint'ler:
    GET    /  -> Gelen odemeler (satis filtresi)
    POST   /  -> Gelen odeme kaydet (satisa bagliysa satisa islenir)
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from teklifsatis.dependencies import get_db
from teklifsatis.schemas.payment import IncomingPaymentCreate, IncomingPaymentResponse
from teklifsatis.services import settlement as settlement_service

router = APIRouter()


@router.get("", response_model=list[IncomingPaymentResponse])
def list_incoming_payments(
    db: Annotated[Session, Depends(get_db)],
    sale_id: uuid.UUID | None = Query(default=None),
    limit: int = Query(default=50, ge=1, le=500),
):
    return settlement_service.get_incoming_payments(db, limit=limit, sale_id=sale_id)


@router.post("", response_model=IncomingPaymentResponse, status_code=status.HTTP_201_CREATED)
def record_incoming_payment(
    data: IncomingPaymentCreate,
    db: Annotated[Session, Depends(get_db)],
):
    return settlement_service.record_incoming_payment(db, data)
