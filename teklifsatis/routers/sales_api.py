"""
Satis REST API Router'i.

Endpoint'ler:
    GET    /                    -> Satis listesi
    POST   /                    -> Elle satis girisi
    GET    /{sale_id}           -> Satis detay
    POST   /{sale_id}/payments  -> Satisa odeme isle
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from teklifsatis.dependencies import get_db, get_salesperson_id
from teklifsatis.schemas.sale import (
    SaleCreate,
    SalePaymentCreate,
    SalePaymentResponse,
    SaleResponse,
)
from teklifsatis.services import settlement as settlement_service

router = APIRouter()


class SaleListResponse(BaseModel):
    items: list[SaleResponse]
    total: int
    page: int
    size: int


@router.get("", response_model=SaleListResponse)
def list_sales(
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(default=1, ge=1),
    size: int = Query(default=20, ge=1, le=100),
    salesperson_id: str | None = Query(default=None, description="Satis temsilcisi filtresi"),
    is_completed: bool | None = Query(default=None, description="Tamamlanma filtresi"),
):
    sales, total = settlement_service.get_sales(
        db, skip=(page - 1) * size, limit=size,
        salesperson_id=salesperson_id, is_completed=is_completed,
    )
    return SaleListResponse(items=sales, total=total, page=page, size=size)


@router.post("", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
def create_sale(
    data: SaleCreate,
    db: Annotated[Session, Depends(get_db)],
    salesperson_id: Annotated[str, Depends(get_salesperson_id)],
):
    return settlement_service.create_sale(db, data, salesperson_id)


@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(sale_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    return settlement_service.get_sale(db, sale_id)


@router.post("/{sale_id}/payments", response_model=SalePaymentResponse)
def apply_payment(
    sale_id: uuid.UUID,
    data: SalePaymentCreate,
    db: Annotated[Session, Depends(get_db)],
):
    """Odeme isle. Satis bu odemeyle tamamlandiysa prim kaydi da dondurulur."""
    sale, commission = settlement_service.apply_payment(db, sale_id, data.amount)
    return SalePaymentResponse(
        sale=SaleResponse.model_validate(sale),
        newly_completed=commission is not None,
        commission_id=commission.id if commission else None,
    )
