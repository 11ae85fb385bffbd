"""
Prim (komisyon) REST API Router'i.

Endpoint'ler:
    GET /                         -> Prim kayitlari (ay/yil filtresi)
    GET /summary                  -> Satis temsilcisi bazinda toplamlar
    GET /{salesperson_id}/details -> Bir temsilcinin primleri ve satislari
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from teklifsatis.dependencies import get_db
from teklifsatis.schemas.commission import CommissionDetail, CommissionResponse, CommissionSummary
from teklifsatis.services import settlement as settlement_service

router = APIRouter()


@router.get("", response_model=list[CommissionResponse])
def list_commissions(
    db: Annotated[Session, Depends(get_db)],
    month: int | None = Query(default=None, ge=1, le=12),
    year: int | None = Query(default=None, ge=2000),
):
    return settlement_service.get_commissions(db, month=month, year=year)


@router.get("/summary", response_model=list[CommissionSummary])
def commission_summary(db: Annotated[Session, Depends(get_db)]):
    return settlement_service.get_commission_summary(db)


@router.get("/{salesperson_id}/details", response_model=list[CommissionDetail])
def commission_details(salesperson_id: str, db: Annotated[Session, Depends(get_db)]):
    return settlement_service.get_commission_details(db, salesperson_id)
