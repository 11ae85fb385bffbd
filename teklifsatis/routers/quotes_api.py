"""
Urun Teklifi REST API Router'i.

Endpoint'ler:
    GET    /                   -> Teklif listesi (sayfalama + arama + durum filtre)
    POST   /                   -> Yeni teklif olustur
    GET    /{quote_id}         -> Teklif detay (kalemler dahil)
    DELETE /{quote_id}         -> Teklif sil (onaylanmis teklif silinemez)
    GET    /{quote_id}/totals  -> Ara toplam, KDV, genel toplam
    GET    /{quote_id}/pdf     -> PDF onizleme (durum degismez)
    POST   /{quote_id}/send    -> PDF olustur, arsivle, email gonder
    POST   /{quote_id}/approve -> Onayla ve satis olustur

Bu router main.py'de su sekilde eklenir:
    app.include_router(quotes_api.router, prefix="/api/v1/quotes", tags=["Teklifler"])
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from teklifsatis.dependencies import get_db, get_mailer, get_renderer, get_salesperson_id
from teklifsatis.rate_limit import SEND_LIMIT, limiter
from teklifsatis.schemas.quote import (
    QuoteCreate,
    QuoteResponse,
    QuoteSendRequest,
    QuoteSendResponse,
    QuoteTotals,
)
from teklifsatis.schemas.sale import SaleResponse
from teklifsatis.services import quote as quote_service

router = APIRouter()


class QuoteListResponse(BaseModel):
    items: list[QuoteResponse]
    total: int
    page: int
    size: int


@router.get("", response_model=QuoteListResponse)
def list_quotes(
    db: Annotated[Session, Depends(get_db)],
    page: int = Query(default=1, ge=1, description="Sayfa numarasi"),
    size: int = Query(default=20, ge=1, le=100, description="Sayfa basi kayit sayisi"),
    search: str | None = Query(default=None, description="Teklif no veya musteri adi"),
    quote_status: str | None = Query(default=None, alias="status", description="Durum filtresi"),
):
    quotes, total = quote_service.get_quotes(
        db, skip=(page - 1) * size, limit=size, search=search, status_filter=quote_status,
    )
    return QuoteListResponse(items=quotes, total=total, page=page, size=size)


@router.post("", response_model=QuoteResponse, status_code=status.HTTP_201_CREATED)
def create_quote(
    data: QuoteCreate,
    db: Annotated[Session, Depends(get_db)],
):
    return quote_service.create_quote(db, data)


@router.get("/{quote_id}", response_model=QuoteResponse)
def get_quote(quote_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    return quote_service.get_quote(db, quote_id)


@router.delete("/{quote_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_quote(quote_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    quote_service.delete_quote(db, quote_id)


@router.get("/{quote_id}/totals", response_model=QuoteTotals)
def get_quote_totals(quote_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    quote = quote_service.get_quote(db, quote_id)
    totals = quote_service.get_quote_totals(quote)
    return QuoteTotals(**totals.model_dump(), currency=quote.currency)


@router.get("/{quote_id}/pdf")
def preview_quote_pdf(
    quote_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    renderer=Depends(get_renderer),
):
    """Teklif PDF'ini tarayicida goster. Teklif durumu degismez."""
    pdf, filename = quote_service.render_quote_pdf(db, quote_id, renderer)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.post("/{quote_id}/send", response_model=QuoteSendResponse)
@limiter.limit(SEND_LIMIT)
def send_quote(
    request: Request,
    quote_id: uuid.UUID,
    data: QuoteSendRequest,
    db: Annotated[Session, Depends(get_db)],
    renderer=Depends(get_renderer),
    mailer=Depends(get_mailer),
):
    """
    Teklifi gonder.
    Email gonderilemese de teklif gonderildi sayilir; email_error alanina bakin.
    """
    return quote_service.send_quote(
        db, quote_id, renderer, mailer,
        recipient_email=data.recipient_email,
        cc=data.cc,
        sender_name=data.sender_name,
    )


@router.post("/{quote_id}/approve", response_model=SaleResponse)
def approve_quote(
    quote_id: uuid.UUID,
    db: Annotated[Session, Depends(get_db)],
    salesperson_id: Annotated[str, Depends(get_salesperson_id)],
):
    """Gonderilmis teklifi onayla. Olusan satis kaydini dondurur."""
    return quote_service.approve_quote(db, quote_id, salesperson_id)
