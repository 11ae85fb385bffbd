"""
Teknik Servis REST API Router'i.

Endpoint'ler:
    GET    /                       -> Servis kayitlari (durum filtresi)
    POST   /                       -> Yeni servis kaydi
    GET    /{ticket_id}            -> Servis kaydi detay (kalemler dahil)
    PUT    /{ticket_id}/status     -> Durum degistir
    POST   /{ticket_id}/items      -> Parca / hizmet ekle
    PUT    /{ticket_id}/pricing    -> Para birimi ve genel toplam ayarlari
    POST   /bulk-quote             -> Secilen kayitlardan toplu teklif
    GET    /sent-quotes            -> Gonderilen teklif arsivi
    GET    /sent-quotes/{id}/lines -> Arsivdeki kalemler
    GET    /exports                -> Uretilen PDF dosyalari
    GET    /exports/{filename}     -> Uretilen PDF'i indir
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import Response
from sqlalchemy.orm import Session

from teklifsatis.dependencies import get_db, get_mailer, get_renderer
from teklifsatis.rate_limit import SEND_LIMIT, limiter
from teklifsatis.schemas.sent_quote import SentQuoteLines, SentQuoteResponse
from teklifsatis.schemas.ticket import (
    BulkQuoteRequest,
    BulkQuoteResponse,
    TicketCreate,
    TicketItemCreate,
    TicketPricingUpdate,
    TicketResponse,
    TicketStatusUpdate,
)
from teklifsatis.services import archive as archive_service
from teklifsatis.services import artifact as artifact_service
from teklifsatis.services import document as document_service
from teklifsatis.services import ticket as ticket_service

router = APIRouter()


# Sabit yollar {ticket_id} yollarindan once tanimlanmali

@router.post("/bulk-quote", response_model=BulkQuoteResponse)
@limiter.limit(SEND_LIMIT)
def create_bulk_quote(
    request: Request,
    data: BulkQuoteRequest,
    db: Annotated[Session, Depends(get_db)],
    renderer=Depends(get_renderer),
    mailer=Depends(get_mailer),
):
    """
    Secilen servis kayitlarindan tek PDF teklif olustur ve gonder.
    Bulunamayan kayitlar atlanir. Durumu guncellenemeyen kayitlar
    failed_ticket_ids alaninda doner.
    """
    return document_service.create_bulk_quote(db, data, renderer, mailer)


@router.get("/sent-quotes", response_model=list[SentQuoteResponse])
def list_sent_quotes(
    db: Annotated[Session, Depends(get_db)],
    limit: int = Query(default=100, ge=1, le=500),
    quote_type: str | None = Query(default=None, description="product / service"),
):
    return archive_service.get_sent_quotes(db, limit=limit, quote_type=quote_type)


@router.get("/sent-quotes/{sent_quote_id}/lines", response_model=SentQuoteLines)
def sent_quote_lines(sent_quote_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    return SentQuoteLines(
        sent_quote_id=sent_quote_id,
        lines=archive_service.get_sent_quote_lines(db, sent_quote_id),
    )


@router.get("/exports", response_model=list[str])
def list_exports():
    return artifact_service.list_artifacts()


@router.get("/exports/{filename}")
def download_export(filename: str):
    data = artifact_service.load_artifact(filename)
    return Response(
        content=data,
        media_type=artifact_service.media_type(filename),
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("", response_model=list[TicketResponse])
def list_tickets(
    db: Annotated[Session, Depends(get_db)],
    ticket_status: str | None = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=500),
):
    return ticket_service.get_tickets(db, limit=limit, status_filter=ticket_status)


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
def create_ticket(data: TicketCreate, db: Annotated[Session, Depends(get_db)]):
    return ticket_service.create_ticket(db, data)


@router.get("/{ticket_id}", response_model=TicketResponse)
def get_ticket(ticket_id: uuid.UUID, db: Annotated[Session, Depends(get_db)]):
    return ticket_service.get_ticket(db, ticket_id)


@router.put("/{ticket_id}/status", response_model=TicketResponse)
def set_ticket_status(
    ticket_id: uuid.UUID,
    data: TicketStatusUpdate,
    db: Annotated[Session, Depends(get_db)],
):
    return ticket_service.set_ticket_status(db, ticket_id, data.status)


@router.post("/{ticket_id}/items", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
def add_ticket_item(
    ticket_id: uuid.UUID,
    data: TicketItemCreate,
    db: Annotated[Session, Depends(get_db)],
):
    return ticket_service.add_ticket_item(db, ticket_id, data)


@router.put("/{ticket_id}/pricing", response_model=TicketResponse)
def update_ticket_pricing(
    ticket_id: uuid.UUID,
    data: TicketPricingUpdate,
    db: Annotated[Session, Depends(get_db)],
):
    return ticket_service.update_ticket_pricing(db, ticket_id, data)
