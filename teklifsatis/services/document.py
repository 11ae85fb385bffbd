"""
Teklif belgesi olusturma.

Teklif veya servis kayitlarindan PDF olusturucuya verilecek belge modelini
(QuoteDocument) hazirlar. create_bulk_quote disindaki fonksiyonlar
kaynak kayitlari degistirmez.
"""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy.orm import Session

from teklifsatis.config import settings
from teklifsatis.exceptions import ExternalDependencyError, NotFoundError, ValidationError
from teklifsatis.models.quote import Quote
from teklifsatis.models.sent_quote import SentQuote
from teklifsatis.models.service_ticket import ServiceTicket
from teklifsatis.schemas.document import (
    LineGroup,
    PartLine,
    QuoteDocument,
    ServiceLine,
)
from teklifsatis.schemas.ticket import BulkQuoteRequest
from teklifsatis.services.artifact import filename_part, save_artifact
from teklifsatis.services.email import MailResult, quote_email_body, send_quietly
from teklifsatis.services.line_codec import encode_line
from teklifsatis.services.pricing import (
    compute_totals,
    line_total,
    override_payable,
    round_money,
    totals_for_lines,
)
from teklifsatis.services.renderer import DocumentRenderer
from teklifsatis.services.status import TicketStatus

logger = logging.getLogger(__name__)

PRODUCT_QUOTE_TITLE = "ÜRÜN LİSTE FİYAT TEKLİFİ"
SERVICE_QUOTE_TITLE = "TEKLİF BELGESİ"
DEFAULT_CUSTOMER_NAME = "Müşteri"


def build_quote_document(
    quote: Quote, now: datetime, sender_name: str | None = None
) -> QuoteDocument:
    """Urun teklifinden tek gruplu (detayli) belge olustur."""
    lines = [
        PartLine(
            name=line.product_name,
            quantity=line.quantity,
            price=round_money(line_total(line.quantity, line.unit_price, line.discount_percent)),
            list_price=line.unit_price,
            discount_percent=line.discount_percent or Decimal("0"),
        )
        for line in quote.lines
    ]
    totals = totals_for_lines(quote.lines)
    group = LineGroup(
        title="Ürünler",
        mode="detailed",
        currency=quote.currency,
        lines=lines,
        subtotal=totals.subtotal,
    )
    return QuoteDocument(
        title=PRODUCT_QUOTE_TITLE,
        customer_name=quote.customer_name,
        document_number=quote.quote_number,
        document_date=now.date(),
        currency=quote.currency,
        groups=[group],
        totals=totals,
        notes=quote.notes,
        sender_name=sender_name,
    )


def _ticket_title(ticket: ServiceTicket) -> str:
    return ticket.product_model or ticket.ticket_number or f"#{ticket.id}"


def _grand_total_lines(ticket: ServiceTicket) -> list[PartLine | ServiceLine]:
    # Genel toplam modunda kalemler sadece ad ve adet ile listelenir
    parts: dict[str, int] = {}
    services: dict[str, int] = {}
    for item in ticket.items:
        target = parts if item.kind == "part" else services
        target[item.name] = target.get(item.name, 0) + (item.quantity or 1)

    lines: list[PartLine | ServiceLine] = [
        PartLine(name=name, quantity=qty) for name, qty in parts.items()
    ]
    lines.extend(ServiceLine(name=name, quantity=qty) for name, qty in services.items())
    return lines


def _detailed_lines(ticket: ServiceTicket) -> tuple[list[PartLine | ServiceLine], Decimal]:
    # Ayni ad/fiyat/liste/iskonto kombinasyonlari tek satirda toplanir
    grouped: dict[tuple, int] = {}
    for item in ticket.items:
        key = (item.kind, item.name, item.price, item.list_price, item.discount_percent)
        grouped[key] = grouped.get(key, 0) + (item.quantity or 1)

    lines: list[PartLine | ServiceLine] = []
    subtotal = Decimal("0")
    for (kind, name, price, list_price, discount), quantity in grouped.items():
        base = list_price if list_price is not None and list_price > 0 else price
        discount = discount or Decimal("0")
        total = line_total(quantity, base, discount)
        subtotal += total
        line_cls = PartLine if kind == "part" else ServiceLine
        lines.append(
            line_cls(
                name=name,
                quantity=quantity,
                price=round_money(total),
                list_price=base,
                discount_percent=discount,
            )
        )
    return lines, subtotal


def build_ticket_group(ticket: ServiceTicket, note: str | None = None) -> LineGroup:
    """
    Servis kaydindan belge grubu olustur.
    grand_total_override doluysa genel toplam modu, degilse detayli mod.
    """
    currency = ticket.currency or settings.BULK_QUOTE_CURRENCY
    group_note = ticket.notes or note

    if ticket.grand_total_override is not None:
        lines = _grand_total_lines(ticket)
        discount = ticket.grand_total_discount or Decimal("0")
        subtotal = override_payable(ticket.grand_total_override, discount)
        mode = "grand_total"
    else:
        lines, subtotal = _detailed_lines(ticket)
        discount = Decimal("0")
        mode = "detailed"

    if not lines:
        # Islem girilmemis kayit icin bos tablo yerine urun adi
        lines = [ServiceLine(name=_ticket_title(ticket))]

    logger.debug(
        "Servis grubu: %s mod=%s kalem=%d toplam=%s %s",
        ticket.ticket_number, mode, len(lines), subtotal, currency,
    )
    return LineGroup(
        title=_ticket_title(ticket),
        reference=ticket.ticket_number,
        mode=mode,
        currency=currency,
        lines=lines,
        override_total=ticket.grand_total_override,
        override_discount=discount,
        subtotal=round_money(subtotal),
        note=group_note,
    )


def build_bulk_document(
    customer_name: str | None,
    groups: list[LineGroup],
    document_number: str | None,
    now: datetime,
    notes: str | None = None,
    sender_name: str | None = None,
) -> QuoteDocument:
    """
    Birden fazla servis kaydini tek belgede topla.
    Tum gruplar ayni para biriminde olmali (kur donusumu yapilmaz).
    """
    if not groups:
        raise ValidationError("Belgede en az bir kalem grubu olmali")

    currencies = {group.currency for group in groups}
    if len(currencies) > 1:
        raise ValidationError(
            f"Secilen kayitlar farkli para birimlerinde: {', '.join(sorted(currencies))}"
        )

    totals = compute_totals(sum((group.subtotal for group in groups), Decimal("0")))
    return QuoteDocument(
        title=SERVICE_QUOTE_TITLE,
        customer_name=customer_name or DEFAULT_CUSTOMER_NAME,
        document_number=document_number,
        document_date=now.date(),
        currency=groups[0].currency,
        groups=groups,
        totals=totals,
        notes=notes,
        sender_name=sender_name,
    )


def encode_document_lines(document: QuoteDocument) -> str:
    """Belgedeki tum kalemlerin metin hali (arsiv kaydi icin)."""
    return "\n".join(
        encode_line(line) for group in document.groups for line in group.lines
    )


def render_document(renderer: DocumentRenderer, document: QuoteDocument) -> bytes:
    """
    Belgeyi PDF'e cevir.
    Olusturucu hatasi ExternalDependencyError olarak yukari tasinir;
    cagiran islem hicbir kaydi degistirmeden sonlanir.
    """
    try:
        return renderer.render(document)
    except Exception as e:
        logger.error("PDF olusturma hatasi (%s): %s", document.document_number, e)
        raise ExternalDependencyError(f"PDF olusturulamadi: {e}") from e


def _split_recipients(value: str | None) -> list[str]:
    if not value:
        return []
    return [address.strip() for address in value.split(";") if address.strip()]


def _bulk_filename(tickets: list[ServiceTicket], now: datetime) -> str:
    stamp = f"{now:%Y%m%d_%H%M%S}"
    if len(tickets) > 1:
        return f"Toplu_Teklif_{stamp}.pdf"
    return f"Teklif_{filename_part(tickets[0].document_number or 'NoBelge')}_{stamp}.pdf"


def mark_tickets_awaiting_approval(
    db: Session, ticket_ids: list[uuid.UUID]
) -> tuple[list[uuid.UUID], list[uuid.UUID]]:
    """
    Teklifi gonderilen servis kayitlarini "Onay Bekliyor" durumuna al.
    Her kayit ayri savepoint icinde guncellenir; hata alan kayit loglanir
    ve atlanir, digerleri etkilenmez.
    Dondurur: (guncellenen_idler, guncellenemeyen_idler)
    """
    updated = []
    failed = []

    for ticket_id in ticket_ids:
        savepoint = db.begin_nested()
        try:
            ticket = db.get(ServiceTicket, ticket_id)
            if ticket is None:
                raise NotFoundError("Servis kaydi bulunamadi")
            ticket.status = TicketStatus.AWAITING_APPROVAL
            db.flush()
            savepoint.commit()
            updated.append(ticket_id)
        except Exception as e:
            logger.error(f"Toplu durum guncelleme hatasi (ID: {ticket_id}): {e}")
            savepoint.rollback()
            failed.append(ticket_id)

    db.commit()
    return updated, failed


def create_bulk_quote(
    db: Session,
    request: BulkQuoteRequest,
    renderer: DocumentRenderer,
    mailer,
    now: datetime | None = None,
) -> dict:
    """
    Secilen servis kayitlarindan tek teklif belgesi olustur ve gonder.

    Sira: PDF -> dosya -> arsiv kaydi (commit) -> servis durumlari
    -> email. PDF olusturulamazsa hicbir sey yazilmaz. Durum guncelleme ve
    email hatalari sonucta raporlanir, islemi geri almaz.
    """
    now = now or datetime.now(timezone.utc)
    if not request.items:
        raise ValidationError("Teklif icin servis kaydi secilmedi")

    tickets = []
    groups = []
    for item in request.items:
        ticket = db.get(ServiceTicket, item.ticket_id)
        if ticket is None:
            logger.warning("Toplu teklif: servis kaydi bulunamadi, atlandi (ID: %s)", item.ticket_id)
            continue
        tickets.append(ticket)
        groups.append(build_ticket_group(ticket, note=item.note))

    if not tickets:
        raise NotFoundError("Secilen servis kayitlarinin hicbiri bulunamadi")

    first = tickets[0]
    document = build_bulk_document(
        first.customer_name,
        groups,
        first.document_number,
        now,
        notes=request.notes,
        sender_name=request.sender_name,
    )
    pdf = render_document(renderer, document)

    filename = _bulk_filename(tickets, now)
    save_artifact(filename, pdf)

    recipients = _split_recipients(request.recipient_email)
    sent_quote = SentQuote(
        recipient_email="; ".join(recipients) or None,
        document_number=first.document_number,
        pdf_filename=filename,
        sent_at=now,
        customer_name=document.customer_name,
        sender_name=request.sender_name,
        quote_type="service",
        service_ticket_ids=",".join(str(ticket.id) for ticket in tickets),
        line_items=encode_document_lines(document),
    )
    db.add(sent_quote)
    db.commit()
    logger.info("Toplu teklif arsivlendi: %s (%d kayit)", filename, len(tickets))

    updated, failed = mark_tickets_awaiting_approval(db, [ticket.id for ticket in tickets])
    if failed:
        logger.warning("Toplu teklif: %d servis kaydinin durumu guncellenemedi", len(failed))

    if recipients:
        mail_result = send_quietly(
            mailer,
            to=recipients,
            cc=request.cc,
            subject=f"Servis Teklifi - {document.customer_name}",
            body=quote_email_body(document.customer_name, request.sender_name, bulk=True),
            attachment=pdf,
            filename=filename,
            sender_name=request.sender_name,
        )
    else:
        mail_result = MailResult(False, None)

    return {
        "sent_quote_id": sent_quote.id,
        "pdf_filename": filename,
        "email_sent": mail_result.success,
        "email_error": mail_result.error,
        "updated_ticket_ids": updated,
        "failed_ticket_ids": failed,
    }
