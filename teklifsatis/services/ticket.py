"""
Teknik servis kaydi servis katmani.
Kayit acma, durum guncelleme, parca/hizmet ekleme ve teklif fiyat ayarlari.
"""
import logging
import uuid

from sqlalchemy.orm import Session

from teklifsatis.exceptions import NotFoundError, ValidationError
from teklifsatis.models.service_ticket import ServiceTicket, TicketItem
from teklifsatis.schemas.ticket import TicketCreate, TicketItemCreate, TicketPricingUpdate
from teklifsatis.services.numbering import insert_with_number, next_ticket_number
from teklifsatis.services.pricing import SUPPORTED_CURRENCIES, validate_discount, validate_price
from teklifsatis.services.status import TicketStatus, normalize_ticket_status

logger = logging.getLogger(__name__)


def _validate_currency(currency: str | None) -> str | None:
    if not currency:
        return None
    code = currency.upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError(f"Desteklenmeyen para birimi: {code}")
    return code


def _validate_override(total, discount) -> None:
    if total is not None:
        validate_price(total, "Genel toplam")
    if discount is not None:
        validate_discount(discount)


def get_tickets(
    db: Session,
    skip: int = 0, limit: int = 50,
    status_filter: str | None = None,
) -> list[ServiceTicket]:
    query = db.query(ServiceTicket)
    if status_filter:
        query = query.filter(ServiceTicket.status == status_filter)
    return query.order_by(ServiceTicket.ticket_number.desc()).offset(skip).limit(limit).all()


def get_ticket(db: Session, ticket_id: uuid.UUID) -> ServiceTicket:
    ticket = db.query(ServiceTicket).filter(ServiceTicket.id == ticket_id).first()
    if not ticket:
        raise NotFoundError("Servis kaydi bulunamadi")
    return ticket


def create_ticket(db: Session, data: TicketCreate) -> ServiceTicket:
    """Yeni servis kaydi. Numara KTNTS-NN formatinda otomatik verilir."""
    _validate_override(data.grand_total_override, data.grand_total_discount)

    ticket = ServiceTicket(
        customer_name=data.customer_name,
        product_model=data.product_model,
        document_number=data.document_number,
        received_by=data.received_by,
        notes=data.notes,
        status=normalize_ticket_status(data.status) if data.status else TicketStatus.OPENED,
        currency=_validate_currency(data.currency),
        grand_total_override=data.grand_total_override,
        grand_total_discount=data.grand_total_discount,
    )
    insert_with_number(
        db, ticket, "ticket_number",
        lambda attempt: next_ticket_number(db, attempt),
    )
    db.commit()
    db.refresh(ticket)
    logger.info("Servis kaydi acildi: %s (%s)", ticket.ticket_number, ticket.customer_name)
    return ticket


def set_ticket_status(db: Session, ticket_id: uuid.UUID, new_status: str | None) -> ServiceTicket:
    """
    Servis kaydi durumunu degistir.
    Gecersiz durum ayara gore "Kayıt Açıldı" olur veya reddedilir.
    """
    ticket = get_ticket(db, ticket_id)
    old_status = ticket.status
    ticket.status = normalize_ticket_status(new_status)
    db.commit()
    db.refresh(ticket)
    logger.info("Servis durumu: %s '%s' -> '%s'", ticket.ticket_number, old_status, ticket.status)
    return ticket


def add_ticket_item(db: Session, ticket_id: uuid.UUID, data: TicketItemCreate) -> ServiceTicket:
    """
    Servis kaydina parca veya hizmet ekle.
    Ekleme sonrasi kayit "Teklif Bekliyor" durumuna alinir; bu adim
    basarisiz olursa kalem yine kaydedilir, hata loglanir.
    """
    ticket = get_ticket(db, ticket_id)
    if data.quantity <= 0:
        raise ValidationError(f"Adet pozitif olmali: {data.name}")
    validate_price(data.price)
    if data.list_price is not None:
        validate_price(data.list_price, "Liste fiyati")
    if data.discount_percent is not None:
        validate_discount(data.discount_percent)

    item = TicketItem(
        ticket_id=ticket.id,
        kind=data.kind,
        name=data.name,
        quantity=data.quantity,
        price=data.price,
        list_price=data.list_price,
        discount_percent=data.discount_percent,
        position=len(ticket.items),
    )
    db.add(item)
    db.commit()

    try:
        ticket.status = TicketStatus.AWAITING_QUOTE
        db.commit()
    except Exception as e:
        logger.error("Servis durumu guncellenemedi (%s): %s", ticket.ticket_number, e)
        db.rollback()

    db.refresh(ticket)
    return ticket


def update_ticket_pricing(
    db: Session, ticket_id: uuid.UUID, data: TicketPricingUpdate
) -> ServiceTicket:
    """
    Teklif para birimi ve genel toplam ayarlari.
    grand_total_override None ise kayit kalem kalem hesaba doner.
    """
    ticket = get_ticket(db, ticket_id)
    _validate_override(data.grand_total_override, data.grand_total_discount)

    ticket.currency = _validate_currency(data.currency)
    ticket.grand_total_override = data.grand_total_override
    ticket.grand_total_discount = (
        data.grand_total_discount if data.grand_total_override is not None else None
    )
    db.commit()
    db.refresh(ticket)
    return ticket
