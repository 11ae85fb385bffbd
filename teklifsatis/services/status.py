"""
Teklif ve servis kaydi durum makineleri.

Teklif: Taslak -> Gönderildi -> Onaylandı (son durum).
Servis kaydi: sabit durum listesi, gecis sirasi zorlanmaz.
"""
import logging

from teklifsatis.config import settings
from teklifsatis.exceptions import InvalidTransitionError, ValidationError

logger = logging.getLogger(__name__)


class QuoteStatus:
    DRAFT = "Taslak"
    SENT = "Gönderildi"
    APPROVED = "Onaylandı"

    ALL = (DRAFT, SENT, APPROVED)


class QuoteEvent:
    SEND = "send"
    APPROVE = "approve"


# (mevcut durum, olay) -> yeni durum
# Tabloda olmayan her gecis reddedilir. Onaylandı'dan cikan kenar yok.
QUOTE_TRANSITIONS: dict[tuple[str, str], str] = {
    (QuoteStatus.DRAFT, QuoteEvent.SEND): QuoteStatus.SENT,
    (QuoteStatus.SENT, QuoteEvent.SEND): QuoteStatus.SENT,
    (QuoteStatus.SENT, QuoteEvent.APPROVE): QuoteStatus.APPROVED,
}

_EVENT_ERRORS = {
    QuoteEvent.SEND: "Sadece 'Taslak' veya 'Gönderildi' durumundaki teklifler gonderilebilir",
    QuoteEvent.APPROVE: "Sadece 'Gönderildi' durumundaki teklifler onaylanabilir",
}


def quote_transition(current: str, event: str) -> str:
    """
    Teklif icin olayin sonucundaki durumu dondur.
    Gecis tabloda yoksa InvalidTransitionError firlatir, durum degismez.
    """
    next_status = QUOTE_TRANSITIONS.get((current, event))
    if next_status is None:
        raise InvalidTransitionError(
            _EVENT_ERRORS.get(event, f"Gecersiz islem: {event}")
            + f" (mevcut durum: {current})"
        )
    return next_status


class TicketStatus:
    OPENED = "Kayıt Açıldı"
    AWAITING_APPROVAL = "Onay Bekliyor"
    AWAITING_QUOTE = "Teklif Bekliyor"
    QUOTE_SENT = "Teklif Gönderildi"
    IN_PROGRESS = "İşlemde"
    COMPLETED = "Tamamlandı"

    ALL = (OPENED, AWAITING_APPROVAL, AWAITING_QUOTE, QUOTE_SENT, IN_PROGRESS, COMPLETED)


def is_valid_ticket_status(value: str | None) -> bool:
    if value is None or not value.strip():
        return False
    return value in TicketStatus.ALL


def normalize_ticket_status(value: str | None) -> str:
    """
    Servis kaydi durumunu dogrula.

    Gecerli durum aynen doner. Gecersiz deger varsayilan olarak
    "Kayıt Açıldı" durumuna cekilir; TICKET_STATUS_STRICT acik ise
    ValidationError ile reddedilir.
    """
    if is_valid_ticket_status(value):
        return value
    if settings.TICKET_STATUS_STRICT:
        raise ValidationError(
            f"Gecersiz servis durumu: {value}. "
            f"Gecerli degerler: {', '.join(TicketStatus.ALL)}"
        )
    logger.warning("Gecersiz servis durumu '%s', '%s' olarak kaydedildi", value, TicketStatus.OPENED)
    return TicketStatus.OPENED
