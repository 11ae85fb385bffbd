"""
Urun teklifi servis katmani.
Teklif CRUD, PDF onizleme, gonderim ve onaylama (satisa cevirme) islemleri.
"""
import logging
import re
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from teklifsatis.config import settings
from teklifsatis.exceptions import InvalidTransitionError, NotFoundError, ValidationError
from teklifsatis.models.quote import Quote, QuoteLine
from teklifsatis.models.sale import Sale
from teklifsatis.models.sent_quote import SentQuote
from teklifsatis.schemas.document import DocumentTotals
from teklifsatis.schemas.quote import QuoteCreate, QuoteLineCreate
from teklifsatis.services.artifact import filename_part, save_artifact
from teklifsatis.services.document import (
    build_quote_document,
    encode_document_lines,
    render_document,
)
from teklifsatis.services.email import MailResult, quote_email_body, send_quietly
from teklifsatis.services.numbering import insert_with_number, next_quote_number, next_sale_number
from teklifsatis.services.pricing import (
    SUPPORTED_CURRENCIES,
    totals_for_lines,
    validate_discount,
    validate_price,
)
from teklifsatis.services.renderer import DocumentRenderer
from teklifsatis.services.status import QuoteEvent, QuoteStatus, quote_transition

logger = logging.getLogger(__name__)

CASH_TERM = "Peşin"

# "30 gün", "45 Gun vadeli" -> 30, 45
_TERM_DAYS_RE = re.compile(r"^\s*(\d+)")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def calculate_due_date(payment_term: str | None, now: datetime) -> datetime:
    """
    Odeme vadesinden son odeme tarihini hesapla.
    Bos veya "Peşin" -> bugun. Bastaki sayi gun olarak eklenir.
    Okunamayan vade -> bugun.
    """
    term = (payment_term or "").strip()
    if not term or term == CASH_TERM:
        return now

    match = _TERM_DAYS_RE.match(term)
    if not match:
        logger.warning("Odeme vadesi okunamadi, pesin kabul edildi: %r", term)
        return now
    return now + timedelta(days=int(match.group(1)))


def _validate_lines(lines: list[QuoteLineCreate]) -> None:
    if not lines:
        raise ValidationError("Teklifte en az bir kalem olmali")
    for line in lines:
        if line.quantity <= 0:
            raise ValidationError(f"Adet pozitif olmali: {line.product_name}")
        validate_price(line.unit_price, "Birim fiyat")
        validate_discount(line.discount_percent)


def _validate_currency(currency: str | None) -> str:
    code = (currency or settings.DEFAULT_CURRENCY).upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError(
            f"Desteklenmeyen para birimi: {code}. "
            f"Gecerli degerler: {', '.join(SUPPORTED_CURRENCIES)}"
        )
    return code


def get_quotes(
    db: Session,
    skip: int = 0, limit: int = 20,
    search: str | None = None,
    status_filter: str | None = None,
) -> tuple[list[Quote], int]:
    """
    Teklif listesi (sayfalama ile).
    Arama: teklif numarasi veya musteri adinda arar.
    Dondurur: (teklif_listesi, toplam_sayi)
    """
    query = db.query(Quote)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            (Quote.quote_number.ilike(search_term)) |
            (Quote.customer_name.ilike(search_term))
        )
    if status_filter:
        query = query.filter(Quote.status == status_filter)

    total = query.count()
    quotes = query.order_by(Quote.created_at.desc()).offset(skip).limit(limit).all()
    return quotes, total


def get_quote(db: Session, quote_id: uuid.UUID, for_update: bool = False) -> Quote:
    """
    Tek bir teklifi getir. Bulunamazsa 404.
    for_update=True ise satir commit'e kadar kilitlenir ve durum veritabanindan
    yeniden okunur (ayni teklifin es zamanli gonderim/onayi icin).
    """
    query = db.query(Quote).filter(Quote.id == quote_id)
    if for_update:
        query = query.with_for_update().populate_existing()
    quote = query.first()
    if not quote:
        raise NotFoundError("Teklif bulunamadi")
    return quote


def create_quote(db: Session, data: QuoteCreate, now: datetime | None = None) -> Quote:
    """
    Yeni teklif olustur.
    Teklif numarasi otomatik atanir, durum "Taslak" olarak baslar.
    """
    now = now or _now()
    currency = _validate_currency(data.currency)
    _validate_lines(data.lines)

    quote = Quote(
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        currency=currency,
        payment_term=data.payment_term or CASH_TERM,
        status=QuoteStatus.DRAFT,
        notes=data.notes,
        created_at=now,
    )
    for position, line in enumerate(data.lines):
        quote.lines.append(
            QuoteLine(
                product_ref=line.product_ref,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount_percent=line.discount_percent,
                position=position,
            )
        )

    insert_with_number(
        db, quote, "quote_number",
        lambda attempt: next_quote_number(db, now.year, attempt),
    )
    db.commit()
    db.refresh(quote)
    logger.info("Teklif olusturuldu: %s (%s)", quote.quote_number, quote.customer_name)
    return quote


def delete_quote(db: Session, quote_id: uuid.UUID) -> bool:
    """Teklifi kalemleriyle birlikte sil. Onaylanmis teklif silinemez."""
    quote = get_quote(db, quote_id)
    if quote.status == QuoteStatus.APPROVED:
        raise InvalidTransitionError("Onaylanmis teklifler silinemez")

    quote_number = quote.quote_number
    db.delete(quote)
    db.commit()
    logger.info("Teklif silindi: %s", quote_number)
    return True


def get_quote_totals(quote: Quote) -> DocumentTotals:
    """Teklifin ara toplam, KDV ve genel toplami."""
    return totals_for_lines(quote.lines)


def render_quote_pdf(
    db: Session,
    quote_id: uuid.UUID,
    renderer: DocumentRenderer,
    sender_name: str | None = None,
    now: datetime | None = None,
) -> tuple[bytes, str]:
    """Teklif PDF onizlemesi. Hicbir kayit degismez. Dondurur: (pdf, dosya_adi)"""
    now = now or _now()
    quote = get_quote(db, quote_id)
    document = build_quote_document(quote, now, sender_name)
    pdf = render_document(renderer, document)
    return pdf, f"Teklif_{quote.quote_number}.pdf"


def send_quote(
    db: Session,
    quote_id: uuid.UUID,
    renderer: DocumentRenderer,
    mailer,
    recipient_email: str | None = None,
    cc: list[str] | None = None,
    sender_name: str | None = None,
    now: datetime | None = None,
) -> dict:
    """
    Teklifi gonder.

    Sira: durum kontrolu -> PDF -> dosya -> arsiv kaydi -> durum "Gönderildi"
    -> commit -> email. PDF olusturulamazsa hicbir sey yazilmaz.
    Email hatasi islemi geri almaz, sonucta email_error olarak doner.
    """
    now = now or _now()
    quote = get_quote(db, quote_id, for_update=True)
    next_status = quote_transition(quote.status, QuoteEvent.SEND)

    document = build_quote_document(quote, now, sender_name)
    pdf = render_document(renderer, document)

    filename = f"Product_Quote_{filename_part(quote.quote_number)}_{now:%Y%m%d_%H%M%S}.pdf"
    save_artifact(filename, pdf)

    recipient = recipient_email or quote.customer_email
    sent_quote = SentQuote(
        recipient_email=recipient,
        document_number=quote.quote_number,
        pdf_filename=filename,
        sent_at=now,
        customer_name=quote.customer_name,
        sender_name=sender_name,
        quote_type="product",
        product_quote_id=quote.id,
        line_items=encode_document_lines(document),
    )
    db.add(sent_quote)
    db.flush()

    quote.status = next_status
    quote.sent_at = now
    quote.sent_quote_id = sent_quote.id
    db.commit()
    db.refresh(quote)
    logger.info("Teklif gonderildi: %s -> %s", quote.quote_number, recipient or "-")

    if recipient:
        mail_result = send_quietly(
            mailer,
            to=[recipient],
            cc=cc or [],
            subject=f"Fiyat Teklifi - {quote.quote_number}",
            body=quote_email_body(quote.customer_name, sender_name),
            attachment=pdf,
            filename=filename,
            sender_name=sender_name,
        )
    else:
        mail_result = MailResult(False, "Alici adresi yok")

    return {
        "quote": quote,
        "sent_quote_id": sent_quote.id,
        "pdf_filename": filename,
        "email_sent": mail_result.success,
        "email_error": mail_result.error,
    }


def approve_quote(
    db: Session,
    quote_id: uuid.UUID,
    salesperson_id: str,
    now: datetime | None = None,
) -> Sale:
    """
    Gonderilmis teklifi onayla ve satis olustur.
    Satis tutari KDV dahil genel toplamdir. Teklif ve satis tek commit ile yazilir.
    """
    now = now or _now()
    quote = get_quote(db, quote_id, for_update=True)
    next_status = quote_transition(quote.status, QuoteEvent.APPROVE)

    totals = get_quote_totals(quote)
    sale = Sale(
        customer_name=quote.customer_name,
        sale_date=now,
        due_date=calculate_due_date(quote.payment_term, now),
        amount=totals.grand_total,
        paid_amount=0,
        is_completed=False,
        salesperson_id=salesperson_id,
    )
    insert_with_number(
        db, sale, "sale_number",
        lambda attempt: next_sale_number(db, quote.customer_name, now, attempt),
    )

    quote.status = next_status
    quote.approved_at = now
    quote.sale_id = sale.id
    db.commit()
    db.refresh(sale)
    logger.info(
        "Teklif onaylandi: %s -> satis %s (%s %s)",
        quote.quote_number, sale.sale_number, sale.amount, quote.currency,
    )
    return sale
