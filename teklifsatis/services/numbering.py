"""
Belge numarasi uretimi.

    Teklif:       TEK-{yil}-{sira:03}       sira = o yil olusturulan teklif sayisi + 1
    Satis:        {ONEK}-{yyyyMMdd}-{sira:03}  sira = o gun olusan satis sayisi + 1
    Servis kaydi: KTNTS-{sira:02}           sira = mevcut en buyuk numara + 1

Sayim-sonra-arttir yontemi ayni anda gelen isteklerde ayni numarayi
uretebilir. Numara kolonlari unique oldugu icin ikinci kayit hata alir;
insert_with_number bu durumda savepoint'i geri alip bir sonraki numarayi dener.
"""
import logging
import re
from collections.abc import Callable
from datetime import datetime, time, timedelta, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teklifsatis.config import settings
from teklifsatis.exceptions import NumberingConflictError
from teklifsatis.models.quote import Quote
from teklifsatis.models.sale import Sale
from teklifsatis.models.service_ticket import ServiceTicket

logger = logging.getLogger(__name__)

QUOTE_PREFIX = "TEK"
DEFAULT_SALE_PREFIX = "SAT"
TICKET_PREFIX = "KTNTS-"

_TICKET_SUFFIX_RE = re.compile(r"^\d+$")


def _day_bounds(moment: datetime) -> tuple[datetime, datetime]:
    start = datetime.combine(moment.date(), time.min, tzinfo=moment.tzinfo)
    return start, start + timedelta(days=1)


def next_quote_number(db: Session, year: int, offset: int = 0) -> str:
    """Format: TEK-2026-001, TEK-2026-002, ..."""
    start = datetime(year, 1, 1, tzinfo=timezone.utc)
    end = datetime(year + 1, 1, 1, tzinfo=timezone.utc)
    count = db.scalar(
        select(func.count(Quote.id)).where(Quote.created_at >= start, Quote.created_at < end)
    )
    return f"{QUOTE_PREFIX}-{year}-{(count or 0) + 1 + offset:03d}"


def sale_prefix(customer_name: str | None) -> str:
    """Musteri adinin ilk 3 harfi (buyuk harf). Ad bossa "SAT"."""
    name = (customer_name or "").strip()
    if not name:
        return DEFAULT_SALE_PREFIX
    return name[:3].upper()


def next_sale_number(db: Session, customer_name: str | None, now: datetime, offset: int = 0) -> str:
    """
    Format: ABC-20260105-001.
    Sira numarasi tum musterilerin o gunku satis sayisina gore verilir.
    """
    start, end = _day_bounds(now)
    count = db.scalar(
        select(func.count(Sale.id)).where(Sale.sale_date >= start, Sale.sale_date < end)
    )
    return f"{sale_prefix(customer_name)}-{now:%Y%m%d}-{(count or 0) + 1 + offset:03d}"


def next_ticket_number(db: Session, offset: int = 0) -> str:
    """
    Format: KTNTS-01, KTNTS-02, ...
    Kayit sayisi degil en buyuk numara kullanilir; silinen kayitlar bosluk birakir.
    """
    numbers = db.scalars(
        select(ServiceTicket.ticket_number).where(ServiceTicket.ticket_number.like(f"{TICKET_PREFIX}%"))
    ).all()

    highest = 0
    for number in numbers:
        suffix = number[len(TICKET_PREFIX):]
        # Sayisal olmayan sonekler yok sayilir
        if _TICKET_SUFFIX_RE.match(suffix):
            highest = max(highest, int(suffix))
    return f"{TICKET_PREFIX}{highest + 1 + offset:02d}"


def insert_with_number(db: Session, obj, field: str, generate: Callable[[int], str]):
    """
    Nesneye numara ata ve flush et.

    generate(attempt) numarayi uretir; attempt 0'dan baslar. Unique hatasinda
    savepoint geri alinir ve bir sonraki deneme yapilir. Deneme hakki bitince
    NumberingConflictError firlatilir. Commit cagiran tarafa aittir.
    """
    last_number = None
    for attempt in range(settings.NUMBERING_MAX_ATTEMPTS):
        last_number = generate(attempt)
        setattr(obj, field, last_number)
        savepoint = db.begin_nested()
        try:
            db.add(obj)
            db.flush()
        except IntegrityError:
            savepoint.rollback()
            logger.warning(
                "Numara cakismasi: %s=%s (deneme %d/%d)",
                field, last_number, attempt + 1, settings.NUMBERING_MAX_ATTEMPTS,
            )
            continue
        savepoint.commit()
        return obj

    logger.error("Numara uretilemedi: %s (son deneme %s)", field, last_number)
    raise NumberingConflictError(
        f"Belge numarasi uretilemedi ({last_number}). Lutfen tekrar deneyin."
    )
