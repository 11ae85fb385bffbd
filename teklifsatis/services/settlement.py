"""
Satis, odeme ve prim (komisyon) servis katmani.

Odeme islenirken satis satiri kilitlenir (SELECT ... FOR UPDATE); ayni
satisa ayni anda gelen iki odeme sirayla islenir. Satis ilk kez tamamlandiginda
satis temsilcisine tek bir prim kaydi yazilir.
"""
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from teklifsatis.config import settings
from teklifsatis.exceptions import NotFoundError, ValidationError
from teklifsatis.models.commission import CommissionRecord
from teklifsatis.models.payment import IncomingPayment
from teklifsatis.models.sale import Sale
from teklifsatis.schemas.payment import IncomingPaymentCreate
from teklifsatis.schemas.sale import SaleCreate
from teklifsatis.services.numbering import insert_with_number, next_sale_number
from teklifsatis.services.pricing import round_money

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _positive_amount(amount, label: str = "Odeme tutari") -> Decimal:
    value = Decimal(amount)
    if not value.is_finite():
        raise ValidationError(f"{label} gecersiz: {amount}")
    # Kolon 2 hane tutar; karsilastirma kaydedilecek degerle yapilmali
    value = round_money(value)
    if value <= 0:
        raise ValidationError(f"{label} sifirdan buyuk olmali: {amount}")
    return value


def get_sale(db: Session, sale_id: uuid.UUID) -> Sale:
    sale = db.query(Sale).filter(Sale.id == sale_id).first()
    if not sale:
        raise NotFoundError("Satis bulunamadi")
    return sale


def get_sales(
    db: Session,
    skip: int = 0, limit: int = 20,
    salesperson_id: str | None = None,
    is_completed: bool | None = None,
) -> tuple[list[Sale], int]:
    """Dondurur: (satis_listesi, toplam_sayi)"""
    query = db.query(Sale)
    if salesperson_id:
        query = query.filter(Sale.salesperson_id == salesperson_id)
    if is_completed is not None:
        query = query.filter(Sale.is_completed == is_completed)

    total = query.count()
    sales = query.order_by(Sale.sale_date.desc()).offset(skip).limit(limit).all()
    return sales, total


def create_sale(
    db: Session, data: SaleCreate, salesperson_id: str, now: datetime | None = None
) -> Sale:
    """
    Elle satis girisi.
    Satis numarasi verilmezse musteri adindan uretilir.
    """
    now = now or _now()
    amount = _positive_amount(data.amount, "Satis tutari")

    sale = Sale(
        customer_name=data.customer_name,
        sale_date=now,
        due_date=data.due_date,
        amount=round_money(amount),
        paid_amount=Decimal("0.00"),
        is_completed=False,
        salesperson_id=salesperson_id,
    )

    if data.sale_number:
        sale.sale_number = data.sale_number
        db.add(sale)
        try:
            db.flush()
        except IntegrityError:
            db.rollback()
            raise ValidationError(f"Satis numarasi zaten kullaniliyor: {data.sale_number}")
    else:
        insert_with_number(
            db, sale, "sale_number",
            lambda attempt: next_sale_number(db, data.customer_name, now, attempt),
        )

    db.commit()
    db.refresh(sale)
    logger.info("Satis olusturuldu: %s (%s)", sale.sale_number, sale.amount)
    return sale


def _accrue_commission(db: Session, sale: Sale, now: datetime) -> CommissionRecord | None:
    # Satis basina tek prim; sale_id kolonu unique
    existing = db.query(CommissionRecord).filter(CommissionRecord.sale_id == sale.id).first()
    if existing:
        return None

    commission = CommissionRecord(
        salesperson_id=sale.salesperson_id,
        sale_id=sale.id,
        amount=round_money(Decimal(sale.amount) * settings.COMMISSION_RATE),
        accrued_at=now,
        month=now.month,
        year=now.year,
    )
    db.add(commission)
    db.flush()
    logger.info(
        "Prim yazildi: %s satis=%s tutar=%s",
        sale.salesperson_id, sale.sale_number, commission.amount,
    )
    return commission


def _apply_payment(
    db: Session, sale_id: uuid.UUID, amount: Decimal, now: datetime
) -> tuple[Sale, CommissionRecord | None]:
    # Commit yapmaz; cagiran taraf tek commit ile yazar
    sale = db.query(Sale).filter(Sale.id == sale_id).with_for_update().populate_existing().first()
    if not sale:
        raise NotFoundError("Satis bulunamadi")

    sale.paid_amount = Decimal(sale.paid_amount or 0) + amount

    commission = None
    # Tamamlanma tek yonlu: sonraki odemeler yeni prim olusturmaz
    if not sale.is_completed and sale.paid_amount >= Decimal(sale.amount):
        sale.is_completed = True
        commission = _accrue_commission(db, sale, now)
    return sale, commission


def apply_payment(
    db: Session, sale_id: uuid.UUID, amount, now: datetime | None = None
) -> tuple[Sale, CommissionRecord | None]:
    """
    Satisa odeme isle.
    Odenen tutar satis tutarina ilk kez ulastiginda satis tamamlanir ve prim yazilir.
    Fazla odeme kabul edilir. Dondurur: (satis, yeni_prim_veya_None)
    """
    now = now or _now()
    value = _positive_amount(amount)
    sale, commission = _apply_payment(db, sale_id, value, now)
    db.commit()
    db.refresh(sale)
    return sale, commission


def record_incoming_payment(
    db: Session, data: IncomingPaymentCreate, now: datetime | None = None
) -> IncomingPayment:
    """Gelen odemeyi kaydet; satisa bagliysa satisa da isle."""
    now = now or _now()
    amount = _positive_amount(data.amount)

    payment = IncomingPayment(
        target_account=data.target_account,
        sender=data.sender,
        amount=amount,
        received_at=data.received_at or now,
        sale_id=data.sale_id,
    )
    if data.sale_id:
        _apply_payment(db, data.sale_id, amount, now)

    db.add(payment)
    db.commit()
    db.refresh(payment)
    logger.info("Gelen odeme kaydedildi: %s %s (satis: %s)", payment.sender, amount, data.sale_id)
    return payment


def get_incoming_payments(
    db: Session,
    skip: int = 0, limit: int = 50,
    sale_id: uuid.UUID | None = None,
) -> list[IncomingPayment]:
    query = db.query(IncomingPayment)
    if sale_id:
        query = query.filter(IncomingPayment.sale_id == sale_id)
    return query.order_by(IncomingPayment.received_at.desc()).offset(skip).limit(limit).all()


def get_commissions(
    db: Session, month: int | None = None, year: int | None = None
) -> list[CommissionRecord]:
    """Donem filtresi ile prim kayitlari."""
    query = db.query(CommissionRecord)
    if month:
        query = query.filter(CommissionRecord.month == month)
    if year:
        query = query.filter(CommissionRecord.year == year)
    return query.order_by(CommissionRecord.accrued_at.desc()).all()


def get_commission_summary(db: Session) -> list[dict]:
    """Satis temsilcisi bazinda: prim sayisi, toplam prim, son prim tarihi."""
    rows = (
        db.query(
            CommissionRecord.salesperson_id,
            func.count(CommissionRecord.id),
            func.sum(CommissionRecord.amount),
            func.max(CommissionRecord.accrued_at),
        )
        .group_by(CommissionRecord.salesperson_id)
        .order_by(CommissionRecord.salesperson_id)
        .all()
    )
    return [
        {
            "salesperson_id": salesperson_id,
            "commission_count": count,
            "total_commission": round_money(total or 0),
            "last_accrued_at": last,
        }
        for salesperson_id, count, total, last in rows
    ]


def get_commission_details(db: Session, salesperson_id: str) -> list[dict]:
    """Bir satis temsilcisinin primleri ve bagli satislar."""
    rows = (
        db.query(CommissionRecord, Sale)
        .join(Sale, CommissionRecord.sale_id == Sale.id)
        .filter(CommissionRecord.salesperson_id == salesperson_id)
        .order_by(CommissionRecord.accrued_at.desc())
        .all()
    )
    return [
        {
            "commission_id": commission.id,
            "sale_id": sale.id,
            "sale_number": sale.sale_number,
            "customer_name": sale.customer_name,
            "sale_amount": sale.amount,
            "commission_amount": commission.amount,
            "accrued_at": commission.accrued_at,
            "month": commission.month,
            "year": commission.year,
        }
        for commission, sale in rows
    ]
