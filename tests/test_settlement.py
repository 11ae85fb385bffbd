"""
TeklifSatis - Satis, Odeme ve Prim Testleri

Test edilen fonksiyonlar (teklifsatis.services.settlement):
    create_sale, get_sale, get_sales, apply_payment, record_incoming_payment,
    get_incoming_payments, get_commissions, get_commission_summary,
    get_commission_details
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from teklifsatis.exceptions import NotFoundError, ValidationError
from teklifsatis.models.commission import CommissionRecord
from teklifsatis.schemas.payment import IncomingPaymentCreate
from teklifsatis.schemas.sale import SaleCreate
from teklifsatis.services import settlement as settlement_service

NOW = datetime(2026, 4, 15, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def sale(db_session):
    return settlement_service.create_sale(
        db_session, SaleCreate(customer_name="Kara Lojistik", amount=Decimal("1000.00")),
        "ahmet", now=NOW,
    )


class TestCreateSale:

    def test_generated_number(self, sale):
        assert sale.sale_number == "KAR-20260415-001"
        assert sale.paid_amount == Decimal("0.00")
        assert sale.is_completed is False
        assert sale.salesperson_id == "ahmet"

    def test_manual_number(self, db_session):
        sale = settlement_service.create_sale(
            db_session,
            SaleCreate(customer_name="Musteri", amount=Decimal("50"), sale_number="ELLE-001"),
            "system",
        )
        assert sale.sale_number == "ELLE-001"

    def test_duplicate_manual_number(self, db_session, sale):
        with pytest.raises(ValidationError):
            settlement_service.create_sale(
                db_session,
                SaleCreate(customer_name="Musteri", amount=Decimal("50"), sale_number=sale.sale_number),
                "system",
            )

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10")])
    def test_non_positive_amount(self, db_session, amount):
        with pytest.raises(ValidationError):
            settlement_service.create_sale(
                db_session, SaleCreate(customer_name="Musteri", amount=amount), "system",
            )

    def test_amount_is_immutable(self, sale):
        with pytest.raises(ValidationError):
            sale.amount = Decimal("2000.00")

    def test_list_filters(self, db_session, sale):
        settlement_service.create_sale(
            db_session, SaleCreate(customer_name="Deniz", amount=Decimal("10")), "mehmet",
        )
        sales, total = settlement_service.get_sales(db_session, salesperson_id="ahmet")
        assert total == 1
        assert sales[0].id == sale.id

        _, total = settlement_service.get_sales(db_session, is_completed=True)
        assert total == 0

    def test_get_missing(self, db_session):
        with pytest.raises(NotFoundError):
            settlement_service.get_sale(db_session, uuid.uuid4())


class TestApplyPayment:

    def test_full_payment_completes_sale_with_commission(self, db_session, sale):
        """1000 tutarli satisa 1000 odeme: tamamlanir, %1.5 prim = 15.00."""
        updated, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("1000"), now=NOW)

        assert updated.is_completed is True
        assert updated.remaining_amount == Decimal("0")
        assert commission is not None
        assert commission.amount == Decimal("15.00")
        assert commission.salesperson_id == "ahmet"
        assert (commission.month, commission.year) == (4, 2026)
        assert db_session.query(CommissionRecord).count() == 1

    def test_partial_payments(self, db_session, sale):
        updated, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("400"), now=NOW)
        assert updated.is_completed is False
        assert updated.remaining_amount == Decimal("600.00")
        assert commission is None

        updated, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("600"), now=NOW)
        assert updated.is_completed is True
        assert commission.amount == Decimal("15.00")

    def test_later_payments_never_add_commission(self, db_session, sale):
        settlement_service.apply_payment(db_session, sale.id, Decimal("1000"), now=NOW)
        updated, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("100"), now=NOW)

        assert commission is None
        # Fazla odeme kabul edilir
        assert updated.paid_amount == Decimal("1100.00")
        assert updated.is_completed is True
        assert db_session.query(CommissionRecord).count() == 1

    def test_sub_cent_payment_rounds_before_completion(self, db_session, sale):
        """999.999 kolona 1000.00 olarak yazilir; satis ayni adimda tamamlanmali."""
        updated, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("999.999"), now=NOW)

        assert updated.paid_amount == Decimal("1000.00")
        assert updated.is_completed is True
        assert commission is not None
        assert commission.amount == Decimal("15.00")

    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-5"), Decimal("0.004")])
    def test_non_positive_payment(self, db_session, sale, amount):
        with pytest.raises(ValidationError):
            settlement_service.apply_payment(db_session, sale.id, amount)
        db_session.refresh(sale)
        assert sale.paid_amount == Decimal("0.00")

    def test_missing_sale(self, db_session):
        with pytest.raises(NotFoundError):
            settlement_service.apply_payment(db_session, uuid.uuid4(), Decimal("10"))

    def test_commission_is_rounded(self, db_session):
        sale = settlement_service.create_sale(
            db_session, SaleCreate(customer_name="Musteri", amount=Decimal("333.33")), "ahmet",
        )
        _, commission = settlement_service.apply_payment(db_session, sale.id, Decimal("333.33"))
        # 333.33 x 0.015 = 4.99995
        assert commission.amount == Decimal("5.00")


class TestIncomingPayments:

    def test_linked_payment_is_applied(self, db_session, sale):
        payment = settlement_service.record_incoming_payment(db_session, IncomingPaymentCreate(
            target_account="Is Bankasi TL",
            sender="Kara Lojistik",
            amount=Decimal("1000"),
            sale_id=sale.id,
        ), now=NOW)

        assert payment.sale_id == sale.id
        db_session.refresh(sale)
        assert sale.is_completed is True
        assert db_session.query(CommissionRecord).count() == 1

    def test_unlinked_payment(self, db_session):
        payment = settlement_service.record_incoming_payment(db_session, IncomingPaymentCreate(
            sender="Bilinmeyen", amount=Decimal("25.50"),
        ), now=NOW)
        assert payment.sale_id is None
        assert settlement_service.get_incoming_payments(db_session)[0].id == payment.id

    def test_payment_to_missing_sale_is_not_stored(self, db_session):
        with pytest.raises(NotFoundError):
            settlement_service.record_incoming_payment(db_session, IncomingPaymentCreate(
                amount=Decimal("10"), sale_id=uuid.uuid4(),
            ))
        db_session.rollback()
        assert settlement_service.get_incoming_payments(db_session) == []

    def test_filter_by_sale(self, db_session, sale):
        settlement_service.record_incoming_payment(
            db_session, IncomingPaymentCreate(amount=Decimal("10"), sale_id=sale.id),
        )
        settlement_service.record_incoming_payment(db_session, IncomingPaymentCreate(amount=Decimal("20")))
        payments = settlement_service.get_incoming_payments(db_session, sale_id=sale.id)
        assert [p.amount for p in payments] == [Decimal("10.00")]


class TestCommissionReports:

    @pytest.fixture
    def commissions(self, db_session):
        for customer, amount, person, when in (
            ("Kara", "1000", "ahmet", datetime(2026, 4, 1, tzinfo=timezone.utc)),
            ("Deniz", "2000", "ahmet", datetime(2026, 5, 2, tzinfo=timezone.utc)),
            ("Yildiz", "400", "mehmet", datetime(2026, 5, 3, tzinfo=timezone.utc)),
        ):
            sale = settlement_service.create_sale(
                db_session, SaleCreate(customer_name=customer, amount=Decimal(amount)), person, now=when,
            )
            settlement_service.apply_payment(db_session, sale.id, Decimal(amount), now=when)

    def test_period_filter(self, db_session, commissions):
        records = settlement_service.get_commissions(db_session, month=5, year=2026)
        assert sorted(r.amount for r in records) == [Decimal("6.00"), Decimal("30.00")]
        assert len(settlement_service.get_commissions(db_session)) == 3

    def test_summary(self, db_session, commissions):
        summary = {row["salesperson_id"]: row for row in settlement_service.get_commission_summary(db_session)}
        assert summary["ahmet"]["commission_count"] == 2
        assert summary["ahmet"]["total_commission"] == Decimal("45.00")
        assert summary["ahmet"]["last_accrued_at"].date() == datetime(2026, 5, 2).date()
        assert summary["mehmet"]["total_commission"] == Decimal("6.00")

    def test_details(self, db_session, commissions):
        details = settlement_service.get_commission_details(db_session, "ahmet")
        assert [d["customer_name"] for d in details] == ["Deniz", "Kara"]
        assert details[0]["sale_amount"] == Decimal("2000.00")
        assert details[0]["commission_amount"] == Decimal("30.00")
