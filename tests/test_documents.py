"""
TeklifSatis - Teklif Belgesi ve Toplu Teklif Testleri

Test edilen fonksiyonlar:
    teklifsatis.services.document: build_quote_document, build_ticket_group,
        build_bulk_document, create_bulk_quote, mark_tickets_awaiting_approval
    teklifsatis.services.archive: get_sent_quotes, get_sent_quote_lines
"""

import uuid
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest

from teklifsatis.config import settings
from teklifsatis.exceptions import ExternalDependencyError, NotFoundError, ValidationError
from teklifsatis.models.sent_quote import SentQuote
from teklifsatis.models.service_ticket import ServiceTicket
from teklifsatis.schemas.ticket import BulkQuoteItem, BulkQuoteRequest
from teklifsatis.services import archive as archive_service
from teklifsatis.services import document as document_service
from teklifsatis.services.status import TicketStatus

NOW = datetime(2026, 3, 10, 14, 30, 0, tzinfo=timezone.utc)

REPAIR_ITEMS = [
    {"kind": "part", "name": "Rotor Kanadi", "quantity": 2, "price": Decimal("12.50")},
    {"kind": "part", "name": "Rotor Kanadi", "quantity": 2, "price": Decimal("12.50")},
    {"kind": "part", "name": "Tetik Valfi", "price": Decimal("18"),
     "list_price": Decimal("20"), "discount_percent": Decimal("10")},
    {"kind": "service", "name": "Revizyon", "price": Decimal("40")},
]


@pytest.fixture
def repair_ticket(make_ticket):
    """Detayli mod: 4 x 12.50 + 20 (%10 iskonto) + 40 = 108.00"""
    return make_ticket(items=REPAIR_ITEMS, document_number="B-1001", customer_name="Yildiz Teknoloji")


@pytest.fixture
def override_ticket(make_ticket):
    """Genel toplam modu: 500, %10 indirim -> 450.00"""
    return make_ticket(
        items=[
            {"kind": "part", "name": "Motor", "price": Decimal("300")},
            {"kind": "service", "name": "Sarim", "price": Decimal("150")},
            {"kind": "service", "name": "Sarim", "price": Decimal("150")},
        ],
        product_model="Kirici Tabanca",
        grand_total_override=Decimal("500"),
        grand_total_discount=Decimal("10"),
    )


class TestTicketGroup:

    def test_detailed_group_aggregates_items(self, repair_ticket):
        group = document_service.build_ticket_group(repair_ticket)

        assert group.mode == "detailed"
        assert group.reference == repair_ticket.ticket_number
        assert group.currency == "USD"
        names = [(line.kind, line.name, line.quantity, line.price) for line in group.lines]
        assert names == [
            ("part", "Rotor Kanadi", 4, Decimal("50.00")),
            ("part", "Tetik Valfi", 1, Decimal("18.00")),
            ("service", "Revizyon", 1, Decimal("40.00")),
        ]
        assert group.lines[1].list_price == Decimal("20")
        assert group.subtotal == Decimal("108.00")

    def test_grand_total_group(self, override_ticket):
        group = document_service.build_ticket_group(override_ticket)

        assert group.mode == "grand_total"
        assert group.subtotal == Decimal("450.00")
        assert group.override_discount == Decimal("10")
        assert [(line.name, line.quantity) for line in group.lines] == [("Motor", 1), ("Sarim", 2)]
        assert all(line.price == 0 for line in group.lines)

    def test_empty_ticket_gets_fallback_line(self, make_ticket):
        group = document_service.build_ticket_group(make_ticket(product_model="Matkap"))
        assert len(group.lines) == 1
        assert group.lines[0].kind == "service"
        assert group.lines[0].name == "Matkap"
        assert group.subtotal == Decimal("0.00")

    def test_default_currency(self, make_ticket):
        group = document_service.build_ticket_group(make_ticket(currency=None))
        assert group.currency == settings.BULK_QUOTE_CURRENCY

    def test_note_from_request_when_ticket_has_none(self, make_ticket):
        group = document_service.build_ticket_group(make_ticket(), note="Teslim 3 gun")
        assert group.note == "Teslim 3 gun"


class TestBulkDocument:

    def test_totals_across_groups(self, repair_ticket, override_ticket):
        groups = [
            document_service.build_ticket_group(repair_ticket),
            document_service.build_ticket_group(override_ticket),
        ]
        document = document_service.build_bulk_document("Yildiz", groups, "B-1001", NOW)

        assert document.currency == "USD"
        assert document.totals.subtotal == Decimal("558.00")
        assert document.totals.vat == Decimal("111.60")
        assert document.totals.grand_total == Decimal("669.60")
        assert document.document_date == NOW.date()

    def test_mixed_currencies_rejected(self, make_ticket):
        groups = [
            document_service.build_ticket_group(make_ticket(currency="USD")),
            document_service.build_ticket_group(make_ticket(currency="EUR")),
        ]
        with pytest.raises(ValidationError):
            document_service.build_bulk_document("Musteri", groups, None, NOW)

    def test_missing_customer_name(self, make_ticket):
        group = document_service.build_ticket_group(make_ticket())
        document = document_service.build_bulk_document(None, [group], None, NOW)
        assert document.customer_name == "Müşteri"


class TestCreateBulkQuote:

    def test_bulk_quote_for_several_tickets(
        self, db_session, repair_ticket, override_ticket, renderer, mailer
    ):
        request = BulkQuoteRequest(
            items=[
                BulkQuoteItem(ticket_id=repair_ticket.id),
                BulkQuoteItem(ticket_id=uuid.uuid4()),
                BulkQuoteItem(ticket_id=override_ticket.id),
            ],
            recipient_email="satinalma@yildiztek.com; muhasebe@yildiztek.com",
            sender_name="Ahmet",
        )
        result = document_service.create_bulk_quote(db_session, request, renderer, mailer, now=NOW)

        assert result["pdf_filename"] == "Toplu_Teklif_20260310_143000.pdf"
        assert (Path(settings.EXPORTS_DIR) / result["pdf_filename"]).is_file()
        assert result["email_sent"] is True
        assert set(result["updated_ticket_ids"]) == {repair_ticket.id, override_ticket.id}
        assert result["failed_ticket_ids"] == []

        for ticket in (repair_ticket, override_ticket):
            db_session.refresh(ticket)
            assert ticket.status == TicketStatus.AWAITING_APPROVAL

        archive = db_session.get(SentQuote, result["sent_quote_id"])
        assert archive.quote_type == "service"
        assert archive.customer_name == "Yildiz Teknoloji"
        assert archive.document_number == "B-1001"
        assert archive.service_ticket_ids == f"{repair_ticket.id},{override_ticket.id}"
        assert archive.recipient_email == "satinalma@yildiztek.com; muhasebe@yildiztek.com"

        assert mailer.sent[0]["to"] == ["satinalma@yildiztek.com", "muhasebe@yildiztek.com"]
        assert len(renderer.documents[0].groups) == 2

    def test_single_ticket_filename(self, db_session, repair_ticket, renderer, mailer):
        request = BulkQuoteRequest(items=[BulkQuoteItem(ticket_id=repair_ticket.id)])
        result = document_service.create_bulk_quote(db_session, request, renderer, mailer, now=NOW)
        assert result["pdf_filename"] == "Teklif_B-1001_20260310_143000.pdf"
        # Alici yoksa email gonderilmez, hata da sayilmaz
        assert result["email_sent"] is False
        assert result["email_error"] is None
        assert mailer.sent == []

    def test_single_ticket_without_document_number(self, db_session, make_ticket, renderer, mailer):
        ticket = make_ticket()
        request = BulkQuoteRequest(items=[BulkQuoteItem(ticket_id=ticket.id)])
        result = document_service.create_bulk_quote(db_session, request, renderer, mailer, now=NOW)
        assert result["pdf_filename"] == "Teklif_NoBelge_20260310_143000.pdf"

    def test_empty_request(self, db_session, renderer, mailer):
        with pytest.raises(ValidationError):
            document_service.create_bulk_quote(db_session, BulkQuoteRequest(items=[]), renderer, mailer)

    def test_no_ticket_found(self, db_session, renderer, mailer):
        request = BulkQuoteRequest(items=[BulkQuoteItem(ticket_id=uuid.uuid4())])
        with pytest.raises(NotFoundError):
            document_service.create_bulk_quote(db_session, request, renderer, mailer)

    def test_renderer_failure_changes_nothing(self, db_session, repair_ticket, failing_renderer, mailer):
        request = BulkQuoteRequest(
            items=[BulkQuoteItem(ticket_id=repair_ticket.id)], recipient_email="a@b.com",
        )
        with pytest.raises(ExternalDependencyError):
            document_service.create_bulk_quote(db_session, request, failing_renderer, mailer, now=NOW)

        db_session.refresh(repair_ticket)
        assert repair_ticket.status == TicketStatus.AWAITING_QUOTE
        assert db_session.query(SentQuote).count() == 0
        assert mailer.sent == []

    def test_mail_failure_is_reported(self, db_session, repair_ticket, renderer, failing_mailer):
        request = BulkQuoteRequest(
            items=[BulkQuoteItem(ticket_id=repair_ticket.id)], recipient_email="a@b.com",
        )
        result = document_service.create_bulk_quote(db_session, request, renderer, failing_mailer, now=NOW)
        assert result["email_sent"] is False
        assert result["email_error"] == "SMTP baglanti hatasi"
        db_session.refresh(repair_ticket)
        assert repair_ticket.status == TicketStatus.AWAITING_APPROVAL


class TestStatusSweep:

    def test_failed_ticket_does_not_block_others(self, db_session, make_ticket):
        first = make_ticket()
        second = make_ticket()
        missing = uuid.uuid4()

        updated, failed = document_service.mark_tickets_awaiting_approval(
            db_session, [first.id, missing, second.id],
        )

        assert updated == [first.id, second.id]
        assert failed == [missing]
        for ticket_id in (first.id, second.id):
            assert db_session.get(ServiceTicket, ticket_id).status == TicketStatus.AWAITING_APPROVAL


class TestArchive:

    def test_archive_lines_round_trip(self, db_session, repair_ticket, renderer, mailer):
        request = BulkQuoteRequest(items=[BulkQuoteItem(ticket_id=repair_ticket.id)])
        result = document_service.create_bulk_quote(db_session, request, renderer, mailer, now=NOW)

        rows = archive_service.get_sent_quote_lines(db_session, result["sent_quote_id"])
        assert [(row.name, row.quantity, row.total_price) for row in rows] == [
            ("Rotor Kanadi", "4", "50.00"),
            ("Tetik Valfi", "1", "18.00"),
            ("Revizyon", "1", "40.00"),
        ]
        assert rows[1].list_price == "20.00"
        assert rows[1].discount == "10"
        assert rows[1].net_price == "18.00"

    def test_newest_first(self, db_session, make_ticket, renderer, mailer):
        ticket = make_ticket()
        request = BulkQuoteRequest(items=[BulkQuoteItem(ticket_id=ticket.id)])
        older = document_service.create_bulk_quote(
            db_session, request, renderer, mailer, now=datetime(2026, 1, 1, tzinfo=timezone.utc),
        )
        newer = document_service.create_bulk_quote(db_session, request, renderer, mailer, now=NOW)

        sent = archive_service.get_sent_quotes(db_session)
        assert [s.id for s in sent] == [newer["sent_quote_id"], older["sent_quote_id"]]
        assert archive_service.get_sent_quotes(db_session, limit=1)[0].id == newer["sent_quote_id"]

    def test_missing_archive_row(self, db_session):
        with pytest.raises(NotFoundError):
            archive_service.get_sent_quote_lines(db_session, uuid.uuid4())
