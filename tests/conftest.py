"""
TeklifSatis - Test Yapilandirmasi (conftest.py)

SQLite in-memory veritabani kullanarak PostgreSQL gerektirmeden
servisleri ve API endpoint'lerini test etmeye olanak saglar.

Her test fonksiyonu icin temiz bir veritabani olusturulur (function scope).
PDF olusturucu ve email gondericinin sahte surumleri kullanilir.
"""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from teklifsatis.config import settings
from teklifsatis.database import Base, get_db
from teklifsatis.dependencies import get_mailer, get_renderer
from teklifsatis.main import app
from teklifsatis.rate_limit import limiter
from teklifsatis.schemas.quote import QuoteCreate, QuoteLineCreate
from teklifsatis.schemas.ticket import TicketCreate, TicketItemCreate
from teklifsatis.services import quote as quote_service
from teklifsatis.services import ticket as ticket_service
from teklifsatis.services.email import MailResult
from teklifsatis.services.renderer import RenderError

# Tum modelleri import et - Base.metadata.create_all icin gerekli
import teklifsatis.models  # noqa: F401


# ---------------------------------------------------------------------------
# SQLite In-Memory Test Veritabani
# ---------------------------------------------------------------------------

# Tek baglanti (StaticPool): testteki oturum ve TestClient ayni veriyi gorur
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
    echo=False,
)


@event.listens_for(test_engine, "connect")
def _on_connect(dbapi_conn, connection_record):
    # pysqlite'in kendi BEGIN yonetimi kapatilir; SAVEPOINT (begin_nested) icin gerekli
    dbapi_conn.isolation_level = None
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@event.listens_for(test_engine, "begin")
def _on_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


# ---------------------------------------------------------------------------
# Sahte dis bilesenler
# ---------------------------------------------------------------------------

class FakeRenderer:
    """Belgeleri kaydeder, sabit bir PDF icerigi dondurur."""

    def __init__(self):
        self.documents = []

    def render(self, document):
        self.documents.append(document)
        return b"%PDF-1.4 fake " + (document.document_number or "-").encode()


class FailingRenderer:
    def render(self, document):
        raise RenderError("sablon hatasi")


class FakeMailer:
    """Gonderilen emailleri kaydeder. fail=True ise hata sonucu dondurur."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent = []

    def send(self, to, cc, subject, body, attachment, filename, sender_name=None):
        if self.fail:
            return MailResult(False, "SMTP baglanti hatasi")
        self.sent.append({"to": to, "cc": cc, "subject": subject, "filename": filename})
        return MailResult(True)


class RaisingMailer:
    def send(self, **kwargs):
        raise ConnectionError("sunucuya ulasilamadi")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def _isolated_settings(tmp_path, monkeypatch):
    """PDF'ler gecici klasore yazilir; durum dogrulamasi varsayilan (esnek) modda."""
    monkeypatch.setattr(settings, "EXPORTS_DIR", str(tmp_path / "exports"))
    monkeypatch.setattr(settings, "TICKET_STATUS_STRICT", False)


@pytest.fixture(scope="function")
def db_session():
    """
    Her test icin temiz bir veritabani oturumu olusturur.
    Test bittikten sonra tablolari siler.
    """
    Base.metadata.create_all(bind=test_engine)

    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture(scope="function")
def client(db_session, renderer, mailer):
    """
    FastAPI TestClient.
    get_db, get_renderer ve get_mailer dependency'leri override edilir.
    """
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_renderer] = lambda: renderer
    app.dependency_overrides[get_mailer] = lambda: mailer
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as c:
        yield c

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def draft_quote(db_session):
    """2 x 100 TL, %10 iskonto -> ara toplam 180, KDV 36, toplam 216."""
    return quote_service.create_quote(db_session, QuoteCreate(
        customer_name="Yildiz Teknoloji",
        customer_email="satinalma@yildiztek.com",
        currency="TRY",
        payment_term="30 gün",
        lines=[
            QuoteLineCreate(
                product_name="Havali Tornavida",
                quantity=2,
                unit_price=Decimal("100.00"),
                discount_percent=Decimal("10"),
            ),
        ],
    ))


@pytest.fixture
def sent_quote(db_session, draft_quote, renderer, mailer):
    quote_service.send_quote(db_session, draft_quote.id, renderer, mailer)
    return draft_quote


@pytest.fixture
def make_ticket(db_session):
    """Kalemleriyle servis kaydi olusturan yardimci."""
    def _make(items=(), **fields):
        fields.setdefault("customer_name", "Deniz Insaat")
        fields.setdefault("product_model", "Somun Sikma 1/2")
        fields.setdefault("currency", "USD")
        ticket = ticket_service.create_ticket(db_session, TicketCreate(**fields))
        for item in items:
            ticket_service.add_ticket_item(db_session, ticket.id, TicketItemCreate(**item))
        db_session.refresh(ticket)
        return ticket
    return _make


@pytest.fixture
def failing_renderer():
    return FailingRenderer()


@pytest.fixture
def failing_mailer():
    return FakeMailer(fail=True)


@pytest.fixture
def raising_mailer():
    return RaisingMailer()
