"""Ornek veri ekleme scripti: servis kayitlari, teklifler ve bir satis."""
from decimal import Decimal

from sqlalchemy.orm import Session

from teklifsatis.database import Base, engine
from teklifsatis.schemas.quote import QuoteCreate, QuoteLineCreate
from teklifsatis.schemas.ticket import TicketCreate, TicketItemCreate
from teklifsatis.services import quote as quote_service
from teklifsatis.services import settlement as settlement_service
from teklifsatis.services import ticket as ticket_service
from teklifsatis.services.auth import create_access_token

Base.metadata.create_all(bind=engine)

with Session(engine) as db:
    # 1. Servis kayitlari
    tickets_data = [
        ("Yildiz Teknoloji A.S.", "Havali Somun Sikma 1/2", "B-1001", [
            ("part", "Rotor Kanadi", 4, "12.50", None, None),
            ("service", "Revizyon", 1, "40.00", None, None),
        ]),
        ("Yildiz Teknoloji A.S.", "Pnomatik Tornavida", "B-1001", [
            ("part", "Tetik Valfi", 1, "18.00", "20.00", "10"),
            ("service", "Test ve Ayar", 1, "15.00", None, None),
        ]),
        ("Deniz Insaat Ltd.", "Kirici Tabanca", None, []),
    ]
    for customer, model, belge, items in tickets_data:
        ticket = ticket_service.create_ticket(db, TicketCreate(
            customer_name=customer,
            product_model=model,
            document_number=belge,
            received_by="Servis",
            currency="USD",
        ))
        for kind, name, qty, price, list_price, discount in items:
            ticket_service.add_ticket_item(db, ticket.id, TicketItemCreate(
                kind=kind,
                name=name,
                quantity=qty,
                price=Decimal(price),
                list_price=Decimal(list_price) if list_price else None,
                discount_percent=Decimal(discount) if discount else None,
            ))
        print(f"Servis kaydi: {ticket.ticket_number} ({model})")

    # 2. Urun teklifi
    quote = quote_service.create_quote(db, QuoteCreate(
        customer_name="Ay Gida San. Tic.",
        customer_email="fatma@aygida.com",
        currency="TRY",
        payment_term="30 gün",
        lines=[
            QuoteLineCreate(product_name="Havali Matkap", quantity=2, unit_price=Decimal("100.00"), discount_percent=Decimal("10")),
            QuoteLineCreate(product_name="Hortum Seti", quantity=1, unit_price=Decimal("50.00")),
        ],
    ))
    print(f"Teklif: {quote.quote_number} ({quote_service.get_quote_totals(quote).grand_total} TL)")

    # 3. Elle satis ve kismi odeme
    from teklifsatis.schemas.sale import SaleCreate

    sale = settlement_service.create_sale(
        db, SaleCreate(customer_name="Kara Lojistik", amount=Decimal("1000.00")), "ahmet",
    )
    settlement_service.apply_payment(db, sale.id, Decimal("400.00"))
    print(f"Satis: {sale.sale_number} (kalan {sale.remaining_amount})")

    print(f"Ornek token (ahmet): {create_access_token('ahmet')}")
