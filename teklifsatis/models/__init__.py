# Tum modelleri buradan import ediyoruz
# Boylece Alembic autogenerate tum tablolari gorebilir
from teklifsatis.models.sale import Sale
from teklifsatis.models.commission import CommissionRecord
from teklifsatis.models.payment import IncomingPayment
from teklifsatis.models.sent_quote import SentQuote
from teklifsatis.models.quote import Quote, QuoteLine
from teklifsatis.models.service_ticket import ServiceTicket, TicketItem

__all__ = [
    "Sale", "CommissionRecord", "IncomingPayment", "SentQuote",
    "Quote", "QuoteLine", "ServiceTicket", "TicketItem",
]
