"""
Gonderilen teklif arsivi.
Kayitlar sadece gonderim sirasinda yazilir; burada yalnizca okunur.
"""
import uuid

from sqlalchemy.orm import Session

from teklifsatis.exceptions import NotFoundError
from teklifsatis.models.sent_quote import SentQuote
from teklifsatis.schemas.document import RenderLine
from teklifsatis.services.line_codec import decode_lines


def get_sent_quotes(
    db: Session, limit: int = 100, quote_type: str | None = None
) -> list[SentQuote]:
    """En yeni gonderimler once."""
    query = db.query(SentQuote)
    if quote_type:
        query = query.filter(SentQuote.quote_type == quote_type)
    return query.order_by(SentQuote.sent_at.desc()).limit(limit).all()


def get_sent_quote(db: Session, sent_quote_id: uuid.UUID) -> SentQuote:
    sent_quote = db.query(SentQuote).filter(SentQuote.id == sent_quote_id).first()
    if not sent_quote:
        raise NotFoundError("Gonderilen teklif bulunamadi")
    return sent_quote


def get_sent_quote_lines(db: Session, sent_quote_id: uuid.UUID) -> list[RenderLine]:
    """Arsivdeki kalem metnini tablo satirlarina cevir."""
    return decode_lines(get_sent_quote(db, sent_quote_id).line_items)
