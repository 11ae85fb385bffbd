"""
Kalem satiri metin formati (surum 1).

    Parça: {ad} x{adet} : {tutar}
    Hizmet: {ad} : {tutar}
    Hizmet: {ad} (x{adet}) : {tutar}

Istege bagli ek: " (Liste: {birim liste fiyati}, İndirim: {oran}%)"

Tutar satir toplamidir, nokta ondalik ayiraci ile 2 hane yazilir.
Belgeler tipli kalemlerle (PartLine / ServiceLine) olusturulur; metin hali
sadece arsiv kaydinda saklanir ve oradan geri okunur.
"""
import logging
import re
from decimal import Decimal, InvalidOperation

from teklifsatis.schemas.document import PartLine, ServiceLine, RenderLine
from teklifsatis.services.pricing import CURRENCY_SYMBOLS, HUNDRED, round_money

logger = logging.getLogger(__name__)

GRAMMAR_VERSION = 1

PART_PREFIX = "Parça:"
SERVICE_PREFIX = "Hizmet:"

_PREFIXES = (
    (PART_PREFIX, "part"),
    (SERVICE_PREFIX, "service"),
)

# " (Liste: 100.00, İndirim: 10%)" satir sonunda
_DETAIL_RE = re.compile(
    r"\s*\((?:Liste|Fiyat):\s*(?P<list>[^()]+?),\s*İndirim:\s*(?P<discount>[^)]*)\)\s*$"
)
# Adet: son " x3" veya " (x3)" parcasi
_QUANTITY_RE = re.compile(r"\s(?:\(x(?P<paren>\d+)\)|x(?P<bare>\d+))$")


class CodecParseFailure(ValueError):
    """Satir cozumlenemedi. Modul disina cikmaz."""


def _format_amount(value: Decimal) -> str:
    return f"{round_money(value):.2f}"


def _format_percent(value: Decimal) -> str:
    # 10.00 -> "10", 12.50 -> "12.5"
    normalized = Decimal(value).normalize()
    return format(normalized, "f")


def encode_line(line: PartLine | ServiceLine) -> str:
    """Tipli kalemi tek satir metne cevir."""
    if line.kind == "part":
        text = f"{PART_PREFIX} {line.name} x{line.quantity} : {_format_amount(line.price)}"
    elif line.quantity > 1 or _QUANTITY_RE.search(line.name):
        # Ad kendisi " x5" ile bitiyorsa adet acikca yazilir
        text = f"{SERVICE_PREFIX} {line.name} (x{line.quantity}) : {_format_amount(line.price)}"
    else:
        text = f"{SERVICE_PREFIX} {line.name} : {_format_amount(line.price)}"

    if line.list_price is not None and line.discount_percent:
        text += (
            f" (Liste: {_format_amount(line.list_price)}, "
            f"İndirim: {_format_percent(line.discount_percent)}%)"
        )
    return text


def parse_amount(raw: str) -> Decimal:
    """
    Tutar metnini sayiya cevir.
    Once nokta ondalik ("1234.50"), olmazsa virgul ondalik ("1.234,50") denenir.
    Para birimi sembolleri ve binlik ayiraclari yok sayilir.
    """
    text = raw.strip()
    for symbol in CURRENCY_SYMBOLS.values():
        text = text.replace(symbol, "")
    text = text.replace(" ", "")

    try:
        value = Decimal(text)
    except InvalidOperation:
        if "," in text and "." in text and text.rfind(".") > text.rfind(","):
            # 1,234.50
            text = text.replace(",", "")
        else:
            # 1.234,50 veya 12,50
            text = text.replace(".", "").replace(",", ".")
        try:
            value = Decimal(text)
        except InvalidOperation as exc:
            raise CodecParseFailure(f"Tutar okunamadi: {raw!r}") from exc

    if not value.is_finite():
        raise CodecParseFailure(f"Tutar okunamadi: {raw!r}")
    return value


def _parse_percent(raw: str) -> Decimal:
    # "10%" ve "%10" ikisi de kabul edilir
    return parse_amount(raw.replace("%", ""))


def _split_kind(text: str) -> tuple[str, str]:
    for prefix, kind in _PREFIXES:
        if text.startswith(prefix):
            return kind, text[len(prefix):].strip()
    raise CodecParseFailure(f"Bilinmeyen satir turu: {text!r}")


def _decode(text: str) -> RenderLine:
    kind, body = _split_kind(text.strip())

    list_price = None
    discount = Decimal("0")
    detail = _DETAIL_RE.search(body)
    if detail:
        list_price = parse_amount(detail.group("list"))
        discount = _parse_percent(detail.group("discount"))
        body = body[:detail.start()]

    colon = body.rfind(":")
    if colon < 0:
        raise CodecParseFailure(f"Tutar ayiraci bulunamadi: {text!r}")
    head = body[:colon].strip()
    amount = parse_amount(body[colon + 1:])

    quantity = 1
    match = _QUANTITY_RE.search(head)
    if match:
        try:
            quantity = int(match.group("paren") or match.group("bare"))
        except ValueError as exc:
            raise CodecParseFailure(f"Adet okunamadi: {text!r}") from exc
        head = head[:match.start()].strip()
    if not head:
        raise CodecParseFailure(f"Kalem adi bos: {text!r}")

    try:
        if list_price is not None:
            net = list_price * (1 - discount / HUNDRED)
            total = Decimal(quantity) * net
        else:
            list_price = net = total = amount

        return RenderLine(
            kind=kind,
            name=head,
            quantity=str(quantity),
            list_price=_format_amount(list_price),
            discount=_format_percent(discount),
            net_price=_format_amount(net),
            total_price=_format_amount(total),
        )
    except ArithmeticError as exc:
        # Sonlu ama 2 haneye yuvarlanamayacak kadar buyuk tutarlar
        raise CodecParseFailure(f"Tutar islenemedi: {text!r}") from exc


def fallback_line(text: str) -> RenderLine:
    return RenderLine(name=text, quantity="1")


def decode_line(text: str) -> RenderLine:
    """
    Metin satiri tablo satirina cevir.
    Cozumlenemeyen satir icin hata firlatmaz; satirin kendisini ad olarak,
    adet 1 ve tutarlar 0.00 olan bir satir dondurur.
    """
    try:
        return _decode(text)
    except CodecParseFailure as exc:
        logger.warning("Kalem satiri cozumlenemedi, varsayilan satir kullanildi: %s", exc)
        return fallback_line(text)


def decode_lines(text: str | None) -> list[RenderLine]:
    """Arsivde saklanan cok satirli metni satir satir coz."""
    if not text:
        return []
    return [decode_line(line) for line in text.splitlines() if line.strip()]


def to_render_line(line: PartLine | ServiceLine) -> RenderLine:
    """Tipli kalemden dogrudan tablo satiri uret (metne cevirmeden)."""
    if line.list_price is not None:
        list_price = line.list_price
        net = list_price * (1 - line.discount_percent / HUNDRED)
    elif line.quantity:
        list_price = net = line.price / line.quantity
    else:
        list_price = net = line.price
    return RenderLine(
        kind=line.kind,
        name=line.name,
        quantity=str(line.quantity),
        list_price=_format_amount(list_price),
        discount=_format_percent(line.discount_percent),
        net_price=_format_amount(net),
        total_price=_format_amount(line.price),
    )
