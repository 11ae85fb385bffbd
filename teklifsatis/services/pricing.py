"""
Fiyat hesaplama.

Iki mod vardir:
- Detayli: her kalem icin net = liste x (1 - iskonto/100), satir = adet x net.
- Genel toplam: anlasilan toplam ve istege bagli tek indirim orani.

Iki mod da ayni KDV adimina girer. Yuvarlama kalem bazinda degil,
belge seviyesinde yapilir (ROUND_HALF_UP, 2 hane).
"""
from collections.abc import Iterable
from decimal import Decimal, ROUND_HALF_UP

from teklifsatis.config import settings
from teklifsatis.exceptions import ValidationError
from teklifsatis.schemas.document import DocumentTotals

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

SUPPORTED_CURRENCIES = ("TRY", "USD", "EUR")

CURRENCY_SYMBOLS = {
    "USD": "$",
    "EUR": "€",
    "TRY": "₺",
}


def round_money(value: Decimal | int | str) -> Decimal:
    """2 haneye yuvarla, yarim degerler sifirdan uzaga (0.005 -> 0.01)."""
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def validate_discount(discount_percent: Decimal) -> Decimal:
    discount = Decimal(discount_percent or 0)
    if discount < 0 or discount > 100:
        raise ValidationError(f"Iskonto orani 0 ile 100 arasinda olmali: {discount}")
    return discount


def validate_price(price: Decimal, label: str = "Fiyat") -> Decimal:
    value = Decimal(price)
    if value < 0:
        raise ValidationError(f"{label} negatif olamaz: {value}")
    return value


def net_unit_price(list_price: Decimal, discount_percent: Decimal = Decimal("0")) -> Decimal:
    """Indirimli birim fiyat (yuvarlanmamis)."""
    price = validate_price(list_price)
    discount = validate_discount(discount_percent)
    return price * (1 - discount / HUNDRED)


def line_total(
    quantity: int, list_price: Decimal, discount_percent: Decimal = Decimal("0")
) -> Decimal:
    """Satir toplami = adet x net birim fiyat (yuvarlanmamis)."""
    return Decimal(quantity) * net_unit_price(list_price, discount_percent)


def detailed_subtotal(lines: Iterable) -> Decimal:
    """
    Detayli mod ara toplami.
    lines: quantity, unit_price ve discount_percent alanlari olan nesneler
    (QuoteLine, QuoteLineCreate, ...).
    """
    return sum(
        (line_total(line.quantity, line.unit_price, line.discount_percent) for line in lines),
        Decimal("0"),
    )


def override_payable(total: Decimal, discount_percent: Decimal | None = None) -> Decimal:
    """Genel toplam modu: odenecek = toplam x (1 - indirim/100)."""
    amount = validate_price(total, "Genel toplam")
    discount = validate_discount(discount_percent or Decimal("0"))
    return amount * (1 - discount / HUNDRED)


def compute_totals(subtotal: Decimal) -> DocumentTotals:
    """
    Ara toplamdan KDV ve genel toplami hesapla.
    Ara toplam bir kez yuvarlanir; KDV yuvarlanmis ara toplam uzerinden alinir.
    """
    rounded_subtotal = round_money(subtotal)
    vat = round_money(rounded_subtotal * settings.VAT_RATE)
    return DocumentTotals(
        subtotal=rounded_subtotal,
        vat=vat,
        grand_total=round_money(rounded_subtotal + vat),
    )


def totals_for_lines(lines: Iterable) -> DocumentTotals:
    return compute_totals(detailed_subtotal(lines))


def totals_for_override(total: Decimal, discount_percent: Decimal | None = None) -> DocumentTotals:
    return compute_totals(override_payable(total, discount_percent))


def currency_symbol(currency: str | None) -> str:
    return CURRENCY_SYMBOLS.get((currency or "").upper(), "$")


def format_currency(amount: Decimal | int | str, currency: str | None) -> str:
    """Ornek: format_currency(1234.5, "EUR") -> "€1,234.50". Bilinmeyen kod -> "$"."""
    return f"{currency_symbol(currency)}{round_money(amount):,.2f}"
