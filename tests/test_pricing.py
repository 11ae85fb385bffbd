"""
TeklifSatis - Fiyat Hesaplama Testleri

Test edilen fonksiyonlar (teklifsatis.services.pricing):
    round_money, line_total, override_payable, compute_totals,
    totals_for_lines, totals_for_override, format_currency
"""

from decimal import Decimal

import pytest

from teklifsatis.exceptions import ValidationError
from teklifsatis.schemas.quote import QuoteLineCreate
from teklifsatis.services import pricing


class TestRounding:

    def test_half_up(self):
        assert pricing.round_money(Decimal("0.005")) == Decimal("0.01")
        assert pricing.round_money(Decimal("2.675")) == Decimal("2.68")
        assert pricing.round_money(Decimal("2.674")) == Decimal("2.67")

    def test_rounds_once_at_document_level(self):
        """Uc kalem 0.333: satir bazinda yuvarlansa 0.99, belge seviyesinde 1.00."""
        lines = [
            QuoteLineCreate(product_name=f"Kalem {i}", quantity=1, unit_price=Decimal("1.00"),
                            discount_percent=Decimal("66.7"))
            for i in range(3)
        ]
        totals = pricing.totals_for_lines(lines)
        assert totals.subtotal == Decimal("1.00")
        assert pricing.detailed_subtotal(lines) == Decimal("0.999")


class TestDetailedMode:

    def test_line_total(self):
        assert pricing.line_total(2, Decimal("100"), Decimal("10")) == Decimal("180")

    def test_quote_totals(self):
        """2 adet x 100, %10 iskonto -> 180 + 36 KDV = 216."""
        lines = [QuoteLineCreate(product_name="Tornavida", quantity=2,
                                 unit_price=Decimal("100"), discount_percent=Decimal("10"))]
        totals = pricing.totals_for_lines(lines)
        assert totals.subtotal == Decimal("180.00")
        assert totals.vat == Decimal("36.00")
        assert totals.grand_total == Decimal("216.00")

    def test_no_discount(self):
        assert pricing.net_unit_price(Decimal("49.90")) == Decimal("49.90")

    @pytest.mark.parametrize("discount", [Decimal("-1"), Decimal("100.5")])
    def test_discount_out_of_range(self, discount):
        with pytest.raises(ValidationError):
            pricing.line_total(1, Decimal("10"), discount)

    def test_negative_price(self):
        with pytest.raises(ValidationError):
            pricing.net_unit_price(Decimal("-5"))

    def test_full_discount_is_zero(self):
        assert pricing.line_total(3, Decimal("10"), Decimal("100")) == Decimal("0")

    @pytest.mark.parametrize("list_price", [Decimal("0"), Decimal("0.01"), Decimal("49.90"), Decimal("1250")])
    def test_net_price_never_rises_with_discount(self, list_price):
        discounts = [Decimal(d) for d in ("0", "0.5", "5", "12.5", "33.33", "50", "99.99", "100")]
        prices = [pricing.net_unit_price(list_price, d) for d in discounts]
        assert prices[0] == list_price
        assert all(later <= earlier for earlier, later in zip(prices, prices[1:]))


class TestGrandTotalMode:

    def test_override_with_discount(self):
        assert pricing.override_payable(Decimal("500"), Decimal("10")) == Decimal("450")

    def test_override_without_discount(self):
        assert pricing.override_payable(Decimal("500"), None) == Decimal("500")

    def test_override_totals_include_vat(self):
        totals = pricing.totals_for_override(Decimal("500"), Decimal("10"))
        assert totals.subtotal == Decimal("450.00")
        assert totals.vat == Decimal("90.00")
        assert totals.grand_total == Decimal("540.00")


class TestVatRate:

    def test_vat_rate_from_settings(self, monkeypatch):
        monkeypatch.setattr(pricing.settings, "VAT_RATE", Decimal("0.10"))
        totals = pricing.compute_totals(Decimal("100"))
        assert totals.vat == Decimal("10.00")
        assert totals.grand_total == Decimal("110.00")


class TestFormatCurrency:

    def test_symbols(self):
        assert pricing.format_currency(Decimal("1234.5"), "EUR") == "€1,234.50"
        assert pricing.format_currency(Decimal("10"), "TRY") == "₺10.00"
        assert pricing.format_currency(Decimal("10"), "usd") == "$10.00"

    def test_unknown_currency_falls_back_to_dollar(self):
        assert pricing.format_currency(Decimal("10"), "GBP") == "$10.00"
        assert pricing.format_currency(Decimal("10"), None) == "$10.00"
