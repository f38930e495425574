# tests/test_extractors.py

"""Tests for the price extraction strategies and their fallback order."""

import math
from typing import Any
import unittest

from filament_prices.extractors.base import (
    OfferCandidate,
    collect_offer_candidates,
    to_number,
)
from filament_prices.extractors.regex import RegexPriceExtractor
from filament_prices.extractors.soup import SoupPriceExtractor
from filament_prices.models import PriceObservation
from tests.fakes import deeply_nested_ld_page, ld_json_page


def _ld(payload: str) -> str:
    return f'<script type="application/ld+json">{payload}</script>'


class TestToNumber(unittest.TestCase):
    """Loose numeric coercion of scraped values."""

    def test_numeric_strings(self) -> None:
        self.assertEqual(to_number("19.99"), 19.99)
        self.assertEqual(to_number(" 7 "), 7.0)
        self.assertEqual(to_number("1e2"), 100.0)
        self.assertEqual(to_number(".5"), 0.5)

    def test_numbers_pass_through(self) -> None:
        self.assertEqual(to_number(3), 3.0)
        self.assertEqual(to_number(2.5), 2.5)
        self.assertEqual(to_number(True), 1.0)

    def test_blank_string_is_zero(self) -> None:
        self.assertEqual(to_number(""), 0.0)
        self.assertEqual(to_number("   "), 0.0)

    def test_unparseable_is_nan(self) -> None:
        for value in ("$5", "1,299.00", "abc", None, {"a": 1}, "1_000"):
            with self.subTest(value=value):
                self.assertTrue(math.isnan(to_number(value)))


class TestOfferCandidates(unittest.TestCase):
    """The JSON-LD tree walk that finds offer-like objects."""

    def test_product_offers_come_first(self) -> None:
        tree = {
            "@type": "Product",
            "offers": {"@type": "Offer", "price": "10.00", "priceCurrency": "EUR"},
        }
        candidates = collect_offer_candidates(tree)
        # Once as the product's offers, once as a priced object in its own right.
        self.assertEqual(len(candidates), 2)
        self.assertEqual(candidates[0].price, "10.00")
        self.assertEqual(candidates[0].price_currency, "EUR")

    def test_offers_array_is_flattened(self) -> None:
        tree = {
            "@type": "Product",
            "offers": [{"price": 5}, {"price": 6}],
        }
        prices = [c.price for c in collect_offer_candidates(tree)]
        self.assertEqual(prices[:2], [5, 6])

    def test_type_list_matches_product(self) -> None:
        tree = {"@type": ["Thing", "Product"], "offers": {"priceAmount": "4"}}
        candidates = collect_offer_candidates(tree)
        self.assertEqual(candidates[0].price_amount, "4")

    def test_nested_graph_is_walked(self) -> None:
        tree = {
            "@graph": [
                {"@type": "WebPage"},
                {"@type": "ProductGroup", "offers": {"price": "8.50"}},
            ]
        }
        candidates = collect_offer_candidates(tree)
        self.assertEqual(candidates[0].price, "8.50")

    def test_walk_is_pre_order(self) -> None:
        tree = [{"price": 1, "child": {"price": 2}}, {"price": 3}]
        self.assertEqual([c.price for c in collect_offer_candidates(tree)], [1, 2, 3])

    def test_deep_nesting_is_walked_without_recursion(self) -> None:
        tree: Any = {"@type": "Product", "offers": {"price": "3.00"}}
        for _ in range(5000):
            tree = [tree]
        candidates = collect_offer_candidates(tree)
        self.assertEqual(candidates[0].price, "3.00")

    def test_scalars_and_unpriced_objects_yield_nothing(self) -> None:
        self.assertEqual(collect_offer_candidates("Product"), [])
        self.assertEqual(collect_offer_candidates({"@type": "Organization", "name": "x"}), [])

    def test_normalize_uses_price_specification(self) -> None:
        candidate = OfferCandidate.from_mapping(
            {"priceSpecification": {"price": "12.5", "priceCurrency": "CAD"}}
        )
        self.assertEqual(candidate.normalize(), PriceObservation(12.5, "CAD"))

    def test_normalize_defaults_currency(self) -> None:
        candidate = OfferCandidate.from_mapping({"price": 3})
        self.assertEqual(candidate.normalize(), PriceObservation(3.0, "USD"))

    def test_normalize_non_numeric_is_empty(self) -> None:
        candidate = OfferCandidate.from_mapping({"price": "call us"})
        self.assertTrue(candidate.normalize().is_empty)


class TestRegexPriceExtractor(unittest.TestCase):
    """End-to-end extraction over page markup."""

    extractor_cls: type = RegexPriceExtractor

    def setUp(self) -> None:
        self.extractor = self.extractor_cls()

    # ── Structured data ──────────────────────────────────

    def test_json_ld_product_offer(self) -> None:
        obs = self.extractor.extract(ld_json_page("19.99", "USD"))
        self.assertEqual(obs, PriceObservation(19.99, "USD"))

    def test_json_ld_array_payload(self) -> None:
        markup = _ld('[{"@type": "BreadcrumbList"}, {"@type": "Product", "offers": {"price": 21, "priceCurrency": "GBP"}}]')
        self.assertEqual(self.extractor.extract(markup), PriceObservation(21.0, "GBP"))

    def test_malformed_block_is_skipped(self) -> None:
        markup = _ld("{not json") + _ld('{"@type": "Product", "offers": {"price": "9.99"}}')
        self.assertEqual(self.extractor.extract(markup), PriceObservation(9.99, "USD"))

    def test_malformed_block_falls_through_to_meta(self) -> None:
        markup = _ld("{broken") + '<meta property="product:price:amount" content="24.00">'
        self.assertEqual(self.extractor.extract(markup), PriceObservation(24.0, "USD"))

    def test_deeply_nested_block_falls_through_to_meta(self) -> None:
        markup = deeply_nested_ld_page(600, tail='<meta property="product:price:amount" content="5.00">')
        self.assertEqual(self.extractor.extract(markup), PriceObservation(5.0, "USD"))

    def test_non_standard_json_constants_make_block_malformed(self) -> None:
        meta = '<meta property="product:price:amount" content="5.00">'
        for literal in ("NaN", "Infinity", "-Infinity"):
            with self.subTest(literal=literal):
                markup = _ld('{"@type": "Product", "offers": {"price": "9.00"}, "ratingValue": %s}' % literal) + meta
                self.assertEqual(self.extractor.extract(markup), PriceObservation(5.0, "USD"))

    def test_zero_structured_price_is_not_a_match(self) -> None:
        markup = _ld('{"@type": "Product", "offers": {"price": "0"}}') + (
            '<meta property="og:price:amount" content="5.00">'
        )
        self.assertEqual(self.extractor.extract(markup), PriceObservation(5.0, "USD"))

    def test_structured_data_beats_meta(self) -> None:
        markup = ld_json_page("19.99") + '<meta property="product:price:amount" content="29.99">'
        self.assertEqual(self.extractor.extract(markup), PriceObservation(19.99, "USD"))

    # ── Meta tags ────────────────────────────────────────

    def test_meta_amount_defaults_to_usd(self) -> None:
        markup = '<head><meta property="product:price:amount" content="29.99"></head>'
        self.assertEqual(self.extractor.extract(markup), PriceObservation(29.99, "USD"))

    def test_meta_currency_tag(self) -> None:
        markup = (
            '<meta property="og:price:amount" content="31.50">'
            '<meta property="og:price:currency" content="EUR">'
        )
        self.assertEqual(self.extractor.extract(markup), PriceObservation(31.5, "EUR"))

    def test_meta_strips_symbols_and_commas(self) -> None:
        markup = '<meta name="twitter:data1" content="$1,299.00">'
        self.assertEqual(self.extractor.extract(markup), PriceObservation(1299.0, "USD"))

    def test_meta_priority_order(self) -> None:
        markup = (
            '<meta name="twitter:data1" content="$1.00">'
            '<meta property="product:price:amount" content="2.00">'
        )
        self.assertEqual(self.extractor.extract(markup).price, 2.0)

    def test_meta_non_finite_keeps_currency(self) -> None:
        markup = (
            '<meta property="product:price:amount" content="1.2.3">'
            '<meta property="product:price:currency" content="AUD">'
        )
        self.assertEqual(self.extractor.extract(markup), PriceObservation(None, "AUD"))

    # ── Text heuristic ───────────────────────────────────

    def test_price_near_dollar_amount(self) -> None:
        markup = "<p>Today's price: great deal, only $14.50 today!</p>"
        self.assertEqual(self.extractor.extract(markup), PriceObservation(14.50, "USD"))

    def test_whole_dollar_amount(self) -> None:
        markup = "<div>Price $ 25</div>"
        self.assertEqual(self.extractor.extract(markup), PriceObservation(25.0, "USD"))

    def test_dollar_amount_too_far_away(self) -> None:
        markup = "price" + ("x" * 150) + "$9.99"
        self.assertEqual(self.extractor.extract(markup), PriceObservation())

    def test_dollar_amount_on_next_line(self) -> None:
        markup = "price\n$9.99"
        self.assertEqual(self.extractor.extract(markup), PriceObservation())

    def test_oversized_dollar_amount_has_no_price(self) -> None:
        obs = self.extractor.extract("price $" + "9" * 400)
        self.assertEqual(obs, PriceObservation(None, "USD"))

    # ── Misses ───────────────────────────────────────────

    def test_nothing_recognisable(self) -> None:
        obs = self.extractor.extract("<html><body>Out of stock</body></html>")
        self.assertTrue(obs.is_empty)
        self.assertEqual(obs.to_dict(), {})

    def test_same_markup_same_result(self) -> None:
        markup = ld_json_page("17.25", "USD")
        self.assertEqual(self.extractor.extract(markup), self.extractor.extract(markup))


class TestSoupPriceExtractor(TestRegexPriceExtractor):
    """The BeautifulSoup extractor agrees with the regex one on the same pages."""

    extractor_cls = SoupPriceExtractor

    def test_attribute_order_does_not_matter(self) -> None:
        markup = '<meta content="18.00" property="product:price:amount">'
        self.assertEqual(self.extractor.extract(markup), PriceObservation(18.0, "USD"))
