"""Tests for the print pricing engine."""

import pytest

from reporthub.services.pricing import PriceEngine


@pytest.fixture
def engine():
    return PriceEngine()


# ---------------------------------------------------------------------------
# Printing cost
# ---------------------------------------------------------------------------

class TestPrintingCost:
    @pytest.mark.parametrize("pages", [1, 7, 20, 21, 30, 150])
    def test_double_sided_is_one_per_page(self, engine, pages):
        assert engine.printing_cost(pages, "double") == pages

    @pytest.mark.parametrize("pages", [1, 10, 20])
    def test_single_sided_up_to_twenty(self, engine, pages):
        assert engine.printing_cost(pages, "single") == 2 * pages

    @pytest.mark.parametrize("pages", [21, 30, 40, 99])
    def test_single_sided_bulk_rate(self, engine, pages):
        assert engine.printing_cost(pages, "single") == pytest.approx(1.5 * pages)

    def test_bulk_boundary(self, engine):
        """20 pages is still the per-page rate; 21 switches to the bulk rate."""
        assert engine.printing_cost(20, "single") == 40
        assert engine.printing_cost(21, "single") == pytest.approx(31.5)


class TestAddOns:
    @pytest.mark.parametrize("binding,cover,expected", [
        (False, False, 0),
        (False, True, 3),
        (True, False, 5),
        (True, True, 8),
    ])
    def test_addon_combinations(self, engine, binding, cover, expected):
        assert engine.addons_cost(binding, cover) == expected


class TestDeliveryCharge:
    def test_threshold_is_strictly_above_fifty(self, engine):
        assert engine.delivery_charge(50) == 15
        assert engine.delivery_charge(50.5) == 0
        assert engine.delivery_charge(51) == 0

    def test_evaluated_on_pre_delivery_subtotal(self, engine):
        """Subtotal 38 pays delivery even though the total ends above 50."""
        q = engine.quote(30, "double", True, True)
        assert q.subtotal == 38
        assert q.delivery_charge == 15
        assert q.total > 50


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------

class TestQuoteScenarios:
    def test_thirty_pages_double_with_addons(self, engine):
        q = engine.quote(30, "double", binding=True, cover=True)
        assert (q.printing_cost, q.addons_cost, q.subtotal, q.delivery_charge, q.total) == (30, 8, 38, 15, 53)

    def test_ten_pages_single_no_addons(self, engine):
        q = engine.quote(10, "single", binding=False, cover=False)
        assert (q.printing_cost, q.addons_cost, q.subtotal, q.delivery_charge, q.total) == (20, 0, 20, 15, 35)

    def test_forty_pages_single_free_delivery(self, engine):
        q = engine.quote(40, "single", binding=True, cover=True)
        assert q.printing_cost == 60
        assert q.addons_cost == 8
        assert q.subtotal == 68
        assert q.delivery_charge == 0
        assert q.total == 68

    def test_total_invariant(self, engine):
        for pages in (1, 19, 20, 21, 42, 80):
            for side in ("single", "double"):
                q = engine.quote(pages, side, True, False)
                assert q.total == q.printing_cost + q.addons_cost + q.delivery_charge

    def test_callback_receives_total(self, engine):
        seen = []
        q = engine.quote(10, "single", False, False, on_price_change=seen.append)
        assert seen == [q.total] == [35]

    def test_deterministic(self, engine):
        assert engine.quote(25, "single", True, True) == engine.quote(25, "single", True, True)

    def test_as_dict(self, engine):
        data = engine.quote(30, "double").as_dict()
        assert data["total"] == 53
        assert data["print_side"] == "double"


class TestOrderTotal:
    def test_flat_delivery_on_report_price(self, engine):
        totals = engine.order_total(53)
        assert totals == {"report_price": 53, "delivery_charge": 50, "total_amount": 103}

    @pytest.mark.parametrize("price", [20, 50, 68, 500])
    def test_order_delivery_ignores_threshold(self, engine, price):
        assert engine.order_total(price)["delivery_charge"] == 50
