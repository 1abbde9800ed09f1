"""Unit tests for ADR, RevPAR and occupancy rate helpers."""

from decimal import Decimal

from rentops.services import metrics


class TestRatios:
    def test_adr(self):
        assert metrics.adr(Decimal("5000"), 5) == Decimal("1000")

    def test_adr_without_occupied_days(self):
        assert metrics.adr(Decimal("5000"), 0) == Decimal("0")

    def test_rev_par(self):
        assert metrics.round_money(metrics.rev_par(Decimal("5000"), 30)) == Decimal("166.67")

    def test_rev_par_without_days(self):
        assert metrics.rev_par(Decimal("100"), 0) == Decimal("0")

    def test_occupancy_rate_is_percentage(self):
        assert metrics.occupancy_rate(15, 30) == Decimal("50")
        assert metrics.occupancy_rate(30, 30) == Decimal("100")

    def test_occupancy_rate_without_days(self):
        assert metrics.occupancy_rate(0, 0) == Decimal("0")


class TestRounding:
    def test_money_rounds_half_up(self):
        assert metrics.round_money(Decimal("0.005")) == Decimal("0.01")
        assert metrics.round_money(Decimal("2.345")) == Decimal("2.35")

    def test_rate_rounds_half_up(self):
        assert metrics.round_rate(Decimal("33.35")) == Decimal("33.4")
        assert metrics.round_rate(metrics.occupancy_rate(1, 3)) == Decimal("33.3")
        assert metrics.round_rate(metrics.occupancy_rate(2, 3)) == Decimal("66.7")
