"""Tests for nestegg.financial.projection.interpolator."""

from datetime import date, timedelta

import pytest

from nestegg.financial.models import FundingPlan, PriceHistory, ProjectionConfig, Transaction
from nestegg.financial.projection.contributions import AVG_DAYS_PER_MONTH
from nestegg.financial.projection.interpolator import ProjectionModel, current_prices


def _build(transactions, today, **config):
    return ProjectionModel.build(transactions, today, ProjectionConfig(**config), PriceHistory())


class TestReferencePoints:
    def test_single_holding_scenario(self, stock_buy, today):
        end = today + timedelta(days=365)
        model = _build([stock_buy], today, projection_date=end, target_prices={"vti": 200})

        assert model.today_net_worth == 1500
        assert model.projected_end_net_worth == 2000
        assert model.net_worth_at(today + timedelta(days=182)) == pytest.approx(1750, abs=1)

    def test_exact_value_at_end_date(self, stock_buy, today):
        end = today + timedelta(days=1000)
        model = _build([stock_buy], today, projection_date=end, target_prices={"vti": 173.37})
        assert model.net_worth_at(end) == model.projected_end_net_worth

    def test_progress_bounds(self, stock_buy, today):
        end = today + timedelta(days=365)
        model = _build([stock_buy], today, projection_date=end, target_prices={"vti": 200})

        assert model.progress(today) == 0
        assert model.progress(end) == 1
        assert model.progress(end + timedelta(days=30)) == 1
        assert model.net_worth_at(today) == model.today_net_worth

    def test_no_projection(self, stock_buy, today):
        model = _build([stock_buy], today)
        assert model.end is None
        assert model.projected_end_net_worth is None
        assert model.net_worth_at(today + timedelta(days=10)) == 1500

    def test_past_projection_date_means_no_projection(self, stock_buy, today):
        model = _build([stock_buy], today, projection_date=today - timedelta(days=1))
        assert model.end is None

    def test_currency_like_does_not_appreciate(self, cash, today):
        tx = Transaction("c", cash, quantity=500, purchase_price=1, purchase_date=date(2025, 1, 1))
        model = _build(
            [tx],
            today,
            projection_date=today + timedelta(days=3650),
            target_prices={"cash": 3},
            funding=FundingPlan(enabled=True, monthly_amount=100),
        )
        assert model.today_net_worth == 500
        assert model.projected_end_net_worth == 500

    def test_missing_target_keeps_current_value(self, stock_buy, today):
        model = _build([stock_buy], today, projection_date=today + timedelta(days=365))
        assert model.projected_end_net_worth == 1500

    def test_future_dated_transactions_not_held_today(self, stock, stock_buy, today):
        later = Transaction("later", stock, quantity=1, purchase_price=100, purchase_date=today + timedelta(days=5))
        model = _build([stock_buy, later], today, projection_date=today + timedelta(days=365))
        assert model.today_net_worth == 1500


class TestFunding:
    def test_contributions_grow_with_target_ratio(self, stock_buy, today):
        end = today + timedelta(days=365)
        model = _build(
            [stock_buy],
            today,
            projection_date=end,
            target_prices={"vti": 200},
            funding=FundingPlan(enabled=True, monthly_amount=100),
        )
        contributed = 100 * 365 / AVG_DAYS_PER_MONTH
        assert model.projected_end_net_worth == pytest.approx(2000 + contributed * 200 / 150)

    def test_split_by_holdings_weight(self, stock_buy, crypto, cash, today):
        btc = Transaction(
            "b", crypto, quantity=1, purchase_price=20_000, purchase_date=date(2025, 2, 1), current_price=3000
        )
        dollars = Transaction("c", cash, quantity=10_000, purchase_price=1, purchase_date=date(2025, 2, 1))
        end = today + timedelta(days=365)
        model = _build(
            [stock_buy, btc, dollars],
            today,
            projection_date=end,
            funding=FundingPlan(enabled=True, monthly_amount=100),
        )
        contributed = 100 * 365 / AVG_DAYS_PER_MONTH

        assert model.asset_end_worth["vti"] == pytest.approx(1500 + contributed / 3)
        assert model.asset_end_worth["btc"] == pytest.approx(3000 + contributed * 2 / 3)
        assert model.asset_end_worth["cash"] == 10_000
        assert model.projected_end_net_worth == pytest.approx(14_500 + contributed)

    def test_progressive_funding(self, stock_buy, today):
        end = today + timedelta(days=61)
        plan = FundingPlan(enabled=True, monthly_amount=100, progressive_growth=True, annual_growth_rate=0.12)
        model = _build([stock_buy], today, projection_date=end, funding=plan)
        # 61 days is just over two months: three started months
        assert model.projected_end_net_worth == pytest.approx(1500 + 100 + 101 + 102.01)


class TestAssetBreakdown:
    def test_never_negative_while_total_is(self, stock, today):
        buy = Transaction("b", stock, quantity=2, purchase_price=100, purchase_date=date(2025, 1, 1), current_price=150)
        sale = Transaction(
            "s", stock, quantity=-10, purchase_price=100, purchase_date=date(2025, 2, 1), current_price=150
        )
        end = today + timedelta(days=365)
        model = _build([buy, sale], today, projection_date=end, target_prices={"vti": 200})

        assert model.today_net_worth == -1200
        assert model.projected_end_net_worth == -1600
        mid = today + timedelta(days=100)
        assert model.net_worth_at(mid) < 0
        assert model.asset_worth_at(mid)["vti"] >= 0
        assert model.asset_worth_at(end)["vti"] == 400

    def test_asset_not_held_today_stays_zero(self, crypto, stock_buy, today):
        gone = Transaction(
            "g", crypto, quantity=1, purchase_price=100, purchase_date=date(2025, 1, 1), current_worth=0
        )
        end = today + timedelta(days=365)
        model = _build([stock_buy, gone], today, projection_date=end, target_prices={"btc": 1000})

        for offset in (0, 100, 365):
            assert model.asset_worth_at(today + timedelta(days=offset))["btc"] == 0

    def test_flat_when_targets_equal_current(self, stock_buy, crypto, today):
        btc = Transaction(
            "b", crypto, quantity=0.5, purchase_price=20_000, purchase_date=date(2025, 2, 1), current_price=60_000
        )
        end = today + timedelta(days=730)
        model = _build([stock_buy, btc], today, projection_date=end, target_prices={"vti": 150, "btc": 60_000})

        for offset in (1, 200, 500, 730):
            day = today + timedelta(days=offset)
            assert model.net_worth_at(day) == pytest.approx(31_500)
            assert model.asset_worth_at(day) == {"vti": pytest.approx(1500), "btc": pytest.approx(30_000)}


class TestCurrentPrices:
    def test_latest_transaction_wins(self, stock):
        txs = [
            Transaction("a", stock, quantity=1, purchase_date=date(2025, 1, 1), current_price=100),
            Transaction("b", stock, quantity=2, purchase_date=date(2025, 2, 1), current_value=300),
        ]
        assert current_prices(txs) == {"vti": 150}
