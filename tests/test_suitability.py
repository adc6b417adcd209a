"""
Tests for the suitability evaluator.

All tests use pure domain objects; no IO.
"""

from dataclasses import replace

import pytest

from riskfit.domain.risk.entities import (
    AssetAllocation,
    Holding,
    InvestmentHorizon,
    PortfolioSnapshot,
    RiskCategory,
    RiskProfile,
    SecurityKind,
)
from riskfit.domain.risk.errors import RiskProfileNotFoundError
from riskfit.domain.risk.reference_data import RECOMMENDED_ALLOCATIONS, RISK_LIMITS
from riskfit.domain.risk.results import DimensionStatus, SuitabilityRating
from riskfit.domain.risk.suitability import (
    SuitabilityEvaluator,
    SuitabilityInputs,
    derive_allocation,
)


def _profile(category: RiskCategory = RiskCategory.MODERATE) -> RiskProfile:
    return RiskProfile(
        investor_id="INV-001",
        risk_category=category,
        composite_risk_score=60,
        risk_tolerance_score=60,
        risk_capacity_score=70,
        recommended_allocation=RECOMMENDED_ALLOCATIONS[category],
        risk_limits=RISK_LIMITS[category],
    )


def _inputs(**overrides) -> SuitabilityInputs:
    """Inputs that sit comfortably inside a MODERATE profile."""
    values = dict(
        volatility=17.0,
        max_drawdown=-20.0,
        asset_allocation=AssetAllocation(equities=60, fixed_income=30, alternatives=5, cash=5),
        top_holding_weight=8.0,
        sector_breakdown={"TECHNOLOGY": 20.0, "HEALTHCARE": 15.0},
    )
    values.update(overrides)
    return SuitabilityInputs(**values)


class TestEvaluate:
    """Overall suitability verdicts."""

    def test_highly_suitable(self):
        result = SuitabilityEvaluator().evaluate(_profile(), InvestmentHorizon.LONG_TERM, _inputs())

        assert [d.score for d in result.dimensions.values()] == [85, 90, 95, 85]
        assert result.average_score == pytest.approx(88.75)
        assert result.overall_score == 89
        assert result.overall_rating is SuitabilityRating.HIGHLY_SUITABLE
        assert result.required_actions == ()
        assert not result.action_required
        assert result.risk_profile.risk_category == "MODERATE"

    def test_not_suitable_lists_every_action(self):
        inputs = _inputs(
            volatility=25.0,
            max_drawdown=-30.0,
            asset_allocation=AssetAllocation(equities=90, fixed_income=5),
            top_holding_weight=30.0,
            sector_breakdown={"TECHNOLOGY": 60.0},
        )
        result = SuitabilityEvaluator().evaluate(
            _profile(RiskCategory.CONSERVATIVE), InvestmentHorizon.SHORT_TERM, inputs
        )

        assert result.overall_score == 45
        assert result.overall_rating is SuitabilityRating.NOT_SUITABLE
        assert result.action_required
        assert result.required_actions == (
            "Address concentration risk",
            "Reduce portfolio volatility to match risk tolerance",
            "Rebalance to recommended asset allocation",
            "Lower portfolio volatility to suit the investment time horizon",
        )
        assert result.to_dict()["action_required"] is True

    def test_missing_profile(self):
        with pytest.raises(RiskProfileNotFoundError):
            SuitabilityEvaluator().evaluate(None, InvestmentHorizon.LONG_TERM, _inputs(), "INV-404")

    def test_inactive_profile(self):
        closed = replace(_profile(), is_active=False)
        with pytest.raises(RiskProfileNotFoundError):
            SuitabilityEvaluator().evaluate(closed, InvestmentHorizon.LONG_TERM, _inputs())

    def test_missing_drawdown_uses_default(self):
        result = SuitabilityEvaluator().evaluate(
            _profile(), InvestmentHorizon.LONG_TERM, _inputs(max_drawdown=None)
        )
        assert result.risk_alignment.score == 85


class TestRate:
    """Rating bands are closed on the lower edge."""

    @pytest.mark.parametrize(
        "average, expected",
        [
            (80, SuitabilityRating.HIGHLY_SUITABLE),
            (79.99, SuitabilityRating.SUITABLE),
            (70, SuitabilityRating.SUITABLE),
            (60, SuitabilityRating.SUITABLE_WITH_CAVEATS),
            (50, SuitabilityRating.REVIEW_REQUIRED),
            (49.9, SuitabilityRating.NOT_SUITABLE),
        ],
    )
    def test_bands(self, average, expected):
        rating, recommendation = SuitabilityEvaluator.rate(average)
        assert rating is expected
        assert recommendation


class TestDimensions:
    """Individual dimension scorers."""

    def test_risk_alignment_tiers(self):
        assert SuitabilityEvaluator.risk_alignment(20, 18, -25, 25).score == 85
        assert SuitabilityEvaluator.risk_alignment(22, 18, -25, 25).status is DimensionStatus.MINOR_DEVIATION
        assert SuitabilityEvaluator.risk_alignment(24, 18, -25, 25).score == 45

    def test_allocation_minor_deviation_detail(self):
        result = SuitabilityEvaluator.allocation_alignment(
            AssetAllocation(equities=70, fixed_income=22),
            RECOMMENDED_ALLOCATIONS[RiskCategory.MODERATE],
        )
        assert result.score == 72
        assert result.detail == "Equity allocation 10% above recommended level"
        assert result.equity_gap == 10
        assert result.fixed_income_gap == -8

    def test_allocation_significant_deviation(self):
        result = SuitabilityEvaluator.allocation_alignment(
            AssetAllocation(equities=40, fixed_income=50),
            RECOMMENDED_ALLOCATIONS[RiskCategory.MODERATE],
        )
        assert result.status is DimensionStatus.SIGNIFICANT_DEVIATION

    def test_concentration_cases(self):
        check = SuitabilityEvaluator.concentration_compliance
        assert check(20, {"TECHNOLOGY": 30}, 25).score == 95
        assert check(26, {"TECHNOLOGY": 30}, 25).status is DimensionStatus.MINOR_NON_COMPLIANT
        sector_only = check(20, {"TECHNOLOGY": 31}, 25)
        assert (sector_only.score, sector_only.detail) == (45, "Sector concentration limit breached")
        assert check(26, {"TECHNOLOGY": 31}, 25).detail == "Multiple concentration limits breached"

    @pytest.mark.parametrize(
        "horizon, volatility, score",
        [
            (InvestmentHorizon.LONG_TERM, 40, 85),
            (InvestmentHorizon.MEDIUM_TERM, 20, 80),
            (InvestmentHorizon.MEDIUM_TERM, 21, 65),
            (InvestmentHorizon.SHORT_TERM, 15, 75),
            (InvestmentHorizon.SHORT_TERM, 16, 40),
        ],
    )
    def test_time_horizon(self, horizon, volatility, score):
        assert SuitabilityEvaluator.time_horizon_fit(horizon, volatility).score == score


class TestDeriveAllocation:
    """Actual allocation derived from holdings when none is supplied."""

    def test_from_holdings(self):
        portfolio = PortfolioSnapshot(
            total_value=100_000,
            holdings=(
                Holding("VTI", SecurityKind.EQUITY, "BROAD", 50_000, 50),
                Holding("VFIAX", SecurityKind.FUND, None, 20_000, 20),
                Holding("AGG", SecurityKind.BOND, None, 25_000, 25),
                Holding("MMF", SecurityKind.CASH, None, 5_000, 5),
            ),
            cash_position=5_000,
        )
        allocation = derive_allocation(portfolio)
        assert allocation.equities == 70
        assert allocation.fixed_income == 25
        assert allocation.cash == 10

    def test_supplied_allocation_wins(self):
        supplied = AssetAllocation(equities=55, fixed_income=35, alternatives=5, cash=5)
        portfolio = PortfolioSnapshot(
            total_value=10_000,
            holdings=(Holding("VTI", SecurityKind.EQUITY, None, 10_000, 100),),
            asset_allocation=supplied,
        )
        assert derive_allocation(portfolio) is supplied
