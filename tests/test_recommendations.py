"""
Tests for the rule-based recommendation generator.

All tests use pure domain objects; no IO.
"""

from datetime import date, datetime, timezone

import pytest

from riskfit.domain.risk.concentration import ConcentrationAnalyzer
from riskfit.domain.risk.entities import (
    AssetAllocation,
    Holding,
    InvestmentHorizon,
    PortfolioSnapshot,
    RiskCategory,
    RiskProfile,
    SecurityKind,
)
from riskfit.domain.risk.portfolio_risk import PortfolioRiskCalculator
from riskfit.domain.risk.recommendations import (
    DEFAULT_RULES,
    RecommendationContext,
    RecommendationGenerator,
    RecommendationRule,
    summarize,
)
from riskfit.domain.risk.reference_data import RECOMMENDED_ALLOCATIONS, RISK_LIMITS
from riskfit.domain.risk.results import Priority, RecommendationCategory
from riskfit.domain.risk.suitability import SuitabilityEvaluator, SuitabilityInputs

NOW = datetime(2024, 6, 1, 9, 30, tzinfo=timezone.utc)


def _holding(symbol: str, weight: float, sector: str = "TECHNOLOGY", vol: float | None = None) -> Holding:
    return Holding(symbol, SecurityKind.EQUITY, sector, weight * 1_000, weight, annualized_volatility=vol)


def _concentration():
    holdings = [
        _holding("AAPL", 22.5),
        _holding("MSFT", 12),
        _holding("JNJ", 10, "HEALTHCARE"),
        _holding("JPM", 10, "FINANCIAL"),
        _holding("XOM", 8, "ENERGY"),
        _holding("KO", 7.5, "CONSUMER_STAPLES"),
        _holding("PG", 15, "CONSUMER_STAPLES"),
        _holding("CL", 15, "CONSUMER_STAPLES"),
    ]
    return ConcentrationAnalyzer().analyze(holdings)


def _volatile_risk():
    portfolio = PortfolioSnapshot(100_000, (_holding("ARKK", 100, vol=25),))
    return PortfolioRiskCalculator().calculate(portfolio)


def _calm_risk():
    portfolio = PortfolioSnapshot(100_000, (_holding("KO", 100, "CONSUMER_STAPLES", vol=12),))
    return PortfolioRiskCalculator().calculate(portfolio)


def _suitability(equities: float, fixed_income: float):
    profile = RiskProfile(
        investor_id="INV-001",
        risk_category=RiskCategory.MODERATE,
        composite_risk_score=55,
        risk_tolerance_score=55,
        risk_capacity_score=60,
        recommended_allocation=RECOMMENDED_ALLOCATIONS[RiskCategory.MODERATE],
        risk_limits=RISK_LIMITS[RiskCategory.MODERATE],
    )
    inputs = SuitabilityInputs(
        volatility=17.0,
        asset_allocation=AssetAllocation(equities=equities, fixed_income=fixed_income),
    )
    return SuitabilityEvaluator().evaluate(profile, InvestmentHorizon.LONG_TERM, inputs)


class TestRules:
    """Each rule fires only on its own condition."""

    def test_rule_order(self):
        assert [r.name for r in DEFAULT_RULES] == [
            "single_position_breach",
            "sector_breach",
            "equity_allocation_gap",
            "elevated_volatility",
            "income_suggestion",
        ]

    def test_all_rules_fire(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(
                portfolio_risk=_volatile_risk(),
                concentration=_concentration(),
                suitability=_suitability(75, 15),
            )
        )
        assert [r.rule for r in recommendations] == [
            "single_position_breach",
            "sector_breach",
            "equity_allocation_gap",
            "elevated_volatility",
        ]

    def test_single_position_breach(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(concentration=_concentration())
        )
        single = recommendations[0]
        assert single.category is RecommendationCategory.REBALANCING
        assert single.priority is Priority.HIGH
        assert single.title == "Reduce AAPL Concentration"
        assert single.current_value == 22.5
        assert single.target_value == 10
        assert single.expected_impact["volatility_reduction"] == pytest.approx(1.88)

    def test_sector_breach(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(concentration=_concentration())
        )
        sector = recommendations[1]
        assert sector.category is RecommendationCategory.DIVERSIFICATION
        assert sector.title == "Reduce CONSUMER_STAPLES Sector Exposure"
        assert sector.priority is Priority.MEDIUM
        assert sector.current_value == pytest.approx(37.5)

    def test_equity_allocation_gap(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(suitability=_suitability(75, 15))
        )
        gap = recommendations[0]
        assert gap.title == "Reduce Equity Exposure"
        assert gap.priority is Priority.MEDIUM
        assert gap.description == (
            "Current equity allocation (75%) is 15% above recommended level (60%)"
        )

    def test_small_allocation_gap_is_ignored(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(suitability=_suitability(68, 22))
        )
        assert [r.rule for r in recommendations] == ["income_suggestion"]

    def test_elevated_volatility(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(portfolio_risk=_volatile_risk())
        )
        risk = recommendations[0]
        assert risk.category is RecommendationCategory.RISK_REDUCTION
        assert risk.current_value == 25
        assert risk.target_value == 18
        assert risk.expected_impact["volatility_reduction"] == pytest.approx(7.0)

    def test_calm_portfolio_only_gets_income(self):
        recommendations = RecommendationGenerator().evaluate_rules(
            RecommendationContext(portfolio_risk=_calm_risk())
        )
        assert [r.category for r in recommendations] == [RecommendationCategory.INCOME]
        assert recommendations[0].priority is Priority.LOW

    def test_custom_rule_list(self):
        never = RecommendationRule("never", RecommendationCategory.INCOME, lambda ctx, produced: None)
        generator = RecommendationGenerator(rules=[never])
        assert generator.evaluate_rules(RecommendationContext()) == []


class TestGenerate:
    """Bundling recommendations with the overall assessment."""

    def test_defaults_without_inputs(self):
        bundle = RecommendationGenerator().generate(investor_id="INV-001", now=NOW)
        assert bundle.overall_assessment.suitability_score == 75
        assert bundle.overall_assessment.suitability_rating == "SUITABLE"
        assert len(bundle.recommendations) == 1
        assert bundle.status == "ACTIVE"

    def test_next_review_date(self):
        bundle = RecommendationGenerator().generate(now=NOW)
        assert bundle.next_review_date == date(2024, 8, 30)
        assert RecommendationGenerator(next_review_days=30).next_review_date(NOW) == date(2024, 7, 1)

    def test_uses_suitability_verdict(self):
        suitability = _suitability(75, 15)
        bundle = RecommendationGenerator().generate(suitability=suitability, now=NOW)
        assert bundle.overall_assessment.suitability_score == suitability.overall_score
        assert bundle.overall_assessment.suitability_rating == suitability.overall_rating.value

    def test_serializes(self):
        bundle = RecommendationGenerator().generate(
            portfolio_risk=_volatile_risk(), concentration=_concentration(), now=NOW
        )
        data = bundle.to_dict()
        assert data["next_review_date"] == "2024-08-30"
        assert data["recommendations"][0]["priority"] == "HIGH"


class TestSummarize:
    @pytest.mark.parametrize("count, fragment", [(0, "well-aligned"), (2, "generally aligned"), (3, "requires attention")])
    def test_templates(self, count, fragment):
        assert fragment in summarize(count)
