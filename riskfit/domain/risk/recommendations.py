"""
Rule-Based Recommendation Generator.

Synthesizes prioritized, human-readable recommendations from the
portfolio risk, concentration and suitability results.

Rules are an ordered list of independent predicate -> recommendation
functions. Each rule inspects the analysis context and either returns a
Recommendation or None; a rule whose input is missing is skipped.
Adding or removing a rule is a change to ``DEFAULT_RULES`` only.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Callable, Optional, Sequence

from riskfit.domain.risk.numeric import round_half_up
from riskfit.domain.risk.results import (
    ComplianceStatus,
    ConcentrationResult,
    OverallAssessment,
    PortfolioRiskResult,
    Priority,
    Recommendation,
    RecommendationBundle,
    RecommendationCategory,
    SuitabilityResult,
)

logger = logging.getLogger(__name__)

DEFAULT_SUITABILITY_SCORE = 75
DEFAULT_SUITABILITY_RATING = "SUITABLE"
NEXT_REVIEW_DAYS = 90


@dataclass(frozen=True)
class RecommendationContext:
    """Everything the rules may look at. Any part may be absent."""

    portfolio_risk: Optional[PortfolioRiskResult] = None
    concentration: Optional[ConcentrationResult] = None
    suitability: Optional[SuitabilityResult] = None
    elevated_volatility: float = 20.0
    target_volatility: float = 18.0


RuleFn = Callable[[RecommendationContext, Sequence[Recommendation]], Optional[Recommendation]]


@dataclass(frozen=True)
class RecommendationRule:
    """A named rule evaluated at a fixed position in the rule order."""

    name: str
    category: RecommendationCategory
    build: RuleFn = field(repr=False)

    def apply(
        self, context: RecommendationContext, produced: Sequence[Recommendation]
    ) -> Optional[Recommendation]:
        return self.build(context, produced)


def _single_position_breach(
    context: RecommendationContext, produced: Sequence[Recommendation]
) -> Optional[Recommendation]:
    if context.concentration is None:
        return None
    single = context.concentration.single_position
    if single.status is not ComplianceStatus.BREACHED:
        return None
    return Recommendation(
        category=RecommendationCategory.REBALANCING,
        priority=Priority.HIGH if single.breach > 10 else Priority.MEDIUM,
        title=f"Reduce {single.top_holding} Concentration",
        description=(
            f"Consider reducing {single.top_holding} position from "
            f"{single.top_holding_weight:g}% to recommended {single.limit:g}% maximum"
        ),
        current_value=single.top_holding_weight,
        target_value=single.limit,
        expected_impact={
            "volatility_reduction": round_half_up(single.breach * 0.15),
            "concentration_improvement": "HIGH",
        },
        rule="single_position_breach",
    )


def _sector_breach(
    context: RecommendationContext, produced: Sequence[Recommendation]
) -> Optional[Recommendation]:
    if context.concentration is None:
        return None
    sector = context.concentration.sector_concentration
    if sector.status is not ComplianceStatus.BREACHED:
        return None
    return Recommendation(
        category=RecommendationCategory.DIVERSIFICATION,
        priority=Priority.HIGH if sector.breach > 15 else Priority.MEDIUM,
        title=f"Reduce {sector.top_sector} Sector Exposure",
        description=(
            f"Consider reducing {sector.top_sector} sector exposure from "
            f"{sector.top_sector_weight:g}% to recommended {sector.limit:g}% maximum"
        ),
        current_value=sector.top_sector_weight,
        target_value=sector.limit,
        expected_impact={
            "correlation_reduction": 0.15,
            "diversification_benefit": "HIGH",
        },
        rule="sector_breach",
    )


def _equity_allocation_gap(
    context: RecommendationContext, produced: Sequence[Recommendation]
) -> Optional[Recommendation]:
    if context.suitability is None:
        return None
    allocation = context.suitability.allocation_alignment
    if allocation.score >= 80 or allocation.actual is None or allocation.recommended is None:
        return None
    actual = allocation.actual.equities
    recommended = allocation.recommended.equities
    gap = actual - recommended
    if abs(gap) <= 10:
        return None
    direction = "above" if gap > 0 else "below"
    return Recommendation(
        category=RecommendationCategory.REBALANCING,
        priority=Priority.MEDIUM,
        title="Reduce Equity Exposure" if gap > 0 else "Increase Equity Exposure",
        description=(
            f"Current equity allocation ({actual:g}%) is {abs(gap):g}% {direction} "
            f"recommended level ({recommended:g}%)"
        ),
        current_value=actual,
        target_value=recommended,
        expected_impact={
            "risk_alignment_improvement": "MODERATE",
            "profile_alignment": "IMPROVED",
        },
        rule="equity_allocation_gap",
    )


def _elevated_volatility(
    context: RecommendationContext, produced: Sequence[Recommendation]
) -> Optional[Recommendation]:
    if context.portfolio_risk is None:
        return None
    volatility = context.portfolio_risk.portfolio_volatility
    if volatility <= context.elevated_volatility:
        return None
    return Recommendation(
        category=RecommendationCategory.RISK_REDUCTION,
        priority=Priority.MEDIUM,
        title="Consider Adding Defensive Positions",
        description=(
            "Portfolio volatility is elevated. Adding defensive sectors or bonds "
            "could improve risk-adjusted returns"
        ),
        current_value=volatility,
        target_value=context.target_volatility,
        expected_impact={
            "volatility_reduction": round_half_up(volatility - context.target_volatility),
            "sharpe_ratio_improvement": 0.15,
        },
        rule="elevated_volatility",
    )


def _income_suggestion(
    context: RecommendationContext, produced: Sequence[Recommendation]
) -> Optional[Recommendation]:
    if len(produced) >= 3:
        return None
    return Recommendation(
        category=RecommendationCategory.INCOME,
        priority=Priority.LOW,
        title="Consider Dividend-Paying Securities",
        description=(
            "Dividend stocks may provide stability and income while maintaining growth potential"
        ),
        current_value=8.0,
        target_value=15.0,
        expected_impact={"income_increase": 1.2, "volatility_reduction": 0.8},
        rule="income_suggestion",
    )


DEFAULT_RULES: tuple[RecommendationRule, ...] = (
    RecommendationRule("single_position_breach", RecommendationCategory.REBALANCING, _single_position_breach),
    RecommendationRule("sector_breach", RecommendationCategory.DIVERSIFICATION, _sector_breach),
    RecommendationRule("equity_allocation_gap", RecommendationCategory.REBALANCING, _equity_allocation_gap),
    RecommendationRule("elevated_volatility", RecommendationCategory.RISK_REDUCTION, _elevated_volatility),
    RecommendationRule("income_suggestion", RecommendationCategory.INCOME, _income_suggestion),
)


def summarize(count: int) -> str:
    """Overall assessment sentence, templated by recommendation count."""
    if count == 0:
        return (
            "Portfolio is well-aligned with risk profile. "
            "Continue monitoring and maintain current allocation."
        )
    if count <= 2:
        return (
            "Portfolio is generally aligned with risk profile but shows "
            "opportunities for optimization."
        )
    return (
        "Portfolio requires attention to improve alignment with risk profile "
        "and reduce concentration risk."
    )


class RecommendationGenerator:
    """Evaluates the rule list in order and bundles the output."""

    def __init__(
        self,
        rules: Sequence[RecommendationRule] = DEFAULT_RULES,
        next_review_days: int = NEXT_REVIEW_DAYS,
        elevated_volatility: float = 20.0,
        target_volatility: float = 18.0,
    ) -> None:
        self.rules = tuple(rules)
        self.next_review_days = next_review_days
        self.elevated_volatility = elevated_volatility
        self.target_volatility = target_volatility

    def evaluate_rules(self, context: RecommendationContext) -> list[Recommendation]:
        """Apply every rule in order; each sees what earlier rules produced."""
        produced: list[Recommendation] = []
        for rule in self.rules:
            recommendation = rule.apply(context, tuple(produced))
            if recommendation is not None:
                produced.append(recommendation)
        return produced

    def generate(
        self,
        portfolio_risk: Optional[PortfolioRiskResult] = None,
        concentration: Optional[ConcentrationResult] = None,
        suitability: Optional[SuitabilityResult] = None,
        investor_id: Optional[str] = None,
        profile_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> RecommendationBundle:
        """Produce a fresh recommendation bundle.

        Persisting or versioning the bundle is the caller's responsibility.
        """
        now = now or datetime.now(timezone.utc)
        context = RecommendationContext(
            portfolio_risk=portfolio_risk,
            concentration=concentration,
            suitability=suitability,
            elevated_volatility=self.elevated_volatility,
            target_volatility=self.target_volatility,
        )
        recommendations = self.evaluate_rules(context)

        if suitability is not None:
            score, rating = suitability.overall_score, suitability.overall_rating.value
        else:
            score, rating = DEFAULT_SUITABILITY_SCORE, DEFAULT_SUITABILITY_RATING

        logger.info(
            "Generated %d recommendations for investor=%s",
            len(recommendations),
            investor_id,
        )
        return RecommendationBundle(
            investor_id=investor_id,
            profile_id=profile_id,
            generated_at=now,
            overall_assessment=OverallAssessment(
                suitability_score=score,
                suitability_rating=rating,
                summary=summarize(len(recommendations)),
            ),
            recommendations=tuple(recommendations),
            next_review_date=self.next_review_date(now),
        )

    def next_review_date(self, now: datetime) -> date:
        return (now + timedelta(days=self.next_review_days)).date()
