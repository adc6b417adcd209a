"""
Domain service: Portfolio suitability evaluation.

Compares a portfolio's risk, allocation and concentration against an
investor's active RiskProfile along four independent dimensions, then
averages them into an overall rating.

Pure business logic. No framework imports. No IO.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from riskfit.domain.risk.entities import (
    AssetAllocation,
    InvestmentHorizon,
    PortfolioSnapshot,
    RiskProfile,
    SecurityKind,
)
from riskfit.domain.risk.errors import RiskProfileNotFoundError, ValidationError
from riskfit.domain.risk.numeric import round_half_up, round_int
from riskfit.domain.risk.results import (
    AllocationDimensionResult,
    ConcentrationResult,
    DimensionResult,
    DimensionStatus,
    PortfolioRiskResult,
    ProfileSummary,
    SuitabilityRating,
    SuitabilityResult,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_DRAWDOWN = -20.0
SECTOR_LIMIT_BUFFER = 5.0
ACTION_THRESHOLD = 70

# (minimum average score, rating, canned recommendation), highest band first.
RATING_BANDS: tuple[tuple[float, SuitabilityRating, str], ...] = (
    (80, SuitabilityRating.HIGHLY_SUITABLE,
     "Portfolio is well-aligned with investor risk profile and objectives"),
    (70, SuitabilityRating.SUITABLE,
     "Portfolio is generally suitable with minor areas for improvement"),
    (60, SuitabilityRating.SUITABLE_WITH_CAVEATS,
     "Portfolio is suitable but requires attention to specific risk areas"),
    (50, SuitabilityRating.REVIEW_REQUIRED,
     "Portfolio requires review and potential adjustments to align with risk profile"),
)
NOT_SUITABLE_RECOMMENDATION = (
    "Portfolio is not suitable for investor risk profile - immediate action required"
)

REQUIRED_ACTIONS = {
    "concentration_compliance": "Address concentration risk",
    "risk_alignment": "Reduce portfolio volatility to match risk tolerance",
    "allocation_alignment": "Rebalance to recommended asset allocation",
    "time_horizon_fit": "Lower portfolio volatility to suit the investment time horizon",
}


def derive_allocation(portfolio: PortfolioSnapshot) -> AssetAllocation:
    """Actual asset-class split of a portfolio.

    Uses the snapshot's own allocation when present; otherwise sums
    holding weights by security kind (funds count as equities) and adds
    any separate cash position.
    """
    if portfolio.asset_allocation is not None:
        return portfolio.asset_allocation
    buckets = {"equities": 0.0, "fixed_income": 0.0, "cash": 0.0}
    for holding in portfolio.holdings:
        if holding.security_kind is SecurityKind.BOND:
            buckets["fixed_income"] += holding.weight
        elif holding.security_kind is SecurityKind.CASH:
            buckets["cash"] += holding.weight
        else:
            buckets["equities"] += holding.weight
    if portfolio.cash_position:
        buckets["cash"] += portfolio.cash_position / portfolio.total_value * 100
    return AssetAllocation(
        equities=round_half_up(buckets["equities"]),
        fixed_income=round_half_up(buckets["fixed_income"]),
        alternatives=0.0,
        cash=round_half_up(buckets["cash"]),
    )


@dataclass(frozen=True)
class SuitabilityInputs:
    """Portfolio facts the evaluator compares against a profile.

    Attributes:
        volatility: Annualized portfolio volatility, percent.
        max_drawdown: Estimated max drawdown, percent (negative). Defaults to -20.
        asset_allocation: Actual asset-class split.
        top_holding_weight: Weight of the largest single holding.
        sector_breakdown: Sector tag to total weight.
    """

    volatility: float
    asset_allocation: AssetAllocation
    max_drawdown: Optional[float] = None
    top_holding_weight: float = 0.0
    sector_breakdown: Mapping[str, float] = field(default_factory=dict)

    @classmethod
    def from_analysis(
        cls,
        portfolio: PortfolioSnapshot,
        portfolio_risk: PortfolioRiskResult,
        concentration: ConcentrationResult,
    ) -> "SuitabilityInputs":
        """Assemble inputs from the calculator and analyzer outputs."""
        return cls(
            volatility=portfolio_risk.portfolio_volatility,
            max_drawdown=portfolio_risk.max_drawdown,
            asset_allocation=derive_allocation(portfolio),
            top_holding_weight=concentration.single_position.top_holding_weight,
            sector_breakdown=dict(concentration.sector_concentration.sector_breakdown),
        )


class SuitabilityEvaluator:
    """Evaluates portfolio suitability against an investor risk profile."""

    @staticmethod
    def risk_alignment(
        volatility: float,
        max_volatility_tolerance: float,
        max_drawdown: float,
        max_drawdown_tolerance: float,
    ) -> DimensionResult:
        vol_gap = volatility - max_volatility_tolerance
        drawdown_gap = abs(max_drawdown) - max_drawdown_tolerance

        if vol_gap <= 2 and drawdown_gap <= 5:
            return DimensionResult(
                85, DimensionStatus.ALIGNED,
                "Portfolio volatility within acceptable range for risk profile",
            )
        if vol_gap <= 5 and drawdown_gap <= 10:
            return DimensionResult(
                70, DimensionStatus.MINOR_DEVIATION,
                "Portfolio volatility slightly above target range",
            )
        return DimensionResult(
            45, DimensionStatus.MISALIGNED,
            "Portfolio risk significantly exceeds investor tolerance",
        )

    @staticmethod
    def allocation_alignment(
        actual: AssetAllocation, recommended: AssetAllocation
    ) -> AllocationDimensionResult:
        equity_gap = actual.equities - recommended.equities
        fixed_income_gap = actual.fixed_income - recommended.fixed_income
        equity_diff = abs(equity_gap)
        fixed_income_diff = abs(fixed_income_gap)

        if equity_diff <= 5 and fixed_income_diff <= 5:
            score, status = 90, DimensionStatus.ALIGNED
            detail = "Asset allocation matches recommended profile"
        elif equity_diff <= 15 and fixed_income_diff <= 15:
            score, status = 72, DimensionStatus.MINOR_DEVIATION
            direction = "above" if equity_gap > 0 else "below"
            detail = f"Equity allocation {equity_diff:g}% {direction} recommended level"
        else:
            score, status = 50, DimensionStatus.SIGNIFICANT_DEVIATION
            detail = "Asset allocation significantly differs from recommended profile"

        return AllocationDimensionResult(
            score=score,
            status=status,
            detail=detail,
            equity_gap=round_half_up(equity_gap),
            fixed_income_gap=round_half_up(fixed_income_gap),
            actual=actual,
            recommended=recommended,
        )

    @staticmethod
    def concentration_compliance(
        top_holding_weight: float,
        sector_breakdown: Mapping[str, float],
        max_concentration_limit: float,
    ) -> DimensionResult:
        top_sector_weight = max(sector_breakdown.values(), default=0.0)
        single_breach = top_holding_weight > max_concentration_limit
        # Sectors get a buffer over the same limit.
        sector_breach = top_sector_weight > max_concentration_limit + SECTOR_LIMIT_BUFFER

        if not single_breach and not sector_breach:
            return DimensionResult(
                95, DimensionStatus.COMPLIANT, "Concentration levels within acceptable limits"
            )
        if single_breach and not sector_breach:
            return DimensionResult(
                60, DimensionStatus.MINOR_NON_COMPLIANT, "Single position limit breached"
            )
        if sector_breach and not single_breach:
            return DimensionResult(
                45, DimensionStatus.NON_COMPLIANT, "Sector concentration limit breached"
            )
        return DimensionResult(
            45, DimensionStatus.NON_COMPLIANT, "Multiple concentration limits breached"
        )

    @staticmethod
    def time_horizon_fit(horizon: InvestmentHorizon, volatility: float) -> DimensionResult:
        if horizon is InvestmentHorizon.LONG_TERM:
            return DimensionResult(
                85, DimensionStatus.ALIGNED,
                "Portfolio composition appropriate for long-term horizon",
            )
        if horizon is InvestmentHorizon.MEDIUM_TERM:
            if volatility > 20:
                return DimensionResult(
                    65, DimensionStatus.CAUTION,
                    "High volatility may be challenging for medium-term horizon",
                )
            return DimensionResult(
                80, DimensionStatus.ALIGNED, "Portfolio suitable for medium-term horizon"
            )
        if volatility > 15:
            return DimensionResult(
                40, DimensionStatus.MISALIGNED,
                "Portfolio too volatile for short-term investment horizon",
            )
        return DimensionResult(
            75, DimensionStatus.ALIGNED, "Portfolio appropriate for short-term needs"
        )

    @staticmethod
    def rate(average_score: float) -> tuple[SuitabilityRating, str]:
        """Map an average dimension score to a rating and canned recommendation."""
        for minimum, rating, recommendation in RATING_BANDS:
            if average_score >= minimum:
                return rating, recommendation
        return SuitabilityRating.NOT_SUITABLE, NOT_SUITABLE_RECOMMENDATION

    def evaluate(
        self,
        profile: Optional[RiskProfile],
        horizon: InvestmentHorizon,
        inputs: SuitabilityInputs,
        investor_id: str = "",
    ) -> SuitabilityResult:
        """Evaluate suitability of a portfolio for an investor.

        Args:
            profile: The investor's active risk profile.
            horizon: The investor's stated investment horizon.
            inputs: Portfolio facts (volatility, drawdown, allocation, concentration).
            investor_id: Used in the error when no profile is available.

        Returns:
            SuitabilityResult with per-dimension scores and required actions.

        Raises:
            RiskProfileNotFoundError: If there is no active profile.
        """
        if profile is None or not profile.is_active:
            raise RiskProfileNotFoundError(investor_id or getattr(profile, "investor_id", ""))
        if not isinstance(horizon, InvestmentHorizon):
            raise ValidationError("investmentHorizon is invalid", field="investmentHorizon")

        max_drawdown = DEFAULT_MAX_DRAWDOWN if inputs.max_drawdown is None else inputs.max_drawdown
        dimensions = {
            "risk_alignment": self.risk_alignment(
                inputs.volatility,
                profile.max_volatility_tolerance,
                max_drawdown,
                profile.max_drawdown_tolerance,
            ),
            "allocation_alignment": self.allocation_alignment(
                inputs.asset_allocation, profile.recommended_allocation
            ),
            "concentration_compliance": self.concentration_compliance(
                inputs.top_holding_weight,
                inputs.sector_breakdown,
                profile.max_concentration_limit,
            ),
            "time_horizon_fit": self.time_horizon_fit(horizon, inputs.volatility),
        }

        average = sum(d.score for d in dimensions.values()) / len(dimensions)
        rating, recommendation = self.rate(average)
        required_actions = tuple(
            action
            for name, action in REQUIRED_ACTIONS.items()
            if dimensions[name].score < ACTION_THRESHOLD
        )

        if rating is SuitabilityRating.NOT_SUITABLE:
            logger.warning(
                "Portfolio not suitable for investor=%s (average=%.2f)",
                profile.investor_id,
                average,
            )
        else:
            logger.info(
                "Suitability for investor=%s: %s (average=%.2f)",
                profile.investor_id,
                rating.value,
                average,
            )

        return SuitabilityResult(
            overall_rating=rating,
            overall_score=round_int(average),
            average_score=average,
            recommendation=recommendation,
            risk_profile=ProfileSummary(
                profile_id=profile.profile_id,
                risk_category=profile.risk_category.value,
                max_volatility_tolerance=profile.max_volatility_tolerance,
                max_drawdown_tolerance=profile.max_drawdown_tolerance,
            ),
            required_actions=required_actions,
            **dimensions,
        )
