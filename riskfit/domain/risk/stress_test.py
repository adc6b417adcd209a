"""
Domain service: Stress testing.

Applies named shock scenarios to portfolio holdings and estimates the
portfolio impact, optionally cross-checked against the investor's
maximum drawdown tolerance.

Every run is independent: no state is shared between scenarios.
Pure business logic. No framework imports. No IO.
"""

import logging
from typing import Iterable, Optional

from riskfit.domain.risk.entities import Holding, PortfolioSnapshot, RiskProfile, Scenario
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.numeric import round_half_up
from riskfit.domain.risk.reference_data import ScenarioCatalog
from riskfit.domain.risk.results import (
    HoldingImpact,
    PortfolioImpact,
    ProfileComparison,
    RankedImpact,
    StressImpactResult,
)

logger = logging.getLogger(__name__)

WORST_HIT_COUNT = 3
BEST_PROTECTED_COUNT = 2

# (max loss magnitude in %, inclusive, recovery label), mildest first.
RECOVERY_BUCKETS: tuple[tuple[float, str], ...] = (
    (20, "6-12 months (estimated)"),
    (30, "12-24 months (estimated)"),
    (40, "24-36 months (estimated)"),
)
LONGEST_RECOVERY = "36+ months (estimated)"

OVER_TOLERANCE_WARNING = "Scenario loss exceeds investor's stated maximum drawdown tolerance"


def recovery_estimate(loss_pct: float) -> str:
    """Step-function recovery estimate from the portfolio percentage change.

    Gains count as no loss.
    """
    magnitude = max(0.0, -loss_pct)
    for upper_bound, label in RECOVERY_BUCKETS:
        if magnitude <= upper_bound:
            return label
    return LONGEST_RECOVERY


class StressTestSimulator:
    """Applies stress scenarios to portfolios."""

    def __init__(self, catalog: Optional[ScenarioCatalog] = None) -> None:
        self._catalog = catalog

    @staticmethod
    def apply_shock(holding: Holding, scenario: Scenario) -> HoldingImpact:
        """Shock one holding: bonds take the bond shock, others their sector or equity shock."""
        shock, source = scenario.shock_for(holding)
        stressed = holding.market_value * (1 + shock / 100)
        return HoldingImpact(
            symbol=holding.symbol,
            sector=holding.sector_tag,
            current_value=holding.market_value,
            stressed_value=round_half_up(stressed),
            loss=round_half_up(stressed - holding.market_value),
            loss_percent=round_half_up(shock),
            shock_source=source,
        )

    @staticmethod
    def compare_to_profile(percentage_loss: float, profile: RiskProfile) -> ProfileComparison:
        drawdown = abs(percentage_loss)
        tolerance = profile.max_drawdown_tolerance
        exceeds = drawdown > tolerance
        return ProfileComparison(
            max_drawdown_tolerance=tolerance,
            scenario_drawdown=round_half_up(drawdown),
            exceeds_tolerance_by=round_half_up(drawdown - tolerance) if exceeds else 0.0,
            warning=OVER_TOLERANCE_WARNING if exceeds else None,
        )

    def run_scenario(
        self,
        scenario: Scenario,
        portfolio: PortfolioSnapshot,
        profile: Optional[RiskProfile] = None,
    ) -> StressImpactResult:
        """Apply a scenario to every holding and total the impact.

        Args:
            scenario: The shock scenario.
            portfolio: The holdings snapshot. Never mutated.
            profile: Active risk profile; when given, the loss is compared
                with its maximum drawdown tolerance.
        """
        if not isinstance(portfolio, PortfolioSnapshot):
            raise ValidationError("portfolioData is required", field="portfolioData")

        impacts = [self.apply_shock(h, scenario) for h in portfolio.holdings]
        stressed_total = sum(i.stressed_value for i in impacts)
        dollar_loss = stressed_total - portfolio.total_value
        percentage_loss = dollar_loss / portfolio.total_value * 100

        ranked = sorted(impacts, key=lambda i: i.loss_percent)
        worst_hit = tuple(RankedImpact(i.symbol, i.loss_percent) for i in ranked[:WORST_HIT_COUNT])
        best_protected = tuple(
            RankedImpact(i.symbol, i.loss_percent) for i in ranked[-BEST_PROTECTED_COUNT:]
        )

        comparison = None
        if profile is not None and profile.is_active:
            comparison = self.compare_to_profile(percentage_loss, profile)
            if comparison.exceeds_tolerance:
                logger.warning(
                    "Scenario %s loss %.2f%% exceeds drawdown tolerance %.2f%% for investor=%s",
                    scenario.scenario_id,
                    abs(percentage_loss),
                    profile.max_drawdown_tolerance,
                    profile.investor_id,
                )

        logger.debug(
            "Stress scenario %s: %.2f%% on %d holdings",
            scenario.scenario_id,
            percentage_loss,
            len(impacts),
        )
        return StressImpactResult(
            scenario_id=scenario.scenario_id,
            scenario_name=scenario.scenario_name,
            portfolio_impact=PortfolioImpact(
                current_value=portfolio.total_value,
                stressed_value=round_half_up(stressed_total),
                dollar_loss=round_half_up(dollar_loss),
                percentage_loss=round_half_up(percentage_loss),
                recovery_time=recovery_estimate(percentage_loss),
            ),
            holding_impacts=tuple(impacts),
            worst_hit=worst_hit,
            best_protected=best_protected,
            risk_profile_comparison=comparison,
        )

    def run_many(
        self,
        scenario_ids: Iterable[str],
        portfolio: PortfolioSnapshot,
        profile: Optional[RiskProfile] = None,
        catalog: Optional[ScenarioCatalog] = None,
    ) -> list[StressImpactResult]:
        """Run several catalog scenarios independently.

        Every id is resolved before any scenario runs, so an unknown id
        fails the whole call without partial results.

        Raises:
            ScenarioNotFoundError: If any scenario id is not in the catalog.
        """
        catalog = catalog or self._catalog
        if catalog is None:
            raise ValidationError("A scenario catalog is required", field="scenarioIds")
        if scenario_ids is None:
            raise ValidationError("scenarioIds is required", field="scenarioIds")
        scenarios = [catalog.get(scenario_id) for scenario_id in scenario_ids]
        return [self.run_scenario(s, portfolio, profile) for s in scenarios]
