"""
Use case: Comprehensive portfolio review.

Input: ComprehensiveAnalysisCommand (investor_id, portfolio, scenario_ids,
    benchmark_symbol)
Output: ComprehensiveAnalysisResult
Side effects: None.
Failure cases: InvestorNotFoundError, ScenarioNotFoundError, ValidationError.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Sequence

from riskfit.application.risk.dtos import (
    ComprehensiveAnalysisCommand,
    ComprehensiveAnalysisResult,
    ExecutiveSummary,
)
from riskfit.domain.risk.concentration import ConcentrationAnalyzer, ConcentrationThresholds
from riskfit.domain.risk.entities import RiskProfile
from riskfit.domain.risk.errors import InvestorNotFoundError
from riskfit.domain.risk.portfolio_risk import PortfolioRiskCalculator
from riskfit.domain.risk.ports import (
    InvestorRepository,
    ReferenceDataSource,
    RiskProfileRepository,
)
from riskfit.domain.risk.recommendations import RecommendationGenerator
from riskfit.domain.risk.results import (
    ComplianceStatus,
    ConcentrationResult,
    ConcentrationRisk,
    PortfolioRiskResult,
    Priority,
    RecommendationBundle,
    StressImpactResult,
)
from riskfit.domain.risk.stress_test import StressTestSimulator
from riskfit.domain.risk.suitability import SuitabilityEvaluator, SuitabilityInputs

logger = logging.getLogger(__name__)

PROFILE_SINGLE_POSITION_OFFSET = 5.0
PROFILE_TOP5_LIMIT = 50.0
RISK_LEVEL_BAND = 5.0
MAX_PRIORITY_ACTIONS = 3


def profile_thresholds(profile: RiskProfile) -> ConcentrationThresholds:
    """Concentration limits derived from a profile's concentration limit.

    The single-position limit sits a fixed offset below the sector limit and
    never goes below zero.
    """
    limit = profile.max_concentration_limit
    return ConcentrationThresholds(
        single_position_limit=max(limit - PROFILE_SINGLE_POSITION_OFFSET, 0.0),
        sector_limit=limit,
        top5_limit=PROFILE_TOP5_LIMIT,
    )


def overall_risk_level(volatility: float, profile: Optional[RiskProfile]) -> str:
    """Place portfolio volatility relative to the profile's tolerance."""
    if profile is None:
        return "MODERATE"
    tolerance = profile.max_volatility_tolerance
    if volatility > tolerance + RISK_LEVEL_BAND:
        return "HIGH"
    if volatility > tolerance:
        return "MODERATE_HIGH"
    if volatility < tolerance - RISK_LEVEL_BAND:
        return "LOW"
    return "MODERATE"


def key_findings(
    portfolio_risk: PortfolioRiskResult,
    concentration: ConcentrationResult,
    stress_tests: Sequence[StressImpactResult],
    profile: Optional[RiskProfile],
) -> list[str]:
    findings: list[str] = []
    volatility = portfolio_risk.portfolio_volatility
    if profile is not None:
        if volatility <= profile.max_volatility_tolerance:
            findings.append(f"Portfolio volatility ({volatility:g}%) is within acceptable range")
        else:
            findings.append(
                f"Portfolio volatility ({volatility:g}%) exceeds target "
                f"({profile.max_volatility_tolerance:g}%)"
            )

    if concentration.overall_concentration_risk.rank >= ConcentrationRisk.ELEVATED.rank:
        sector = concentration.sector_concentration
        findings.append(
            f"Significant concentration risk in {sector.top_sector} sector "
            f"({sector.top_sector_weight:g}%)"
        )
        single = concentration.single_position
        if single.status is ComplianceStatus.BREACHED:
            findings.append(
                f"Single position limit breached for {single.top_holding} "
                f"({single.top_holding_weight:g}%)"
            )

    if stress_tests:
        worst = min(stress_tests, key=lambda s: s.portfolio_impact.percentage_loss)
        findings.append(
            f"Worst stress scenario ({worst.scenario_name}) shows potential "
            f"{abs(worst.portfolio_impact.percentage_loss):.1f}% loss"
        )
    return findings


def priority_actions(bundle: RecommendationBundle) -> list[str]:
    urgent = [r.title for r in bundle.recommendations if r.priority in (Priority.HIGH, Priority.MEDIUM)]
    return urgent[:MAX_PRIORITY_ACTIONS]


class RunComprehensiveAnalysisUseCase:
    """Runs every analysis over one portfolio and summarizes the outcome.

    Concentration limits come from the investor's active profile when
    there is one; otherwise the analyzer's defaults apply and the
    suitability section is left empty.
    """

    def __init__(
        self,
        investor_repo: InvestorRepository,
        profile_repo: RiskProfileRepository,
        reference_data: ReferenceDataSource,
        calculator: PortfolioRiskCalculator,
        analyzer: ConcentrationAnalyzer,
        evaluator: SuitabilityEvaluator,
        simulator: StressTestSimulator,
        generator: RecommendationGenerator,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self._investor_repo = investor_repo
        self._profile_repo = profile_repo
        self._reference_data = reference_data
        self._calculator = calculator
        self._analyzer = analyzer
        self._evaluator = evaluator
        self._simulator = simulator
        self._generator = generator
        self._clock = clock

    def execute(self, command: ComprehensiveAnalysisCommand) -> ComprehensiveAnalysisResult:
        """Run the comprehensive analysis use case.

        Raises:
            InvestorNotFoundError: If the investor does not exist.
            ScenarioNotFoundError: If a requested scenario is not in the catalog.
        """
        logger.info("Running comprehensive analysis for investor=%s", command.investor_id)

        investor = self._investor_repo.get_by_id(command.investor_id)
        if investor is None:
            raise InvestorNotFoundError(command.investor_id)
        profile = self._profile_repo.get_active(command.investor_id)
        portfolio = command.portfolio
        # Profile-derived limits are validated before any analysis runs
        thresholds = profile_thresholds(profile) if profile is not None else None

        # Stress scenarios are resolved up front so an unknown id fails fast
        stress_tests: list[StressImpactResult] = []
        if command.scenario_ids:
            stress_tests = self._simulator.run_many(
                command.scenario_ids,
                portfolio,
                profile=profile,
                catalog=self._reference_data.current().scenarios,
            )

        portfolio_risk = self._calculator.calculate(portfolio, command.benchmark_symbol)
        concentration = self._analyzer.analyze(portfolio.holdings, thresholds)

        suitability = None
        if profile is not None:
            inputs = SuitabilityInputs.from_analysis(portfolio, portfolio_risk, concentration)
            suitability = self._evaluator.evaluate(
                profile, investor.investment_horizon, inputs, investor_id=investor.investor_id
            )

        now = self._clock()
        bundle = self._generator.generate(
            portfolio_risk=portfolio_risk,
            concentration=concentration,
            suitability=suitability,
            investor_id=investor.investor_id,
            profile_id=profile.profile_id if profile is not None else None,
            now=now,
        )

        summary = ExecutiveSummary(
            overall_risk_level=overall_risk_level(portfolio_risk.portfolio_volatility, profile),
            key_findings=tuple(key_findings(portfolio_risk, concentration, stress_tests, profile)),
            priority_actions=tuple(priority_actions(bundle)),
            next_review_date=bundle.next_review_date,
        )
        logger.info(
            "Comprehensive analysis for investor=%s: risk level %s, %d recommendations",
            investor.investor_id,
            summary.overall_risk_level,
            len(bundle.recommendations),
        )
        return ComprehensiveAnalysisResult(
            investor_id=investor.investor_id,
            portfolio_risk=portfolio_risk,
            concentration=concentration,
            suitability=suitability,
            stress_tests=tuple(stress_tests),
            recommendations=bundle,
            executive_summary=summary,
        )
