"""
Use case: Check a portfolio's suitability for an investor.

Input: CheckSuitabilityCommand (investor_id, portfolio)
Output: SuitabilityResult
Side effects: None.
Failure cases: InvestorNotFoundError, RiskProfileNotFoundError.
"""

import logging

from riskfit.application.risk.dtos import CheckSuitabilityCommand
from riskfit.domain.risk.concentration import ConcentrationAnalyzer
from riskfit.domain.risk.errors import InvestorNotFoundError, RiskProfileNotFoundError
from riskfit.domain.risk.portfolio_risk import PortfolioRiskCalculator
from riskfit.domain.risk.ports import InvestorRepository, RiskProfileRepository
from riskfit.domain.risk.results import SuitabilityResult
from riskfit.domain.risk.suitability import SuitabilityEvaluator, SuitabilityInputs

logger = logging.getLogger(__name__)


class CheckSuitabilityUseCase:
    """Computes the portfolio facts and evaluates them against the active profile."""

    def __init__(
        self,
        investor_repo: InvestorRepository,
        profile_repo: RiskProfileRepository,
        calculator: PortfolioRiskCalculator,
        analyzer: ConcentrationAnalyzer,
        evaluator: SuitabilityEvaluator,
    ) -> None:
        self._investor_repo = investor_repo
        self._profile_repo = profile_repo
        self._calculator = calculator
        self._analyzer = analyzer
        self._evaluator = evaluator

    def execute(self, command: CheckSuitabilityCommand) -> SuitabilityResult:
        """Run the suitability use case.

        Raises:
            InvestorNotFoundError: If the investor does not exist.
            RiskProfileNotFoundError: If the investor has no active profile.
        """
        logger.info("Checking suitability for investor=%s", command.investor_id)

        investor = self._investor_repo.get_by_id(command.investor_id)
        if investor is None:
            raise InvestorNotFoundError(command.investor_id)
        profile = self._profile_repo.get_active(command.investor_id)
        if profile is None:
            raise RiskProfileNotFoundError(command.investor_id)

        portfolio_risk = self._calculator.calculate(command.portfolio)
        concentration = self._analyzer.analyze(command.portfolio.holdings)
        inputs = SuitabilityInputs.from_analysis(command.portfolio, portfolio_risk, concentration)
        return self._evaluator.evaluate(
            profile,
            investor.investment_horizon,
            inputs,
            investor_id=investor.investor_id,
        )
