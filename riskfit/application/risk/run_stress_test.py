"""
Use case: Run catalog stress scenarios against a portfolio.

Input: RunStressTestCommand (portfolio, scenario_ids, optional investor_id)
Output: list of StressImpactResult, one per scenario, in request order
Side effects: None.
Failure cases: ScenarioNotFoundError, ValidationError.
"""

import logging

from riskfit.application.risk.dtos import RunStressTestCommand
from riskfit.domain.risk.ports import ReferenceDataSource, RiskProfileRepository
from riskfit.domain.risk.results import StressImpactResult
from riskfit.domain.risk.stress_test import StressTestSimulator

logger = logging.getLogger(__name__)


class RunStressTestUseCase:
    """Resolves scenarios from the current catalog and runs them.

    When an investor is named and has an active profile, each result
    carries the drawdown-tolerance comparison. A missing profile only
    drops the comparison.
    """

    def __init__(
        self,
        profile_repo: RiskProfileRepository,
        reference_data: ReferenceDataSource,
        simulator: StressTestSimulator,
    ) -> None:
        self._profile_repo = profile_repo
        self._reference_data = reference_data
        self._simulator = simulator

    def execute(self, command: RunStressTestCommand) -> list[StressImpactResult]:
        logger.info(
            "Running %d stress scenarios for investor=%s",
            len(command.scenario_ids),
            command.investor_id,
        )
        profile = None
        if command.investor_id:
            profile = self._profile_repo.get_active(command.investor_id)

        return self._simulator.run_many(
            command.scenario_ids,
            command.portfolio,
            profile=profile,
            catalog=self._reference_data.current().scenarios,
        )
