"""
Use case: Score a questionnaire and activate a new risk profile.

Input: GenerateRiskProfileCommand (investor_id, responses)
Output: GeneratedProfileResult
Side effects: Activates the new profile and closes the previous one
    through the RiskProfileRepository port.
Failure cases: InvestorNotFoundError, UnknownQuestionError,
    UnknownOptionError, ValidationError.
"""

import logging
import random
from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import uuid4

from riskfit.application.risk.dtos import GenerateRiskProfileCommand, GeneratedProfileResult
from riskfit.domain.risk.errors import InvestorNotFoundError
from riskfit.domain.risk.ports import (
    InvestorRepository,
    ReferenceDataSource,
    RiskProfileRepository,
)
from riskfit.domain.risk.scoring import AssessmentScorer

logger = logging.getLogger(__name__)


def new_record_id(prefix: str) -> str:
    return f"{prefix}-{uuid4().hex[:12]}"


class GenerateRiskProfileUseCase:
    """Orchestrates assessment scoring and profile hand-over.

    The questionnaire is read from the reference data in force at the
    time of the call, so a reference swap applies to the next request.
    """

    def __init__(
        self,
        investor_repo: InvestorRepository,
        profile_repo: RiskProfileRepository,
        reference_data: ReferenceDataSource,
        jitter_seed: Optional[int] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
        id_factory: Callable[[str], str] = new_record_id,
    ) -> None:
        self._investor_repo = investor_repo
        self._profile_repo = profile_repo
        self._reference_data = reference_data
        self._jitter_seed = jitter_seed
        self._clock = clock
        self._id_factory = id_factory

    def execute(self, command: GenerateRiskProfileCommand) -> GeneratedProfileResult:
        """Run the profile generation use case.

        Args:
            command: The investor id and their questionnaire answers.

        Returns:
            The scored assessment and the newly active profile.

        Raises:
            InvestorNotFoundError: If the investor does not exist.
        """
        logger.info("Generating risk profile for investor=%s", command.investor_id)

        investor = self._investor_repo.get_by_id(command.investor_id)
        if investor is None:
            raise InvestorNotFoundError(command.investor_id)

        scorer = AssessmentScorer(self._reference_data.current().questionnaire)
        assessment = scorer.score(
            command.responses,
            investor_id=investor.investor_id,
            assessment_id=self._id_factory("assessment"),
        )

        now = self._clock()
        rng = random.Random(self._jitter_seed) if self._jitter_seed is not None else None
        profile = scorer.build_profile(
            investor, assessment, rng=rng, now=now, profile_id=self._id_factory("profile")
        )

        previous = self._profile_repo.get_active(investor.investor_id)
        closed = None
        if previous is not None:
            closed, profile = scorer.supersede(previous, profile, now=now)
            logger.info(
                "Superseding profile %s for investor=%s",
                previous.profile_id,
                investor.investor_id,
            )
        self._profile_repo.activate(profile, superseded=closed)

        return GeneratedProfileResult(
            assessment=assessment,
            profile=profile,
            superseded_profile_id=previous.profile_id if previous is not None else None,
        )
