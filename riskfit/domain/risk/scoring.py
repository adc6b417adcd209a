"""
Domain service: Assessment scoring and risk profile generation.

Turns questionnaire answers into a raw score, classifies the score into
one of five risk categories, and combines it with investor demographics
into a complete RiskProfile record.

Pure business logic. No framework imports. No IO.
Randomised jitter is opt-in: pass a seeded ``random.Random`` to enable it.
"""

import logging
import random
from dataclasses import replace
from datetime import datetime, timezone
from typing import Iterable, Optional

from riskfit.domain.risk.entities import (
    AssetAllocation,
    Assessment,
    AssessmentResponse,
    InvestmentHorizon,
    Investor,
    RiskCategory,
    RiskLimits,
    RiskProfile,
    ScoredResponse,
)
from riskfit.domain.risk.errors import (
    UnknownOptionError,
    UnknownQuestionError,
    ValidationError,
)
from riskfit.domain.risk.numeric import clamp, round_int
from riskfit.domain.risk.reference_data import (
    COMPREHENSIVE_QUESTIONNAIRE,
    RECOMMENDED_ALLOCATIONS,
    RISK_CATEGORY_BANDS,
    RISK_LIMITS,
    Questionnaire,
)

logger = logging.getLogger(__name__)

# Reference magnitudes for the capacity score.
CAPACITY_NET_WORTH_REFERENCE = 1_000_000
CAPACITY_INCOME_REFERENCE = 300_000
CAPACITY_NET_WORTH_POINTS = 40
CAPACITY_INCOME_POINTS = 30
CAPACITY_BASE_POINTS = 30

TIME_HORIZON_SCORES = {
    InvestmentHorizon.SHORT_TERM: 25,
    InvestmentHorizon.MEDIUM_TERM: 50,
    InvestmentHorizon.LONG_TERM: 75,
}

BASE_REQUIRED_SCORE = 60
TOLERANCE_JITTER = 5
REQUIRED_JITTER = 10


def classify(raw_score: float) -> RiskCategory:
    """Map a raw questionnaire score to its risk category.

    Bands are closed on the upper edge: 30 is Conservative, 31 is
    Moderately Conservative, and anything above 65 is Aggressive.
    """
    for upper_bound, category in RISK_CATEGORY_BANDS:
        if raw_score <= upper_bound:
            return category
    return RiskCategory.AGGRESSIVE


def recommended_allocation(category: RiskCategory) -> AssetAllocation:
    return RECOMMENDED_ALLOCATIONS[category]


def risk_limits(category: RiskCategory) -> RiskLimits:
    return RISK_LIMITS[category]


def capacity_score(liquid_net_worth: float, annual_income: float) -> int:
    """Bounded linear capacity score from net worth and income, clamped to [0, 100]."""
    raw = (
        (liquid_net_worth / CAPACITY_NET_WORTH_REFERENCE) * CAPACITY_NET_WORTH_POINTS
        + (annual_income / CAPACITY_INCOME_REFERENCE) * CAPACITY_INCOME_POINTS
        + CAPACITY_BASE_POINTS
    )
    return int(clamp(round_int(raw), 0, 100))


class AssessmentScorer:
    """Scores questionnaire submissions and builds risk profiles."""

    def __init__(self, questionnaire: Questionnaire = COMPREHENSIVE_QUESTIONNAIRE) -> None:
        self._questionnaire = questionnaire

    @property
    def questionnaire(self) -> Questionnaire:
        return self._questionnaire

    def score(
        self,
        responses: Iterable[AssessmentResponse],
        investor_id: str = "",
        assessment_id: Optional[str] = None,
    ) -> Assessment:
        """Score an ordered list of (questionId, selectedOptionId) answers.

        Args:
            responses: Answers in questionnaire order.
            investor_id: Owner of the assessment, when known.
            assessment_id: Record id to assign. Derived from the investor
                and the answers when omitted, so repeated calls agree.

        Returns:
            A scored Assessment with raw and percentile scores.

        Raises:
            UnknownQuestionError: If a question id is not in the questionnaire.
            UnknownOptionError: If an option id is not offered by its question.
            ValidationError: If a question is answered more than once.
        """
        if responses is None:
            raise ValidationError("Assessment responses are required", field="responses")
        responses = list(responses)
        seen: set[str] = set()
        for response in responses:
            if response.question_id in seen:
                raise ValidationError(
                    f"Question {response.question_id} answered more than once",
                    field="questionId",
                )
            seen.add(response.question_id)

        scored = tuple(self._score_response(r) for r in responses)
        raw_score = sum(r.score for r in scored)
        max_score = self._questionnaire.max_score
        percentile = round_int(raw_score / max_score * 100)

        logger.debug(
            "Scored assessment for investor=%s: raw=%d/%d percentile=%d",
            investor_id,
            raw_score,
            max_score,
            percentile,
        )
        return Assessment(
            investor_id=investor_id,
            responses=scored,
            raw_score=raw_score,
            max_possible_score=max_score,
            percentile_score=percentile,
            assessment_id=assessment_id or "",
        )

    def _score_response(self, response: AssessmentResponse) -> ScoredResponse:
        question = self._questionnaire.find_question(response.question_id)
        if question is None:
            raise UnknownQuestionError(response.question_id)
        option = question.find_option(response.selected_option)
        if option is None:
            raise UnknownOptionError(response.question_id, response.selected_option)
        return ScoredResponse(
            question_id=question.question_id,
            question_category=question.category,
            question_text=question.question_text,
            selected_option=option.option_id,
            option_text=option.text,
            score=option.score,
        )

    def build_profile(
        self,
        investor: Investor,
        assessment: Assessment,
        rng: Optional[random.Random] = None,
        now: Optional[datetime] = None,
        profile_id: Optional[str] = None,
    ) -> RiskProfile:
        """Derive a complete, active RiskProfile from a scored assessment.

        Args:
            investor: Investor demographics (horizon, net worth, income).
            assessment: The scored assessment.
            rng: Optional seeded random source. When given, the tolerance,
                volatility-tolerance and required scores receive the same
                jitter the demo data was generated with. When omitted the
                profile is fully deterministic.
            now: Timestamp used for ``valid_from``; defaults to current UTC time.
            profile_id: Record id to assign. Derived from the profile contents
                when omitted.

        Returns:
            A new RiskProfile with ``is_active=True``.
        """
        if assessment.investor_id and assessment.investor_id != investor.investor_id:
            raise ValidationError(
                "Assessment does not belong to investor "
                f"{investor.investor_id}",
                field="investorId",
            )
        now = now or datetime.now(timezone.utc)
        category = classify(assessment.raw_score)
        composite = assessment.percentile_score

        tolerance = composite + self._jitter(rng, TOLERANCE_JITTER)
        required = BASE_REQUIRED_SCORE + self._jitter(rng, REQUIRED_JITTER)
        volatility_tolerance = composite + self._jitter(rng, TOLERANCE_JITTER)

        profile = RiskProfile(
            investor_id=investor.investor_id,
            assessment_id=assessment.assessment_id,
            risk_category=category,
            composite_risk_score=clamp(composite, 0, 100),
            risk_tolerance_score=clamp(round_int(tolerance), 0, 100),
            risk_capacity_score=capacity_score(investor.liquid_net_worth, investor.annual_income),
            risk_required_score=clamp(round_int(required), 0, 100),
            loss_aversion_score=clamp(100 - composite, 0, 100),
            volatility_tolerance_score=clamp(round_int(volatility_tolerance), 0, 100),
            time_horizon_score=TIME_HORIZON_SCORES[investor.investment_horizon],
            recommended_allocation=recommended_allocation(category),
            risk_limits=risk_limits(category),
            is_active=True,
            valid_from=now,
            valid_to=None,
            profile_id=profile_id or "",
        )
        logger.info(
            "Generated %s profile for investor=%s (composite=%s)",
            category.value,
            investor.investor_id,
            composite,
        )
        return profile

    @staticmethod
    def _jitter(rng: Optional[random.Random], spread: float) -> float:
        if rng is None:
            return 0.0
        return rng.uniform(-spread, spread)

    @staticmethod
    def supersede(
        old_profile: RiskProfile,
        new_profile: RiskProfile,
        now: Optional[datetime] = None,
    ) -> tuple[RiskProfile, RiskProfile]:
        """Model the hand-over of the active profile as two new records.

        Returns:
            (closed old profile, active new profile). Neither input is mutated.
        """
        if old_profile.investor_id != new_profile.investor_id:
            raise ValidationError(
                "Cannot supersede a profile belonging to another investor",
                field="investorId",
            )
        now = now or new_profile.valid_from or datetime.now(timezone.utc)
        closed = old_profile.supersede(now)
        activated = replace(new_profile, is_active=True, valid_from=new_profile.valid_from or now)
        return closed, activated
