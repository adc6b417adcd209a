"""
Data Transfer Objects for the risk application layer.

DTOs carry data between the interface and application layers.
They are plain dataclasses with no behavior beyond serialization.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from riskfit.domain.risk.entities import (
    Assessment,
    AssessmentResponse,
    PortfolioSnapshot,
    RiskProfile,
)
from riskfit.domain.risk.results import (
    ConcentrationResult,
    PortfolioRiskResult,
    RecommendationBundle,
    StressImpactResult,
    SuitabilityResult,
)


@dataclass(frozen=True)
class GenerateRiskProfileCommand:
    """Input DTO for scoring an assessment and activating a new profile.

    Attributes:
        investor_id: Investor who completed the questionnaire.
        responses: Answers in questionnaire order.
    """

    investor_id: str
    responses: tuple[AssessmentResponse, ...]


@dataclass(frozen=True)
class GeneratedProfileResult:
    """Output DTO for profile generation.

    Attributes:
        assessment: The scored assessment.
        profile: The newly active profile.
        superseded_profile_id: Id of the profile it replaced, if any.
    """

    assessment: Assessment
    profile: RiskProfile
    superseded_profile_id: Optional[str] = None


@dataclass(frozen=True)
class CheckSuitabilityCommand:
    """Input DTO for a suitability check.

    Attributes:
        investor_id: Investor whose active profile is used.
        portfolio: Holdings snapshot to evaluate.
    """

    investor_id: str
    portfolio: PortfolioSnapshot


@dataclass(frozen=True)
class RunStressTestCommand:
    """Input DTO for running catalog scenarios against a portfolio.

    Attributes:
        portfolio: Holdings snapshot to stress.
        scenario_ids: Catalog ids, each run independently.
        investor_id: When given, losses are compared with the investor's
            drawdown tolerance.
    """

    portfolio: PortfolioSnapshot
    scenario_ids: tuple[str, ...]
    investor_id: Optional[str] = None


@dataclass(frozen=True)
class ComprehensiveAnalysisCommand:
    """Input DTO for a full portfolio review.

    Attributes:
        investor_id: Investor whose active profile drives thresholds.
        portfolio: Holdings snapshot to analyze.
        scenario_ids: Optional stress scenarios to include.
        benchmark_symbol: Benchmark reported with the risk metrics.
    """

    investor_id: str
    portfolio: PortfolioSnapshot
    scenario_ids: tuple[str, ...] = ()
    benchmark_symbol: Optional[str] = None


@dataclass(frozen=True)
class ExecutiveSummary:
    """Headline view of a comprehensive analysis."""

    overall_risk_level: str
    key_findings: tuple[str, ...]
    priority_actions: tuple[str, ...]
    next_review_date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_risk_level": self.overall_risk_level,
            "key_findings": list(self.key_findings),
            "priority_actions": list(self.priority_actions),
            "next_review_date": self.next_review_date.isoformat(),
        }


@dataclass(frozen=True)
class ComprehensiveAnalysisResult:
    """Output DTO bundling every analysis of one portfolio review."""

    investor_id: str
    portfolio_risk: PortfolioRiskResult
    concentration: ConcentrationResult
    recommendations: RecommendationBundle
    executive_summary: ExecutiveSummary
    suitability: Optional[SuitabilityResult] = None
    stress_tests: tuple[StressImpactResult, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "investor_id": self.investor_id,
            "portfolio_risk": self.portfolio_risk.to_dict(),
            "concentration": self.concentration.to_dict(),
            "suitability": self.suitability.to_dict() if self.suitability else None,
            "stress_tests": [s.to_dict() for s in self.stress_tests],
            "recommendations": self.recommendations.to_dict(),
            "executive_summary": self.executive_summary.to_dict(),
        }
