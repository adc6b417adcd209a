"""
Risk bounded context: domain layer.

This module contains all domain logic for the risk context:
- Assessment scoring and risk profile generation
- Portfolio risk metrics
- Concentration analysis
- Suitability evaluation
- Stress testing
- Recommendation generation
"""

from riskfit.domain.risk.concentration import ConcentrationAnalyzer, ConcentrationThresholds
from riskfit.domain.risk.entities import (
    AssessmentResponse,
    AssetAllocation,
    Holding,
    InvestmentHorizon,
    Investor,
    PortfolioSnapshot,
    RiskCategory,
    RiskProfile,
    Scenario,
    SecurityKind,
)
from riskfit.domain.risk.errors import (
    ComputationError,
    NotFoundError,
    RiskDomainError,
    ValidationError,
)
from riskfit.domain.risk.portfolio_risk import PortfolioRiskCalculator
from riskfit.domain.risk.recommendations import RecommendationGenerator
from riskfit.domain.risk.scoring import AssessmentScorer
from riskfit.domain.risk.stress_test import StressTestSimulator
from riskfit.domain.risk.suitability import SuitabilityEvaluator, SuitabilityInputs

__all__ = [
    "AssessmentResponse",
    "AssessmentScorer",
    "AssetAllocation",
    "ComputationError",
    "ConcentrationAnalyzer",
    "ConcentrationThresholds",
    "Holding",
    "InvestmentHorizon",
    "Investor",
    "NotFoundError",
    "PortfolioRiskCalculator",
    "PortfolioSnapshot",
    "RecommendationGenerator",
    "RiskCategory",
    "RiskDomainError",
    "RiskProfile",
    "Scenario",
    "SecurityKind",
    "StressTestSimulator",
    "SuitabilityEvaluator",
    "SuitabilityInputs",
    "ValidationError",
]
