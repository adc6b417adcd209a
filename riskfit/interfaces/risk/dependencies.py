"""
Dependency injection for the risk bounded context.

Provides factory functions that wire settings and infrastructure
adapters into domain services and use cases via constructor injection.
These are the composition root for the risk context.
"""

import logging
from functools import lru_cache

from riskfit.application.risk.check_suitability import CheckSuitabilityUseCase
from riskfit.application.risk.generate_risk_profile import GenerateRiskProfileUseCase
from riskfit.application.risk.run_comprehensive_analysis import (
    RunComprehensiveAnalysisUseCase,
)
from riskfit.application.risk.run_stress_test import RunStressTestUseCase
from riskfit.core.config import Settings, settings
from riskfit.domain.risk.concentration import ConcentrationAnalyzer, ConcentrationThresholds
from riskfit.domain.risk.portfolio_risk import PortfolioRiskCalculator
from riskfit.domain.risk.recommendations import RecommendationGenerator
from riskfit.domain.risk.stress_test import StressTestSimulator
from riskfit.domain.risk.suitability import SuitabilityEvaluator
from riskfit.infrastructure.risk.memory_repositories import (
    InMemoryInvestorRepository,
    InMemoryRiskProfileRepository,
)
from riskfit.infrastructure.risk.reference_loader import (
    ReferenceDataProvider,
    load_reference_data,
)
from riskfit.shared.logging import configure_logging

logger = logging.getLogger(__name__)


def configure(config: Settings = settings) -> None:
    """Apply process-wide settings. Call once at start-up, before the getters."""
    configure_logging(config.log_level, config.domain_log_level)
    logger.info("%s %s configured (log_level=%s)", config.project_name, config.version, config.log_level)


# --- Infrastructure singletons ---


@lru_cache(maxsize=1)
def get_reference_provider() -> ReferenceDataProvider:
    """Reference data in force, loaded from settings.reference_data_path when set."""
    if settings.reference_data_path:
        return ReferenceDataProvider(load_reference_data(settings.reference_data_path))
    return ReferenceDataProvider()


@lru_cache(maxsize=1)
def get_investor_repository() -> InMemoryInvestorRepository:
    return InMemoryInvestorRepository()


@lru_cache(maxsize=1)
def get_profile_repository() -> InMemoryRiskProfileRepository:
    return InMemoryRiskProfileRepository()


# --- Domain services ---


def build_calculator(config: Settings = settings) -> PortfolioRiskCalculator:
    """Build the PortfolioRiskCalculator from market assumptions."""
    return PortfolioRiskCalculator(
        risk_free_rate=config.risk_free_rate,
        market_return=config.market_return,
        benchmark_volatility=config.benchmark_volatility,
        default_benchmark=config.default_benchmark_symbol,
    )


def build_analyzer(config: Settings = settings) -> ConcentrationAnalyzer:
    """Build the ConcentrationAnalyzer with the configured default limits."""
    return ConcentrationAnalyzer(
        ConcentrationThresholds(
            single_position_limit=config.single_position_limit,
            sector_limit=config.sector_limit,
            top5_limit=config.top5_limit,
        )
    )


def build_generator(config: Settings = settings) -> RecommendationGenerator:
    return RecommendationGenerator(
        next_review_days=config.next_review_days,
        elevated_volatility=config.elevated_volatility_threshold,
        target_volatility=config.target_volatility,
    )


# --- Use cases ---


def get_generate_risk_profile_use_case() -> GenerateRiskProfileUseCase:
    """Build GenerateRiskProfileUseCase with its infrastructure dependencies."""
    return GenerateRiskProfileUseCase(
        investor_repo=get_investor_repository(),
        profile_repo=get_profile_repository(),
        reference_data=get_reference_provider(),
        jitter_seed=settings.profile_jitter_seed,
    )


def get_check_suitability_use_case() -> CheckSuitabilityUseCase:
    """Build CheckSuitabilityUseCase with its infrastructure dependencies."""
    return CheckSuitabilityUseCase(
        investor_repo=get_investor_repository(),
        profile_repo=get_profile_repository(),
        calculator=build_calculator(),
        analyzer=build_analyzer(),
        evaluator=SuitabilityEvaluator(),
    )


def get_run_stress_test_use_case() -> RunStressTestUseCase:
    """Build RunStressTestUseCase with its infrastructure dependencies."""
    return RunStressTestUseCase(
        profile_repo=get_profile_repository(),
        reference_data=get_reference_provider(),
        simulator=StressTestSimulator(),
    )


def get_comprehensive_analysis_use_case() -> RunComprehensiveAnalysisUseCase:
    """Build RunComprehensiveAnalysisUseCase with its infrastructure dependencies."""
    return RunComprehensiveAnalysisUseCase(
        investor_repo=get_investor_repository(),
        profile_repo=get_profile_repository(),
        reference_data=get_reference_provider(),
        calculator=build_calculator(),
        analyzer=build_analyzer(),
        evaluator=SuitabilityEvaluator(),
        simulator=StressTestSimulator(),
        generator=build_generator(),
    )
