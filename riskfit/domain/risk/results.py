"""
Analysis result records for the risk bounded context.

Results are pure output values with no identity of their own.
Callers decide whether and how to persist them. Each record exposes
``to_dict()`` producing plain JSON-ready data.
"""

from dataclasses import dataclass, field, fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Mapping, Optional


def _plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(_plain(k)): _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for API responses."""
        return _plain(self)


# --- Portfolio risk ---


@dataclass(frozen=True)
class ValueAtRisk(_Serializable):
    """Parametric one-month VaR at 95% and 99% confidence."""

    var95_percent: float
    var95_amount: float
    var99_percent: float
    var99_amount: float
    time_horizon: str = "1_MONTH"


@dataclass(frozen=True)
class ExpectedShortfall(_Serializable):
    es95_percent: float
    es95_amount: float
    es99_percent: float
    es99_amount: float


@dataclass(frozen=True)
class RiskContributor(_Serializable):
    symbol: str
    risk_contribution: float


@dataclass(frozen=True)
class RiskDecomposition(_Serializable):
    systematic_risk: float
    unsystematic_risk: float
    top_risk_contributors: tuple[RiskContributor, ...]


@dataclass(frozen=True)
class BenchmarkComparison(_Serializable):
    symbol: str
    benchmark_return: float
    benchmark_volatility: float
    portfolio_return: float
    alpha: float


@dataclass(frozen=True)
class PortfolioRiskResult(_Serializable):
    total_value: float
    portfolio_volatility: float
    portfolio_beta: float
    expected_return: float
    sharpe_ratio: float
    sortino_ratio: float
    treynor_ratio: float
    information_ratio: float
    max_drawdown: float
    value_at_risk: ValueAtRisk
    expected_shortfall: ExpectedShortfall
    tracking_error: float
    r_squared: float
    risk_decomposition: RiskDecomposition
    benchmark: BenchmarkComparison


# --- Concentration ---


class ComplianceStatus(str, Enum):
    COMPLIANT = "COMPLIANT"
    BREACHED = "BREACHED"


class ConcentrationRisk(str, Enum):
    """Overall concentration tier, ordered from lowest to highest."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    ELEVATED = "ELEVATED"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return list(ConcentrationRisk).index(self)


class AlertSeverity(str, Enum):
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class AlertType(str, Enum):
    SINGLE_POSITION = "SINGLE_POSITION"
    SECTOR = "SECTOR"
    TOP5_HOLDINGS = "TOP5_HOLDINGS"


@dataclass(frozen=True)
class SinglePositionCheck(_Serializable):
    top_holding: Optional[str]
    top_holding_weight: float
    limit: float
    status: ComplianceStatus
    breach: float


@dataclass(frozen=True)
class SectorConcentrationCheck(_Serializable):
    top_sector: Optional[str]
    top_sector_weight: float
    limit: float
    status: ComplianceStatus
    breach: float
    sector_breakdown: Mapping[str, float]


@dataclass(frozen=True)
class Top5ConcentrationCheck(_Serializable):
    top5_weight: float
    limit: float
    status: ComplianceStatus
    breach: float


@dataclass(frozen=True)
class ConcentrationAlert(_Serializable):
    alert_type: AlertType
    severity: AlertSeverity
    message: str
    symbol: Optional[str] = None
    sector: Optional[str] = None


@dataclass(frozen=True)
class ConcentrationResult(_Serializable):
    single_position: SinglePositionCheck
    sector_concentration: SectorConcentrationCheck
    top5_concentration: Top5ConcentrationCheck
    herfindahl_index: float
    effective_positions: float
    overall_concentration_risk: ConcentrationRisk
    alerts: tuple[ConcentrationAlert, ...] = ()

    @property
    def breach_count(self) -> int:
        checks = (self.single_position, self.sector_concentration, self.top5_concentration)
        return sum(1 for c in checks if c.status is ComplianceStatus.BREACHED)


# --- Suitability ---


class DimensionStatus(str, Enum):
    ALIGNED = "ALIGNED"
    MINOR_DEVIATION = "MINOR_DEVIATION"
    MISALIGNED = "MISALIGNED"
    SIGNIFICANT_DEVIATION = "SIGNIFICANT_DEVIATION"
    COMPLIANT = "COMPLIANT"
    MINOR_NON_COMPLIANT = "MINOR_NON_COMPLIANT"
    NON_COMPLIANT = "NON_COMPLIANT"
    CAUTION = "CAUTION"


class SuitabilityRating(str, Enum):
    HIGHLY_SUITABLE = "HIGHLY_SUITABLE"
    SUITABLE = "SUITABLE"
    SUITABLE_WITH_CAVEATS = "SUITABLE_WITH_CAVEATS"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"
    NOT_SUITABLE = "NOT_SUITABLE"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class DimensionResult(_Serializable):
    score: int
    status: DimensionStatus
    detail: str


@dataclass(frozen=True)
class AllocationDimensionResult(DimensionResult):
    equity_gap: float = 0.0
    fixed_income_gap: float = 0.0
    actual: Optional[Any] = None
    recommended: Optional[Any] = None


@dataclass(frozen=True)
class ProfileSummary(_Serializable):
    profile_id: str
    risk_category: str
    max_volatility_tolerance: float
    max_drawdown_tolerance: float


@dataclass(frozen=True)
class SuitabilityResult(_Serializable):
    overall_rating: SuitabilityRating
    overall_score: int
    average_score: float
    recommendation: str
    risk_alignment: DimensionResult
    allocation_alignment: AllocationDimensionResult
    concentration_compliance: DimensionResult
    time_horizon_fit: DimensionResult
    risk_profile: ProfileSummary
    required_actions: tuple[str, ...] = ()

    @property
    def action_required(self) -> bool:
        return bool(self.required_actions)

    @property
    def dimensions(self) -> dict[str, DimensionResult]:
        return {
            "risk_alignment": self.risk_alignment,
            "allocation_alignment": self.allocation_alignment,
            "concentration_compliance": self.concentration_compliance,
            "time_horizon_fit": self.time_horizon_fit,
        }

    def to_dict(self) -> dict[str, Any]:
        data = _plain(self)
        data["action_required"] = self.action_required
        return data


# --- Stress testing ---


@dataclass(frozen=True)
class HoldingImpact(_Serializable):
    symbol: str
    sector: str
    current_value: float
    stressed_value: float
    loss: float
    loss_percent: float
    shock_source: str


@dataclass(frozen=True)
class RankedImpact(_Serializable):
    symbol: str
    loss_percent: float


@dataclass(frozen=True)
class PortfolioImpact(_Serializable):
    current_value: float
    stressed_value: float
    dollar_loss: float
    percentage_loss: float
    recovery_time: str


@dataclass(frozen=True)
class ProfileComparison(_Serializable):
    max_drawdown_tolerance: float
    scenario_drawdown: float
    exceeds_tolerance_by: float
    warning: Optional[str] = None

    @property
    def exceeds_tolerance(self) -> bool:
        return self.exceeds_tolerance_by > 0


@dataclass(frozen=True)
class StressImpactResult(_Serializable):
    scenario_id: str
    scenario_name: str
    portfolio_impact: PortfolioImpact
    holding_impacts: tuple[HoldingImpact, ...]
    worst_hit: tuple[RankedImpact, ...]
    best_protected: tuple[RankedImpact, ...]
    risk_profile_comparison: Optional[ProfileComparison] = None


# --- Recommendations ---


class RecommendationCategory(str, Enum):
    REBALANCING = "REBALANCING"
    DIVERSIFICATION = "DIVERSIFICATION"
    RISK_REDUCTION = "RISK_REDUCTION"
    INCOME = "INCOME"


class Priority(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


@dataclass(frozen=True)
class Recommendation(_Serializable):
    category: RecommendationCategory
    priority: Priority
    title: str
    description: str
    current_value: float
    target_value: float
    expected_impact: Mapping[str, Any] = field(default_factory=dict)
    rule: str = ""


@dataclass(frozen=True)
class OverallAssessment(_Serializable):
    suitability_score: int
    suitability_rating: str
    summary: str


@dataclass(frozen=True)
class RecommendationBundle(_Serializable):
    investor_id: Optional[str]
    profile_id: Optional[str]
    generated_at: datetime
    overall_assessment: OverallAssessment
    recommendations: tuple[Recommendation, ...]
    next_review_date: date
    status: str = "ACTIVE"
