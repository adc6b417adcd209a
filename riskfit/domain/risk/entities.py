"""
Domain entities for the risk bounded context.

Entities are immutable input records consumed by the calculators.
They validate their own invariants on construction so that a
ValidationError is always raised before any computation begins.
They contain no framework imports and no IO operations.
"""

import hashlib
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Mapping, Optional

from riskfit.domain.risk.errors import ValidationError


class SecurityKind(Enum):
    """Kind of security held in a portfolio."""

    EQUITY = "equity"
    BOND = "bond"
    FUND = "fund"
    CASH = "cash"


class InvestmentHorizon(Enum):
    """Investor's stated investment horizon."""

    SHORT_TERM = "SHORT_TERM"
    MEDIUM_TERM = "MEDIUM_TERM"
    LONG_TERM = "LONG_TERM"


class RiskCategory(Enum):
    """Five ordinal risk tiers, lowest risk first."""

    CONSERVATIVE = "CONSERVATIVE"
    MODERATELY_CONSERVATIVE = "MODERATELY_CONSERVATIVE"
    MODERATE = "MODERATE"
    MODERATELY_AGGRESSIVE = "MODERATELY_AGGRESSIVE"
    AGGRESSIVE = "AGGRESSIVE"

    @property
    def code(self) -> int:
        """Ordinal code, 1 (Conservative) to 5 (Aggressive)."""
        return list(RiskCategory).index(self) + 1

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()

    @classmethod
    def from_code(cls, code: int) -> "RiskCategory":
        members = list(cls)
        if not 1 <= code <= len(members):
            raise ValidationError(f"Unknown risk category code: {code}", field="riskCategoryCode")
        return members[code - 1]


class ScenarioCategory(Enum):
    """Origin of a stress scenario."""

    HISTORICAL = "HISTORICAL"
    HYPOTHETICAL = "HYPOTHETICAL"
    REGULATORY = "REGULATORY"


def _require_finite(value: float, name: str) -> None:
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be numeric", field=name)
    try:
        numeric = float(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{name} must be numeric", field=name) from exc
    if not math.isfinite(numeric):
        raise ValidationError(f"{name} must be a finite number", field=name)


def _require_score(value: float, name: str) -> None:
    _require_finite(value, name)
    if not 0 <= value <= 100:
        raise ValidationError(f"{name} must be between 0 and 100, got {value}", field=name)


def derive_id(prefix: str, *parts: object) -> str:
    """Stable record id built from the values that identify the record."""
    digest = hashlib.sha1("|".join(str(p) for p in parts).encode("utf-8")).hexdigest()
    return f"{prefix}-{digest[:12]}"


@dataclass(frozen=True)
class Holding:
    """A single position in a portfolio snapshot.

    Attributes:
        symbol: Security identifier.
        security_kind: equity, bond, fund or cash.
        sector: Sector tag (e.g. TECHNOLOGY); holdings without one are grouped as OTHER.
        market_value: Current market value in portfolio currency.
        weight: Percentage of total portfolio value, 0-100.
        beta: Optional beta; defaulted from the sector/kind table when absent.
        annualized_volatility: Optional volatility in percent; defaulted likewise.
    """

    symbol: str
    security_kind: SecurityKind
    sector: Optional[str]
    market_value: float
    weight: float
    beta: Optional[float] = None
    annualized_volatility: Optional[float] = None

    def __post_init__(self) -> None:
        if not self.symbol:
            raise ValidationError("Holding symbol is required", field="symbol")
        if not isinstance(self.security_kind, SecurityKind):
            raise ValidationError(
                f"Holding {self.symbol} has an invalid security kind", field="securityKind"
            )
        _require_finite(self.market_value, "marketValue")
        if self.market_value < 0:
            raise ValidationError(
                f"Holding {self.symbol} market value must not be negative", field="marketValue"
            )
        _require_finite(self.weight, "weight")
        if not 0 <= self.weight <= 100:
            raise ValidationError(
                f"Holding {self.symbol} weight must be between 0 and 100, got {self.weight}",
                field="weight",
            )
        if self.beta is not None:
            _require_finite(self.beta, "beta")
        if self.annualized_volatility is not None:
            _require_finite(self.annualized_volatility, "annualizedVolatility")
            if self.annualized_volatility < 0:
                raise ValidationError(
                    f"Holding {self.symbol} volatility must not be negative",
                    field="annualizedVolatility",
                )

    @property
    def sector_tag(self) -> str:
        """Sector tag used for grouping; missing sectors collapse to OTHER."""
        return self.sector or "OTHER"


@dataclass(frozen=True)
class AssetAllocation:
    """Percentages across the four asset classes."""

    equities: float
    fixed_income: float
    alternatives: float = 0.0
    cash: float = 0.0

    def __post_init__(self) -> None:
        for name in ("equities", "fixed_income", "alternatives", "cash"):
            _require_finite(getattr(self, name), name)


@dataclass(frozen=True)
class PortfolioSnapshot:
    """Immutable snapshot of a portfolio at analysis time.

    The sum of holding weights is expected to be close to 100 but drift
    is tolerated; no calculation renormalizes the weights.
    """

    total_value: float
    holdings: tuple[Holding, ...]
    cash_position: Optional[float] = None
    asset_allocation: Optional[AssetAllocation] = None

    def __post_init__(self) -> None:
        if self.holdings is None:
            raise ValidationError("Portfolio holdings are required", field="holdings")
        # Lists are accepted for convenience but stored as a tuple.
        object.__setattr__(self, "holdings", tuple(self.holdings))
        for holding in self.holdings:
            if not isinstance(holding, Holding):
                raise ValidationError("Portfolio holdings must be Holding records", field="holdings")
        _require_finite(self.total_value, "totalValue")
        if self.total_value <= 0:
            raise ValidationError("Portfolio total value must be positive", field="totalValue")
        if self.cash_position is not None:
            _require_finite(self.cash_position, "cashPosition")

    @property
    def total_weight(self) -> float:
        return sum(h.weight for h in self.holdings)


@dataclass(frozen=True)
class Investor:
    """The demographic facts the scorer and suitability checks need."""

    investor_id: str
    investment_horizon: InvestmentHorizon
    liquid_net_worth: float = 0.0
    annual_income: float = 0.0

    def __post_init__(self) -> None:
        if not self.investor_id:
            raise ValidationError("investorId is required", field="investorId")
        if not isinstance(self.investment_horizon, InvestmentHorizon):
            raise ValidationError("investmentHorizon is invalid", field="investmentHorizon")
        _require_finite(self.liquid_net_worth, "liquidNetWorth")
        _require_finite(self.annual_income, "annualIncome")


@dataclass(frozen=True)
class AssessmentResponse:
    """One answered question: (questionId, selectedOptionId)."""

    question_id: str
    selected_option: str


@dataclass(frozen=True)
class ScoredResponse:
    """A response resolved against the questionnaire definition."""

    question_id: str
    question_category: str
    question_text: str
    selected_option: str
    option_text: str
    score: int


@dataclass(frozen=True)
class Assessment:
    """A scored questionnaire submission."""

    investor_id: str
    responses: tuple[ScoredResponse, ...]
    raw_score: int
    max_possible_score: int
    percentile_score: int
    assessment_id: str = ""

    def __post_init__(self) -> None:
        if not self.assessment_id:
            answers = (f"{r.question_id}={r.selected_option}" for r in self.responses)
            object.__setattr__(
                self, "assessment_id", derive_id("assessment", self.investor_id, *answers)
            )


@dataclass(frozen=True)
class RiskLimits:
    """Tolerance limits attached to a risk category, all in percent."""

    max_drawdown_tolerance: float
    max_volatility_tolerance: float
    max_concentration_limit: float


@dataclass(frozen=True)
class RiskProfile:
    """An investor's risk profile derived from a completed assessment.

    Exactly one profile per investor is active at a time. Superseding is
    modelled as producing a closed copy of the old record (see ``supersede``);
    the orchestration layer swaps the active pointer.
    """

    investor_id: str
    risk_category: RiskCategory
    composite_risk_score: float
    risk_tolerance_score: float
    risk_capacity_score: float
    recommended_allocation: AssetAllocation
    risk_limits: RiskLimits
    risk_required_score: float = 60.0
    loss_aversion_score: float = 0.0
    volatility_tolerance_score: float = 0.0
    time_horizon_score: float = 50.0
    assessment_id: Optional[str] = None
    is_active: bool = True
    valid_from: Optional[datetime] = None
    valid_to: Optional[datetime] = None
    profile_id: str = ""

    def __post_init__(self) -> None:
        if not isinstance(self.risk_category, RiskCategory):
            raise ValidationError("riskCategory is invalid", field="riskCategory")
        for name in (
            "composite_risk_score",
            "risk_tolerance_score",
            "risk_capacity_score",
            "risk_required_score",
            "loss_aversion_score",
            "volatility_tolerance_score",
            "time_horizon_score",
        ):
            _require_score(getattr(self, name), name)
        if not self.profile_id:
            profile_id = derive_id(
                "profile",
                self.investor_id,
                self.assessment_id,
                self.risk_category.value,
                self.risk_tolerance_score,
                self.risk_required_score,
                self.valid_from.isoformat() if self.valid_from else "",
            )
            object.__setattr__(self, "profile_id", profile_id)

    @property
    def max_drawdown_tolerance(self) -> float:
        return self.risk_limits.max_drawdown_tolerance

    @property
    def max_volatility_tolerance(self) -> float:
        return self.risk_limits.max_volatility_tolerance

    @property
    def max_concentration_limit(self) -> float:
        return self.risk_limits.max_concentration_limit

    def supersede(self, now: datetime) -> "RiskProfile":
        """Return a closed copy of this profile, inactive from ``now``."""
        return replace(self, is_active=False, valid_to=now)


@dataclass(frozen=True)
class ShockParameters:
    """Market-wide shocks of a scenario, in percent (spread in basis points)."""

    equity_shock: float
    bond_shock: float
    credit_spread_change: float = 0.0
    volatility_spike: float = 0.0


@dataclass(frozen=True)
class Scenario:
    """A named stress scenario. Read-only reference data."""

    scenario_id: str
    scenario_name: str
    scenario_category: ScenarioCategory
    shock_parameters: ShockParameters
    sector_shocks: Mapping[str, float] = field(default_factory=dict)
    description: str = ""

    def __post_init__(self) -> None:
        if not self.scenario_id:
            raise ValidationError("scenarioId is required", field="scenarioId")
        object.__setattr__(self, "sector_shocks", MappingProxyType(dict(self.sector_shocks)))

    def shock_for(self, holding: Holding) -> tuple[float, str]:
        """Return (shock percent, source) applicable to ``holding``.

        Bonds take the bond shock regardless of sector. Everything else takes
        its sector-specific shock when defined, else the generic equity shock.
        """
        if holding.security_kind is SecurityKind.BOND:
            return self.shock_parameters.bond_shock, "BOND"
        sector = holding.sector_tag
        if sector in self.sector_shocks:
            return self.sector_shocks[sector], "SECTOR"
        return self.shock_parameters.equity_shock, "EQUITY"
