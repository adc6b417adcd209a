"""
Pydantic schemas for risk request validation.

These schemas enforce input validation and define the wire contract
(camelCase field names). Each request converts to the domain entities
or application commands it describes.
No business logic belongs here.
"""

from typing import Any, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from riskfit.application.risk.dtos import (
    CheckSuitabilityCommand,
    ComprehensiveAnalysisCommand,
    GenerateRiskProfileCommand,
    RunStressTestCommand,
)
from riskfit.domain.risk.concentration import ConcentrationThresholds
from riskfit.domain.risk.entities import (
    AssessmentResponse,
    AssetAllocation,
    Holding,
    InvestmentHorizon,
    Investor,
    PortfolioSnapshot,
    RiskCategory,
    RiskLimits,
    RiskProfile,
    SecurityKind,
)
from riskfit.domain.risk.errors import ValidationError

SYMBOL_DESCRIPTION = "Security identifier"
PERCENT_DESCRIPTION = "Percentage, 0-100"

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def parse(schema: type[SchemaT], payload: Any) -> SchemaT:
    """Validate a payload, raising the domain ValidationError on failure.

    The first failing location is reported as the error's field.
    """
    try:
        return schema.model_validate(payload)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise ValidationError(f"{location}: {first['msg']}", field=location or None) from exc


class HoldingSchema(CamelModel):
    """A single portfolio position."""

    symbol: str = Field(..., min_length=1, description=SYMBOL_DESCRIPTION)
    security_type: SecurityKind = Field(SecurityKind.EQUITY, alias="securityType")
    sector: Optional[str] = None
    market_value: float = Field(..., ge=0, alias="marketValue")
    weight: float = Field(..., ge=0, le=100, description=PERCENT_DESCRIPTION)
    beta: Optional[float] = None
    annualized_volatility: Optional[float] = Field(None, ge=0, alias="annualizedVolatility")

    def to_domain(self) -> Holding:
        return Holding(
            symbol=self.symbol,
            security_kind=self.security_type,
            sector=self.sector,
            market_value=self.market_value,
            weight=self.weight,
            beta=self.beta,
            annualized_volatility=self.annualized_volatility,
        )


class AssetAllocationSchema(CamelModel):
    equities: float = Field(..., ge=0, le=100)
    fixed_income: float = Field(..., ge=0, le=100, alias="fixedIncome")
    alternatives: float = Field(0.0, ge=0, le=100)
    cash: float = Field(0.0, ge=0, le=100)

    def to_domain(self) -> AssetAllocation:
        return AssetAllocation(
            equities=self.equities,
            fixed_income=self.fixed_income,
            alternatives=self.alternatives,
            cash=self.cash,
        )


class PortfolioSnapshotSchema(CamelModel):
    """Holdings snapshot submitted for analysis.

    Attributes:
        total_value: Total market value, strictly positive.
        holdings: Positions; may be empty.
        cash_position: Cash held outside the listed holdings.
        asset_allocation: Actual split; derived from holdings when absent.
    """

    total_value: float = Field(..., gt=0, alias="totalValue")
    holdings: list[HoldingSchema]
    cash_position: Optional[float] = Field(None, ge=0, alias="cashPosition")
    asset_allocation: Optional[AssetAllocationSchema] = Field(None, alias="assetAllocation")

    def to_domain(self) -> PortfolioSnapshot:
        return PortfolioSnapshot(
            total_value=self.total_value,
            holdings=tuple(h.to_domain() for h in self.holdings),
            cash_position=self.cash_position,
            asset_allocation=self.asset_allocation.to_domain() if self.asset_allocation else None,
        )


class ConcentrationThresholdsSchema(CamelModel):
    single_position_limit: float = Field(10.0, ge=0, le=100, alias="singlePositionLimit")
    sector_limit: float = Field(25.0, ge=0, le=100, alias="sectorLimit")
    top5_limit: float = Field(50.0, ge=0, le=100, alias="top5Limit")

    def to_domain(self) -> ConcentrationThresholds:
        return ConcentrationThresholds(
            single_position_limit=self.single_position_limit,
            sector_limit=self.sector_limit,
            top5_limit=self.top5_limit,
        )


class InvestorSchema(CamelModel):
    investor_id: str = Field(..., min_length=1, alias="investorId")
    investment_horizon: InvestmentHorizon = Field(..., alias="investmentHorizon")
    liquid_net_worth: float = Field(0.0, ge=0, alias="liquidNetWorth")
    annual_income: float = Field(0.0, ge=0, alias="annualIncome")

    def to_domain(self) -> Investor:
        return Investor(
            investor_id=self.investor_id,
            investment_horizon=self.investment_horizon,
            liquid_net_worth=self.liquid_net_worth,
            annual_income=self.annual_income,
        )


class RiskProfileSchema(CamelModel):
    """A risk profile supplied directly by the caller."""

    investor_id: str = Field(..., min_length=1, alias="investorId")
    risk_category: RiskCategory = Field(..., alias="riskCategory")
    composite_risk_score: float = Field(..., ge=0, le=100, alias="compositeRiskScore")
    risk_tolerance_score: float = Field(..., ge=0, le=100, alias="riskToleranceScore")
    risk_capacity_score: float = Field(..., ge=0, le=100, alias="riskCapacityScore")
    recommended_allocation: AssetAllocationSchema = Field(..., alias="recommendedAllocation")
    max_drawdown_tolerance: float = Field(..., ge=0, le=100, alias="maxDrawdownTolerance")
    max_volatility_tolerance: float = Field(..., ge=0, le=100, alias="maxVolatilityTolerance")
    max_concentration_limit: float = Field(..., ge=0, le=100, alias="maxConcentrationLimit")
    is_active: bool = Field(True, alias="isActive")

    def to_domain(self) -> RiskProfile:
        return RiskProfile(
            investor_id=self.investor_id,
            risk_category=self.risk_category,
            composite_risk_score=self.composite_risk_score,
            risk_tolerance_score=self.risk_tolerance_score,
            risk_capacity_score=self.risk_capacity_score,
            recommended_allocation=self.recommended_allocation.to_domain(),
            risk_limits=RiskLimits(
                max_drawdown_tolerance=self.max_drawdown_tolerance,
                max_volatility_tolerance=self.max_volatility_tolerance,
                max_concentration_limit=self.max_concentration_limit,
            ),
            is_active=self.is_active,
        )


class AssessmentResponseSchema(CamelModel):
    question_id: str = Field(..., min_length=1, alias="questionId")
    selected_option: str = Field(..., min_length=1, alias="selectedOption")

    def to_domain(self) -> AssessmentResponse:
        return AssessmentResponse(
            question_id=self.question_id, selected_option=self.selected_option
        )


# --- Requests ---


class GenerateRiskProfileRequest(CamelModel):
    investor_id: str = Field(..., min_length=1, alias="investorId")
    responses: list[AssessmentResponseSchema] = Field(..., min_length=1)

    def to_command(self) -> GenerateRiskProfileCommand:
        return GenerateRiskProfileCommand(
            investor_id=self.investor_id,
            responses=tuple(r.to_domain() for r in self.responses),
        )


class SuitabilityRequest(CamelModel):
    investor_id: str = Field(..., min_length=1, alias="investorId")
    portfolio_data: PortfolioSnapshotSchema = Field(..., alias="portfolioData")

    def to_command(self) -> CheckSuitabilityCommand:
        return CheckSuitabilityCommand(
            investor_id=self.investor_id, portfolio=self.portfolio_data.to_domain()
        )


class StressTestRequest(CamelModel):
    portfolio_data: PortfolioSnapshotSchema = Field(..., alias="portfolioData")
    scenario_ids: list[str] = Field(..., min_length=1, alias="scenarioIds")
    investor_id: Optional[str] = Field(None, alias="investorId")

    def to_command(self) -> RunStressTestCommand:
        return RunStressTestCommand(
            portfolio=self.portfolio_data.to_domain(),
            scenario_ids=tuple(self.scenario_ids),
            investor_id=self.investor_id,
        )


class ComprehensiveAnalysisRequest(CamelModel):
    """Full review request.

    Stress scenarios run only when ``includeStressTests`` is set and at
    least one scenario id is given.
    """

    investor_id: str = Field(..., min_length=1, alias="investorId")
    portfolio_data: PortfolioSnapshotSchema = Field(..., alias="portfolioData")
    include_stress_tests: bool = Field(False, alias="includeStressTests")
    scenario_ids: list[str] = Field(default_factory=list, alias="scenarioIds")
    benchmark_symbol: Optional[str] = Field(None, alias="benchmarkSymbol")

    def to_command(self) -> ComprehensiveAnalysisCommand:
        scenario_ids = tuple(self.scenario_ids) if self.include_stress_tests else ()
        return ComprehensiveAnalysisCommand(
            investor_id=self.investor_id,
            portfolio=self.portfolio_data.to_domain(),
            scenario_ids=scenario_ids,
            benchmark_symbol=self.benchmark_symbol,
        )
