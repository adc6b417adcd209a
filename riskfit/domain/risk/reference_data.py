"""
Reference data for the risk bounded context.

Lookup tables, the questionnaire definition and the stress scenario
catalog. All of it is versioned configuration data: load it once, never
mutate it, and replace it as a whole ``ReferenceData`` snapshot.

Table version: 2024-06 (REFERENCE_DATA_VERSION).
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from riskfit.domain.risk.entities import (
    AssetAllocation,
    RiskCategory,
    RiskLimits,
    Scenario,
    ScenarioCategory,
    SecurityKind,
    ShockParameters,
)
from riskfit.domain.risk.errors import ScenarioNotFoundError, ValidationError

REFERENCE_DATA_VERSION = "2024-06"

# --- Default factor tables (annualized volatility in %, beta) ---

SECTOR_VOLATILITY: Mapping[str, float] = MappingProxyType({
    "TECHNOLOGY": 28.0,
    "FINANCIAL": 22.0,
    "HEALTHCARE": 18.0,
    "CONSUMER_DISCRETIONARY": 20.0,
    "CONSUMER_STAPLES": 14.0,
    "UTILITIES": 12.0,
    "ENERGY": 26.0,
    "REAL_ESTATE": 20.0,
    "INDUSTRIALS": 19.0,
    "MATERIALS": 21.0,
    "TELECOMMUNICATIONS": 18.0,
})

SECTOR_BETA: Mapping[str, float] = MappingProxyType({
    "TECHNOLOGY": 1.25,
    "FINANCIAL": 1.15,
    "HEALTHCARE": 0.85,
    "CONSUMER_DISCRETIONARY": 1.05,
    "CONSUMER_STAPLES": 0.70,
    "UTILITIES": 0.60,
    "ENERGY": 1.10,
    "REAL_ESTATE": 0.95,
    "INDUSTRIALS": 1.08,
    "MATERIALS": 1.12,
    "TELECOMMUNICATIONS": 0.80,
})

# Kind-level overrides take precedence over the sector tables.
KIND_VOLATILITY: Mapping[SecurityKind, float] = MappingProxyType({
    SecurityKind.BOND: 6.0,
    SecurityKind.FUND: 15.0,
    SecurityKind.CASH: 0.0,
})

KIND_BETA: Mapping[SecurityKind, float] = MappingProxyType({
    SecurityKind.BOND: 0.10,
    SecurityKind.FUND: 1.00,
    SecurityKind.CASH: 0.0,
})

FALLBACK_VOLATILITY = 20.0
FALLBACK_BETA = 1.00


def default_volatility(sector: Optional[str], kind: SecurityKind) -> float:
    """Default annualized volatility (%) for a sector/kind pair."""
    if kind in KIND_VOLATILITY:
        return KIND_VOLATILITY[kind]
    return SECTOR_VOLATILITY.get(sector or "", FALLBACK_VOLATILITY)


def default_beta(sector: Optional[str], kind: SecurityKind) -> float:
    """Default beta for a sector/kind pair."""
    if kind in KIND_BETA:
        return KIND_BETA[kind]
    return SECTOR_BETA.get(sector or "", FALLBACK_BETA)


# --- Risk category tables ---

# (upper bound of raw score, inclusive) -> category; anything above the last band is AGGRESSIVE.
RISK_CATEGORY_BANDS: tuple[tuple[int, RiskCategory], ...] = (
    (30, RiskCategory.CONSERVATIVE),
    (45, RiskCategory.MODERATELY_CONSERVATIVE),
    (55, RiskCategory.MODERATE),
    (65, RiskCategory.MODERATELY_AGGRESSIVE),
)

RECOMMENDED_ALLOCATIONS: Mapping[RiskCategory, AssetAllocation] = MappingProxyType({
    RiskCategory.CONSERVATIVE: AssetAllocation(equities=20, fixed_income=60, alternatives=5, cash=15),
    RiskCategory.MODERATELY_CONSERVATIVE: AssetAllocation(equities=40, fixed_income=45, alternatives=5, cash=10),
    RiskCategory.MODERATE: AssetAllocation(equities=60, fixed_income=30, alternatives=5, cash=5),
    RiskCategory.MODERATELY_AGGRESSIVE: AssetAllocation(equities=75, fixed_income=15, alternatives=7, cash=3),
    RiskCategory.AGGRESSIVE: AssetAllocation(equities=90, fixed_income=5, alternatives=3, cash=2),
})

RISK_LIMITS: Mapping[RiskCategory, RiskLimits] = MappingProxyType({
    RiskCategory.CONSERVATIVE: RiskLimits(10, 8, 15),
    RiskCategory.MODERATELY_CONSERVATIVE: RiskLimits(15, 12, 20),
    RiskCategory.MODERATE: RiskLimits(25, 18, 25),
    RiskCategory.MODERATELY_AGGRESSIVE: RiskLimits(35, 22, 30),
    RiskCategory.AGGRESSIVE: RiskLimits(50, 30, 35),
})


# --- Questionnaire ---


@dataclass(frozen=True)
class QuestionOption:
    option_id: str
    text: str
    score: int


@dataclass(frozen=True)
class Question:
    question_id: str
    category: str
    question_text: str
    options: tuple[QuestionOption, ...]

    def find_option(self, option_id: str) -> Optional[QuestionOption]:
        for option in self.options:
            if option.option_id == option_id:
                return option
        return None


@dataclass(frozen=True)
class Questionnaire:
    """A fixed questionnaire definition with its maximum attainable score."""

    questionnaire_id: str
    questionnaire_type: str
    version: str
    questions: tuple[Question, ...]
    max_score: int

    def __post_init__(self) -> None:
        if self.max_score <= 0:
            raise ValidationError("Questionnaire maxScore must be positive", field="maxScore")
        ids = [q.question_id for q in self.questions]
        if len(ids) != len(set(ids)):
            raise ValidationError("Questionnaire question ids must be unique", field="questions")

    def find_question(self, question_id: str) -> Optional[Question]:
        for question in self.questions:
            if question.question_id == question_id:
                return question
        return None


def _question(question_id: str, category: str, text: str, answers: Iterable[str]) -> Question:
    # Answers are listed from most cautious (score 1) to most risk-seeking (score 5).
    options = tuple(
        QuestionOption(option_id=f"{question_id}_{letter}", text=answer, score=score)
        for score, (letter, answer) in enumerate(zip("ABCDE", answers), start=1)
    )
    return Question(question_id=question_id, category=category, question_text=text, options=options)


COMPREHENSIVE_QUESTIONNAIRE = Questionnaire(
    questionnaire_id="RQ-COMPREHENSIVE",
    questionnaire_type="COMPREHENSIVE",
    version="1.0",
    max_score=75,
    questions=(
        _question("Q1", "TIME_HORIZON", "When do you expect to start withdrawing a significant part of this money?", (
            "Within 1 year", "In 1 to 3 years", "In 3 to 5 years", "In 5 to 10 years", "In more than 10 years",
        )),
        _question("Q2", "TIME_HORIZON", "Once withdrawals begin, over how long will you spend the money?", (
            "All at once", "Within 2 years", "Over 3 to 5 years", "Over 6 to 10 years", "Over more than 10 years",
        )),
        _question("Q3", "TIME_HORIZON", "What is the primary goal for this investment?", (
            "Preserve capital", "Generate steady income", "Income with some growth",
            "Long-term growth", "Maximum long-term growth",
        )),
        _question("Q4", "RISK_TOLERANCE", "Your portfolio falls 20% in a month. What do you do?", (
            "Sell everything", "Sell some holdings", "Do nothing", "Buy a little more", "Buy significantly more",
        )),
        _question("Q5", "RISK_TOLERANCE", "Which one-year range of outcomes would you accept on $100,000?", (
            "$98,000 to $104,000", "$94,000 to $110,000", "$88,000 to $118,000",
            "$80,000 to $128,000", "$70,000 to $145,000",
        )),
        _question("Q6", "RISK_TOLERANCE", "How would you describe your attitude to investment risk?", (
            "I avoid risk whenever possible", "I accept little risk", "I accept moderate risk for moderate returns",
            "I accept above-average risk", "I seek high risk for high returns",
        )),
        _question("Q7", "RISK_TOLERANCE", "How do you feel when markets are volatile?", (
            "Very anxious", "Uneasy", "Indifferent", "Somewhat comfortable", "I see opportunity",
        )),
        _question("Q8", "RISK_TOLERANCE", "What is the largest one-year loss you could accept?", (
            "No loss", "Up to 5%", "Up to 15%", "Up to 25%", "More than 25%",
        )),
        _question("Q9", "FINANCIAL_SITUATION", "How stable is your current and future income?", (
            "Very unstable", "Somewhat unstable", "Fairly stable", "Stable", "Very stable",
        )),
        _question("Q10", "FINANCIAL_SITUATION", "How many months of expenses do you hold in emergency savings?", (
            "None", "Less than 3 months", "3 to 6 months", "6 to 12 months", "More than 12 months",
        )),
        _question("Q11", "FINANCIAL_SITUATION", "What share of your liquid net worth does this investment represent?", (
            "More than 75%", "50% to 75%", "25% to 50%", "10% to 25%", "Less than 10%",
        )),
        _question("Q12", "FINANCIAL_SITUATION", "How much of your income goes to debt repayment?", (
            "More than 40%", "25% to 40%", "10% to 25%", "Less than 10%", "None",
        )),
        _question("Q13", "INVESTMENT_KNOWLEDGE", "How would you rate your investment knowledge?", (
            "None", "Limited", "Moderate", "Good", "Extensive",
        )),
        _question("Q14", "INVESTMENT_KNOWLEDGE", "Which investments have you held before?", (
            "Only bank deposits", "Bonds or money market funds", "Mutual funds or ETFs",
            "Individual stocks", "Options, futures or other derivatives",
        )),
        _question("Q15", "INVESTMENT_KNOWLEDGE", "How many years have you been investing?", (
            "Never", "Less than 2 years", "2 to 5 years", "5 to 10 years", "More than 10 years",
        )),
    ),
)


# --- Stress scenarios ---


class ScenarioCatalog:
    """Read-only lookup of stress scenarios by id."""

    def __init__(self, scenarios: Iterable[Scenario]) -> None:
        by_id: dict[str, Scenario] = {}
        for scenario in scenarios:
            if scenario.scenario_id in by_id:
                raise ValidationError(
                    f"Duplicate scenario id: {scenario.scenario_id}", field="scenarioId"
                )
            by_id[scenario.scenario_id] = scenario
        self._scenarios = MappingProxyType(by_id)

    def get(self, scenario_id: str) -> Scenario:
        """Return the scenario or raise ScenarioNotFoundError."""
        try:
            return self._scenarios[scenario_id]
        except KeyError:
            raise ScenarioNotFoundError(scenario_id) from None

    def ids(self) -> list[str]:
        return list(self._scenarios)

    def by_category(self, category: ScenarioCategory) -> list[Scenario]:
        return [s for s in self._scenarios.values() if s.scenario_category is category]

    def __contains__(self, scenario_id: object) -> bool:
        return scenario_id in self._scenarios

    def __iter__(self):
        return iter(self._scenarios.values())

    def __len__(self) -> int:
        return len(self._scenarios)


DEFAULT_SCENARIOS: tuple[Scenario, ...] = (
    Scenario(
        scenario_id="SCN-001",
        scenario_name="2008 Global Financial Crisis",
        scenario_category=ScenarioCategory.HISTORICAL,
        shock_parameters=ShockParameters(
            equity_shock=-45.0, bond_shock=5.0, credit_spread_change=400, volatility_spike=150
        ),
        sector_shocks={
            "FINANCIAL": -65.0,
            "REAL_ESTATE": -60.0,
            "CONSUMER_DISCRETIONARY": -50.0,
            "CONSUMER_STAPLES": -20.0,
            "HEALTHCARE": -25.0,
            "UTILITIES": -30.0,
        },
        description="Peak-to-trough replay of the 2007-2009 credit crisis.",
    ),
    Scenario(
        scenario_id="SCN-002",
        scenario_name="2020 COVID-19 Crash",
        scenario_category=ScenarioCategory.HISTORICAL,
        shock_parameters=ShockParameters(
            equity_shock=-34.0, bond_shock=3.0, credit_spread_change=250, volatility_spike=200
        ),
        sector_shocks={
            "ENERGY": -55.0,
            "FINANCIAL": -40.0,
            "INDUSTRIALS": -38.0,
            "TECHNOLOGY": -28.0,
            "HEALTHCARE": -22.0,
            "CONSUMER_STAPLES": -15.0,
        },
        description="February-March 2020 pandemic sell-off.",
    ),
    Scenario(
        scenario_id="SCN-003",
        scenario_name="2000-2002 Dot-Com Bust",
        scenario_category=ScenarioCategory.HISTORICAL,
        shock_parameters=ShockParameters(
            equity_shock=-49.0, bond_shock=10.0, credit_spread_change=150, volatility_spike=60
        ),
        sector_shocks={
            "TECHNOLOGY": -78.0,
            "TELECOMMUNICATIONS": -65.0,
            "UTILITIES": -10.0,
            "CONSUMER_STAPLES": -5.0,
        },
        description="Collapse of technology valuations after the 1990s bubble.",
    ),
    Scenario(
        scenario_id="SCN-004",
        scenario_name="2022 Inflation and Rate Shock",
        scenario_category=ScenarioCategory.HISTORICAL,
        shock_parameters=ShockParameters(
            equity_shock=-25.0, bond_shock=-17.0, credit_spread_change=120, volatility_spike=40
        ),
        sector_shocks={
            "TECHNOLOGY": -35.0,
            "CONSUMER_DISCRETIONARY": -37.0,
            "TELECOMMUNICATIONS": -40.0,
            "ENERGY": 30.0,
            "UTILITIES": -2.0,
        },
        description="Simultaneous equity and bond drawdown as policy rates rose.",
    ),
    Scenario(
        scenario_id="SCN-005",
        scenario_name="Rapid Rate Rise (+300bp)",
        scenario_category=ScenarioCategory.HYPOTHETICAL,
        shock_parameters=ShockParameters(
            equity_shock=-15.0, bond_shock=-12.0, credit_spread_change=100, volatility_spike=50
        ),
        sector_shocks={
            "REAL_ESTATE": -25.0,
            "UTILITIES": -20.0,
            "FINANCIAL": 5.0,
        },
        description="Parallel 300bp shift in the yield curve over six months.",
    ),
    Scenario(
        scenario_id="SCN-006",
        scenario_name="Severely Adverse Supervisory Scenario",
        scenario_category=ScenarioCategory.REGULATORY,
        shock_parameters=ShockParameters(
            equity_shock=-40.0, bond_shock=-3.0, credit_spread_change=550, volatility_spike=170
        ),
        sector_shocks={
            "FINANCIAL": -55.0,
            "REAL_ESTATE": -45.0,
            "ENERGY": -45.0,
        },
        description="Supervisory severe recession with a sharp rise in corporate spreads.",
    ),
)


@dataclass(frozen=True)
class ReferenceData:
    """Immutable snapshot of everything the core reads but does not own."""

    questionnaire: Questionnaire = COMPREHENSIVE_QUESTIONNAIRE
    scenarios: ScenarioCatalog = field(default_factory=lambda: ScenarioCatalog(DEFAULT_SCENARIOS))
    version: str = REFERENCE_DATA_VERSION
