"""
Adapter: Reference data loading and publication.

Implements the ReferenceDataSource port.
Reads the questionnaire and scenario catalog from a JSON file and
publishes whole snapshots: readers always see either the previous or
the new ReferenceData, never a mixture.

File format (camelCase, both sections optional)::

    {
      "version": "2024-06",
      "questionnaire": {"questionnaireId": ..., "questions": [...], "maxScore": 75},
      "scenarios": [{"scenarioId": "SCN-001", "shockParameters": {...}, ...}]
    }
"""

import json
import logging
import threading
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from riskfit.domain.risk.entities import Scenario, ScenarioCategory, ShockParameters
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.ports import ReferenceDataSource
from riskfit.domain.risk.reference_data import (
    COMPREHENSIVE_QUESTIONNAIRE,
    DEFAULT_SCENARIOS,
    REFERENCE_DATA_VERSION,
    Question,
    QuestionOption,
    Questionnaire,
    ReferenceData,
    ScenarioCatalog,
)

logger = logging.getLogger(__name__)


class _FileModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class OptionFile(_FileModel):
    option_id: str = Field(..., alias="optionId", min_length=1)
    text: str = ""
    score: int = Field(..., ge=0)


class QuestionFile(_FileModel):
    question_id: str = Field(..., alias="questionId", min_length=1)
    category: str = ""
    question_text: str = Field("", alias="questionText")
    options: list[OptionFile] = Field(..., min_length=1)


class QuestionnaireFile(_FileModel):
    questionnaire_id: str = Field(..., alias="questionnaireId")
    questionnaire_type: str = Field("COMPREHENSIVE", alias="questionnaireType")
    version: str = "1.0"
    questions: list[QuestionFile] = Field(..., min_length=1)
    max_score: int = Field(..., alias="maxScore", gt=0)

    def to_domain(self) -> Questionnaire:
        return Questionnaire(
            questionnaire_id=self.questionnaire_id,
            questionnaire_type=self.questionnaire_type,
            version=self.version,
            questions=tuple(
                Question(
                    question_id=q.question_id,
                    category=q.category,
                    question_text=q.question_text,
                    options=tuple(
                        QuestionOption(option_id=o.option_id, text=o.text, score=o.score)
                        for o in q.options
                    ),
                )
                for q in self.questions
            ),
            max_score=self.max_score,
        )


class ShockParametersFile(_FileModel):
    equity_shock: float = Field(..., alias="equityShock")
    bond_shock: float = Field(..., alias="bondShock")
    credit_spread_change: float = Field(0.0, alias="creditSpreadChange")
    volatility_spike: float = Field(0.0, alias="volatilitySpike")


class ScenarioFile(_FileModel):
    scenario_id: str = Field(..., alias="scenarioId", min_length=1)
    scenario_name: str = Field(..., alias="scenarioName")
    scenario_category: ScenarioCategory = Field(
        ScenarioCategory.HYPOTHETICAL, alias="scenarioCategory"
    )
    description: str = ""
    shock_parameters: ShockParametersFile = Field(..., alias="shockParameters")
    sector_shocks: dict[str, float] = Field(default_factory=dict, alias="sectorShocks")

    def to_domain(self) -> Scenario:
        shocks = self.shock_parameters
        return Scenario(
            scenario_id=self.scenario_id,
            scenario_name=self.scenario_name,
            scenario_category=self.scenario_category,
            shock_parameters=ShockParameters(
                equity_shock=shocks.equity_shock,
                bond_shock=shocks.bond_shock,
                credit_spread_change=shocks.credit_spread_change,
                volatility_spike=shocks.volatility_spike,
            ),
            sector_shocks=dict(self.sector_shocks),
            description=self.description,
        )


class ReferenceFile(_FileModel):
    version: str = REFERENCE_DATA_VERSION
    questionnaire: Optional[QuestionnaireFile] = None
    scenarios: Optional[list[ScenarioFile]] = None


def parse_reference_data(payload: dict) -> ReferenceData:
    """Build a ReferenceData snapshot from a decoded JSON document.

    Sections missing from the document keep the built-in defaults.

    Raises:
        ValidationError: If the document does not match the format.
    """
    try:
        document = ReferenceFile.model_validate(payload)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid reference data: {exc.errors()[0]['msg']}") from exc

    questionnaire = (
        document.questionnaire.to_domain()
        if document.questionnaire is not None
        else COMPREHENSIVE_QUESTIONNAIRE
    )
    scenarios = (
        [s.to_domain() for s in document.scenarios]
        if document.scenarios is not None
        else DEFAULT_SCENARIOS
    )
    return ReferenceData(
        questionnaire=questionnaire,
        scenarios=ScenarioCatalog(scenarios),
        version=document.version,
    )


def load_reference_data(path: Union[str, Path]) -> ReferenceData:
    """Load a reference-data snapshot from a JSON file.

    Args:
        path: Location of the JSON document.

    Raises:
        ValidationError: If the file cannot be read, is not UTF-8 JSON, or is
            not in the expected format.
    """
    path = Path(path)
    logger.info("Loading reference data from %s", path)
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError(f"Reference data file {path} is not UTF-8 text") from exc
    except OSError as exc:
        logger.error("Cannot read reference data file %s: %s", path, exc)
        reason = exc.strerror or exc
        raise ValidationError(f"Reference data file {path} cannot be read: {reason}") from exc
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValidationError(f"Reference data file {path} is not valid JSON: {exc.msg}") from exc
    if not isinstance(payload, dict):
        raise ValidationError(f"Reference data file {path} must contain a JSON object")

    data = parse_reference_data(payload)
    logger.info(
        "Loaded reference data version=%s (%d questions, %d scenarios)",
        data.version,
        len(data.questionnaire.questions),
        len(data.scenarios),
    )
    return data


class ReferenceDataProvider(ReferenceDataSource):
    """Holds the current ReferenceData and swaps it atomically.

    Snapshots are immutable, so handing out the current reference is
    safe for any number of concurrent readers.
    """

    def __init__(self, initial: Optional[ReferenceData] = None) -> None:
        self._lock = threading.Lock()
        self._current = initial or ReferenceData()

    def current(self) -> ReferenceData:
        with self._lock:
            return self._current

    def swap(self, data: ReferenceData) -> ReferenceData:
        """Publish a new snapshot and return the one it replaced."""
        if not isinstance(data, ReferenceData):
            raise ValidationError("Reference data snapshot is required")
        with self._lock:
            previous, self._current = self._current, data
        logger.info("Reference data swapped: %s -> %s", previous.version, data.version)
        return previous

    def reload(self, path: Union[str, Path]) -> ReferenceData:
        """Load a file and publish it. On error the current snapshot stays."""
        return self.swap(load_reference_data(path))
