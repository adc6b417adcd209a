"""
Domain-specific errors for the risk bounded context.

All errors raised from the domain layer must be defined here.
Callers map them to transport responses; the domain never catches its own errors.
No framework imports allowed.
"""


class RiskDomainError(Exception):
    """Base error for all risk domain errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class ValidationError(RiskDomainError):
    """Raised when an input record is malformed or missing required data."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class UnknownQuestionError(ValidationError):
    """Raised when a response references a question that is not in the questionnaire."""

    def __init__(self, question_id: str) -> None:
        super().__init__(f"Invalid question ID: {question_id}", field="questionId")
        self.question_id = question_id


class UnknownOptionError(ValidationError):
    """Raised when a response selects an option the question does not offer."""

    def __init__(self, question_id: str, option_id: str) -> None:
        super().__init__(
            f"Invalid option {option_id} for question {question_id}",
            field="selectedOption",
        )
        self.question_id = question_id
        self.option_id = option_id


class NotFoundError(RiskDomainError):
    """Raised when a referenced aggregate the core needs is absent."""

    def __init__(self, entity: str, identifier: str) -> None:
        super().__init__(f"{entity} not found: {identifier}")
        self.entity = entity
        self.identifier = identifier


class RiskProfileNotFoundError(NotFoundError):
    """Raised when an investor has no active risk profile."""

    def __init__(self, investor_id: str) -> None:
        super().__init__("Active risk profile", investor_id)
        self.investor_id = investor_id


class InvestorNotFoundError(NotFoundError):
    """Raised when an investor cannot be found."""

    def __init__(self, investor_id: str) -> None:
        super().__init__("Investor", investor_id)
        self.investor_id = investor_id


class ScenarioNotFoundError(NotFoundError):
    """Raised when a stress scenario id is not in the catalog."""

    def __init__(self, scenario_id: str) -> None:
        super().__init__("Scenario", scenario_id)
        self.scenario_id = scenario_id


class ComputationError(RiskDomainError):
    """Raised for a genuine arithmetic impossibility.

    Every division in the core is guarded, so nothing raises this today.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Computation failed: {reason}")
        self.reason = reason
