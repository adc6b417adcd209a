"""
Port interfaces (ABCs) for the risk bounded context.

Ports define the contracts the use cases require from the outside world.
Persistence adapters live outside this package and implement them.
The domain layer never depends on concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Optional

from riskfit.domain.risk.entities import Investor, RiskProfile
from riskfit.domain.risk.reference_data import ReferenceData


class InvestorRepository(ABC):
    """Port for looking up investors."""

    @abstractmethod
    def get_by_id(self, investor_id: str) -> Optional[Investor]:
        """Return the investor, or None if unknown."""
        raise NotImplementedError


class RiskProfileRepository(ABC):
    """Port for reading and activating risk profiles.

    Implementations must serialize ``activate`` per investor so that two
    concurrent assessments can never both end up active.
    """

    @abstractmethod
    def get_active(self, investor_id: str) -> Optional[RiskProfile]:
        """Return the investor's active profile, or None."""
        raise NotImplementedError

    @abstractmethod
    def activate(
        self, new_profile: RiskProfile, superseded: Optional[RiskProfile] = None
    ) -> None:
        """Atomically store ``new_profile`` as active and ``superseded`` as closed.

        Args:
            new_profile: The profile to make active.
            superseded: The closed copy of the previously active profile, if any.
        """
        raise NotImplementedError


class ReferenceDataSource(ABC):
    """Port for the reference data (questionnaire, scenarios) in force."""

    @abstractmethod
    def current(self) -> ReferenceData:
        """Return the current immutable snapshot."""
        raise NotImplementedError
