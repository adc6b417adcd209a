"""
Adapter: In-process investor and risk profile storage.

Implements InvestorRepository and RiskProfileRepository.
Profiles are kept as an append-only history per investor; activation
replaces the active entry under a lock so that at most one profile per
investor is active at any time.
"""

import threading
from typing import Iterable, Optional

from riskfit.domain.risk.entities import Investor, RiskProfile
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.ports import InvestorRepository, RiskProfileRepository


class InMemoryInvestorRepository(InvestorRepository):
    """Investor lookup backed by a dict."""

    def __init__(self, investors: Iterable[Investor] = ()) -> None:
        self._investors = {i.investor_id: i for i in investors}

    def get_by_id(self, investor_id: str) -> Optional[Investor]:
        return self._investors.get(investor_id)

    def add(self, investor: Investor) -> None:
        self._investors[investor.investor_id] = investor


class InMemoryRiskProfileRepository(RiskProfileRepository):
    """Profile history per investor with a single active entry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._history: dict[str, list[RiskProfile]] = {}

    def get_active(self, investor_id: str) -> Optional[RiskProfile]:
        with self._lock:
            for profile in reversed(self._history.get(investor_id, [])):
                if profile.is_active:
                    return profile
        return None

    def history(self, investor_id: str) -> list[RiskProfile]:
        """All stored profiles for an investor, oldest first."""
        with self._lock:
            return list(self._history.get(investor_id, []))

    def activate(
        self, new_profile: RiskProfile, superseded: Optional[RiskProfile] = None
    ) -> None:
        if not new_profile.is_active:
            raise ValidationError("Only an active profile can be activated", field="isActive")
        if superseded is not None and superseded.investor_id != new_profile.investor_id:
            raise ValidationError(
                "Superseded profile belongs to another investor", field="investorId"
            )

        with self._lock:
            history = self._history.setdefault(new_profile.investor_id, [])
            closed_ids = {superseded.profile_id} if superseded is not None else set()
            updated = []
            for profile in history:
                if profile.profile_id in closed_ids:
                    updated.append(superseded)
                elif profile.is_active:
                    # Any other active entry is closed as well
                    updated.append(profile.supersede(new_profile.valid_from))
                else:
                    updated.append(profile)
            updated.append(new_profile)
            self._history[new_profile.investor_id] = updated
