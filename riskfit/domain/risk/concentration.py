"""
Domain service: Concentration risk analysis.

Measures how concentrated a portfolio is along three dimensions
(largest single position, largest sector, top five holdings) plus the
Herfindahl index, and raises severity-tagged alerts for every breached
limit.

Pure business logic. No framework imports. No IO.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from riskfit.domain.risk.entities import Holding
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.numeric import round_half_up
from riskfit.domain.risk.results import (
    AlertSeverity,
    AlertType,
    ComplianceStatus,
    ConcentrationAlert,
    ConcentrationResult,
    ConcentrationRisk,
    SectorConcentrationCheck,
    SinglePositionCheck,
    Top5ConcentrationCheck,
)

logger = logging.getLogger(__name__)

HHI_HIGH = 0.15
HHI_ELEVATED = 0.10
HHI_MODERATE = 0.05

# Breach magnitude (pp over the limit) above which an alert is HIGH rather than MEDIUM.
ALERT_ESCALATION = {
    AlertType.SINGLE_POSITION: 10.0,
    AlertType.SECTOR: 15.0,
    AlertType.TOP5_HOLDINGS: 20.0,
}


@dataclass(frozen=True)
class ConcentrationThresholds:
    """Concentration limits, all in percent of portfolio value."""

    single_position_limit: float = 10.0
    sector_limit: float = 25.0
    top5_limit: float = 50.0

    def __post_init__(self) -> None:
        for name in ("single_position_limit", "sector_limit", "top5_limit"):
            value = getattr(self, name)
            if value is None or not 0 <= value <= 100:
                raise ValidationError(f"{name} must be between 0 and 100", field=name)


def herfindahl_index(holdings: Sequence[Holding]) -> float:
    """Sum of squared fractional weights, always within [0, 1].

    Weights that add up to more than 100% are rescaled to their own total
    first, so rounding drift in the input cannot push the index above 1.
    """
    if not holdings:
        return 0.0
    weights = np.array([h.weight for h in holdings], dtype=float) / 100
    total = float(np.sum(weights))
    if total > 1:
        weights = weights / total
    return float(np.sum(weights ** 2))


def effective_positions(hhi: float) -> float:
    """Equivalent number of equally weighted positions, 0 when HHI is 0."""
    return 1 / hhi if hhi > 0 else 0.0


def _status(breach: float) -> ComplianceStatus:
    return ComplianceStatus.BREACHED if breach > 0 else ComplianceStatus.COMPLIANT


def _by_weight(holdings: Sequence[Holding]) -> list[Holding]:
    return sorted(holdings, key=lambda h: h.weight, reverse=True)


class ConcentrationAnalyzer:
    """Analyzes portfolio concentration risk against configurable thresholds."""

    def __init__(self, thresholds: Optional[ConcentrationThresholds] = None) -> None:
        self.thresholds = thresholds or ConcentrationThresholds()

    def single_position(self, holdings: Sequence[Holding], limit: float = 10.0) -> SinglePositionCheck:
        """Check the largest holding against the single-position limit."""
        if not holdings:
            return SinglePositionCheck(None, 0.0, limit, ComplianceStatus.COMPLIANT, 0.0)
        top = _by_weight(holdings)[0]
        breach = top.weight - limit
        return SinglePositionCheck(
            top_holding=top.symbol,
            top_holding_weight=round_half_up(top.weight),
            limit=limit,
            status=_status(breach),
            breach=round_half_up(breach) if breach > 0 else 0.0,
        )

    def sector_concentration(
        self, holdings: Sequence[Holding], limit: float = 25.0
    ) -> SectorConcentrationCheck:
        """Sum weights per sector and check the largest against the sector limit."""
        totals: dict[str, float] = defaultdict(float)
        for holding in holdings:
            totals[holding.sector_tag] += holding.weight
        sectors = sorted(
            ((sector, round_half_up(weight)) for sector, weight in totals.items()),
            key=lambda item: item[1],
            reverse=True,
        )
        if not sectors:
            return SectorConcentrationCheck(None, 0.0, limit, ComplianceStatus.COMPLIANT, 0.0, {})

        top_sector, top_weight = sectors[0]
        breach = top_weight - limit
        return SectorConcentrationCheck(
            top_sector=top_sector,
            top_sector_weight=top_weight,
            limit=limit,
            status=_status(breach),
            breach=round_half_up(breach) if breach > 0 else 0.0,
            sector_breakdown=dict(sectors),
        )

    def top5_concentration(self, holdings: Sequence[Holding], limit: float = 50.0) -> Top5ConcentrationCheck:
        """Check the combined weight of the five largest holdings."""
        top5_weight = sum(h.weight for h in _by_weight(holdings)[:5])
        breach = top5_weight - limit
        return Top5ConcentrationCheck(
            top5_weight=round_half_up(top5_weight),
            limit=limit,
            status=_status(breach),
            breach=round_half_up(breach) if breach > 0 else 0.0,
        )

    @staticmethod
    def overall_risk(
        single: ComplianceStatus,
        sector: ComplianceStatus,
        top5: ComplianceStatus,
        hhi: float,
    ) -> ConcentrationRisk:
        """Combine breach count and HHI into an overall tier."""
        breaches = [single, sector, top5].count(ComplianceStatus.BREACHED)
        if breaches >= 2 or hhi > HHI_HIGH:
            return ConcentrationRisk.HIGH
        if breaches == 1 or hhi > HHI_ELEVATED:
            return ConcentrationRisk.ELEVATED
        if hhi > HHI_MODERATE:
            return ConcentrationRisk.MODERATE
        return ConcentrationRisk.LOW

    @staticmethod
    def alerts(
        single: SinglePositionCheck,
        sector: SectorConcentrationCheck,
        top5: Top5ConcentrationCheck,
    ) -> list[ConcentrationAlert]:
        """One alert per breached dimension."""
        alerts = []

        def severity(alert_type: AlertType, breach: float) -> AlertSeverity:
            return AlertSeverity.HIGH if breach > ALERT_ESCALATION[alert_type] else AlertSeverity.MEDIUM

        if single.status is ComplianceStatus.BREACHED:
            alerts.append(
                ConcentrationAlert(
                    alert_type=AlertType.SINGLE_POSITION,
                    severity=severity(AlertType.SINGLE_POSITION, single.breach),
                    symbol=single.top_holding,
                    message=(
                        f"{single.top_holding} position ({single.top_holding_weight:g}%) "
                        f"exceeds {single.limit:g}% single position limit"
                    ),
                )
            )
        if sector.status is ComplianceStatus.BREACHED:
            alerts.append(
                ConcentrationAlert(
                    alert_type=AlertType.SECTOR,
                    severity=severity(AlertType.SECTOR, sector.breach),
                    sector=sector.top_sector,
                    message=(
                        f"{sector.top_sector} sector ({sector.top_sector_weight:g}%) "
                        f"exceeds {sector.limit:g}% sector limit"
                    ),
                )
            )
        if top5.status is ComplianceStatus.BREACHED:
            alerts.append(
                ConcentrationAlert(
                    alert_type=AlertType.TOP5_HOLDINGS,
                    severity=severity(AlertType.TOP5_HOLDINGS, top5.breach),
                    message=(
                        f"Top 5 holdings ({top5.top5_weight:g}%) exceed "
                        f"{top5.limit:g}% concentration limit"
                    ),
                )
            )
        return alerts

    def analyze(
        self,
        holdings: Sequence[Holding],
        thresholds: Optional[ConcentrationThresholds] = None,
    ) -> ConcentrationResult:
        """Run every concentration check and assemble the result.

        Args:
            holdings: Portfolio holdings; an empty list yields a LOW, compliant result.
            thresholds: Overrides the analyzer's default thresholds.
        """
        if holdings is None:
            raise ValidationError("holdings array is required", field="holdings")
        limits = thresholds or self.thresholds

        single = self.single_position(holdings, limits.single_position_limit)
        sector = self.sector_concentration(holdings, limits.sector_limit)
        top5 = self.top5_concentration(holdings, limits.top5_limit)
        hhi = herfindahl_index(holdings)
        risk = self.overall_risk(single.status, sector.status, top5.status, hhi)
        alerts = self.alerts(single, sector, top5)

        if alerts:
            logger.info(
                "Concentration limits breached: %s (overall=%s)",
                ", ".join(a.alert_type.value for a in alerts),
                risk.value,
            )
        return ConcentrationResult(
            single_position=single,
            sector_concentration=sector,
            top5_concentration=top5,
            herfindahl_index=round_half_up(hhi, 3),
            effective_positions=round_half_up(effective_positions(hhi), 1),
            overall_concentration_risk=risk,
            alerts=tuple(alerts),
        )
