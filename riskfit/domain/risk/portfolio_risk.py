"""
Domain service: Portfolio risk metrics.

Computes volatility, beta, risk-adjusted return ratios, parametric
Value-at-Risk, drawdown and risk decomposition from a set of holdings.

Several metrics are closed-form heuristics rather than statistical
estimates:
    - expected return is a single-factor CAPM estimate
    - Sortino approximates downside deviation as 60% of total volatility
    - max drawdown, tracking error and R-squared are driven by beta and
      volatility only, with no benchmark return series involved

Pure business logic. No framework imports. No IO.
"""

import logging
import math
from typing import Optional, Sequence

import numpy as np

from riskfit.domain.risk.entities import Holding, PortfolioSnapshot
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.numeric import clamp, round_half_up, safe_divide
from riskfit.domain.risk.reference_data import default_beta, default_volatility
from riskfit.domain.risk.results import (
    BenchmarkComparison,
    ExpectedShortfall,
    PortfolioRiskResult,
    RiskContributor,
    RiskDecomposition,
    ValueAtRisk,
)

logger = logging.getLogger(__name__)

RISK_FREE_RATE = 3.5
MARKET_RETURN = 10.5
BENCHMARK_VOLATILITY = 15.2
DEFAULT_BENCHMARK = "SPY"

MONTHS_PER_YEAR = 12
Z_95 = 1.645
Z_99 = 2.326
# Standard normal tail expectations, phi(z) / (1 - confidence).
ES_95 = 2.063
ES_99 = 2.665

DOWNSIDE_DEVIATION_FACTOR = 0.6

BASE_DRAWDOWN = -15.0
DRAWDOWN_BETA_FACTOR = 8.0
DRAWDOWN_VOL_FACTOR = 0.5
DRAWDOWN_REFERENCE_VOL = 15.0

SYSTEMATIC_RISK_PER_BETA = 60.0
MAX_SYSTEMATIC_RISK = 95.0
TOP_CONTRIBUTOR_COUNT = 3


def resolved_volatility(holding: Holding) -> float:
    """Holding volatility, filled from the sector/kind table when absent."""
    if holding.annualized_volatility is not None:
        return holding.annualized_volatility
    return default_volatility(holding.sector, holding.security_kind)


def resolved_beta(holding: Holding) -> float:
    """Holding beta, filled from the sector/kind table when absent."""
    if holding.beta is not None:
        return holding.beta
    return default_beta(holding.sector, holding.security_kind)


class PortfolioRiskCalculator:
    """Calculate portfolio risk metrics from holdings."""

    def __init__(
        self,
        risk_free_rate: float = RISK_FREE_RATE,
        market_return: float = MARKET_RETURN,
        benchmark_volatility: float = BENCHMARK_VOLATILITY,
        default_benchmark: str = DEFAULT_BENCHMARK,
    ) -> None:
        """
        Initialize the calculator.

        Args:
            risk_free_rate: Annual risk-free rate in percent (e.g. 3.5).
            market_return: Expected annual market return in percent.
            benchmark_volatility: Historical benchmark volatility in percent.
            default_benchmark: Symbol reported when a call names no benchmark.
        """
        self.risk_free_rate = risk_free_rate
        self.market_return = market_return
        self.benchmark_volatility = benchmark_volatility
        self.default_benchmark = default_benchmark

    # --- Building blocks ---

    def volatility(self, holdings: Sequence[Holding]) -> float:
        """Weight-averaged annualized volatility in percent; 0 for no holdings."""
        if not holdings:
            return 0.0
        weights = np.array([h.weight for h in holdings], dtype=float) / 100
        vols = np.array([resolved_volatility(h) for h in holdings], dtype=float)
        return round_half_up(float(np.dot(weights, vols)))

    def beta(self, holdings: Sequence[Holding]) -> float:
        """Weight-averaged beta; a portfolio with no holdings has market beta 1.0."""
        if not holdings:
            return 1.0
        weights = np.array([h.weight for h in holdings], dtype=float) / 100
        betas = np.array([resolved_beta(h) for h in holdings], dtype=float)
        return round_half_up(float(np.dot(weights, betas)))

    def expected_return(self, beta: float) -> float:
        """CAPM estimate: riskFree + beta * (marketReturn - riskFree)."""
        return self.risk_free_rate + beta * (self.market_return - self.risk_free_rate)

    def sharpe(self, portfolio_return: float, volatility: float) -> float:
        return round_half_up(safe_divide(portfolio_return - self.risk_free_rate, volatility))

    def sortino(self, portfolio_return: float, volatility: float) -> float:
        downside_deviation = volatility * DOWNSIDE_DEVIATION_FACTOR
        return round_half_up(safe_divide(portfolio_return - self.risk_free_rate, downside_deviation))

    def treynor(self, portfolio_return: float, beta: float) -> float:
        return round_half_up(safe_divide(portfolio_return - self.risk_free_rate, beta))

    def value_at_risk(self, total_value: float, volatility: float) -> ValueAtRisk:
        """Parametric one-month VaR assuming normally distributed returns."""
        monthly_vol = volatility / math.sqrt(MONTHS_PER_YEAR)
        var95 = -Z_95 * monthly_vol
        var99 = -Z_99 * monthly_vol
        return ValueAtRisk(
            var95_percent=round_half_up(var95),
            var95_amount=round_half_up(total_value * var95 / 100),
            var99_percent=round_half_up(var99),
            var99_amount=round_half_up(total_value * var99 / 100),
        )

    def expected_shortfall(self, total_value: float, volatility: float) -> ExpectedShortfall:
        """Conditional tail loss beyond the VaR threshold (CVaR)."""
        monthly_vol = volatility / math.sqrt(MONTHS_PER_YEAR)
        es95 = -ES_95 * monthly_vol
        es99 = -ES_99 * monthly_vol
        return ExpectedShortfall(
            es95_percent=round_half_up(es95),
            es95_amount=round_half_up(total_value * es95 / 100),
            es99_percent=round_half_up(es99),
            es99_amount=round_half_up(total_value * es99 / 100),
        )

    def max_drawdown(self, beta: float, volatility: float) -> float:
        """Heuristic drawdown estimate in percent; not a historical simulation."""
        beta_adjustment = (beta - 1) * DRAWDOWN_BETA_FACTOR
        vol_adjustment = (volatility - DRAWDOWN_REFERENCE_VOL) * DRAWDOWN_VOL_FACTOR
        return round_half_up(BASE_DRAWDOWN + beta_adjustment + vol_adjustment)

    def tracking_error(self, beta: float, volatility: float) -> float:
        """Distance from market beta plus a volatility component."""
        return round_half_up(abs(beta - 1) * 2 + volatility * 0.15)

    def r_squared(self, beta: float, volatility: float) -> float:
        """Closer to market beta means a higher R-squared, bounded to [0.5, 0.99]."""
        return round_half_up(clamp(0.95 - abs(beta - 1) * 0.15, 0.5, 0.99))

    def risk_decomposition(self, holdings: Sequence[Holding], beta: float) -> RiskDecomposition:
        """Split risk into systematic/unsystematic shares and rank top contributors."""
        systematic = min(MAX_SYSTEMATIC_RISK, beta * SYSTEMATIC_RISK_PER_BETA)
        contributors = sorted(
            (
                RiskContributor(
                    symbol=h.symbol,
                    risk_contribution=round_half_up(h.weight * resolved_volatility(h) / 100),
                )
                for h in holdings
            ),
            key=lambda c: c.risk_contribution,
            reverse=True,
        )
        return RiskDecomposition(
            systematic_risk=round_half_up(systematic),
            unsystematic_risk=round_half_up(100 - systematic),
            top_risk_contributors=tuple(contributors[:TOP_CONTRIBUTOR_COUNT]),
        )

    # --- Aggregate ---

    def calculate(
        self,
        portfolio: PortfolioSnapshot,
        benchmark_symbol: Optional[str] = None,
    ) -> PortfolioRiskResult:
        """Compute the full risk picture of a portfolio snapshot.

        Args:
            portfolio: The holdings snapshot. Never mutated.
            benchmark_symbol: Symbol reported in the benchmark block; the
                calculator default when omitted.

        Returns:
            A PortfolioRiskResult bundling every metric.
        """
        if not isinstance(portfolio, PortfolioSnapshot):
            raise ValidationError("portfolioData with holdings is required", field="portfolioData")

        holdings = portfolio.holdings
        beta = self.beta(holdings)
        volatility = self.volatility(holdings)
        portfolio_return = self.expected_return(beta)
        tracking_error = self.tracking_error(beta, volatility)
        alpha = portfolio_return - self.market_return

        result = PortfolioRiskResult(
            total_value=portfolio.total_value,
            portfolio_volatility=volatility,
            portfolio_beta=beta,
            expected_return=round_half_up(portfolio_return),
            sharpe_ratio=self.sharpe(portfolio_return, volatility),
            sortino_ratio=self.sortino(portfolio_return, volatility),
            treynor_ratio=self.treynor(portfolio_return, beta),
            information_ratio=round_half_up(safe_divide(alpha, tracking_error)),
            max_drawdown=self.max_drawdown(beta, volatility),
            value_at_risk=self.value_at_risk(portfolio.total_value, volatility),
            expected_shortfall=self.expected_shortfall(portfolio.total_value, volatility),
            tracking_error=tracking_error,
            r_squared=self.r_squared(beta, volatility),
            risk_decomposition=self.risk_decomposition(holdings, beta),
            benchmark=BenchmarkComparison(
                symbol=benchmark_symbol or self.default_benchmark,
                benchmark_return=self.market_return,
                benchmark_volatility=self.benchmark_volatility,
                portfolio_return=round_half_up(portfolio_return),
                alpha=round_half_up(alpha),
            ),
        )
        logger.debug(
            "Portfolio risk: holdings=%d vol=%.2f beta=%.2f sharpe=%.2f",
            len(holdings),
            volatility,
            beta,
            result.sharpe_ratio,
        )
        return result
