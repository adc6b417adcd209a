"""
Tests for the portfolio risk calculator.

All tests use pure domain objects; no IO.
"""

import json

import pytest

from riskfit.domain.risk.entities import Holding, PortfolioSnapshot, SecurityKind
from riskfit.domain.risk.errors import ValidationError
from riskfit.domain.risk.portfolio_risk import (
    PortfolioRiskCalculator,
    resolved_beta,
    resolved_volatility,
)


def _holding(
    symbol: str,
    weight: float,
    sector: str = "TECHNOLOGY",
    kind: SecurityKind = SecurityKind.EQUITY,
    beta: float | None = None,
    vol: float | None = None,
    value: float | None = None,
) -> Holding:
    return Holding(
        symbol=symbol,
        security_kind=kind,
        sector=sector,
        market_value=value if value is not None else weight * 1_000,
        weight=weight,
        beta=beta,
        annualized_volatility=vol,
    )


def _portfolio(*holdings: Holding, total: float = 100_000) -> PortfolioSnapshot:
    return PortfolioSnapshot(total_value=total, holdings=holdings)


@pytest.fixture
def calculator() -> PortfolioRiskCalculator:
    return PortfolioRiskCalculator()


class TestResolvedFactors:
    """Missing beta and volatility fall back to the reference tables."""

    def test_explicit_values_win(self):
        h = _holding("AAPL", 10, beta=1.3, vol=31)
        assert resolved_beta(h) == 1.3
        assert resolved_volatility(h) == 31

    def test_sector_defaults(self):
        h = _holding("AAPL", 10)
        assert resolved_beta(h) == 1.25
        assert resolved_volatility(h) == 28

    def test_kind_defaults_override_sector(self):
        bond = _holding("BND", 10, kind=SecurityKind.BOND)
        cash = _holding("CASH", 10, kind=SecurityKind.CASH)
        assert (resolved_beta(bond), resolved_volatility(bond)) == (0.10, 6.0)
        assert (resolved_beta(cash), resolved_volatility(cash)) == (0.0, 0.0)

    def test_unknown_sector_fallback(self):
        h = _holding("XYZ", 10, sector="SPACE")
        assert (resolved_beta(h), resolved_volatility(h)) == (1.0, 20.0)


class TestBuildingBlocks:
    """Individual metric formulas."""

    def test_capm_expected_return(self, calculator):
        assert calculator.expected_return(1.12) == pytest.approx(11.34)
        assert calculator.expected_return(1.0) == pytest.approx(10.5)

    def test_weighted_volatility_and_beta(self, calculator):
        holdings = [
            _holding("AAPL", 50, beta=1.2, vol=30),
            _holding("BND", 50, kind=SecurityKind.BOND, sector="BONDS"),
        ]
        assert calculator.volatility(holdings) == pytest.approx(18.0)
        assert calculator.beta(holdings) == pytest.approx(0.65)

    def test_empty_holdings(self, calculator):
        assert calculator.volatility([]) == 0.0
        assert calculator.beta([]) == 1.0

    def test_zero_denominators_yield_zero(self, calculator):
        assert calculator.sharpe(10.0, 0.0) == 0.0
        assert calculator.sortino(10.0, 0.0) == 0.0
        assert calculator.treynor(10.0, 0.0) == 0.0

    def test_r_squared_bounds(self, calculator):
        assert calculator.r_squared(1.0, 15) == pytest.approx(0.95)
        assert calculator.r_squared(5.0, 15) == pytest.approx(0.5)


class TestCalculate:
    """End-to-end portfolio metrics."""

    def test_single_holding_metrics(self, calculator):
        result = calculator.calculate(_portfolio(_holding("AAPL", 100, beta=1.12, vol=20)))

        assert result.portfolio_beta == pytest.approx(1.12)
        assert result.portfolio_volatility == pytest.approx(20.0)
        assert result.expected_return == pytest.approx(11.34)
        assert result.sharpe_ratio == pytest.approx(0.39)
        assert result.sortino_ratio == pytest.approx(0.65)
        assert result.treynor_ratio == pytest.approx(7.0)
        assert result.max_drawdown == pytest.approx(-11.54)
        assert result.tracking_error == pytest.approx(3.24)
        assert result.information_ratio == pytest.approx(0.26)
        assert result.r_squared == pytest.approx(0.93)
        assert result.benchmark.symbol == "SPY"
        assert result.benchmark.alpha == pytest.approx(0.84)

    def test_value_at_risk(self, calculator):
        result = calculator.calculate(_portfolio(_holding("AAPL", 100, beta=1.12, vol=20)))
        var = result.value_at_risk
        es = result.expected_shortfall

        assert var.var95_percent == pytest.approx(-9.5)
        assert var.var95_amount == pytest.approx(-9497.41, abs=0.01)
        assert var.var99_percent == pytest.approx(-13.43)
        assert es.es95_percent == pytest.approx(-11.91)
        assert es.es99_percent == pytest.approx(-15.39)
        assert var.time_horizon == "1_MONTH"

    def test_tail_losses_are_ordered(self, calculator):
        result = calculator.calculate(
            _portfolio(_holding("AAPL", 60, vol=25), _holding("JNJ", 40, sector="HEALTHCARE"))
        )
        var, es = result.value_at_risk, result.expected_shortfall
        assert 0 >= var.var95_percent >= var.var99_percent
        assert var.var95_percent >= es.es95_percent
        assert var.var99_percent >= es.es99_percent

    def test_risk_decomposition(self, calculator):
        result = calculator.calculate(
            _portfolio(
                _holding("AAPL", 40, vol=30),
                _holding("MSFT", 30, vol=25),
                _holding("JNJ", 20, sector="HEALTHCARE"),
                _holding("KO", 10, sector="CONSUMER_STAPLES"),
            )
        )
        decomposition = result.risk_decomposition
        assert decomposition.systematic_risk + decomposition.unsystematic_risk == pytest.approx(100)
        assert [c.symbol for c in decomposition.top_risk_contributors] == ["AAPL", "MSFT", "JNJ"]
        assert decomposition.top_risk_contributors[0].risk_contribution == pytest.approx(12.0)

    def test_systematic_risk_is_capped(self, calculator):
        result = calculator.calculate(_portfolio(_holding("TQQQ", 100, beta=3.0, vol=60)))
        assert result.risk_decomposition.systematic_risk == 95
        assert result.risk_decomposition.unsystematic_risk == 5

    def test_empty_portfolio(self, calculator):
        result = calculator.calculate(_portfolio())
        assert result.portfolio_volatility == 0.0
        assert result.portfolio_beta == 1.0
        assert result.sharpe_ratio == 0.0
        assert result.value_at_risk.var95_amount == 0.0
        assert result.risk_decomposition.top_risk_contributors == ()

    def test_custom_market_assumptions(self):
        calculator = PortfolioRiskCalculator(risk_free_rate=2.0, market_return=8.0)
        result = calculator.calculate(_portfolio(_holding("AAPL", 100, beta=1.0, vol=20)), "QQQ")
        assert result.expected_return == pytest.approx(8.0)
        assert result.benchmark.symbol == "QQQ"

    def test_input_is_not_mutated_and_result_is_stable(self, calculator):
        portfolio = _portfolio(_holding("AAPL", 70), _holding("BND", 30, kind=SecurityKind.BOND))
        first = calculator.calculate(portfolio).to_dict()
        second = calculator.calculate(portfolio).to_dict()
        assert json.dumps(first, sort_keys=True) == json.dumps(second, sort_keys=True)
        assert portfolio.holdings[0].beta is None

    def test_rejects_non_portfolio(self, calculator):
        with pytest.raises(ValidationError):
            calculator.calculate(None)


class TestPortfolioValidation:
    """Invalid snapshots are rejected before any computation."""

    def test_weight_out_of_range(self):
        with pytest.raises(ValidationError):
            _holding("AAPL", 120)

    def test_negative_market_value(self):
        with pytest.raises(ValidationError):
            _holding("AAPL", 10, value=-1)

    def test_non_positive_total(self):
        with pytest.raises(ValidationError):
            _portfolio(_holding("AAPL", 10), total=0)

    def test_nan_rejected(self):
        with pytest.raises(ValidationError):
            _holding("AAPL", float("nan"))
