"""
RiskFit: investor risk scoring and portfolio suitability.

This package implements the risk analysis and scoring core:
- Scores risk questionnaires and builds risk profiles
- Computes portfolio risk metrics (volatility, beta, VaR, drawdown)
- Analyzes concentration risk
- Evaluates suitability of a portfolio for a risk profile
- Runs stress scenarios
- Generates prioritized recommendations

Usage:
    from riskfit.domain.risk import PortfolioRiskCalculator, PortfolioSnapshot

    result = PortfolioRiskCalculator().calculate(snapshot)
"""

__version__ = "0.1.0"
