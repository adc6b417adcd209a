"""
Application configuration.

Loads settings from environment variables and .env file.
All configuration is centralized here rather than scattered through the services.
"""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name.
        version: Current version string.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        domain_log_level: Level for the domain services; follows log_level when unset.
        risk_free_rate: Annual risk-free rate in percent.
        market_return: Expected annual market (benchmark) return in percent.
        benchmark_volatility: Historical benchmark volatility in percent.
        default_benchmark_symbol: Benchmark reported when none is requested.
        single_position_limit: Default single-position concentration limit (%).
        sector_limit: Default sector concentration limit (%).
        top5_limit: Default top-five holdings concentration limit (%).
        elevated_volatility_threshold: Volatility above which risk reduction is recommended.
        target_volatility: Volatility a risk-reduction recommendation aims for.
        next_review_days: Days until a recommendation bundle should be reviewed.
        profile_jitter_seed: Seed for profile score jitter. None disables jitter.
        reference_data_path: Optional JSON file replacing the built-in
            questionnaire and scenario catalog.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    project_name: str = "RiskFit"
    version: str = "0.1.0"
    log_level: str = "INFO"
    domain_log_level: Optional[str] = None

    # --- Market assumptions ---
    risk_free_rate: float = 3.5
    market_return: float = 10.5
    benchmark_volatility: float = 15.2
    default_benchmark_symbol: str = "SPY"

    # --- Concentration thresholds ---
    single_position_limit: float = 10.0
    sector_limit: float = 25.0
    top5_limit: float = 50.0

    # --- Recommendations ---
    elevated_volatility_threshold: float = 20.0
    target_volatility: float = 18.0
    next_review_days: int = 90

    # --- Reference data ---
    profile_jitter_seed: Optional[int] = None
    reference_data_path: Optional[str] = None


settings = Settings()
