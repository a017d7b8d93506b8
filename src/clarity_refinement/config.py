"""
Configuration settings for the Clarity refinement core.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development (see .env.example).
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Clarity Refinement Core"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"  # "production" switches logs to JSON

    # === Agent Retry ===
    RETRY_MAX_RETRIES: int = 3
    RETRY_INITIAL_DELAY_MS: int = 1000
    RETRY_BACKOFF_MULTIPLIER: float = 2.0  # Exponential backoff multiplier

    # === Refinement Loop ===
    REFINEMENT_TARGET_SCORE: float = 8.0  # Stop refining once the brief reaches this
    REFINEMENT_MAX_ATTEMPTS: int = 3
    FIXER_DEPLOY_THRESHOLD: float = 7.0  # Deploy fixers for dimensions scoring below this

    # === Refinement Pricing (USD) ===
    COST_PER_FIXER_USD: float = 0.0045
    COST_RECONCILIATION_USD: float = 0.006
    COST_SCORING_USD: float = 0.0125

    # === Persistence ===
    REDIS_URL: str = "redis://redis:6379/0"
    REDIS_MAX_CONNECTIONS: int = 50  # Connection pool size
    EXECUTION_LOGS_TABLE: str = "agent_execution_logs"
    EXECUTION_LOG_TTL_SECONDS: int = 2592000  # 30 days


# Global settings instance
settings = Settings()
