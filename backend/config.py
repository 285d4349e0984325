"""
Configuration management for the Top-up Storefront API.

Values come from the environment or a local .env file (pydantic-settings);
field names map to upper-case variables, e.g. MIN_CREDIT_PURCHASE_MMK.
Production startup refuses an empty JWT secret or a wildcard CORS origin.
"""
import logging

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ── Database ────────────────────────────────────────────────────
    database_url: str = "sqlite:///./data/storefront.db"

    # ── Application ─────────────────────────────────────────────────
    environment: str = "development"

    # ── Auth (JWT) ──────────────────────────────────────────────────
    jwt_secret: str = ""
    jwt_issuer: str = "storefront-api"
    jwt_access_ttl_minutes: int = 60

    # ── Orders ──────────────────────────────────────────────────────
    min_credit_purchase_mmk: int = 1000  # smallest accepted top-up request
    admin_audience: str = "admins"
    order_rate_limit_requests: int = 10  # per caller per route
    order_rate_limit_window_seconds: int = 60

    # ── CORS ────────────────────────────────────────────────────────
    cors_origins: str = "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # allow unknown .env keys without crashing
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]

    def _problems(self) -> List[str]:
        problems = []
        if not self.jwt_secret:
            problems.append("JWT_SECRET is empty; every bearer token will be rejected")
        if "*" in self.cors_origins:
            problems.append("CORS_ORIGINS contains '*'")
        if self.min_credit_purchase_mmk <= 0:
            problems.append("MIN_CREDIT_PURCHASE_MMK must be positive")
        if self.order_rate_limit_requests <= 0 or self.order_rate_limit_window_seconds <= 0:
            problems.append("order rate limit values must be positive")
        return problems

    def validate_production_settings(self):
        """
        Check settings at startup.

        In production any problem aborts startup; elsewhere each one is logged.
        """
        problems = self._problems()
        if self.environment == "production":
            if problems:
                raise ValueError("Refusing to start in production: " + "; ".join(problems))
            logger.info("Production settings validated")
            return
        for problem in problems:
            logger.warning(problem)


settings = Settings()
