"""Configuration management using Pydantic Settings"""

from typing import FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict

from loanbook.domain.models import BookPolicy


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="LOANBOOK_",
        extra="ignore",
    )

    # Book policy
    special_project_ids: FrozenSet[int] = frozenset({51, 55, 59})
    operating_company_name: str = "goodland"
    active_loan_statuses: FrozenSet[str] = frozenset({"operating", "performing"})

    # Horizons
    cashflow_horizon_months: int = 12
    investor_reminder_days: int = 30
    borrower_reminder_days: int = 14
    reminder_flag_visibility_days: int = 15

    # Service
    service_name: str = "loanbook-engine"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    def book_policy(self) -> BookPolicy:
        """Snapshot of the policy constants handed to the engine"""
        return BookPolicy(
            special_project_ids=frozenset(self.special_project_ids),
            operating_company_name=self.operating_company_name,
            active_statuses=frozenset(self.active_loan_statuses),
        )


settings = Settings()
