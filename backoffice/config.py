"""
Configuration management for the back-office analytics engine
"""
from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings"""

    # Application
    app_name: str = "Back-Office Analytics"
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    log_dir: str = "logs"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4

    # Database (shared with the CRUD stores, read-only except for `reports`)
    database_url: str = "sqlite:///./backoffice.db"

    # Report output
    reports_dir: str = "./public/reports"
    reports_url_prefix: str = "/reports"
    report_brand: str = "BACK OFFICE"

    # Analytics
    top_n_limit: int = 10
    low_stock_threshold: int = 10
    dashboard_max_workers: int = 5
    dashboard_timeout_seconds: Optional[float] = None  # None = wait for the store

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
