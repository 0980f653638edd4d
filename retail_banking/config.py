"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional


class BankConfig(BaseSettings):
    """Retail banking API configuration"""

    # Database configuration
    database_url: str = "sqlite:///retail_bank.db"  # memory:// for in-process storage

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090
    cors_origins: List[str] = ["*"]

    # Security configuration
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expiry_minutes: int = 60

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    log_file: Optional[str] = None  # If None, logs to stdout

    # Business rules configuration
    max_transaction_amount: str = "10000.00"
    account_number_max_attempts: int = 20

    class Config:
        env_prefix = "BANK_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = BankConfig()


def get_config() -> BankConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankConfig:
    """Reload configuration from environment"""
    global config
    config = BankConfig()
    return config
