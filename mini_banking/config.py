"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class BankingConfig(BaseSettings):
    """Mini banking configuration"""

    model_config = SettingsConfigDict(
        env_prefix="MINI_BANKING_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Storage configuration
    storage_backend: str = "csv"  # csv, sqlite or memory
    data_file: str = "./banking_system.csv"
    database_path: str = "mini_banking.db"

    # Presentation
    currency_symbol: str = "$"

    # Logging configuration
    log_level: str = "WARNING"
    log_format: str = "json"  # json or text

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090


# Global configuration instance
config = BankingConfig()


def get_config() -> BankingConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> BankingConfig:
    """Reload configuration from environment"""
    global config
    config = BankingConfig()
    return config
