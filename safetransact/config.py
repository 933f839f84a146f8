"""
Configuration Management Module

Provides centralized configuration using pydantic-settings for environment-based configuration.
"""

from decimal import Decimal

from pydantic_settings import BaseSettings


class SafeTransactConfig(BaseSettings):
    """SafeTransact ledger configuration"""

    # Logging configuration
    log_level: str = "INFO"
    log_format: str = "json"  # json or text

    # Business rules configuration
    loan_payment_rate: Decimal = Decimal("0.01")  # Share of principal due each month

    # Feature flags
    enable_audit_logging: bool = True

    # API configuration
    api_host: str = "0.0.0.0"
    api_port: int = 8090

    class Config:
        env_prefix = "SAFETRANSACT_"
        env_file = ".env"
        case_sensitive = False


# Global configuration instance
config = SafeTransactConfig()


def get_config() -> SafeTransactConfig:
    """Get global configuration instance"""
    return config


def reload_config() -> SafeTransactConfig:
    """Reload configuration from environment"""
    global config
    config = SafeTransactConfig()
    return config
