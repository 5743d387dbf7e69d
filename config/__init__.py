# config/__init__.py
"""
Application configuration package
"""

from .base import Config, DevelopmentConfig, ProductionConfig, TestingConfig
from .logging_config import (
    DevelopmentLoggingConfig,
    LoggingConfig,
    ProductionLoggingConfig,
    TestingLoggingConfig,
)

__all__ = [
    "Config",
    "DevelopmentConfig",
    "ProductionConfig",
    "TestingConfig",
    "LoggingConfig",
    "DevelopmentLoggingConfig",
    "ProductionLoggingConfig",
    "TestingLoggingConfig",
]
