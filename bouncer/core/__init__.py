"""
Bouncer - Core Package
======================

Configuration, logging, constants, the warnings database and the
command permission policy.

DESIGN:
    Core modules are singletons or global instances so state is
    consistent across the application:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    EmbedColors,
    GateConfig,
    get_config,
)

from .database import DatabaseManager, get_db

from .logger import logger, TreeLogger, NY_TZ


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "EmbedColors",
    "GateConfig",
    "get_config",
    # Database
    "DatabaseManager",
    "get_db",
    # Logger
    "logger",
    "TreeLogger",
    "NY_TZ",
]
