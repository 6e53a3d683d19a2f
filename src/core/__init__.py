"""
Herald Discord Bot - Core Package
=================================

Core components shared by every service: configuration, logging,
persistence and the error taxonomy.

DESIGN:
    Config, database and logger are process-wide singletons:
    - get_config() returns the same Config instance
    - get_db() returns the same DatabaseManager instance
    - logger is a global TreeLogger instance

    Everything else (registries, watcher, gate) is owned by AppContext
    and passed explicitly.
"""

# =============================================================================
# Core Imports
# =============================================================================

from .config import (
    Config,
    ConfigValidationError,
    get_config,
)

from .database import DatabaseManager, get_db

from .errors import (
    HeraldError,
    NotFoundError,
    AlreadyExistsError,
    PersistenceError,
    ExternalServiceError,
    AuthorizationError,
)

from .logger import logger, TreeLogger


# =============================================================================
# Module Export
# =============================================================================

__all__ = [
    # Config
    "Config",
    "ConfigValidationError",
    "get_config",
    # Database
    "DatabaseManager",
    "get_db",
    # Errors
    "HeraldError",
    "NotFoundError",
    "AlreadyExistsError",
    "PersistenceError",
    "ExternalServiceError",
    "AuthorizationError",
    # Logger
    "logger",
    "TreeLogger",
]
