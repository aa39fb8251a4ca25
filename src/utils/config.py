"""
Configuration management for the Pastry Cost Tracker application.

This module handles:
- Database path configuration
- Environment-specific configuration (development vs. production)
"""

import logging
import os
from pathlib import Path
from typing import Optional

from .constants import (
    APP_DIR_NAME,
    APP_NAME,
    APP_VERSION,
    DATABASE_FILENAME,
    DATABASE_VERSION,
    ENVIRONMENT_VARIABLE,
)

logger = logging.getLogger(__name__)


class Config:
    """
    Application configuration manager.

    Resolves where the SQLite database lives for the current environment.
    """

    def __init__(self, environment: str = "production", base_dir: Optional[Path] = None):
        """
        Initialize configuration.

        Args:
            environment: Environment mode - 'production' or 'development'
            base_dir: Optional explicit data directory (overrides environment lookup)
        """
        if environment not in ("production", "development"):
            raise ValueError(f"Unknown environment: {environment}")

        self.environment = environment

        if base_dir is not None:
            self._base_dir = Path(base_dir)
        elif environment == "development":
            self._base_dir = self._get_project_data_dir()
        else:
            self._base_dir = self._get_user_documents_dir()

        self._database_path = self._base_dir / DATABASE_FILENAME

    def _get_project_data_dir(self) -> Path:
        """Get the project's data/ directory for development."""
        project_root = Path(__file__).parent.parent.parent
        return project_root / "data"

    def _get_user_documents_dir(self) -> Path:
        """Get the app folder inside the user's Documents directory."""
        return Path.home() / "Documents" / APP_DIR_NAME

    def ensure_directories(self) -> None:
        """Create the data directory if it doesn't exist."""
        self._base_dir.mkdir(parents=True, exist_ok=True)

    @property
    def app_name(self) -> str:
        """Application name."""
        return APP_NAME

    @property
    def app_version(self) -> str:
        """Application version."""
        return APP_VERSION

    @property
    def database_version(self) -> str:
        """Database schema version."""
        return DATABASE_VERSION

    @property
    def base_dir(self) -> Path:
        """Directory holding application data."""
        return self._base_dir

    @property
    def database_path(self) -> Path:
        """Full path to the database file."""
        return self._database_path

    @property
    def database_url(self) -> str:
        """
        SQLAlchemy database URL.

        Returns:
            Database URL string for SQLAlchemy
        """
        # Use forward slashes for SQLite URL
        db_path_str = str(self._database_path).replace("\\", "/")
        return f"sqlite:///{db_path_str}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    def database_exists(self) -> bool:
        """Check if the database file exists."""
        return self._database_path.exists()

    def __repr__(self) -> str:
        return f"Config(environment='{self.environment}', database_path='{self._database_path}')"


_config_instance: Optional[Config] = None


def get_config(environment: Optional[str] = None) -> Config:
    """
    Get the global configuration instance.

    Once created, the singleton's environment is not changed by passing a
    different environment argument; this prevents switching databases
    mid-session.

    Args:
        environment: Optional environment for initial creation. If None, uses
                    PASTRY_COST_ENV or defaults to production.

    Returns:
        Config instance
    """
    global _config_instance

    if _config_instance is None:
        if environment is None:
            environment = os.environ.get(ENVIRONMENT_VARIABLE, "production")
        _config_instance = Config(environment)
    elif environment is not None and environment != _config_instance.environment:
        logger.warning(
            f"get_config() called with environment='{environment}' but singleton "
            f"already exists with environment='{_config_instance.environment}'. "
            f"Returning existing singleton."
        )

    return _config_instance


def set_config(config: Optional[Config]) -> None:
    """Replace (or clear, with None) the global configuration instance."""
    global _config_instance
    _config_instance = config


def get_database_url() -> str:
    """Get the database URL of the active configuration."""
    return get_config().database_url
