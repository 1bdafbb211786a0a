"""
MODULE: config.settings
RESPONSIBILITY: Application configuration loading and validation.
ALLOWED: os, dotenv, dataclasses.
FORBIDDEN: Complex business logic, database connections (only config).
ERRORS: ConfigurationError (required variable missing).

Configuration of the board backend, read from the environment and an
optional .env file.
"""

from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
import os
import sys
from dotenv import load_dotenv
from loguru import logger

from core.exceptions import ConfigurationError


@dataclass(frozen=True)
class DatabaseConfig:
    """PostgreSQL connection and pool settings"""
    host: str
    database: str
    user: str
    password: str
    port: int
    pool_min: int = 1
    pool_max: int = 10
    connect_timeout: int = 5
    statement_timeout: float = 10.0


@dataclass(frozen=True)
class AppConfig:
    """Main application settings"""
    app_name: str
    app_version: str
    log_level: str
    log_dir: str
    log_rotation: str
    log_retention: str


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings"""
    host: str
    port: int
    max_body_bytes: int
    cors_allow_origins: Tuple[str, ...]
    shutdown_timeout: int = 6


class Config:
    """
    Top-level configuration object, loads every section from the environment
    """

    def __init__(self, env_file: Optional[str] = None):
        """
        Args:
            env_file: Path to a .env file (optional)
        """
        self._load_environment(env_file)
        self.database = self._load_database_config()
        self.app = self._load_app_config()
        self.server = self._load_server_config()

    def _load_environment(self, env_file: Optional[str]) -> None:
        """Load environment variables from a .env file"""
        try:
            if env_file and os.path.exists(env_file):
                load_dotenv(env_file)
            else:
                load_dotenv()
        except Exception as e:
            logger.warning(f"Could not load .env file: {e}")

    def _get_env_var(self, key: str, default: Any = None, required: bool = False) -> str:
        """
        Read an environment variable

        Args:
            key: Variable name
            default: Value used when the variable is unset
            required: Whether the variable must be present

        Returns:
            The variable value

        Raises:
            ConfigurationError: If a required variable is missing
        """
        value = os.getenv(key)

        if value is None:
            if required:
                raise ConfigurationError(f"Required environment variable {key} is not set")
            return default

        return value

    def _get_env_float(self, key: str, default: float = 0.0) -> float:
        """Read a float variable from the environment"""
        try:
            return float(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid float for {key}: {e}, using default: {default}")
            return default

    def _get_env_int(self, key: str, default: int = 0) -> int:
        """Read an int variable from the environment"""
        try:
            return int(self._get_env_var(key, default))
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid int for {key}: {e}, using default: {default}")
            return default

    def _load_database_config(self) -> DatabaseConfig:
        """Load the database section"""
        return DatabaseConfig(
            host=self._get_env_var("DB_HOST", "localhost"),
            database=self._get_env_var("DB_DATABASE", "bloc"),
            user=self._get_env_var("DB_USER", "user"),
            password=self._get_env_var("DB_PASSWORD", "password"),
            port=self._get_env_int("DB_PORT", 5432),
            pool_min=self._get_env_int("DB_POOL_MIN", 1),
            pool_max=self._get_env_int("DB_POOL_MAX", 10),
            connect_timeout=self._get_env_int("DB_CONNECT_TIMEOUT", 5),
            statement_timeout=self._get_env_float("DB_STATEMENT_TIMEOUT", 10.0),
        )

    def _load_app_config(self) -> AppConfig:
        """Load the main application section"""
        return AppConfig(
            app_name=self._get_env_var("APP_NAME", "Bloc Board API"),
            app_version=self._get_env_var("APP_VERSION", "0.1.0"),
            log_level=self._get_env_var("LOG_LEVEL", "INFO"),
            log_dir=self._get_env_var("LOG_DIR", "logs"),
            log_rotation=self._get_env_var("LOG_ROTATION", "10 MB"),
            log_retention=self._get_env_var("LOG_RETENTION", "30 days"),
        )

    def _load_server_config(self) -> ServerConfig:
        """Load the HTTP server section"""
        origins = self._get_env_var("CORS_ALLOW_ORIGINS", "*")
        return ServerConfig(
            host=self._get_env_var("SERVER_HOST", "0.0.0.0"),
            port=self._get_env_int("SERVER_PORT", 8080),
            max_body_bytes=self._get_env_int("MAX_BODY_BYTES", 25 << 20),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            shutdown_timeout=self._get_env_int("SERVER_SHUTDOWN_TIMEOUT", 6),
        )

    def validate(self) -> bool:
        """
        Validate the loaded configuration

        Returns:
            True if the configuration is usable
        """
        try:
            if not all([self.database.host, self.database.database, self.database.user]):
                raise ValueError("Not all required database settings are filled in")

            if self.database.pool_min < 1 or self.database.pool_max < self.database.pool_min:
                raise ValueError("DB_POOL_MAX must be >= DB_POOL_MIN >= 1")

            if self.database.statement_timeout < 0:
                raise ValueError("DB_STATEMENT_TIMEOUT must not be negative")

            if self.server.max_body_bytes <= 0:
                raise ValueError("MAX_BODY_BYTES must be positive")

            logger.info("Configuration validated")
            return True

        except ValueError as e:
            logger.error(f"Configuration validation failed: {e}")
            return False

    def to_dict(self) -> Dict[str, Any]:
        """Configuration as a dict (without passwords)"""
        return {
            "database": {
                "host": self.database.host,
                "database": self.database.database,
                "user": self.database.user,
                "port": self.database.port,
                "pool_min": self.database.pool_min,
                "pool_max": self.database.pool_max,
                "statement_timeout": self.database.statement_timeout,
            },
            "app": {
                "app_name": self.app.app_name,
                "app_version": self.app.app_version,
                "log_level": self.app.log_level,
            },
            "server": {
                "host": self.server.host,
                "port": self.server.port,
                "max_body_bytes": self.server.max_body_bytes,
                "cors_allow_origins": list(self.server.cors_allow_origins),
            },
        }


# Global configuration instance
try:
    config = Config()
except ConfigurationError as e:
    print(f"CRITICAL ERROR during config initialization: {e}", file=sys.stderr)
    sys.exit(1)
