"""Configuration management for labelhub.

Settings live on one flat ``LabelhubConfig`` so they map cleanly onto
``LABELHUB_*`` environment variables. The YAML file groups the same
settings by concern::

    api:
      host: 0.0.0.0
      port: 8000
    database:
      path: ./labelhub.db
    scoring:
      critical_error_weight: 10
      penalty_per_weight: 10
    logging:
      level: INFO
"""
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# YAML section -> {key in section: config field}
FILE_SECTIONS: dict[str, dict[str, str]] = {
    "api": {"host": "api_host", "port": "api_port"},
    "database": {"storage": "storage", "path": "db_path", "url": "db_url", "echo": "db_echo"},
    "scoring": {
        "critical_error_weight": "critical_error_weight",
        "penalty_per_weight": "penalty_per_weight",
    },
    "logging": {"level": "log_level", "file": "log_file"},
}

DEFAULT_CONFIG_PATHS = [
    Path("labelhub.yaml"),
    Path("labelhub.yml"),
    Path(".labelhub.yaml"),
    Path.home() / ".labelhub" / "config.yaml",
]


class LabelhubConfig(BaseSettings):
    """Main configuration for the labelhub service.

    Configuration can be loaded from:
    1. Environment variables (prefixed with LABELHUB_)
    2. YAML configuration file (labelhub.yaml)
    3. Default values
    """

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host address")
    api_port: int = Field(default=8000, description="API port")

    # Database Configuration
    storage: str = Field(default="sqlite", description="Storage backend (sqlite or postgresql)")
    db_path: str = Field(default="./labelhub.db", description="Database file path for SQLite")
    db_url: Optional[str] = Field(default=None, description="Database URL for PostgreSQL")
    db_echo: bool = Field(default=False, description="Log emitted SQL statements")

    # Scoring Configuration
    critical_error_weight: int = Field(
        default=10,
        ge=0,
        description="Checklist weight at or above which a rejection counts as a critical error",
    )
    penalty_per_weight: int = Field(
        default=10,
        ge=0,
        description="Score penalty applied per unit of checklist weight",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_file: Optional[str] = Field(default=None, description="Log file path")

    model_config = SettingsConfigDict(
        env_prefix="LABELHUB_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def get_database_url(self) -> str:
        """Get the async SQLAlchemy URL for the configured storage."""
        if self.db_url:
            return self.db_url

        if self.storage == "sqlite":
            if self.db_path == ":memory:":
                return "sqlite+aiosqlite:///:memory:"
            db_path = Path(self.db_path)
            if not db_path.is_absolute():
                db_path = Path.cwd() / db_path
            return f"sqlite+aiosqlite:///{db_path}"
        elif self.storage == "postgresql":
            raise ValueError(
                "PostgreSQL selected but db_url not provided. "
                "Set LABELHUB_DB_URL or database.url in the config file."
            )
        else:
            raise ValueError(f"Unknown storage backend: {self.storage}")

    @staticmethod
    def flatten_sections(data: dict[str, Any], source: str | Path = "<config>") -> dict[str, Any]:
        """Turn sectioned YAML data into config field values.

        Top-level keys that are not sections pass through unchanged, so flat
        files keep working.

        Raises:
            ValueError: If a section is not a mapping or holds an unknown key
        """
        values: dict[str, Any] = {}
        for key, value in data.items():
            section = FILE_SECTIONS.get(key)
            if section is None:
                values[key] = value
                continue
            if not isinstance(value, dict):
                raise ValueError(f"Section '{key}' in {source} must be a mapping")
            for name, item in value.items():
                if name not in section:
                    raise ValueError(f"Unknown setting '{key}.{name}' in {source}")
                values[section[name]] = item
        return values

    def to_sections(self) -> dict[str, dict[str, Any]]:
        """Group the current settings by YAML section, leaving out unset values."""
        dumped = self.model_dump()
        data: dict[str, dict[str, Any]] = {}
        for section, keys in FILE_SECTIONS.items():
            values = {name: dumped[field] for name, field in keys.items() if dumped[field] is not None}
            if values:
                data[section] = values
        return data

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "LabelhubConfig":
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config file is invalid
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f)

        if not isinstance(data, dict):
            raise ValueError(f"Invalid configuration file: {config_path}")

        return cls(**cls.flatten_sections(data, config_path))

    def to_yaml(self, config_path: str | Path) -> None:
        """Save configuration to a sectioned YAML file."""
        with open(Path(config_path), "w") as f:
            yaml.safe_dump(self.to_sections(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def create_default_config(cls, config_path: str | Path) -> "LabelhubConfig":
        """Create a default configuration file and return the config it holds."""
        config = cls()
        config.to_yaml(config_path)
        return config


def find_config_file() -> Optional[Path]:
    """First existing file among the default configuration locations."""
    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            return path
    return None


# Global configuration instance
_config: Optional[LabelhubConfig] = None


def init_config(config_path: Optional[str | Path] = None) -> LabelhubConfig:
    """Initialize the global configuration.

    Args:
        config_path: Optional path to YAML configuration file.
                    If not provided, the default locations are searched and
                    environment variables and defaults apply when none exists.

    Returns:
        LabelhubConfig instance
    """
    global _config

    path = Path(config_path) if config_path else find_config_file()
    _config = LabelhubConfig.from_yaml(path) if path else LabelhubConfig()
    return _config


def get_config() -> LabelhubConfig:
    """Get the global configuration instance, initializing it on first use."""
    if _config is None:
        return init_config()
    return _config
