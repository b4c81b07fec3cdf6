"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator

ProviderType = Literal["savvycal", "calcom", "mock"]


class SelectionConfig(BaseModel):
    """Settings for the slot selection algorithm."""
    max_slots: int = 4
    increment_minutes: int = 30

    @field_validator("max_slots", "increment_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure limits are positive."""
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value


class SavvyCalConfig(BaseModel):
    """SavvyCal provider settings."""
    token: str = ""
    link: str = ""  # Scheduling link slug


class CalComConfig(BaseModel):
    """Cal.com provider settings."""
    username: str = ""
    event_slug: str = ""


class AppConfig(BaseModel):
    """Application configuration."""
    provider: ProviderType = "savvycal"
    timezone: str = "America/New_York"
    days_ahead: int = 10
    savvycal: SavvyCalConfig = Field(default_factory=SavvyCalConfig)
    calcom: CalComConfig = Field(default_factory=CalComConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        return validate_timezone_name(value)

    @field_validator("days_ahead")
    @classmethod
    def validate_days_ahead(cls, value: int) -> int:
        """Ensure the search window covers at least one day."""
        if value < 1:
            raise ValueError(f"days_ahead must be at least 1, got {value}")
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Optional[Path] = None) -> "AppConfig":
        """
        Load the given or default config file, falling back to defaults.

        An explicitly passed path must exist.
        """
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def validate_timezone_name(value: str) -> str:
    """Return value if pendulum knows the timezone, raise ValueError otherwise."""
    try:
        pendulum.timezone(value)
    except Exception as exc:
        raise ValueError(f"Unknown timezone: {value}") from exc
    return value


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
