"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ConfigError
from .domain.models import WEEKDAYS, BoundingBox, TimeSlot
from .domain.schedule_editor import ScheduleEditor

_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class ViewboxConfig(BaseModel):
    """Region that bounds forward geocoding (Cairo and Giza by default)."""
    min_lon: float = 30.5
    max_lat: float = 30.3
    max_lon: float = 31.5
    min_lat: float = 29.8

    @model_validator(mode="after")
    def validate_corners(self) -> "ViewboxConfig":
        """Ensure the box has a positive area."""
        if self.min_lon >= self.max_lon or self.min_lat >= self.max_lat:
            raise ValueError("viewbox min values must be lower than max values")
        return self

    def to_bounding_box(self) -> BoundingBox:
        return BoundingBox(
            min_lon=self.min_lon,
            max_lat=self.max_lat,
            max_lon=self.max_lon,
            min_lat=self.min_lat,
        )


class GeocodingConfig(BaseModel):
    """Settings for the Nominatim-compatible geocoding provider."""
    base_url: str = "https://nominatim.openstreetmap.org"
    user_agent: str = "washregistry"
    timeout_seconds: float = 10
    country_codes: List[str] = Field(default_factory=lambda: ["eg"])
    viewbox: ViewboxConfig = Field(default_factory=ViewboxConfig)
    language: str = "en"
    result_limit: int = 5
    reverse_zoom: int = 18

    @field_validator("result_limit")
    @classmethod
    def validate_limit(cls, value: int) -> int:
        """Nominatim caps results at 40."""
        if not 1 <= value <= 40:
            raise ValueError(f"result_limit must be between 1 and 40, got {value}")
        return value

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    def language_param(self, language: str | None = None) -> str:
        """Only Arabic and English are offered; everything else maps to English."""
        return "ar" if (language or self.language) == "ar" else "en"


class DeviceConfig(BaseModel):
    """Settings for IP based device location."""
    lookup_url: str = "http://ip-api.com/json/"
    timeout_seconds: float = 10


class ScheduleConfig(BaseModel):
    """Defaults used by the availability editor."""
    default_day: str = "Monday"
    default_start: str = "09:00"
    default_end: str = "10:00"
    default_capacity: int = 2
    base_start_hour: int = 12
    base_end_hour: int = 13
    max_attempts: int = 24

    @field_validator("default_day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        if value not in WEEKDAYS:
            raise ValueError(f"default_day must be one of {', '.join(WEEKDAYS)}, got {value}")
        return value

    @field_validator("default_start", "default_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate HH:MM in 24h notation."""
        if not _TIME_PATTERN.match(value):
            raise ValueError(f"Time must be HH:MM (24h), got {value}")
        return value

    @field_validator("base_start_hour", "base_end_hour")
    @classmethod
    def validate_hour(cls, v: int) -> int:
        """Validate hour is between 0 and 23."""
        if not 0 <= v <= 23:
            raise ValueError(f"Hour must be between 0 and 23, got {v}")
        return v

    @field_validator("default_capacity", "max_attempts")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("value must be greater than zero")
        return value

    def build_editor(self) -> ScheduleEditor:
        return ScheduleEditor(
            default_day=self.default_day,
            default_slot=TimeSlot(self.default_start, self.default_end, self.default_capacity),
            base_start_hour=self.base_start_hour,
            base_end_hour=self.base_end_hour,
            default_capacity=self.default_capacity,
            max_attempts=self.max_attempts,
        )


class RegistrationConfig(BaseModel):
    """Phone number rules for the submission payload."""
    phone_prefix: str = "+20"
    phone_digits: int = 10


class AppConfig(BaseModel):
    """Application configuration."""
    geocoding: GeocodingConfig = Field(default_factory=GeocodingConfig)
    device: DeviceConfig = Field(default_factory=DeviceConfig)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)
    registration: RegistrationConfig = Field(default_factory=RegistrationConfig)

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
            ConfigError: If the file is not valid YAML or not a mapping
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
            raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigError("Config file must contain a mapping at the root level.")

        return cls(**data)

    @classmethod
    def load_or_default(cls, config_path: Path | None = None) -> "AppConfig":
        """Load the given or default config file, falling back to defaults."""
        path = config_path or get_default_config_path()
        if config_path is None and not path.exists():
            return cls()
        return cls.load_from_yaml(path)


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of washregistry/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
