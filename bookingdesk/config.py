"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import BusinessHours, parse_time_of_day


class BusinessHoursConfig(BaseModel):
    """Default opening hours used when a business has none on record."""
    start: str = "09:00"
    end: str = "17:00"

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Normalise to HH:MM."""
        return parse_time_of_day(value).strftime("%H:%M")

    @model_validator(mode="after")
    def validate_order(self) -> "BusinessHoursConfig":
        """Ensure the business opens before it closes."""
        if self.get_start_time() >= self.get_end_time():
            raise ValueError("business_hours.end must be later than business_hours.start")
        return self

    def get_start_time(self) -> time:
        return parse_time_of_day(self.start)

    def get_end_time(self) -> time:
        return parse_time_of_day(self.end)

    def to_business_hours(self) -> BusinessHours:
        return BusinessHours(start=self.get_start_time(), end=self.get_end_time())


class DefaultsConfig(BaseModel):
    """Default settings for the booking calendar."""
    business_hours: BusinessHoursConfig = Field(default_factory=BusinessHoursConfig)
    booking_window_days: int = 90
    months_ahead: int = 3
    duration_minutes: int = 60

    @field_validator("booking_window_days", "months_ahead", "duration_minutes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        """Ensure counts and durations are positive."""
        if value <= 0:
            raise ValueError(f"Value must be greater than zero, got {value}")
        return value


class SupabaseConfig(BaseModel):
    """Hosted backend connection settings."""
    url: str = ""
    anon_key: str = ""
    session_cache: Optional[Path] = None

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def is_configured(self) -> bool:
        return bool(self.url and self.anon_key)


class AppConfig(BaseModel):
    """Application configuration."""
    supabase: SupabaseConfig = Field(default_factory=SupabaseConfig)
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    timezone: str = "UTC"
    business_id: Optional[str] = None
    exclude_days: List[int] = Field(default_factory=list)

    @field_validator("exclude_days")
    @classmethod
    def validate_exclude_days(cls, value: List[int]) -> List[int]:
        """Only weekdays 0 (Monday) to 6 (Sunday), first occurrence wins."""
        out_of_range = sorted({day for day in value if not 0 <= day <= 6})
        if out_of_range:
            raise ValueError(f"exclude_days entries must be weekdays 0-6, got {out_of_range}")
        return list(dict.fromkeys(value))

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Read and validate a YAML config file.

        Args:
            config_path: Location of config.yaml

        Returns:
            The parsed AppConfig

        Raises:
            FileNotFoundError: If the file is missing
            ValueError: If the YAML is malformed or fails validation
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Copy config.example.yaml to config.yaml and fill in your Supabase project."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as config_file:
                raw = yaml.safe_load(config_file) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ValueError(f"{config_path} must contain a mapping at the top level.")

        return cls.model_validate(raw)

    def resolve_business_id(self, business_id: Optional[str]) -> str:
        """Pick the explicit business id or fall back to the configured one."""
        resolved = business_id or self.business_id
        if not resolved:
            raise ValueError(
                "No business given. Pass --business or set business_id in config.yaml."
            )
        return resolved


def get_default_config_path() -> Path:
    """Return ./config.yaml, or the one next to the package when cwd has none."""
    candidate = Path.cwd() / "config.yaml"
    if candidate.exists():
        return candidate
    return Path(__file__).resolve().parent.parent / "config.yaml"
