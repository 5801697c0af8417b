"""
Configuration management using Pydantic models loaded from YAML.
"""

from pathlib import Path
from typing import List, Literal, Optional

import pendulum
import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.fixed_slots import WALK_STEP_MINUTES
from .domain.models import ServiceRequest
from .domain.variable_slots import SITTING_MIN_DURATION_MINUTES, SITTING_STEP_MINUTES


class ServiceConfig(BaseModel):
    """A bookable service from the catalogue."""
    id: str
    name: str
    kind: Literal["walk", "sitting"] = "walk"
    duration_minutes: Optional[int] = None  # Walks only

    @model_validator(mode="after")
    def validate_duration(self) -> "ServiceConfig":
        """Walks need a positive fixed duration; sitting picks its own length."""
        if self.kind == "walk":
            if self.duration_minutes is None or self.duration_minutes <= 0:
                raise ValueError(f"Walk service '{self.id}' needs a positive duration_minutes")
        elif self.duration_minutes is not None:
            raise ValueError(f"Sitting service '{self.id}' must not set duration_minutes")
        return self

    @property
    def is_sitting(self) -> bool:
        return self.kind == "sitting"


def _default_services() -> List[ServiceConfig]:
    return [
        ServiceConfig(id="meetgreet", name="Meet & Greet - for new clients", duration_minutes=30),
        ServiceConfig(id="quick", name="Quick Walk (30 min)", duration_minutes=30),
        ServiceConfig(id="solo", name="Solo Walk (60 min)", duration_minutes=60),
        ServiceConfig(id="solo2h", name="Solo Walk (2 hours)", duration_minutes=120),
        ServiceConfig(id="sitting", name="Dog Sitting", kind="sitting"),
    ]


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3000/api/dog-walking"
    request_timeout_seconds: float = 30.0
    timezone: str = "Europe/London"
    walk_step_minutes: int = WALK_STEP_MINUTES
    sitting_step_minutes: int = SITTING_STEP_MINUTES
    sitting_min_duration_minutes: int = SITTING_MIN_DURATION_MINUTES
    services: List[ServiceConfig] = Field(default_factory=_default_services)

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        return value

    @field_validator("walk_step_minutes", "sitting_step_minutes", "sitting_min_duration_minutes")
    @classmethod
    def validate_positive_minutes(cls, value: int) -> int:
        """Ensure step sizes and durations are positive."""
        if value <= 0:
            raise ValueError(f"Minutes must be greater than zero, got {value}")
        return value

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value}") from exc
        return value

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("services")
    @classmethod
    def validate_services(cls, value: List[ServiceConfig]) -> List[ServiceConfig]:
        """Ensure service ids are unique."""
        seen: set[str] = set()
        for service in value:
            key = service.id.lower()
            if key in seen:
                raise ValueError(f"Duplicate service id detected: {service.id}")
            seen.add(key)
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

    def find_service(self, service_id: str) -> ServiceConfig | None:
        """Find a service by its id (case-insensitive)."""
        for service in self.services:
            if service.id.lower() == service_id.lower():
                return service
        return None

    def get_service(self, service_id: str) -> ServiceConfig:
        """
        Resolve a service id to its catalogue entry.

        Raises:
            ValueError: If the id is unknown
        """
        service = self.find_service(service_id)
        if service is None:
            known = ", ".join(s.id for s in self.services)
            raise ValueError(f"Unknown service: '{service_id}'. Known services: {known}")
        return service

    def sitting_service(self) -> ServiceConfig:
        """
        Return the first sitting service in the catalogue.

        Raises:
            ValueError: If the catalogue has no sitting service
        """
        for service in self.services:
            if service.is_sitting:
                return service
        raise ValueError("No sitting service configured")

    def service_request(self, service_id: str) -> ServiceRequest:
        """Build the slot parameters for a catalogue service."""
        service = self.get_service(service_id)
        if service.is_sitting:
            return ServiceRequest(
                fixed_duration_minutes=None,
                min_duration_minutes=self.sitting_min_duration_minutes,
                step_minutes=self.sitting_step_minutes,
            )
        return ServiceRequest(
            fixed_duration_minutes=service.duration_minutes,
            min_duration_minutes=None,
            step_minutes=self.walk_step_minutes,
        )


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


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load the given config file, or the default one, falling back to built-in defaults."""
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)
    return AppConfig()
