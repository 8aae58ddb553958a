"""
Input validation schemas using Pydantic v2
Validates time entries, roster records and race config input
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .models import City
from .pace import parse_time_to_seconds

if TYPE_CHECKING:
    from .config import RaceConfig

logger = logging.getLogger(__name__)

PIN_PATTERN = re.compile(r"^\d{4,6}$")
COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")

# ==================== VALIDATOR FUNCTIONS ====================


def _strip_dangerous(value: str) -> str:
    dangerous_patterns = ["--", "/*", "*/", "<script", "javascript:", "onerror="]
    for pattern in dangerous_patterns:
        if pattern.upper() in value.upper():
            raise ValueError(f"contains potentially dangerous pattern: {pattern}")
    if "<" in value and ">" in value:
        raise ValueError("contains HTML tags")
    return value


class ValidatedTimeEntry(BaseModel):
    """Time submission from a runner, captain, admin or import row"""

    legNumber: int = Field(..., ge=1, le=999, description="Leg number (1-based)")
    clockTime: int = Field(
        ..., gt=0, le=86400, description="Elapsed seconds on the leg (or H:MM:SS)"
    )
    kills: int = Field(0, ge=0, le=999, description="Runners passed during the leg")
    # Required for captain/admin entry; runners submit for themselves
    runnerId: Optional[str] = Field(None, min_length=1, max_length=64)

    @field_validator("clockTime", mode="before")
    @classmethod
    def parse_clock_time(cls, v: Any) -> Any:
        """Accept seconds or a H:MM:SS / MM:SS string"""
        if isinstance(v, bool):
            raise ValueError("clockTime must be seconds or H:MM:SS")
        if isinstance(v, str):
            stripped = v.strip()
            if ":" in stripped:
                seconds = parse_time_to_seconds(stripped)
                logger.debug(f"Normalized clockTime: {v} → {seconds}")
                return seconds
            return stripped
        return v

    @field_validator("kills", mode="before")
    @classmethod
    def default_kills(cls, v: Any) -> Any:
        # Missing/blank kills count as zero, matching the entry forms
        if v is None or v == "":
            return 0
        return v

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class ValidatedTeam(BaseModel):
    """Team create/edit input"""

    name: str = Field(..., min_length=1, max_length=50)
    city: City
    color: str = Field("#808080", description="Hex display color (#RRGGBB)")
    van1Captain: Optional[str] = Field(None, max_length=100)
    van2Captain: Optional[str] = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Team names are unique and uppercase"""
        v = _strip_dangerous(v.strip())
        if len(v) == 0:
            raise ValueError("team name cannot be empty")
        return v.upper()

    @field_validator("city", mode="before")
    @classmethod
    def normalize_city(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().capitalize()
        return v

    @field_validator("color")
    @classmethod
    def validate_color(cls, v: str) -> str:
        v = v.strip()
        if not COLOR_PATTERN.match(v):
            raise ValueError("color must be #RRGGBB")
        return v.upper()


class ValidatedRunner(BaseModel):
    """Runner create/edit input"""

    name: str = Field(..., min_length=1, max_length=255)
    teamId: str = Field(..., min_length=1, max_length=64)
    vanNumber: int = Field(..., ge=1, le=9)
    runOrder: int = Field(..., ge=1, le=99)
    projectedPace: float = Field(
        ..., gt=0, le=3600, description="Projected pace (seconds per mile)"
    )
    pin: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = _strip_dangerous(v.strip())
        if len(v) == 0:
            raise ValueError("runner name cannot be empty")
        return v

    @field_validator("projectedPace", mode="before")
    @classmethod
    def parse_pace(cls, v: Any) -> Any:
        """Accept seconds or "M:SS" pace strings"""
        if isinstance(v, str) and ":" in v:
            return parse_time_to_seconds(v.strip())
        return v

    @field_validator("pin")
    @classmethod
    def validate_pin(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not PIN_PATTERN.match(v):
            raise ValueError("pin must be 4-6 digits")
        return v


class ValidatedLeg(BaseModel):
    """Leg create/edit input"""

    legNumber: int = Field(..., ge=1, le=999)
    distance: float = Field(..., gt=0, le=100, description="Distance in miles")
    difficulty: Optional[str] = None
    elevation: Optional[float] = None
    startPoint: Optional[str] = Field(None, max_length=255)
    endPoint: Optional[str] = Field(None, max_length=255)
    startLat: Optional[float] = Field(None, ge=-90, le=90)
    startLng: Optional[float] = Field(None, ge=-180, le=180)
    endLat: Optional[float] = Field(None, ge=-90, le=90)
    endLng: Optional[float] = Field(None, ge=-180, le=180)

    @field_validator("difficulty")
    @classmethod
    def validate_difficulty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip().lower()
        if v not in {"easy", "moderate", "hard"}:
            raise ValueError(f"difficulty must be easy, moderate or hard, got {v}")
        return v


class ValidatedRaceConfig(BaseModel):
    """Race constants from the admin key/value config table"""

    totalLegs: int = Field(36, gt=0, le=999)
    runnersPerVan: int = Field(6, gt=0, le=99)
    legsPerVan: int = Field(12, gt=0, le=999)
    averageLegMiles: float = Field(5.0, gt=0, le=100)

    @model_validator(mode="before")
    @classmethod
    def accept_snake_case(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        aliases = {
            "total_legs": "totalLegs",
            "runners_per_van": "runnersPerVan",
            "legs_per_van": "legsPerVan",
            "average_leg_miles": "averageLegMiles",
        }
        normalized = {}
        for key, value in data.items():
            normalized[aliases.get(key, key)] = value
        return normalized

    @model_validator(mode="after")
    def validate_shape(self) -> Self:
        """Legs must split evenly into vans and rotations"""
        if self.legsPerVan % self.runnersPerVan != 0:
            raise ValueError("legsPerVan must be a multiple of runnersPerVan")
        if self.totalLegs % self.legsPerVan != 0:
            raise ValueError("totalLegs must be a multiple of legsPerVan")
        return self

    model_config = ConfigDict(extra="ignore")


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        value = value.strip()
        value = value[:max_length]
        # Remove null bytes
        value = value.replace("\0", "")

        return value

    @staticmethod
    def sanitize_runner_name(name: str) -> str:
        """Sanitize runner name for display, keeping letters with diacritics"""
        name = InputSanitizer.sanitize_string(name, 255)
        dangerous_chars = r'[<>{}[\]\\|;()&$`"\*\x00-\x1f\x7f]'
        name = re.sub(dangerous_chars, "", name)
        return name.strip()

    @staticmethod
    def _validate(model: type[BaseModel], data: Dict[str, Any], label: str) -> Any:
        try:
            return model(**data)
        except Exception as e:
            logger.warning(f"{label} validation failed: {e}")
            raise ValueError(f"Invalid {label}: {str(e)}")

    @staticmethod
    def validate_and_sanitize_entry(entry_dict: dict) -> ValidatedTimeEntry:
        """
        Validate a time submission

        Returns:
            ValidatedTimeEntry: Validated entry

        Raises:
            ValueError: If validation fails
        """
        return InputSanitizer._validate(ValidatedTimeEntry, entry_dict, "time entry")

    @staticmethod
    def validate_and_sanitize_team(team_dict: dict) -> ValidatedTeam:
        return InputSanitizer._validate(ValidatedTeam, team_dict, "team")

    @staticmethod
    def validate_and_sanitize_runner(
        runner_dict: dict, config: Optional["RaceConfig"] = None
    ) -> ValidatedRunner:
        """
        Validate a runner record; with `config`, also check the van seat exists

        Raises:
            ValueError: If validation fails or (vanNumber, runOrder) is outside the race shape
        """
        validated = InputSanitizer._validate(ValidatedRunner, runner_dict, "runner")
        if config is not None and not (
            1 <= validated.vanNumber <= config.vans
            and 1 <= validated.runOrder <= config.runners_per_van
        ):
            message = (
                f"van {validated.vanNumber} / order {validated.runOrder} outside "
                f"{config.vans} vans x {config.runners_per_van} runners"
            )
            logger.warning(f"runner validation failed: {message}")
            raise ValueError(f"Invalid runner: {message}")
        validated.name = InputSanitizer.sanitize_runner_name(validated.name)
        return validated

    @staticmethod
    def validate_and_sanitize_leg(leg_dict: dict) -> ValidatedLeg:
        return InputSanitizer._validate(ValidatedLeg, leg_dict, "leg")

    @staticmethod
    def validate_and_sanitize_config(config_dict: dict) -> ValidatedRaceConfig:
        return InputSanitizer._validate(ValidatedRaceConfig, config_dict, "race config")


# ==================== EXPORT ====================

__all__ = [
    "ValidatedTimeEntry",
    "ValidatedTeam",
    "ValidatedRunner",
    "ValidatedLeg",
    "ValidatedRaceConfig",
    "InputSanitizer",
]
