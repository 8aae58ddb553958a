"""Race-level constants shared by the leg resolver and the standings engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .validation import InputSanitizer


class ConfigurationError(ValueError):
    """Raised when race constants cannot describe a valid race."""


@dataclass(frozen=True)
class RaceConfig:
    """
    Shape of the race.

    Defaults describe the standard 36-leg race: 2 vans of 6 runners, each
    runner running 3 legs. `legs_per_van` is the length of one full rotation
    through every van (12 for the default race).
    """

    total_legs: int = 36
    runners_per_van: int = 6
    legs_per_van: int = 12
    average_leg_miles: float = 5.0

    def __post_init__(self) -> None:
        for name in ("total_legs", "runners_per_van", "legs_per_van"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ConfigurationError(f"{name} must be a positive integer, got {value!r}")
        if self.legs_per_van % self.runners_per_van != 0:
            raise ConfigurationError(
                f"legs_per_van ({self.legs_per_van}) must be a multiple of "
                f"runners_per_van ({self.runners_per_van})"
            )
        if self.total_legs % self.legs_per_van != 0:
            raise ConfigurationError(
                f"total_legs ({self.total_legs}) must be a multiple of "
                f"legs_per_van ({self.legs_per_van})"
            )
        if not self.average_leg_miles > 0:
            raise ConfigurationError(
                f"average_leg_miles must be positive, got {self.average_leg_miles!r}"
            )

    @property
    def vans(self) -> int:
        return self.legs_per_van // self.runners_per_van

    @property
    def legs_per_runner(self) -> int:
        return self.total_legs // self.legs_per_van

    @property
    def runners_per_team(self) -> int:
        return self.legs_per_van

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "RaceConfig":
        """Build a config from the admin key/value table (string values allowed).

        Raises:
            ConfigurationError: if the values are missing, malformed or inconsistent
        """
        try:
            validated = InputSanitizer.validate_and_sanitize_config(dict(values))
        except ValueError as e:
            raise ConfigurationError(str(e)) from e
        return cls(
            total_legs=validated.totalLegs,
            runners_per_van=validated.runnersPerVan,
            legs_per_van=validated.legsPerVan,
            average_leg_miles=validated.averageLegMiles,
        )


DEFAULT_CONFIG = RaceConfig()
