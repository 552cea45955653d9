"""
Input validation schemas using Pydantic v2
Validates seeding configuration, advancement rules and persistence rows
"""

import logging
import math
import re
from typing import Literal, Optional, Self

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

MAX_LANES = 12
MAX_HEATS = 99

# Operator-facing aliases for the distribution strategies
_STRATEGY_ALIASES = {
    "zigzag": "serpentine",
    "snake": "serpentine",
    "fastest-last": "fastest_last",
    "fastestlast": "fastest_last",
    "lot": "random",
}

_STATUS_ALIASES = {
    "FINISHED": "finished",
    "OK": "finished",
    "DNS": "DNS",
    "DNF": "DNF",
    "DQ": "DQ",
    # Field-event codes with no valid result
    "NM": "DNF",
    "R": "DNF",
}

# ==================== CONFIGURATION ====================


class ValidatedSeedingConfig(BaseModel):
    """Seeding configuration with bounds checking"""

    lane_count: int = Field(
        ..., ge=1, le=MAX_LANES, description=f"Lanes per heat (1-{MAX_LANES})"
    )
    heat_count: Optional[int] = Field(
        None, ge=1, le=MAX_HEATS, description="Explicit heat count; derived when omitted"
    )
    strategy: Literal["random", "serpentine", "fastest_last"] = "serpentine"
    race_kind: Literal["time", "mark"] = "time"
    lane_policy: Literal["center_out", "ranking_groups"] = "center_out"
    race_type: Literal["straight", "200m_300m", "400m_relay_800m", "distance"] = "straight"

    @field_validator("strategy", "race_kind", "lane_policy", "race_type", mode="before")
    @classmethod
    def normalize_choice(cls, v):
        """Lower-case and trim enum-like strings, resolving strategy aliases"""
        if isinstance(v, str):
            v = v.strip().lower()
            return _STRATEGY_ALIASES.get(v, v)
        return v

    @field_validator("heat_count", mode="before")
    @classmethod
    def empty_heat_count_is_derived(cls, v):
        # Forms submit "" for "let the engine decide"
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    model_config = ConfigDict(extra="forbid")


class ValidatedAdvancementRule(BaseModel):
    """Advancement rule: top N per heat by place (Q) + next M by time (q)"""

    # No upper bound: places beyond the field simply go unused
    by_place: int = Field(..., ge=0, description="Q per heat")
    by_time: int = Field(..., ge=0, description="q overall")

    model_config = ConfigDict(extra="forbid")


# ==================== ROWS ====================


class ValidatedEntryRow(BaseModel):
    """Entry row coming from the persistence layer"""

    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field("", max_length=255)
    club: Optional[str] = Field(None, max_length=255)
    seed_mark: Optional[str] = Field(None, max_length=20)
    seed_mark_value: Optional[float] = None
    status: str = Field("registered", min_length=1, max_length=32)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str) -> str:
        return InputSanitizer.sanitize_display_name(v)

    @field_validator("club")
    @classmethod
    def sanitize_club(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return InputSanitizer.sanitize_display_name(v) or None

    @field_validator("seed_mark")
    @classmethod
    def blank_mark_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("seed_mark_value")
    @classmethod
    def finite_seed_value(cls, v: Optional[float]) -> Optional[float]:
        if v is None:
            return v
        if not math.isfinite(v) or v < 0:
            raise ValueError("seed_mark_value must be a finite, non-negative number")
        return v

    @field_validator("status")
    @classmethod
    def normalize_status(cls, v: str) -> str:
        return v.strip().lower()

    model_config = ConfigDict(extra="ignore")


class ValidatedHeatEntryRow(BaseModel):
    """Heat entry row carrying a recorded result"""

    entry_id: str = Field(..., min_length=1, max_length=64)
    heat_number: int = Field(..., ge=1, le=MAX_HEATS)
    result_value: Optional[float] = None
    status: Literal["finished", "DNS", "DNF", "DQ"] = "finished"

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            key = v.strip().upper()
            if key in _STATUS_ALIASES:
                return _STATUS_ALIASES[key]
        return v

    @field_validator("result_value")
    @classmethod
    def finite_result(cls, v: Optional[float]) -> Optional[float]:
        if v is not None and not math.isfinite(v):
            raise ValueError("result_value must be finite")
        return v

    @model_validator(mode="after")
    def drop_value_for_non_finishers(self) -> Self:
        """DNS/DNF/DQ rows never carry a rankable value"""
        if self.status != "finished":
            self.result_value = None
        return self

    model_config = ConfigDict(extra="ignore")


class InputSanitizer:
    """Utility class for input sanitization"""

    @staticmethod
    def sanitize_string(value: str, max_length: int = 255) -> str:
        """Sanitize string input"""
        if not isinstance(value, str):
            return str(value)[:max_length]

        # Strip whitespace
        value = value.strip()

        # Limit length
        value = value[:max_length]

        # Remove null bytes
        value = value.replace("\0", "")

        return value

    @staticmethod
    def sanitize_display_name(name: str) -> str:
        """Sanitize athlete/club name for start lists - preserve diacritics (æ, ø, å, ...)"""
        name = InputSanitizer.sanitize_string(name, 255)
        dangerous_chars = r'[<>{}[\]\\|;()&$`"\*\x00-\x1f\x7f]'
        name = re.sub(dangerous_chars, "", name)
        return name.strip()


class ConfigValidator:
    """Validate raw dictionaries into the schemas above"""

    @staticmethod
    def validate_seeding_config(data: dict) -> ValidatedSeedingConfig:
        """
        Validate seeding configuration

        Raises:
            ValueError: If validation fails
        """
        try:
            return ValidatedSeedingConfig(**data)
        except Exception as e:
            logger.warning(f"Seeding config validation failed: {e}")
            raise ValueError(f"Invalid seeding config: {str(e)}")

    @staticmethod
    def validate_advancement_rule(data: dict) -> ValidatedAdvancementRule:
        """
        Validate advancement rule

        Raises:
            ValueError: If validation fails
        """
        try:
            return ValidatedAdvancementRule(**data)
        except Exception as e:
            logger.warning(f"Advancement rule validation failed: {e}")
            raise ValueError(f"Invalid advancement rule: {str(e)}")


# ==================== EXPORT ====================

__all__ = [
    "ValidatedSeedingConfig",
    "ValidatedAdvancementRule",
    "ValidatedEntryRow",
    "ValidatedHeatEntryRow",
    "InputSanitizer",
    "ConfigValidator",
]
