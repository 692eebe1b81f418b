"""Track selection rule models."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SortProperty(str, Enum):
    """Stream properties a sort criterion can order by."""

    CODEC = "codec"
    BITRATE = "bitrate"
    CHANNELS = "channels"
    LANGUAGE = "language"


class MatchType(str, Enum):
    """Stream field a removal pattern is tested against."""

    TITLE = "title"
    LANGUAGE = "language"
    CODEC = "codec"


class SortCriterion(BaseModel):
    """One ordering criterion.

    Without a comparison, numeric properties sort by magnitude. With one,
    streams matching the comparison sort first (see PredicateEvaluator).
    """

    model_config = ConfigDict(frozen=True)

    property: SortProperty = Field(..., description="Stream property to sort by")
    descending: bool = Field(default=False, description="Reverse the order")
    comparison: Optional[str] = Field(
        default=None, description="Comparison, regex or value to match against"
    )

    @model_validator(mode="before")
    @classmethod
    def accept_option_form(cls, data: Any) -> Any:
        """Accept the single-key form, e.g. ``{"BitrateDesc": ">=5mbps"}``."""
        if isinstance(data, dict) and len(data) == 1:
            ((key, value),) = data.items()
            if key not in cls.model_fields:
                return cls._option_fields(key, value)
        return data

    @classmethod
    def from_option(cls, option: str, comparison: Optional[str] = None) -> "SortCriterion":
        """Build a criterion from an option name such as "Bitrate" or "LanguageDesc".

        Args:
            option: Property name, optionally suffixed with "Desc"
            comparison: Optional comparison value

        Returns:
            SortCriterion instance
        """
        return cls(**cls._option_fields(option, comparison))

    @staticmethod
    def _option_fields(option: str, comparison: Any) -> dict:
        descending = option.endswith("Desc")
        if descending:
            option = option[: -len("Desc")]
        return {
            "property": option.lower(),
            "descending": descending,
            "comparison": None if comparison is None else str(comparison),
        }


class MatchRule(BaseModel):
    """A track removal rule."""

    model_config = ConfigDict(frozen=True)

    match_type: MatchType = Field(default=MatchType.TITLE, description="Field to test")
    pattern: str = Field(default="", description="Case-insensitive regular expression")
    invert: bool = Field(default=False, description="Remove tracks that do NOT match")
    remove_all: bool = Field(default=False, description="Remove every non-exempt track")
    skip_count: int = Field(
        default=0, ge=0, description="Number of surviving tracks exempt from removal"
    )
