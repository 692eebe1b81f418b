"""Configuration management for StreamSift."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from streamsift.models.rules import MatchRule, SortCriterion
from streamsift.models.stream import StreamKind

ORIGINAL_LANGUAGE_VARIABLE = "OriginalLanguage"


class DefaultStreamType(str, Enum):
    """Stream collections the default-language resolver can update."""

    AUDIO = "audio"
    SUBTITLE = "subtitle"
    BOTH = "both"

    @property
    def kinds(self) -> List[StreamKind]:
        """Stream kinds covered by this option."""
        if self is DefaultStreamType.AUDIO:
            return [StreamKind.AUDIO]
        elif self is DefaultStreamType.SUBTITLE:
            return [StreamKind.SUBTITLE]
        return [StreamKind.AUDIO, StreamKind.SUBTITLE]


class RemovalStep(BaseModel):
    """Apply one removal rule to one stream collection."""

    stream_type: StreamKind = Field(default=StreamKind.AUDIO, description="Streams to filter")
    rule: MatchRule = Field(default_factory=MatchRule, description="Removal rule")

    @field_validator("stream_type")
    @classmethod
    def validate_stream_type(cls, v: StreamKind) -> StreamKind:
        """Attachments carry no selectable track data."""
        if v is StreamKind.ATTACHMENT:
            raise ValueError("Removal supports audio, video or subtitle streams")
        return v


class SortStep(BaseModel):
    """Sort one stream collection by a list of criteria."""

    stream_type: StreamKind = Field(default=StreamKind.AUDIO, description="Streams to sort")
    criteria: List[SortCriterion] = Field(..., min_length=1, description="Criteria in priority order")

    @field_validator("stream_type")
    @classmethod
    def validate_stream_type(cls, v: StreamKind) -> StreamKind:
        """Only audio and subtitle collections are reordered."""
        if v not in (StreamKind.AUDIO, StreamKind.SUBTITLE):
            raise ValueError("Sorting supports audio or subtitle streams")
        return v


class DefaultLanguageConfig(BaseModel):
    """Default track resolution configuration."""

    enabled: bool = Field(default=False, description="Mark matching tracks as default")
    stream_type: DefaultStreamType = Field(
        default=DefaultStreamType.AUDIO, description="Streams to update"
    )
    language: Optional[str] = Field(
        default=None,
        description=f"Target language; falls back to the {ORIGINAL_LANGUAGE_VARIABLE} variable",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    format: str = Field(default="text", description="Log format (json or text)")
    level: str = Field(default="warning", description="Log level")
    output: Optional[str] = Field(default=None, description="Optional log file path")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "text"):
            raise ValueError("Log format must be 'json' or 'text'")
        return v

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level."""
        if v.lower() not in ("debug", "info", "warning", "error", "critical"):
            raise ValueError("Invalid log level")
        return v.lower()


class Config(BaseModel):
    """Main configuration model."""

    variables: Dict[str, str] = Field(
        default_factory=dict, description="Runtime variables for {name} substitution"
    )
    removals: List[RemovalStep] = Field(
        default_factory=list, description="Removal steps, applied in order"
    )
    sorters: List[SortStep] = Field(default_factory=list, description="Sort steps, applied in order")
    default_language: DefaultLanguageConfig = Field(
        default_factory=DefaultLanguageConfig, description="Default track resolution"
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig, description="Logging configuration")

    @field_validator("variables", mode="before")
    @classmethod
    def stringify_variables(cls, v: Any) -> Any:
        """YAML turns bare numbers into ints; variables are always strings."""
        if isinstance(v, dict):
            return {str(key): "" if value is None else str(value) for key, value in v.items()}
        return v

    @property
    def original_language(self) -> Optional[str]:
        """The OriginalLanguage runtime variable, if set."""
        return self.variables.get(ORIGINAL_LANGUAGE_VARIABLE) or None

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)

        if raw_config is None:
            raw_config = {}

        raw_config = cls._substitute_env_vars(raw_config)

        return cls(**raw_config)

    @staticmethod
    def _substitute_env_vars(obj: Any) -> Any:
        """Recursively substitute environment variables in configuration.

        Replaces ${VAR_NAME} with os.environ['VAR_NAME']. Plain {name}
        references are runtime variables and are left alone.

        Args:
            obj: Configuration object (dict, list, str, etc.)

        Returns:
            Object with environment variables substituted
        """
        if isinstance(obj, dict):
            return {key: Config._substitute_env_vars(value) for key, value in obj.items()}
        elif isinstance(obj, list):
            return [Config._substitute_env_vars(item) for item in obj]
        elif isinstance(obj, str):
            pattern = r"\$\{([^}]+)\}"

            def replace_var(match):
                var_name = match.group(1)
                value = os.environ.get(var_name)
                if value is None:
                    raise ValueError(
                        f"Environment variable '{var_name}' not found "
                        f"(referenced in configuration)"
                    )
                return value

            return re.sub(pattern, replace_var, obj)
        else:
            return obj

    @classmethod
    def from_defaults(cls) -> "Config":
        """Create configuration with default values.

        Returns:
            Config instance with defaults
        """
        return cls()


def load_config(path: Optional[str | Path] = None) -> Config:
    """Load configuration from file or use defaults.

    Args:
        path: Optional path to configuration file. If None, uses defaults.

    Returns:
        Config instance
    """
    if path is None:
        return Config.from_defaults()

    return Config.from_yaml(path)
