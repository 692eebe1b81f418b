"""Unit tests for configuration loading."""

import pytest
from pydantic import ValidationError

from streamsift.config import (
    Config,
    DefaultLanguageConfig,
    DefaultStreamType,
    LoggingConfig,
    RemovalStep,
    SortStep,
    load_config,
)
from streamsift.models.rules import MatchType, SortProperty
from streamsift.models.stream import StreamKind

FULL_CONFIG = """
variables:
  OriginalLanguage: Japanese
  MaxBitrate: 5
removals:
  - stream_type: audio
    rule:
      match_type: title
      pattern: commentary
  - stream_type: subtitle
    rule:
      match_type: language
      pattern: "eng|jpn"
      invert: true
sorters:
  - stream_type: audio
    criteria:
      - property: language
        comparison: "{OriginalLanguage}"
      - BitrateDesc: ">=5mbps"
default_language:
  enabled: true
  stream_type: both
logging:
  format: json
  level: DEBUG
"""


class TestConfigLoading:
    """Test YAML configuration loading."""

    def test_full_config(self, tmp_path):
        """Every section is read into its model."""
        path = tmp_path / "config.yaml"
        path.write_text(FULL_CONFIG)

        config = Config.from_yaml(path)

        assert config.variables == {"OriginalLanguage": "Japanese", "MaxBitrate": "5"}
        assert config.original_language == "Japanese"

        assert len(config.removals) == 2
        assert config.removals[1].stream_type is StreamKind.SUBTITLE
        assert config.removals[1].rule.match_type is MatchType.LANGUAGE
        assert config.removals[1].rule.invert is True

        criteria = config.sorters[0].criteria
        assert criteria[0].property is SortProperty.LANGUAGE
        assert criteria[0].comparison == "{OriginalLanguage}"
        assert criteria[1].property is SortProperty.BITRATE
        assert criteria[1].descending is True

        assert config.default_language.enabled is True
        assert config.default_language.stream_type is DefaultStreamType.BOTH
        assert config.logging.format == "json"
        assert config.logging.level == "debug"

    def test_env_var_substitution(self, tmp_path, monkeypatch):
        """${VAR} is replaced from the environment, {name} is kept."""
        monkeypatch.setenv("STREAMSIFT_LANG", "French")
        path = tmp_path / "config.yaml"
        path.write_text(
            "variables:\n"
            "  OriginalLanguage: ${STREAMSIFT_LANG}\n"
            "default_language:\n"
            "  enabled: true\n"
            "  language: '{OriginalLanguage}'\n"
        )

        config = Config.from_yaml(path)

        assert config.original_language == "French"
        assert config.default_language.language == "{OriginalLanguage}"

    def test_missing_env_var(self, tmp_path, monkeypatch):
        """An unset environment variable is a configuration error."""
        monkeypatch.delenv("STREAMSIFT_MISSING", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text("variables:\n  OriginalLanguage: ${STREAMSIFT_MISSING}\n")

        with pytest.raises(ValueError, match="STREAMSIFT_MISSING"):
            Config.from_yaml(path)

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            Config.from_yaml(tmp_path / "absent.yaml")

    def test_empty_file_gives_defaults(self, tmp_path):
        """An empty document is the default configuration."""
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = Config.from_yaml(path)

        assert config.removals == []
        assert config.sorters == []
        assert config.default_language.enabled is False

    def test_load_config_defaults(self):
        """No path means built-in defaults."""
        config = load_config()

        assert config.variables == {}
        assert config.original_language is None
        assert config.logging.level == "warning"


class TestConfigValidation:
    """Test model validation."""

    def test_invalid_log_format(self):
        """Only json and text are accepted."""
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_invalid_log_level(self):
        """Unknown levels are rejected."""
        with pytest.raises(ValidationError):
            LoggingConfig(level="verbose")

    def test_removal_rejects_attachments(self):
        """Attachments cannot be filtered."""
        with pytest.raises(ValidationError):
            RemovalStep(stream_type=StreamKind.ATTACHMENT)

    def test_sort_rejects_video(self):
        """Only audio and subtitle streams are sorted."""
        with pytest.raises(ValidationError):
            SortStep(stream_type=StreamKind.VIDEO, criteria=[{"Bitrate": None}])

    def test_sort_needs_criteria(self):
        """A sort step without criteria is an error."""
        with pytest.raises(ValidationError):
            SortStep(stream_type=StreamKind.AUDIO, criteria=[])

    def test_invalid_default_stream_type(self):
        """stream_type must be audio, subtitle or both."""
        with pytest.raises(ValidationError):
            DefaultLanguageConfig(stream_type="video")

    def test_default_stream_type_kinds(self):
        """"both" covers audio and subtitle streams."""
        assert DefaultStreamType.BOTH.kinds == [StreamKind.AUDIO, StreamKind.SUBTITLE]
        assert DefaultStreamType.SUBTITLE.kinds == [StreamKind.SUBTITLE]
