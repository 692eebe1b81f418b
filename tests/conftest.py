"""Shared pytest fixtures for StreamSift tests."""

import logging
from pathlib import Path

import pytest

from streamsift.config import Config, DefaultLanguageConfig, RemovalStep, SortStep
from streamsift.models.rules import MatchRule, MatchType, SortCriterion, SortProperty
from streamsift.models.stream import AudioStream, StreamKind, SubtitleStream, VideoStream

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture(autouse=True)
def reset_log_handlers():
    """Drop handlers installed by CLI runs so later tests never log to a closed stream."""
    yield
    logging.getLogger().handlers.clear()


@pytest.fixture
def fixture_text():
    """Load a sample probe output from tests/fixtures."""

    def _load(name: str) -> str:
        return (FIXTURES / name).read_text(encoding="utf-8")

    return _load


@pytest.fixture
def fixture_path():
    """Path to a sample probe output in tests/fixtures."""

    def _path(name: str) -> Path:
        return FIXTURES / name

    return _path


@pytest.fixture
def sample_audio_streams():
    """Create sample audio streams for testing."""
    return [
        AudioStream(
            index=0,
            codec="aac",
            language="eng",
            title="English",
            is_default=True,
            channels=2,
            bitrate=128000,
        ),
        AudioStream(
            index=1,
            codec="ac3",
            language="jpn",
            title="Japanese",
            channels=5.1,
            bitrate=640000,
        ),
        AudioStream(
            index=2,
            codec="dts",
            language="fre",
            title="French",
            channels=5.1,
            bitrate=1536000,
        ),
        AudioStream(
            index=3,
            codec="aac",
            language="eng",
            title="Commentary",
            channels=2,
            bitrate=96000,
        ),
    ]


@pytest.fixture
def sample_subtitle_streams():
    """Create sample subtitle streams for testing."""
    return [
        SubtitleStream(index=0, codec="subrip", language="eng", title="English"),
        SubtitleStream(index=1, codec="hdmv_pgs_subtitle", language="jpn", title="Japanese"),
        SubtitleStream(index=2, codec="ass", language="", title="Signs"),
    ]


@pytest.fixture
def sample_video_stream():
    """Create a sample video stream for testing."""
    return VideoStream(index=0, codec="h264", language="eng", title="Main", width=1920, height=1080)


@pytest.fixture
def pipeline_config():
    """Configuration exercising every pipeline step."""
    return Config(
        variables={"OriginalLanguage": "Japanese"},
        removals=[
            RemovalStep(
                stream_type=StreamKind.AUDIO,
                rule=MatchRule(match_type=MatchType.TITLE, pattern="commentary"),
            ),
        ],
        sorters=[
            SortStep(
                stream_type=StreamKind.AUDIO,
                criteria=[
                    SortCriterion(property=SortProperty.LANGUAGE, comparison="orig"),
                    SortCriterion(property=SortProperty.BITRATE, descending=True),
                ],
            ),
        ],
        default_language=DefaultLanguageConfig(enabled=True, stream_type="both"),
    )
