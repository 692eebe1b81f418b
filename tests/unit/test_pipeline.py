"""Unit tests for the track selection pipeline."""

import pytest

from streamsift.config import Config, DefaultLanguageConfig, RemovalStep, SortStep
from streamsift.core.parser import ProbeOutputParser
from streamsift.core.pipeline import StreamPipeline
from streamsift.models.media import MediaDescriptor
from streamsift.models.rules import MatchRule, MatchType, SortCriterion, SortProperty
from streamsift.models.stream import StreamKind


@pytest.fixture
def descriptor(sample_audio_streams, sample_subtitle_streams, sample_video_stream):
    """Create a descriptor from the sample streams."""
    return MediaDescriptor(
        filename="movie.mkv",
        video_streams=[sample_video_stream],
        audio_streams=sample_audio_streams,
        subtitle_streams=sample_subtitle_streams,
    )


class TestStreamPipeline:
    """Test the full removal, sort and default sequence."""

    def test_process(self, pipeline_config, descriptor):
        """All three steps run in order."""
        result = StreamPipeline(pipeline_config).process(descriptor)

        assert result.removed == 1
        assert result.reordered == ["audio"]
        assert result.defaults_changed == 3
        assert result.default_language == "Japanese"
        assert result.changed

        audio = descriptor.audio_streams
        assert [s.index for s in audio] == [1, 2, 0, 3]
        assert audio[3].deleted is True
        assert [s.is_default for s in audio] == [True, False, False, False]
        assert [s.is_default for s in descriptor.subtitle_streams] == [False, True, False]

    def test_second_run_changes_nothing(self, pipeline_config, descriptor):
        """Processing an already processed descriptor is a no-op."""
        pipeline = StreamPipeline(pipeline_config)
        pipeline.process(descriptor)

        result = pipeline.process(descriptor)

        assert not result.changed
        assert str(result) == "No changes"

    def test_explicit_default_language_with_variable(self, descriptor):
        """The configured target may reference a runtime variable."""
        config = Config(
            variables={"Preferred": "fre"},
            default_language=DefaultLanguageConfig(enabled=True, language="{Preferred}"),
        )

        result = StreamPipeline(config).process(descriptor)

        assert result.default_language == "fre"
        assert [s.is_default for s in descriptor.audio_streams] == [False, False, True, False]
        # Subtitles untouched when only audio is configured
        assert not any(s.is_default for s in descriptor.subtitle_streams)

    def test_no_target_language_skips_defaults(self, descriptor):
        """Without a target, default flags are left alone."""
        config = Config(default_language=DefaultLanguageConfig(enabled=True))

        result = StreamPipeline(config).process(descriptor)

        assert result.defaults_changed == 0
        assert result.default_language == ""
        assert descriptor.audio_streams[0].is_default is True

    def test_defaults_disabled(self, descriptor):
        """The default step only runs when enabled."""
        config = Config(variables={"OriginalLanguage": "jpn"})

        result = StreamPipeline(config).process(descriptor)

        assert not result.changed
        assert descriptor.audio_streams[0].is_default is True

    def test_steps_target_their_stream_type(self, descriptor):
        """A subtitle removal step leaves audio alone."""
        config = Config(
            removals=[
                RemovalStep(
                    stream_type=StreamKind.SUBTITLE,
                    rule=MatchRule(match_type=MatchType.LANGUAGE, pattern="eng"),
                )
            ]
        )

        result = StreamPipeline(config).process(descriptor)

        assert result.removed == 1
        assert descriptor.subtitle_streams[0].deleted is True
        assert not any(s.deleted for s in descriptor.audio_streams)

    def test_parsed_media(self, fixture_text):
        """Parsed probe output runs through the pipeline."""
        media = ProbeOutputParser().parse(fixture_text("cast_away.txt"))
        config = Config(
            removals=[
                RemovalStep(rule=MatchRule(match_type=MatchType.TITLE, pattern="commentary")),
            ],
            sorters=[
                SortStep(
                    stream_type=StreamKind.SUBTITLE,
                    criteria=[SortCriterion(property=SortProperty.LANGUAGE, comparison="spa")],
                )
            ],
        )

        result = StreamPipeline(config).process(media)

        assert result.removed == 1
        assert result.reordered == ["subtitle"]
        assert [s.language for s in media.subtitle_streams] == ["spa", "eng"]
        assert result.parse_issues == 0
