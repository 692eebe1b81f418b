"""Data models for parsed media and track selection rules.

Streams, chapters and format info are plain dataclasses created by the
parser. Sort criteria and removal rules are pydantic models so they can be
loaded straight from configuration.
"""

from streamsift.models.media import ChapterRecord, FormatInfo, FormatTags, MediaDescriptor, ParseIssue
from streamsift.models.result import ProcessResult
from streamsift.models.rules import MatchRule, MatchType, SortCriterion, SortProperty
from streamsift.models.stream import (
    AttachmentStream,
    AudioStream,
    StreamKind,
    StreamRecord,
    SubtitleStream,
    VideoStream,
)

__all__ = [
    "AttachmentStream",
    "AudioStream",
    "ChapterRecord",
    "FormatInfo",
    "FormatTags",
    "MatchRule",
    "MatchType",
    "MediaDescriptor",
    "ParseIssue",
    "ProcessResult",
    "SortCriterion",
    "SortProperty",
    "StreamKind",
    "StreamRecord",
    "SubtitleStream",
    "VideoStream",
]
