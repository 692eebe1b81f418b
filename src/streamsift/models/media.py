"""Parsed media descriptor models."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Optional, Union

from streamsift.models.stream import (
    AttachmentStream,
    AudioStream,
    StreamKind,
    StreamRecord,
    SubtitleStream,
    VideoStream,
)


@dataclass
class ChapterRecord:
    """A chapter, with times measured from the start of the stream."""

    start: timedelta
    end: timedelta
    title: str = ""

    def __str__(self) -> str:
        """Human-readable representation."""
        return f"{self.title or 'Untitled'} ({self.start} - {self.end})"


class FormatTags(Mapping[str, str]):
    """Case-insensitive, read-only view of container tags.

    Probe tools are inconsistent about tag case ("TITLE", "Title", "title"),
    so keys are folded on the way in. Values are kept as strings even when
    the source had numbers (``track: 3`` reads back as ``"3"``).
    """

    def __init__(self, tags: Optional[Mapping[str, Any]] = None):
        self._tags: dict[str, str] = {}
        for key, value in (tags or {}).items():
            if value is None:
                continue
            self._tags[str(key).lower()] = str(value)

    def __getitem__(self, key: str) -> str:
        return self._tags[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(self._tags)

    def __len__(self) -> int:
        return len(self._tags)

    def __repr__(self) -> str:
        return f"FormatTags({self._tags!r})"

    @property
    def title(self) -> Optional[str]:
        return self.get("title")

    @property
    def artist(self) -> Optional[str]:
        return self.get("artist")

    @property
    def album(self) -> Optional[str]:
        return self.get("album")

    @property
    def album_artist(self) -> Optional[str]:
        return self.get("album_artist")

    @property
    def track(self) -> Optional[str]:
        return self.get("track")

    @property
    def total_tracks(self) -> Optional[str]:
        return self.get("totaltracks")

    @property
    def disc(self) -> Optional[str]:
        return self.get("disc")

    @property
    def total_discs(self) -> Optional[str]:
        return self.get("totaldiscs")

    @property
    def date(self) -> Optional[str]:
        return self.get("date")

    @property
    def genre(self) -> Optional[str]:
        return self.get("genre")

    @property
    def comment(self) -> Optional[str]:
        return self.get("comment")


@dataclass
class FormatInfo:
    """Container level information."""

    bitrate: Optional[int] = None  # bits/second
    duration: Optional[timedelta] = None
    format_name: str = ""
    tags: FormatTags = field(default_factory=FormatTags)


@dataclass
class ParseIssue:
    """A section of probe output that could not be parsed."""

    section: str  # "json", "format", "stream" or "chapter"
    message: str

    def __str__(self) -> str:
        return f"{self.section}: {self.message}"


@dataclass
class MediaDescriptor:
    """Everything recognized in one probe output.

    The descriptor belongs to whoever parsed it. Filtering, sorting and
    default resolution mutate the streams in place and never remove them.
    """

    filename: str = ""
    video_streams: list[VideoStream] = field(default_factory=list)
    audio_streams: list[AudioStream] = field(default_factory=list)
    subtitle_streams: list[SubtitleStream] = field(default_factory=list)
    attachment_streams: list[AttachmentStream] = field(default_factory=list)
    chapters: list[ChapterRecord] = field(default_factory=list)
    format: FormatInfo = field(default_factory=FormatInfo)
    issues: list[ParseIssue] = field(default_factory=list)

    @property
    def had_issues(self) -> bool:
        """Whether any section failed to parse."""
        return bool(self.issues)

    def streams_of(
        self, kind: StreamKind
    ) -> Union[list[VideoStream], list[AudioStream], list[SubtitleStream], list[AttachmentStream]]:
        """Get the live stream list for a kind.

        Args:
            kind: Stream kind

        Returns:
            The descriptor's own list (not a copy)
        """
        if kind is StreamKind.VIDEO:
            return self.video_streams
        elif kind is StreamKind.AUDIO:
            return self.audio_streams
        elif kind is StreamKind.SUBTITLE:
            return self.subtitle_streams
        elif kind is StreamKind.ATTACHMENT:
            return self.attachment_streams
        raise ValueError(f"Unknown stream kind: {kind}")

    def add_stream(self, stream: StreamRecord) -> None:
        """Append a stream to the list for its kind."""
        self.streams_of(stream.kind).append(stream)

    def all_streams(self) -> list[StreamRecord]:
        """All streams, grouped by kind in container order."""
        return [
            *self.video_streams,
            *self.audio_streams,
            *self.subtitle_streams,
            *self.attachment_streams,
        ]

    def __str__(self) -> str:
        """Human-readable representation."""
        return (
            f"{self.filename or '<unnamed>'} ({len(self.video_streams)} video, "
            f"{len(self.audio_streams)} audio, {len(self.subtitle_streams)} subtitle, "
            f"{len(self.attachment_streams)} attachment, {len(self.chapters)} chapters)"
        )
