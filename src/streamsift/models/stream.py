"""Stream data models."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional


class StreamKind(Enum):
    """Kinds of elementary stream in a container."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    ATTACHMENT = "attachment"


@dataclass(eq=False)
class StreamRecord:
    """Base for all stream kinds.

    Streams compare by identity: two tracks with identical properties are
    still different tracks. ``index`` is assigned once at parse time, in
    source order within the stream's kind, and never renumbered.
    """

    kind: ClassVar[StreamKind]

    index: int  # 0-based position among streams of the same kind
    codec: str = ""
    title: str = ""
    language: str = ""  # raw language tag as found in the probe output
    is_default: bool = False
    deleted: bool = False

    def __str__(self) -> str:
        """Human-readable representation."""
        lang_part = f" [{self.language}]" if self.language else ""
        title_part = f" ({self.title})" if self.title else ""
        default_marker = " [DEFAULT]" if self.is_default else ""
        deleted_marker = " [DELETED]" if self.deleted else ""
        return (
            f"{self.kind.value.capitalize()} {self.index}: {self.codec or 'unknown'}"
            f"{lang_part}{title_part}{default_marker}{deleted_marker}"
        )


@dataclass(eq=False)
class VideoStream(StreamRecord):
    """Video stream."""

    kind: ClassVar[StreamKind] = StreamKind.VIDEO

    width: Optional[int] = None
    height: Optional[int] = None
    frames_per_second: Optional[float] = None


@dataclass(eq=False)
class AudioStream(StreamRecord):
    """Audio stream."""

    kind: ClassVar[StreamKind] = StreamKind.AUDIO

    channels: Optional[float] = None  # 5.1 for "5.1(side)", 2 for "stereo"
    sample_rate: Optional[int] = None  # Hz
    bitrate: Optional[int] = None  # bits/second


@dataclass(eq=False)
class SubtitleStream(StreamRecord):
    """Subtitle stream."""

    kind: ClassVar[StreamKind] = StreamKind.SUBTITLE


@dataclass(eq=False)
class AttachmentStream(StreamRecord):
    """Attachment stream (fonts, cover art)."""

    kind: ClassVar[StreamKind] = StreamKind.ATTACHMENT

    input_file_index: int = 0
