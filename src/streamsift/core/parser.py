"""Probe output parsing.

Turns the diagnostic output of a media probe into a MediaDescriptor. Two
forms are understood:

- the banner text printed by ``ffmpeg -i`` / ``ffprobe`` on stderr
  (``Stream #0:1(eng): Audio: ac3, 48000 Hz, stereo, fltp, 192 kb/s``)
- the JSON document printed by ``ffprobe -print_format json``

Parsing never raises on malformed input. Every block that cannot be read is
dropped, recorded as a ParseIssue on the descriptor and logged, and parsing
carries on with the next block.
"""

import json
import math
import re
from datetime import timedelta
from typing import Any, Optional

from streamsift.models.media import ChapterRecord, FormatInfo, FormatTags, MediaDescriptor, ParseIssue
from streamsift.models.stream import (
    AttachmentStream,
    AudioStream,
    StreamKind,
    StreamRecord,
    SubtitleStream,
    VideoStream,
)
from streamsift.utils.logger import get_logger
from streamsift.utils.units import parse_number

logger = get_logger(__name__)

# Banner grammar
_BLOCK_START = re.compile(r"^\s*(?:(Stream|Chapter|Input|Output) #|(Chapters|Duration):)")
_STREAM_LINE = re.compile(
    r"^\s*Stream #(?P<file>\d+):(?P<index>\d+)"
    r"(?:\[[^\]]*\])?"  # stream id, e.g. [0x2]
    r"(?:\((?P<lang>[^)]*)\))?"
    r"(?:\[[^\]]*\])?"
    r":\s*(?P<type>\w+):\s*(?P<details>.*?)\s*$"
)
_CHAPTER_HEADER = re.compile(
    r"^\s*Chapter #(?P<file>\d+):(?P<index>\d+):\s*"
    r"(?:start\s+(?P<start>[^,\s]+),\s*)?"
    r"end\s+(?P<end>\S+)\s*$"
)
_INPUT_LINE = re.compile(r"^\s*Input #\d+,\s*(?P<format>.*?),\s*from '(?P<filename>.*)':\s*$")
_METADATA_LINE = re.compile(r"^\s*([^:]+?)\s*:\s*(.*?)\s*$")

# Container line: "Duration: 02:23:46.66, start: 0.000000, bitrate: 38174 kb/s"
_DURATION = re.compile(r"Duration:\s*(\d+):(\d{2}):(\d{2}(?:\.\d+)?)")
_CONTAINER_BITRATE = re.compile(r"bitrate:\s*(\d+(?:\.\d+)?)\s*kb/s")

# Stream detail sub-patterns, matched independently of each other
_CODEC = re.compile(r"^([^\s,]+)")
_DEFAULT_FLAG = re.compile(r"\(default\)")
_SAMPLE_RATE = re.compile(r"(\d+)\s*Hz\b")
_BITRATE = re.compile(r"(\d+(?:\.\d+)?)\s*kb/s")
_CHANNELS = re.compile(
    r"(?:^|,)\s*(mono|stereo|quad|downmix|\d+\s+channels|\d+\.\d+(?:\([^)]*\))?)\s*(?=,|\(|$)",
    re.IGNORECASE,
)
_RESOLUTION = re.compile(r"(?<![\w.])(\d{2,5})x(\d{2,5})(?!\w)")
_FPS = re.compile(r"(\d+(?:\.\d+)?)\s*fps\b")

_CHANNEL_LAYOUTS = {"mono": 1.0, "stereo": 2.0, "downmix": 2.0, "quad": 4.0}

_STREAM_KINDS = {kind.value: kind for kind in StreamKind}


class ProbeOutputParser:
    """Parse probe output (banner text or JSON) into a MediaDescriptor."""

    def parse(self, raw: Optional[str], filename: str = "") -> MediaDescriptor:
        """Parse probe output.

        Args:
            raw: Probe output text, banner or JSON form
            filename: Source file name; overrides the one found in the output

        Returns:
            MediaDescriptor holding whatever was recognized. Check
            ``had_issues`` to learn whether any section was dropped.
        """
        descriptor = MediaDescriptor(filename=filename)

        if not raw or not raw.strip():
            self._issue(descriptor, "format", "Probe output is empty")
            return descriptor

        if raw.lstrip().startswith(("{", "[")):
            self._parse_json(raw, descriptor)
        else:
            self._parse_banner(raw, descriptor)

        if filename:
            descriptor.filename = filename

        logger.info(
            "Probe output parsed",
            file=descriptor.filename,
            video=len(descriptor.video_streams),
            audio=len(descriptor.audio_streams),
            subtitle=len(descriptor.subtitle_streams),
            attachment=len(descriptor.attachment_streams),
            chapters=len(descriptor.chapters),
            issues=len(descriptor.issues),
        )
        return descriptor

    # ------------------------------------------------------------------
    # Banner text
    # ------------------------------------------------------------------

    def _parse_banner(self, raw: str, descriptor: MediaDescriptor) -> None:
        blocks = _split_blocks(raw)
        if not blocks:
            self._issue(descriptor, "format", "No probe output blocks recognized")
            return

        counters: dict[StreamKind, int] = {}
        previous_end = timedelta(0)

        for label, header, body in blocks:
            if label == "Output":
                # Anything after an output header describes the encode, not the source
                break
            elif label == "Input":
                self._parse_input(header, body, descriptor)
            elif label == "Duration":
                self._parse_container_line(header, descriptor)
            elif label == "Stream":
                stream = self._parse_stream(header, body, counters, descriptor)
                if stream is not None:
                    descriptor.add_stream(stream)
            elif label == "Chapter":
                chapter = self._parse_chapter(header, body, previous_end, descriptor)
                if chapter is not None:
                    descriptor.chapters.append(chapter)
                    previous_end = chapter.end

    def _parse_input(self, header: str, body: list[str], descriptor: MediaDescriptor) -> None:
        if match := _INPUT_LINE.match(header):
            descriptor.format.format_name = match.group("format")
            if not descriptor.filename:
                descriptor.filename = match.group("filename")

        descriptor.format.tags = FormatTags(_read_metadata(body))

    def _parse_container_line(self, line: str, descriptor: MediaDescriptor) -> None:
        if match := _DURATION.search(line):
            hours, minutes, seconds = match.groups()
            try:
                descriptor.format.duration = timedelta(
                    hours=int(hours), minutes=int(minutes), seconds=float(seconds)
                )
            except (OverflowError, ValueError):
                self._issue(descriptor, "format", f"Duration out of range: {line.strip()}")
        elif "N/A" not in line:
            self._issue(descriptor, "format", f"Unrecognized duration: {line.strip()}")

        if match := _CONTAINER_BITRATE.search(line):
            descriptor.format.bitrate = _kilobits(match.group(1))

    def _parse_stream(
        self,
        header: str,
        body: list[str],
        counters: dict[StreamKind, int],
        descriptor: MediaDescriptor,
    ) -> Optional[StreamRecord]:
        match = _STREAM_LINE.match(header)
        if not match:
            self._issue(descriptor, "stream", f"Unrecognized stream line: {header.strip()}")
            return None

        kind = _STREAM_KINDS.get(match.group("type").lower())
        if kind is None:
            logger.debug("Ignoring stream type", type=match.group("type"))
            return None

        index = counters.get(kind, 0)
        try:
            stream = _build_stream(kind, index, match, _read_metadata(body))
        except (OverflowError, ValueError) as e:
            self._issue(descriptor, "stream", f"Unreadable stream values: {e}")
            return None
        counters[kind] = index + 1
        return stream

    def _parse_chapter(
        self,
        header: str,
        body: list[str],
        previous_end: timedelta,
        descriptor: MediaDescriptor,
    ) -> Optional[ChapterRecord]:
        match = _CHAPTER_HEADER.match(header)
        if not match:
            self._issue(descriptor, "chapter", f"Malformed chapter header: {header.strip()}")
            return None

        return self._make_chapter(
            match.group("start"),
            match.group("end"),
            _read_metadata(body).get("title", ""),
            previous_end,
            descriptor,
        )

    # ------------------------------------------------------------------
    # JSON
    # ------------------------------------------------------------------

    def _parse_json(self, raw: str, descriptor: MediaDescriptor) -> None:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            self._issue(descriptor, "json", f"Invalid JSON: {e}")
            return
        except RecursionError:
            self._issue(descriptor, "json", "JSON nested too deeply")
            return

        if not isinstance(data, dict):
            self._issue(descriptor, "json", "Top-level JSON value is not an object")
            return

        fmt = data.get("format")
        if isinstance(fmt, dict):
            descriptor.format = self._format_from_json(fmt, descriptor)
            if not descriptor.filename and fmt.get("filename"):
                descriptor.filename = str(fmt["filename"])
        elif fmt is not None:
            self._issue(descriptor, "format", "'format' is not an object")

        counters: dict[StreamKind, int] = {}
        for item in self._json_list(data, "streams", descriptor):
            stream = self._stream_from_json(item, counters, descriptor)
            if stream is not None:
                descriptor.add_stream(stream)

        previous_end = timedelta(0)
        for item in self._json_list(data, "chapters", descriptor):
            if not isinstance(item, dict):
                self._issue(descriptor, "chapter", "Chapter entry is not an object")
                continue
            tags = FormatTags(item.get("tags") if isinstance(item.get("tags"), dict) else None)
            chapter = self._make_chapter(
                item.get("start_time"), item.get("end_time"), tags.title or "", previous_end, descriptor
            )
            if chapter is not None:
                descriptor.chapters.append(chapter)
                previous_end = chapter.end

    def _format_from_json(self, fmt: dict, descriptor: MediaDescriptor) -> FormatInfo:
        info = FormatInfo(format_name=str(fmt.get("format_name") or ""))

        if fmt.get("bit_rate") is not None:
            bitrate = parse_number(str(fmt["bit_rate"]))
            if bitrate is None:
                self._issue(descriptor, "format", f"Invalid bit_rate: {fmt['bit_rate']!r}")
            else:
                info.bitrate = int(bitrate)

        if fmt.get("duration") is not None:
            duration = _seconds(fmt["duration"])
            if duration is None:
                self._issue(descriptor, "format", f"Invalid duration: {fmt['duration']!r}")
            else:
                info.duration = duration

        tags = fmt.get("tags")
        if isinstance(tags, dict):
            info.tags = FormatTags(tags)
        elif tags is not None:
            self._issue(descriptor, "format", "'tags' is not an object")

        return info

    def _stream_from_json(
        self, item: Any, counters: dict[StreamKind, int], descriptor: MediaDescriptor
    ) -> Optional[StreamRecord]:
        if not isinstance(item, dict):
            self._issue(descriptor, "stream", "Stream entry is not an object")
            return None

        kind = _STREAM_KINDS.get(str(item.get("codec_type", "")).lower())
        if kind is None:
            logger.debug("Ignoring stream type", type=item.get("codec_type"))
            return None

        tags = FormatTags(item.get("tags") if isinstance(item.get("tags"), dict) else None)
        disposition = item.get("disposition") if isinstance(item.get("disposition"), dict) else {}
        index = counters.get(kind, 0)
        common = dict(
            index=index,
            codec=str(item.get("codec_name") or ""),
            title=tags.title or "",
            language=tags.get("language", ""),
            is_default=disposition.get("default", 0) == 1,
        )

        try:
            stream = _stream_record(kind, common, item, tags)
        except (OverflowError, ValueError) as e:
            self._issue(descriptor, "stream", f"Unreadable stream values: {e}")
            return None

        counters[kind] = index + 1
        return stream

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------

    def _make_chapter(
        self,
        start: Any,
        end: Any,
        title: str,
        previous_end: timedelta,
        descriptor: MediaDescriptor,
    ) -> Optional[ChapterRecord]:
        end_time = _seconds(end)
        if end_time is None:
            self._issue(descriptor, "chapter", f"Invalid chapter end: {end!r}")
            return None

        if start is None:
            start_time = previous_end
        else:
            start_time = _seconds(start)
            if start_time is None:
                self._issue(descriptor, "chapter", f"Invalid chapter start: {start!r}")
                return None

        if end_time <= start_time:
            self._issue(
                descriptor, "chapter", f"Chapter ends before it starts: {start_time} - {end_time}"
            )
            return None

        return ChapterRecord(start=start_time, end=end_time, title=title)

    def _json_list(self, data: dict, key: str, descriptor: MediaDescriptor) -> list:
        value = data.get(key)
        if value is None:
            return []
        if not isinstance(value, list):
            section = "stream" if key == "streams" else "chapter"
            self._issue(descriptor, section, f"'{key}' is not a list")
            return []
        return value

    def _issue(self, descriptor: MediaDescriptor, section: str, message: str) -> None:
        logger.warning("Skipping unparseable probe output", section=section, reason=message)
        descriptor.issues.append(ParseIssue(section=section, message=message))


def parse_probe_output(raw: Optional[str], filename: str = "") -> MediaDescriptor:
    """Parse probe output with a default parser.

    Args:
        raw: Probe output text, banner or JSON form
        filename: Optional source file name

    Returns:
        Parsed MediaDescriptor
    """
    return ProbeOutputParser().parse(raw, filename)


def parse_stream_line(text: str, index: int = 0) -> Optional[StreamRecord]:
    """Parse a single banner stream description.

    The text is one ``Stream #`` line, optionally followed by its indented
    metadata lines.

    Args:
        text: Stream line plus optional metadata
        index: Index to assign to the stream

    Returns:
        The stream, or None if the line is not a recognized stream
    """
    lines = text.strip("\r\n").splitlines()
    if not lines:
        return None

    match = _STREAM_LINE.match(lines[0])
    if not match:
        return None

    kind = _STREAM_KINDS.get(match.group("type").lower())
    if kind is None:
        return None

    try:
        return _build_stream(kind, index, match, _read_metadata(lines[1:]))
    except (OverflowError, ValueError) as e:
        logger.debug("Unreadable stream values", line=lines[0], error=str(e))
        return None


def _split_blocks(raw: str) -> list[tuple[str, str, list[str]]]:
    """Split banner text into (label, header line, body lines) blocks.

    Lines before the first recognized header are dropped.
    """
    blocks: list[tuple[str, str, list[str]]] = []
    for line in raw.splitlines():
        match = _BLOCK_START.match(line)
        if match:
            blocks.append((match.group(1) or match.group(2), line, []))
        elif blocks:
            blocks[-1][2].append(line)
    return blocks


def _read_metadata(lines: list[str]) -> dict[str, str]:
    """Collect ``key : value`` metadata lines; first occurrence of a key wins."""
    metadata: dict[str, str] = {}
    for line in lines:
        match = _METADATA_LINE.match(line)
        if not match or not match.group(2):
            continue
        metadata.setdefault(match.group(1).lower(), match.group(2))
    return metadata


def _build_stream(
    kind: StreamKind, index: int, match: re.Match, metadata: dict[str, str]
) -> StreamRecord:
    details = match.group("details")
    codec_match = _CODEC.match(details)
    common = dict(
        index=index,
        codec=codec_match.group(1) if codec_match else "",
        title=metadata.get("title", ""),
        language=match.group("lang") or "",
        is_default=bool(_DEFAULT_FLAG.search(details)),
    )

    if kind is StreamKind.VIDEO:
        resolution = _RESOLUTION.search(details)
        fps = _FPS.search(details)
        return VideoStream(
            **common,
            width=int(resolution.group(1)) if resolution else None,
            height=int(resolution.group(2)) if resolution else None,
            frames_per_second=float(fps.group(1)) if fps else None,
        )
    elif kind is StreamKind.AUDIO:
        sample_rate = _SAMPLE_RATE.search(details)
        channels = _CHANNELS.search(details)
        return AudioStream(
            **common,
            channels=_channel_count(channels.group(1)) if channels else None,
            sample_rate=int(sample_rate.group(1)) if sample_rate else None,
            bitrate=_audio_bitrate(details, metadata),
        )
    elif kind is StreamKind.SUBTITLE:
        return SubtitleStream(**common)
    elif kind is StreamKind.ATTACHMENT:
        common["title"] = common["title"] or metadata.get("filename", "")
        return AttachmentStream(**common, input_file_index=int(match.group("file")))
    raise ValueError(f"Unknown stream kind: {kind}")


def _channel_count(layout: str) -> Optional[float]:
    layout = layout.lower()
    if layout in _CHANNEL_LAYOUTS:
        return _CHANNEL_LAYOUTS[layout]
    number = re.match(r"\d+(?:\.\d+)?", layout)
    return float(number.group(0)) if number else None


def _audio_bitrate(details: str, metadata: dict[str, str]) -> Optional[int]:
    match = _BITRATE.search(details)
    bitrate = _kilobits(match.group(1)) if match else None
    if bitrate is not None:
        return bitrate
    # mkvmerge statistics tag, present when the stream line has no kb/s
    bps = parse_number(metadata.get("bps", ""))
    return int(bps) if bps is not None else None


def _json_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    number = parse_number(str(value))
    return int(number) if number is not None else None


def _frame_rate(value: Any) -> Optional[float]:
    """Parse "24000/1001" or "25" into frames per second."""
    if not value:
        return None
    numerator, _, denominator = str(value).partition("/")
    num = parse_number(numerator)
    den = parse_number(denominator) if denominator else 1.0
    if num is None or not den:
        return None
    rate = num / den
    return rate if math.isfinite(rate) else None


def _seconds(value: Any) -> Optional[timedelta]:
    """Parse seconds into a timedelta; None when not finite or out of range."""
    if value is None or isinstance(value, bool):
        return None
    seconds = parse_number(str(value))
    if seconds is None:
        return None
    try:
        return timedelta(seconds=seconds)
    except OverflowError:
        return None


def _kilobits(text: str) -> Optional[int]:
    """Convert a "kb/s" figure to bits per second."""
    number = parse_number(text)
    if number is None or not math.isfinite(number * 1000):
        return None
    return int(number * 1000)



def _stream_record(kind: StreamKind, common: dict, item: dict, tags: FormatTags) -> StreamRecord:
    """Build a stream from one ffprobe JSON ``streams`` entry."""
    if kind is StreamKind.VIDEO:
        return VideoStream(
            **common,
            width=_json_int(item.get("width")),
            height=_json_int(item.get("height")),
            frames_per_second=_frame_rate(item.get("r_frame_rate") or item.get("avg_frame_rate")),
        )
    elif kind is StreamKind.AUDIO:
        bitrate = _json_int(item.get("bit_rate"))
        if bitrate is None:
            bitrate = _json_int(tags.get("bps"))
        channels = _json_int(item.get("channels"))
        return AudioStream(
            **common,
            channels=float(channels) if channels is not None else None,
            sample_rate=_json_int(item.get("sample_rate")),
            bitrate=bitrate,
        )
    elif kind is StreamKind.SUBTITLE:
        return SubtitleStream(**common)
    common["title"] = common["title"] or tags.get("filename", "")
    return AttachmentStream(**common)
