"""Pattern based track removal."""

import re
from typing import Optional, Sequence

from streamsift.models.rules import MatchRule, MatchType
from streamsift.models.stream import StreamKind, StreamRecord
from streamsift.utils.logger import get_logger

logger = get_logger(__name__)

# Kinds whose language tag can be matched; video language is never used
_LANGUAGE_KINDS = (StreamKind.AUDIO, StreamKind.SUBTITLE)


class TrackRemover:
    """Mark streams deleted according to a MatchRule.

    Streams are never removed from their list, only flagged, so indexes of
    the remaining tracks stay valid.
    """

    def apply(self, streams: Sequence[StreamRecord], rule: MatchRule) -> bool:
        """Apply a removal rule.

        The first ``rule.skip_count`` streams that are still alive are exempt.
        With ``remove_all`` or an empty pattern every other stream is
        deleted. Otherwise the pattern is tested against the field chosen by
        ``rule.match_type``; streams with an empty field are left alone.

        Args:
            streams: Streams of one kind
            rule: Removal rule

        Returns:
            True if at least one stream was newly marked deleted
        """
        logger.debug(
            "Applying removal rule",
            match_type=rule.match_type.value,
            pattern=rule.pattern,
            invert=rule.invert,
            remove_all=rule.remove_all,
            skip_count=rule.skip_count,
        )

        regex: Optional[re.Pattern] = None
        if not rule.remove_all and rule.pattern:
            try:
                regex = re.compile(rule.pattern, re.IGNORECASE)
            except re.error as e:
                logger.warning("Invalid removal pattern", pattern=rule.pattern, error=str(e))
                return False

        removed = False
        alive = -1
        for stream in streams:
            if stream.deleted:
                continue

            alive += 1
            if alive < rule.skip_count:
                continue

            if regex is None:
                stream.deleted = True
                removed = True
                logger.info("Removing track", track=str(stream), reason="remove_all")
                continue

            value = match_field(stream, rule.match_type)
            if not value:
                # Nothing to match on, keep it
                continue

            matches = regex.search(value) is not None
            if rule.invert:
                matches = not matches
            if matches:
                stream.deleted = True
                removed = True
                logger.info("Removing track", track=str(stream), reason="pattern", value=value)

        return removed


def match_field(stream: StreamRecord, match_type: MatchType) -> str:
    """Get the stream field a MatchType refers to.

    Args:
        stream: Stream to read
        match_type: Field selector

    Returns:
        Field value, "" when the stream kind does not carry that field
    """
    if match_type is MatchType.TITLE:
        return stream.title
    elif match_type is MatchType.CODEC:
        return stream.codec
    elif match_type is MatchType.LANGUAGE:
        return stream.language if stream.kind in _LANGUAGE_KINDS else ""
    raise ValueError(f"Unknown match type: {match_type}")
