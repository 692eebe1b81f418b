"""Multi-criterion track sorting.

Each stream gets one composite string key. Per criterion the predicate
distance is rounded to an integer and written as a 15 digit, zero padded
block; descending criteria replace every digit d with 9 - d. The blocks are
concatenated in criteria order, so a plain ascending string sort orders by
the first criterion, then the second, and so on.

Magnitudes are limited to 15 digits: longer values keep their leading 15
digits, and negative values are not supported.
"""

import math
from typing import Any, Mapping, Optional, Sequence, TypeVar

from streamsift.config import ORIGINAL_LANGUAGE_VARIABLE
from streamsift.core.predicate import PredicateEvaluator, PropertyValue
from streamsift.models.rules import SortCriterion, SortProperty
from streamsift.models.stream import (
    AudioStream,
    StreamRecord,
    SubtitleStream,
    VideoStream,
)
from streamsift.utils.language import get_iso1_code
from streamsift.utils.logger import get_logger

logger = get_logger(__name__)

KEY_DIGITS = 15
_COMPLEMENT = str.maketrans("0123456789", "9876543210")

S = TypeVar("S", bound=StreamRecord)


class TrackSorter:
    """Order streams by a list of sort criteria."""

    def __init__(self, variables: Optional[Mapping[str, Any]] = None):
        """Initialize sorter.

        Args:
            variables: Runtime variables; ``OriginalLanguage`` feeds "orig" tokens
        """
        self.evaluator = PredicateEvaluator(variables)
        original = self.evaluator.variables.get(ORIGINAL_LANGUAGE_VARIABLE)
        self.original_language = get_iso1_code(str(original)) if original else ""

    def sort(self, streams: Sequence[S], criteria: Sequence[SortCriterion]) -> list[S]:
        """Return the streams in sorted order.

        The sort is stable: streams with identical keys keep their relative
        order.

        Args:
            streams: Streams to sort
            criteria: Criteria in priority order

        Returns:
            New list of the same stream objects
        """
        if not streams or not criteria:
            return list(streams)
        return sorted(streams, key=lambda stream: self.build_key(stream, criteria))

    def apply(self, streams: list[S], criteria: Sequence[SortCriterion]) -> bool:
        """Sort a stream list in place.

        Args:
            streams: Stream list to reorder
            criteria: Criteria in priority order

        Returns:
            True if the order changed
        """
        ordered = self.sort(streams, criteria)
        changed = any(a is not b for a, b in zip(streams, ordered))
        streams[:] = ordered

        logger.debug(
            "Streams sorted",
            criteria=[_describe(c) for c in criteria],
            order=[s.index for s in ordered],
            changed=changed,
        )
        return changed

    def build_key(self, stream: StreamRecord, criteria: Sequence[SortCriterion]) -> str:
        """Build the composite sort key for a stream.

        Args:
            stream: Stream to key
            criteria: Criteria in priority order

        Returns:
            Concatenation of one 15 digit block per criterion
        """
        return "".join(self._encode(self.sort_value(stream, c), c.descending) for c in criteria)

    def sort_value(self, stream: StreamRecord, criterion: SortCriterion) -> float:
        """Compute the scalar a criterion assigns to a stream.

        Args:
            stream: Stream to evaluate
            criterion: Sort criterion

        Returns:
            Predicate distance (0 match, 1 no match) or raw numeric value
        """
        comparison = self.evaluator.substitute(criterion.comparison)
        value = _property_value(stream, criterion.property)

        if criterion.property is SortProperty.LANGUAGE:
            comparison = self._normalize_languages(comparison)
            # An unknown language can never match anything
            if not value:
                return 1.0

        return self.evaluator.compare(value, comparison).distance

    def _normalize_languages(self, comparison: str) -> str:
        """Map each "|" separated language token to its ISO 639-1 code."""
        codes = []
        for token in comparison.split("|"):
            token = token.strip()
            if not token:
                continue
            if token.lower().startswith("orig"):
                code = self.original_language
            else:
                code = get_iso1_code(token)
            if code:
                codes.append(code)
        if comparison and not codes:
            logger.debug("No known languages in comparison", comparison=comparison)
        return "|".join(codes)

    @staticmethod
    def _encode(value: float, descending: bool) -> str:
        if not math.isfinite(value):
            logger.warning("Non-finite sort value treated as zero", value=value)
            value = 0.0
        block = str(int(round(value)))[:KEY_DIGITS].rjust(KEY_DIGITS, "0")
        return block.translate(_COMPLEMENT) if descending else block


def _property_value(stream: StreamRecord, prop: SortProperty) -> PropertyValue:
    if prop is SortProperty.CODEC:
        return stream.codec
    elif prop is SortProperty.LANGUAGE:
        if isinstance(stream, (AudioStream, SubtitleStream, VideoStream)):
            return get_iso1_code(stream.language)
        return ""
    elif prop is SortProperty.BITRATE:
        return stream.bitrate if isinstance(stream, AudioStream) else None
    elif prop is SortProperty.CHANNELS:
        return stream.channels if isinstance(stream, AudioStream) else None
    raise ValueError(f"Unknown sort property: {prop}")


def _describe(criterion: SortCriterion) -> str:
    direction = "desc" if criterion.descending else "asc"
    suffix = f" {criterion.comparison}" if criterion.comparison else ""
    return f"{criterion.property.value} {direction}{suffix}"
