"""Default track resolution by language."""

import re
from typing import Sequence

from streamsift.models.stream import StreamRecord
from streamsift.utils.language import get_iso1_code, get_iso2_code
from streamsift.utils.logger import get_logger

logger = get_logger(__name__)


class DefaultLanguageResolver:
    """Flag streams in a target language as default, all others as not default."""

    def resolve(self, streams: Sequence[StreamRecord], target_language: str) -> int:
        """Update ``is_default`` on every surviving stream.

        Deleted streams are skipped. Streams already carrying the computed
        flag are left untouched, so a second call with the same target
        changes nothing.

        Args:
            streams: Streams of one kind
            target_language: Language to prefer (code, name or regex)

        Returns:
            Number of streams whose flag changed
        """
        changed = 0
        for stream in streams:
            if stream.deleted:
                continue

            is_default = language_matches(stream.language, target_language)
            if is_default:
                logger.info(
                    "Stream set as default",
                    kind=stream.kind.value,
                    index=stream.index,
                    language=stream.language,
                )

            if stream.is_default == is_default:
                continue

            stream.is_default = is_default
            changed += 1

        return changed


def language_matches(stream_language: str, target_language: str) -> bool:
    """Test whether a stream language matches a target language.

    Tried in order: substring containment either way (case-insensitive),
    equal ISO 639-2 codes, equal ISO 639-1 codes, and finally the target as
    a case-insensitive regex searched in the stream language.

    Args:
        stream_language: Raw language tag of the stream
        target_language: Target language

    Returns:
        True on the first test that succeeds
    """
    if not stream_language or not stream_language.strip():
        return False
    if not target_language or not target_language.strip():
        return False

    stream_lower = stream_language.lower()
    target_lower = target_language.lower()
    if stream_lower in target_lower or target_lower in stream_lower:
        return True

    stream_iso2 = get_iso2_code(stream_language)
    if stream_iso2 and stream_iso2 == get_iso2_code(target_language):
        return True

    stream_iso1 = get_iso1_code(stream_language)
    if stream_iso1 and stream_iso1 == get_iso1_code(target_language):
        return True

    try:
        return re.search(target_language, stream_language, re.IGNORECASE) is not None
    except re.error as e:
        logger.debug("Target language is not a valid regex", target=target_language, error=str(e))
        return False
