"""Language code normalization.

Probe output tags tracks with ISO 639-2 codes ("eng", "fre", sometimes the
terminology variant "fra"), configuration tends to use ISO 639-1 ("en") or
plain names ("English"). Everything is mapped onto one canonical pair:
the ISO 639-1 code and the ISO 639-2/B code.

Unknown tokens normalize to an empty string. Callers treat an empty code
as "no match possible", never as an error.
"""

import re
from types import MappingProxyType
from typing import Mapping, NamedTuple


class LanguageCodes(NamedTuple):
    """Canonical codes for one language."""

    iso1: str  # ISO 639-1, e.g. "en"
    iso2: str  # ISO 639-2/B, e.g. "eng"


# (ISO 639-1, ISO 639-2/B, extra aliases: 639-2/T code and names)
_LANGUAGES = (
    ("en", "eng", ("english",)),
    ("es", "spa", ("spanish", "espanol", "español", "castilian")),
    ("fr", "fre", ("fra", "french", "français", "francais")),
    ("de", "ger", ("deu", "german", "deutsch")),
    ("it", "ita", ("italian", "italiano")),
    ("pt", "por", ("portuguese", "português", "portugues")),
    ("ru", "rus", ("russian",)),
    ("ja", "jpn", ("japanese", "jp")),
    ("ko", "kor", ("korean",)),
    ("zh", "chi", ("zho", "chinese", "mandarin", "cantonese")),
    ("ar", "ara", ("arabic",)),
    ("hi", "hin", ("hindi",)),
    ("nl", "dut", ("nld", "dutch", "flemish", "nederlands")),
    ("pl", "pol", ("polish", "polski")),
    ("tr", "tur", ("turkish",)),
    ("sv", "swe", ("swedish", "svenska")),
    ("da", "dan", ("danish", "dansk")),
    ("no", "nor", ("norwegian", "norsk")),
    ("nb", "nob", ("norwegian bokmal", "norwegian bokmål", "bokmal", "bokmål")),
    ("nn", "nno", ("norwegian nynorsk", "nynorsk")),
    ("fi", "fin", ("finnish", "suomi")),
    ("cs", "cze", ("ces", "czech")),
    ("hu", "hun", ("hungarian", "magyar")),
    ("ro", "rum", ("ron", "romanian")),
    ("th", "tha", ("thai",)),
    ("vi", "vie", ("vietnamese",)),
    ("id", "ind", ("indonesian",)),
    ("he", "heb", ("hebrew",)),
    ("el", "gre", ("ell", "greek")),
    ("uk", "ukr", ("ukrainian",)),
    ("ca", "cat", ("catalan",)),
    ("sk", "slo", ("slk", "slovak")),
    ("hr", "hrv", ("croatian",)),
    ("sr", "srp", ("serbian",)),
    ("bg", "bul", ("bulgarian",)),
    ("lt", "lit", ("lithuanian",)),
    ("lv", "lav", ("latvian",)),
    ("et", "est", ("estonian",)),
    ("sl", "slv", ("slovenian", "slovene")),
    ("fa", "per", ("fas", "persian", "farsi")),
    ("ms", "may", ("msa", "malay")),
    ("ta", "tam", ("tamil",)),
    ("te", "tel", ("telugu",)),
    ("bn", "ben", ("bengali", "bangla")),
    ("mr", "mar", ("marathi",)),
    ("sq", "alb", ("sqi", "albanian")),
    ("hy", "arm", ("hye", "armenian")),
    ("eu", "baq", ("eus", "basque")),
    ("mk", "mac", ("mkd", "macedonian")),
    ("ka", "geo", ("kat", "georgian")),
    ("is", "ice", ("isl", "icelandic")),
    ("cy", "wel", ("cym", "welsh")),
    ("ga", "gle", ("irish",)),
    ("gl", "glg", ("galician",)),
    ("bs", "bos", ("bosnian",)),
    ("tl", "tgl", ("tagalog", "filipino", "fil")),
    ("ur", "urd", ("urdu",)),
    ("kk", "kaz", ("kazakh",)),
    ("af", "afr", ("afrikaans",)),
    ("sw", "swa", ("swahili",)),
    ("la", "lat", ("latin",)),
)


def _build_lookup() -> Mapping[str, LanguageCodes]:
    lookup: dict[str, LanguageCodes] = {}
    for iso1, iso2, aliases in _LANGUAGES:
        codes = LanguageCodes(iso1, iso2)
        for token in (iso1, iso2, *aliases):
            lookup.setdefault(token, codes)
    return MappingProxyType(lookup)


# Built once at import, read-only afterwards
LANGUAGE_LOOKUP: Mapping[str, LanguageCodes] = _build_lookup()

_EMPTY = LanguageCodes("", "")
_REGION_SUFFIX = re.compile(r"^([a-z]{2,3})[-_][a-z0-9]+$")


def lookup_language(token: str) -> LanguageCodes:
    """Resolve a language token to its canonical codes.

    Accepts 2-letter and 3-letter codes, language names and region tagged
    codes such as "en-US" or "pt_BR".

    Args:
        token: Language token in any supported form

    Returns:
        Canonical codes, or empty codes if the token is unknown
    """
    if not token:
        return _EMPTY

    key = token.strip().lower()
    if key in LANGUAGE_LOOKUP:
        return LANGUAGE_LOOKUP[key]

    if match := _REGION_SUFFIX.match(key):
        return LANGUAGE_LOOKUP.get(match.group(1), _EMPTY)

    return _EMPTY


def get_iso1_code(token: str) -> str:
    """Get the ISO 639-1 (2-letter) code for a language token.

    Args:
        token: Language token (e.g. "eng", "fr", "German")

    Returns:
        2-letter code (e.g. "en"), or "" if unknown
    """
    return lookup_language(token).iso1


def get_iso2_code(token: str) -> str:
    """Get the ISO 639-2/B (3-letter) code for a language token.

    Args:
        token: Language token (e.g. "en", "fra", "German")

    Returns:
        3-letter code (e.g. "eng"), or "" if unknown
    """
    return lookup_language(token).iso2
