"""Postal address normalization."""

from __future__ import annotations

import re

STREET_SUFFIXES: dict[str, str] = {
    "street": "st",
    "avenue": "ave",
    "boulevard": "blvd",
    "road": "rd",
    "drive": "dr",
    "lane": "ln",
    "court": "ct",
    "circle": "cir",
    "place": "pl",
    "parkway": "pkwy",
    "terrace": "ter",
    "highway": "hwy",
}

_LEADING_DETERMINER = re.compile(r"^(?:(?:the|a|an)\s+)+")
_COUNTRY_SUFFIX = re.compile(r",\s*(usa|united states|us)$")
# NC only: the business operates in North Carolina
_STATE_NAME = re.compile(r",?\s*north carolina\s*")
_STATE_CODE = re.compile(r",?\s*\bnc\b\s*")
_STREET_SUFFIX = re.compile(r"\b(" + "|".join(STREET_SUFFIXES) + r")\b")
_PUNCTUATION = re.compile(r"[.,#]")

# Used only by the quick customer linker
_LINKING_WORDS: dict[str, str] = {
    "apartment": "apt",
    "suite": "ste",
}
_UNIT_DESIGNATOR = re.compile(r",?\s*(?:\b(?:apt|apartment|suite|ste|unit)\b|#)\s*[\w-]+")


def _normalize_once(s: str) -> str:
    # 1. Lowercase
    s = s.lower()

    # 2. Leading determiners
    s = _LEADING_DETERMINER.sub("", s)

    # 3. Trailing country
    s = _COUNTRY_SUFFIX.sub("", s)

    # 4. State folding
    s = _STATE_NAME.sub(", nc ", s)
    s = _STATE_CODE.sub(", nc ", s)

    # 5. Street suffixes, whole words only
    s = _STREET_SUFFIX.sub(lambda m: STREET_SUFFIXES[m.group(1)], s)

    # 6. Punctuation becomes a separator so tokens never merge
    s = _PUNCTUATION.sub(" ", s)

    # 7. Whitespace
    return " ".join(s.split())


def normalize_address(address: str | None) -> str:
    """Canonicalize a free-text postal address into a comparable form.

    Returns an empty string for empty, missing or non-string input. The
    pipeline is re-applied until it reaches a fixed point, so punctuation
    that hid a leading determiner ("the.oaks") cannot leave the result
    half-normalized. After the first pass a change can only drop a leading
    determiner, so the loop always terminates.
    """
    if not isinstance(address, str) or not address:
        return ""

    s = _normalize_once(address)
    while True:
        nxt = _normalize_once(s)
        if nxt == s:
            return s
        s = nxt


def normalize_for_linking(address: str | None, strip_units: bool = True) -> str:
    """Looser normalization used by the quick customer linker.

    Folds street suffixes, "north carolina", "apartment" and "suite", then
    drops unit designators ("Apt 4B", "# 12", "Suite 200") along with
    commas and periods.
    """
    if not isinstance(address, str) or not address:
        return ""

    s = address.strip().lower()
    s = _STREET_SUFFIX.sub(lambda m: STREET_SUFFIXES[m.group(1)], s)
    s = re.sub(r"\bnorth carolina\b", "nc", s)
    for word, abbrev in _LINKING_WORDS.items():
        s = re.sub(rf"\b{word}\b", abbrev, s)
    if strip_units:
        s = _UNIT_DESIGNATOR.sub("", s)
    s = re.sub(r"[,.]", "", s)
    return " ".join(s.split())
