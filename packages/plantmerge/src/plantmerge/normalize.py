"""Facility name normalization for cross-source matching."""

from __future__ import annotations

import re
import unicodedata

from plantmerge.config import NormalizationConfig

_DEFAULT_CONFIG = NormalizationConfig()


def normalize(name: str | None, config: NormalizationConfig | None = None) -> str:
    """Canonicalize a facility name into a comparable token string.

    "Gaston Steam Plant" and "GASTON (steam) station" both become "gaston".
    Total: None or an all-stopword name yields the empty string.
    """
    if not name:
        return ""
    config = config or _DEFAULT_CONFIG

    s = unicodedata.normalize("NFKC", name).lower()

    # Keep alphanumerics and whitespace only
    s = "".join(ch for ch in s if ch.isalnum() or ch.isspace())

    stopwords = set(config.stopwords)
    tokens = [t for t in s.split() if t not in stopwords]
    return " ".join(tokens)


def contains_match(a: str, b: str) -> bool:
    """Containment match on two already-normalized names.

    Empty names never match; otherwise equal names or one being a substring
    of the other count, so "clover" matches "cloverdale".
    """
    if not a or not b:
        return False
    return a == b or a in b or b in a


def numeric_portion(label: str | None) -> str:
    """Digits of a unit label, concatenated ("ST1" -> "1", "Unit 4A" -> "4")."""
    if not label:
        return ""
    return "".join(re.findall(r"\d+", str(label)))
