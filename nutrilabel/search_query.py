"""
Search-text builders for the food database.

clean_ingredient_for_search() turns a parsed ingredient name into the query
stored on the parsed line; generate_search_variants() produces progressively
simpler fallbacks for when the first query finds nothing.
"""
from __future__ import annotations

import logging
import re
from typing import List

from nutrilabel.knowledgebase import SEARCH_DESCRIPTORS, SEARCH_SUBSTITUTIONS, SYNONYMS

logger = logging.getLogger(__name__)

MAX_QUERY_LENGTH = 200
MAX_VARIANTS = 10

_DESCRIPTOR_RE = re.compile(r"\b(%s)\b" % "|".join(re.escape(d) for d in SEARCH_DESCRIPTORS))
_SYMBOL_RE = re.compile("[™®©]")
_QUOTE_RE = re.compile("[\"“”'‘’]")
_DASH_RE = re.compile("[—–]")


def clean_ingredient_for_search(name: str) -> str:
    """
    Lowercase, drop bracketed notes, symbols, punctuation and cooking descriptors.

    "Boneless/Skinless Chicken Breast (organic)" -> "boneless skinless chicken breast"
    Falls back to the lowercased input if everything was stripped.
    """
    if not name or not isinstance(name, str):
        return ""
    s = name.lower()
    s = _SYMBOL_RE.sub("", s)
    s = re.sub(r"\([^)]*\)", "", s)
    s = re.sub(r"\[[^\]]*\]", "", s)
    s = re.sub(r"\{[^}]*\}", "", s)
    s = s.replace("/", " ")
    s = re.sub(r"\s*&\s*", " and ", s)
    s = _DASH_RE.sub(" ", s)
    s = s.replace(",", " ")
    s = _QUOTE_RE.sub("", s)
    s = re.sub(r"[+*#@!?°%]", " ", s)
    s = re.sub(r"\.(?!\d)", " ", s)
    s = _DESCRIPTOR_RE.sub("", s)
    s = re.sub(r"\s+", " ", s)
    s = re.sub(r"-+", "-", s).strip()

    result = s or name.lower().strip()
    if len(result) > MAX_QUERY_LENGTH:
        logger.warning("truncating long query from %d to %d chars", len(result), MAX_QUERY_LENGTH)
        return result[:MAX_QUERY_LENGTH].strip()
    return result


def generate_search_variants(ingredient: str) -> List[str]:
    """Ordered, de-duplicated list of at most MAX_VARIANTS queries to try."""
    if not ingredient or not isinstance(ingredient, str):
        return []

    variants: List[str] = []

    def _push(v: str) -> None:
        if v and v not in variants:
            variants.append(v)

    original = ingredient.lower().strip()
    fully = clean_ingredient_for_search(ingredient)
    _push(fully)

    minimal = _QUOTE_RE.sub("", _SYMBOL_RE.sub("", original))
    minimal = re.sub(r"\s+", " ", minimal).strip()
    if minimal != fully:
        _push(minimal)

    _push(clean_ingredient_for_search(re.split(r"[,;]", original)[0].strip()))

    words = fully.split()
    if len(words) >= 2:
        _push(" ".join(words[-2:]))
    if len(words) >= 3:
        _push(" ".join(words[-3:]))
    if len(words) >= 2 and len(words[-1]) > 2:
        _push(words[-1])

    # plural/singular flips of the first three
    flips = []
    for v in variants[:3]:
        if v.endswith("s") and len(v) > 3:
            flips.append(v[:-1])
        elif not v.endswith("s"):
            flips.append(v + "s")
    for v in flips:
        _push(v)

    for pattern, replacement in SEARCH_SUBSTITUTIONS:
        substituted = re.sub(pattern, replacement, fully, flags=re.IGNORECASE)
        if substituted != fully:
            _push(substituted)

    synonym = SYNONYMS.get(fully) or SYNONYMS.get(original)
    if synonym:
        _push(synonym)

    return variants[:MAX_VARIANTS]
