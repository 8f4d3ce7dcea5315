"""
===============================================================================
ingredient_parser.py — Ingredient Line Parser
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Turns one ingredient line ("1 1/2 cups flour", "2 Tbsp. olive oil",
    "1 chicken breast (boneless, skinless)") into quantity, unit and name.

-------------------------------------------------------------------------------
Grammar (informal):
    [bullet] quantity? unit? name [(descriptor, ...)]

    • quantity: integers, decimals, n/d and mixed numbers "w n/d"; each
      whitespace-separated token is summed. A malformed fraction counts as 1,
      a malformed number as 0. The total is forced into (0, 1_000_000].
    • unit: only a token the Unit Table recognizes, or a high-variation
      ingredient noun ("2 tomatoes diced"). Anything else stays part of the
      name and the unit defaults to "item".
    • parentheses: merged into the name by merge_descriptive_parentheses().

-------------------------------------------------------------------------------
Notes:
    • Nothing here raises on bad input. parse_ingredient_line() returns None
      only for a line that is blank once bullets are removed.
    • Sub-recipe detection happens before this parser is applied to a line.

===============================================================================
"""
from __future__ import annotations

import math
import re
from typing import List, Optional

from nutrilabel import units
from nutrilabel.datasets import ParsedIngredientLine
from nutrilabel.knowledgebase import (
    BODY_PART_WORDS,
    COLOR_WORDS,
    INFORMATIONAL_PREFIXES,
    PREP_WORDS,
    UNICODE_FRACTIONS,
)
from nutrilabel.search_query import clean_ingredient_for_search
from nutrilabel.taxonomy import needs_specification_noun

MAX_QUANTITY = 1_000_000
MAX_NAME_LENGTH = 255
MAX_MERGE_ITERATIONS = 5

_PUA_BULLET_RE = re.compile("^[\U0000E000-\U0000F8FF]+\\s*")
_BULLET_RE = re.compile(
    "^[\U00002022\U00002023\U000025E6\U00002043\U00002219\\-*+"
    "\U000025CB\U000025CF\U000025AA\U000025AB\U000025A0\U000025A1\U00002192\U0000203A\U000000BB]\\s*"
)
_NUMBERED_RE = re.compile(r"^\d+[.)]\s+")
_EDGE_SPACE_RE = re.compile("^[\\s\U0000200B\U0000FEFF]+|[\\s\U0000200B\U0000FEFF]+$")

_UNIT_TOKEN = r"fl\.?\s*oz|fluid\s+ounces?|extra\s+large|[a-zA-Z][a-zA-Z-]*"
_LINE_RE = re.compile(r"^([\d/.\s]+?)\s+(%s)\.?\s+(.+)$" % _UNIT_TOKEN)
_NO_UNIT_RE = re.compile(r"^([\d/.\s]+?)\s+(.+)$")
_FLOAT_PREFIX_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")

_INFORMATIONAL_RE = re.compile(
    r"\((?:%s)[^)]*\)" % "|".join(re.escape(p) for p in INFORMATIONAL_PREFIXES), re.IGNORECASE
)
_PAREN_GROUP_RE = re.compile(r"^(.+?)\s*\(([^)]+)\)\s*(.*)$")
_BODY_PART_RE = re.compile(r"\b(%s)s?\b" % "|".join(BODY_PART_WORDS), re.IGNORECASE)
_COLOR_RE = re.compile(r"\b(%s)$" % "|".join(COLOR_WORDS), re.IGNORECASE)
_PREP_RE = re.compile(r"\b(%s)$" % "|".join(PREP_WORDS), re.IGNORECASE)


# =============== Quantity ===============================================
def _parse_float_prefix(token: str) -> float:
    m = _FLOAT_PREFIX_RE.match(token)
    return float(m.group(0)) if m else math.nan


def _fraction_part(text: str) -> float:
    if text == "":
        return 0.0
    try:
        return float(text)
    except ValueError:
        return math.nan


def _token_value(token: str) -> float:
    if "/" in token:
        parts = token.split("/")
        num, den = _fraction_part(parts[0]), _fraction_part(parts[1])
        if math.isnan(num) or math.isnan(den) or den <= 0:
            return 1.0
        return num / den
    value = _parse_float_prefix(token)
    return 0.0 if math.isnan(value) else value


def parse_quantity(text: str) -> float:
    """
    Sum of the whitespace-separated numeric tokens in `text`.

    "1 1/2" -> 1.5, "3/4" -> 0.75, "1/0" -> 1.0. The result is never NaN or
    infinite and always lies in (0, MAX_QUANTITY].
    """
    total = sum(_token_value(t) for t in (text or "").split())
    if math.isnan(total) or math.isinf(total) or total <= 0:
        return 1.0
    return min(total, float(MAX_QUANTITY))


# =============== Line cleanup ===========================================
def strip_list_marker(line: str) -> str:
    """Remove bullets, numbered-list prefixes and edge whitespace."""
    s = (line or "").strip()
    s = _PUA_BULLET_RE.sub("", s)
    s = _BULLET_RE.sub("", s)
    s = _NUMBERED_RE.sub("", s)
    s = _EDGE_SPACE_RE.sub("", s)
    for glyph, ascii_fraction in UNICODE_FRACTIONS.items():
        s = s.replace(glyph, " " + ascii_fraction)
    return re.sub(r"\s+", " ", s).strip()


def is_unit_token(token: str) -> bool:
    """A token counts as a unit when the Unit Table knows it or it is a countable produce noun."""
    return units.is_known_unit(token) or needs_specification_noun(token)


def _make_line(quantity: float, unit: str, name: str, original: str) -> ParsedIngredientLine:
    name = name.strip()[:MAX_NAME_LENGTH]
    return ParsedIngredientLine(
        quantity=quantity,
        unit=unit,
        ingredient_name=name,
        original_line=original,
        search_query=clean_ingredient_for_search(name),
    )


def parse_ingredient_line(line: str) -> Optional[ParsedIngredientLine]:
    """Parse one ingredient line; None when nothing is left after cleanup."""
    s = strip_list_marker(line)
    if not s:
        return None

    m = _LINE_RE.match(s)
    if m:
        qty_text, unit_token, rest = m.groups()
        unit_token = re.sub(r"\s+", " ", unit_token)
        if is_unit_token(unit_token):
            unit = units.canonical_unit(unit_token) if units.is_known_unit(unit_token) else unit_token.lower()
            return _make_line(parse_quantity(qty_text), unit, rest, line)
        return _make_line(parse_quantity(qty_text), "item", f"{unit_token} {rest}", line)

    m = _NO_UNIT_RE.match(s)
    if m:
        qty_text, rest = m.groups()
        return _make_line(parse_quantity(qty_text), "item", rest, line)

    return _make_line(1.0, "item", s, line)


# =============== Parenthesis merging ====================================
def _merge_single(base_input: str, paren_input: str) -> str:
    base = base_input.strip()
    descriptors = [d.strip() for d in paren_input.strip().split(",")]

    core_words: List[str] = []
    others: List[str] = []
    for word in base.split():
        if _COLOR_RE.search(word) or _PREP_RE.search(word):
            others.append(word)
        else:
            core_words.append(word)
    core = " ".join(core_words) if core_words else base

    body_parts: List[str] = []
    for desc in descriptors:
        if _BODY_PART_RE.search(desc):
            for word in desc.split():
                (body_parts if _BODY_PART_RE.search(word) else others).append(word)
        else:
            others.append(desc)

    parts = [p for p in others + [core] + body_parts if p]
    return re.sub(r"\s+", " ", " ".join(parts)).strip()


def merge_descriptive_parentheses(name: str) -> str:
    """
    Fold descriptive parentheses into the ingredient name.

    "chicken (boneless, skinless breast)" -> "boneless skinless chicken breast"
    "tomatoes (fresh, diced)"             -> "fresh diced tomatoes"
    Informational groups such as "(about 1 cup)" or "(optional)" are dropped.
    At most MAX_MERGE_ITERATIONS groups are merged.
    """
    processed = re.sub(r"\s+", " ", _INFORMATIONAL_RE.sub("", name or "")).strip()
    iterations = 0
    while "(" in processed and ")" in processed and iterations < MAX_MERGE_ITERATIONS:
        m = _PAREN_GROUP_RE.match(processed)
        if not m:
            break
        before, content, after = m.groups()
        merged = _merge_single(before, content)
        if not after.strip():
            return merged
        processed = f"{merged} {after}".strip()
        iterations += 1
    return processed


def has_parentheses(text: str) -> bool:
    return "(" in text and ")" in text
