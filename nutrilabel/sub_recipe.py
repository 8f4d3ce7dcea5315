"""
Sub-recipe detector.

Decides whether a trailing parenthetical is a nested ingredient list
("1 cup salsa (2 tomato, 1 onion, 1 tbsp cilantro)") or just a description
("1 chicken breast (boneless, skinless)"). Each comma-separated item is
classified by an ordered rule table; the counts decide.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from nutrilabel.ingredient_parser import parse_ingredient_line
from nutrilabel.knowledgebase import (
    INFORMATIONAL_PREFIXES,
    SUB_RECIPE_DESCRIPTOR_WORDS,
    SUB_RECIPE_FOOD_WORDS,
    SUB_RECIPE_ITEM_UNITS,
    SUB_RECIPE_SINGLE_ITEM_UNITS,
)

logger = logging.getLogger(__name__)

INGREDIENT_LIKE = "ingredient"
DESCRIPTOR_LIKE = "descriptor"

_INFORMATIONAL_RE = re.compile(r"^(%s)" % "|".join(re.escape(p) for p in INFORMATIONAL_PREFIXES), re.IGNORECASE)
_SINGLE_UNIT_RE = re.compile(r"\b(%s)\b" % SUB_RECIPE_SINGLE_ITEM_UNITS, re.IGNORECASE)
_ITEM_UNIT_RE = re.compile(r"\b(%s)\b" % SUB_RECIPE_ITEM_UNITS, re.IGNORECASE)
_FOOD_RE = re.compile(r"\b(%s)\b" % "|".join(SUB_RECIPE_FOOD_WORDS), re.IGNORECASE)
_DESCRIPTOR_RE = re.compile(r"\b(%s)\b" % "|".join(SUB_RECIPE_DESCRIPTOR_WORDS), re.IGNORECASE)

SHORT_WORD_LENGTH = 12


@dataclass(frozen=True)
class SubRecipeMatch:
    quantity: float
    unit: str
    name: str
    content: str
    items: Tuple[str, ...]
    has_nested_parentheses: bool = False


def _has_food(item: str) -> bool:
    return bool(_FOOD_RE.search(item))


def _is_short_adjective(item: str) -> bool:
    return len(item.split()) == 1 and len(item) < SHORT_WORD_LENGTH and not _has_food(item)


# (class, predicate); first match wins, unmatched items count for neither side
ITEM_RULES: Tuple[Tuple[str, Callable[[str], bool]], ...] = (
    (INGREDIENT_LIKE, lambda item: bool(re.search(r"\d", item))),
    (INGREDIENT_LIKE, lambda item: bool(_ITEM_UNIT_RE.search(item))),
    (INGREDIENT_LIKE, lambda item: _has_food(item) and not _DESCRIPTOR_RE.search(item)),
    (DESCRIPTOR_LIKE, lambda item: bool(_DESCRIPTOR_RE.search(item))),
    (DESCRIPTOR_LIKE, _is_short_adjective),
)


def classify_item(item: str) -> Optional[str]:
    for label, rule in ITEM_RULES:
        if rule(item):
            return label
    return None


def is_bare_measurement(item: str) -> bool:
    """A lone parenthetical like "1 1/2 cups", "large" or "thinly sliced"."""
    return (
        bool(_SINGLE_UNIT_RE.search(item))
        or len(re.findall(r"\d+", item)) > 1
        or len(item.split()) <= 2
    )


def find_trailing_group(line: str) -> Optional[Tuple[int, int]]:
    """(open, close) indices of the outermost parenthesis group that ends the line."""
    s = line.rstrip()
    if not s.endswith(")"):
        return None
    depth = 0
    for i in range(len(s) - 1, -1, -1):
        ch = s[i]
        if ch == ")":
            depth += 1
        elif ch == "(":
            depth -= 1
            if depth == 0:
                return i, len(s) - 1
    return None


def split_top_level(content: str) -> List[str]:
    """Split on commas that are not inside nested parentheses."""
    items, depth, current = [], 0, []
    for ch in content:
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth = max(depth - 1, 0)
        if ch == "," and depth == 0:
            items.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
    items.append("".join(current).strip())
    return [i for i in items if i]


def detect_sub_recipe(line: str) -> Optional[SubRecipeMatch]:
    """Return a SubRecipeMatch when the line's trailing parenthetical lists ingredients."""
    group = find_trailing_group(line or "")
    if group is None:
        return None
    start, end = group
    prefix = line[:start].strip()
    content = line[start + 1:end].strip()
    if not prefix or not content:
        return None

    if _INFORMATIONAL_RE.match(content):
        return None

    items = split_top_level(content)
    if len(items) == 1 and is_bare_measurement(items[0]):
        return None

    labels = [classify_item(i) for i in items]
    ingredient_like = labels.count(INGREDIENT_LIKE)
    descriptor_like = labels.count(DESCRIPTOR_LIKE)
    if descriptor_like >= ingredient_like:
        return None
    if ingredient_like < 2 and len(items) >= 2:
        return None

    head = parse_ingredient_line(prefix)
    if head is None:
        return None
    logger.debug("sub-recipe %r: %d ingredient-like / %d descriptor-like", head.ingredient_name,
                 ingredient_like, descriptor_like)
    return SubRecipeMatch(
        quantity=head.quantity,
        unit=head.unit,
        name=head.ingredient_name,
        content=content,
        items=tuple(items),
        has_nested_parentheses="(" in content or ")" in content,
    )
