"""
Ingredient taxonomy and the specification resolver.

Some recipe lines count an ingredient noun instead of a unit ("2 tomatoes",
"1 onion"). For high-variation produce the weight depends on the variety, so
such lines are flagged for the user to pick one. Standard-size items (egg,
lemon, ...) and meats are recognized as nouns but never need a choice.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from nutrilabel.datasets import ParsedIngredientLine

logger = logging.getLogger(__name__)

HIGH_VARIATION = "high_variation"
STANDARD_SIZE = "standard_size"
MEAT = "meat"

DEFAULT_VARIETY_SIZE = "medium"

HIGH_VARIATION_INGREDIENTS = {
    "tomato": ("cherry tomato", "grape tomato", "roma tomato", "medium tomato", "large tomato",
               "beefsteak tomato", "heirloom tomato"),
    "potato": ("small potato", "medium potato", "large potato", "russet potato", "red potato",
               "yukon gold potato", "fingerling potato"),
    "onion": ("small onion", "medium onion", "large onion", "pearl onion", "shallot", "red onion",
              "white onion", "yellow onion"),
    "apple": ("small apple", "medium apple", "large apple", "granny smith apple", "fuji apple",
              "honeycrisp apple", "gala apple"),
    "pepper": ("bell pepper", "red bell pepper", "green bell pepper", "jalapeño pepper",
               "serrano pepper", "poblano pepper"),
    "carrot": ("baby carrot", "medium carrot", "large carrot"),
    "orange": ("small orange", "medium orange", "large orange", "navel orange", "blood orange"),
    "banana": ("small banana", "medium banana", "large banana"),
    "zucchini": ("small zucchini", "medium zucchini", "large zucchini"),
    "eggplant": ("small eggplant", "medium eggplant", "large eggplant", "japanese eggplant"),
}
STANDARD_SIZE_INGREDIENTS = ("egg", "avocado", "lemon", "lime", "garlic bulb")
MEAT_INGREDIENTS = ("chicken", "beef", "pork", "fish", "turkey", "lamb", "salmon", "tuna", "shrimp")


@dataclass(frozen=True)
class TaxonomyMatch:
    base: str
    category: str
    varieties: Tuple[str, ...] = ()

    @property
    def needs_specification(self) -> bool:
        return self.category == HIGH_VARIATION


def check_ingredient_unit(word: str) -> Optional[TaxonomyMatch]:
    """Classify a unit-position word as an ingredient noun, or None."""
    w = re.sub(r"s$", "", (word or "").strip().lower())
    if not w:
        return None
    for base, varieties in HIGH_VARIATION_INGREDIENTS.items():
        if w == base or w == base + "s" or base in w:
            return TaxonomyMatch(base, HIGH_VARIATION, varieties)
    for base in STANDARD_SIZE_INGREDIENTS:
        if w == base or w == base + "s":
            return TaxonomyMatch(w, STANDARD_SIZE)
    for base in MEAT_INGREDIENTS:
        if w == base or w == base + "s":
            return TaxonomyMatch(w, MEAT)
    return None


def needs_specification_noun(word: str) -> bool:
    hit = check_ingredient_unit(word)
    return bool(hit and hit.needs_specification)


def specification_prompt(base: str) -> str:
    return f"What type/size of {base}?"


def _head_noun(name: str) -> str:
    """'onion, diced' -> 'onion'; multi-word names yield ''."""
    head = name.split(",")[0].strip()
    return head if head and " " not in head else ""


def _candidate(line: ParsedIngredientLine) -> Optional[TaxonomyMatch]:
    hit = check_ingredient_unit(line.unit)
    if hit is not None:
        return hit
    if line.unit == "item":
        head = _head_noun(line.ingredient_name)
        if head:
            return check_ingredient_unit(head)
    return None


def resolve_specification(line: ParsedIngredientLine) -> ParsedIngredientLine:
    """
    Flag a line whose counted noun needs a size/variety choice.

    The line is flagged only when none of the candidate varieties already
    appears in the ingredient name ("2 roma tomato" is left alone).
    """
    hit = _candidate(line)
    if hit is None or not hit.needs_specification:
        return line
    name = line.ingredient_name.lower()
    if any(v.lower() in name for v in hit.varieties):
        return line
    return replace(
        line,
        needs_specification=True,
        base_ingredient=hit.base,
        specification_options=hit.varieties,
        specification_prompt=specification_prompt(hit.base),
    )


def apply_specification(line: ParsedIngredientLine, variety: Optional[str] = None) -> ParsedIngredientLine:
    """
    Resolve a flagged line with the chosen variety ("medium <base>" when skipped).

    The unit becomes "item", the name becomes "<variety> <ingredient>" and the
    search text is rebuilt from the new name.
    """
    from nutrilabel.search_query import clean_ingredient_for_search

    if not line.needs_specification:
        return line
    base = line.base_ingredient or ""
    chosen = (variety or "").strip() or f"{DEFAULT_VARIETY_SIZE} {base}"

    rest = line.ingredient_name.strip()
    head = _head_noun(rest)
    head_hit = check_ingredient_unit(head) if head else None
    if head_hit is not None and head_hit.base == base:
        rest = rest[len(head):].lstrip(" ,")
    new_name = f"{chosen} {rest}".strip() if rest else chosen

    logger.debug("specification applied: %r -> %r", line.ingredient_name, new_name)
    return replace(
        line,
        unit="item",
        ingredient_name=new_name,
        needs_specification=False,
        specification_options=(),
        specification_prompt=None,
        search_query=clean_ingredient_for_search(new_name),
    )
