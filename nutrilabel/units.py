"""
===============================================================================
units.py — Unit Table (names, aliases, gram equivalents, categories)
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Single registry of every measurement token the parser accepts as a unit,
    with its category (volume / weight / count / other) and, where a standard
    equivalence exists, grams per unit.

    Volume entries assume water density (1 g/ml). They are the third tier of
    the unit normalizer and only apply when neither a custom conversion nor
    database portion data is available.

-------------------------------------------------------------------------------
Notes:
    • Size words (small / medium / large / ...) carry USDA egg-white weights;
      they double as generic "1 large item" counts.
    • Count units (clove, slice, can, ...) have no gram equivalent: they need
      portion data or a custom conversion.
    • Lookups are case-insensitive and tolerate plurals and a trailing period
      ("Tbsp." → tbsp, "cups" → cup).

===============================================================================
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Optional, Tuple

VOLUME = "volume"
WEIGHT = "weight"
COUNT = "count"
OTHER = "other"


@dataclass(frozen=True)
class UnitConversion:
    name: str                       # canonical unit name
    category: str                   # volume | weight | count | other
    grams: Optional[float]          # grams per 1 unit, None when no standard equivalence
    aliases: Tuple[str, ...] = ()


UNIT_TABLE: Tuple[UnitConversion, ...] = (
    # weight (exact)
    UnitConversion("g", WEIGHT, 1.0, ("gram", "grams", "gm", "gr")),
    UnitConversion("kg", WEIGHT, 1000.0, ("kilogram", "kilograms", "kilo", "kilos")),
    UnitConversion("mg", WEIGHT, 0.001, ("milligram", "milligrams")),
    UnitConversion("oz", WEIGHT, 28.3495, ("ounce", "ounces")),
    UnitConversion("lb", WEIGHT, 453.592, ("pound", "pounds", "lbs")),

    # volume (water density)
    UnitConversion("ml", VOLUME, 1.0, ("milliliter", "milliliters", "millilitre", "millilitres")),
    UnitConversion("l", VOLUME, 1000.0, ("liter", "liters", "litre", "litres")),
    UnitConversion("cup", VOLUME, 236.588, ("cups",)),
    UnitConversion("tbsp", VOLUME, 14.7868, ("tablespoon", "tablespoons", "tbs", "tbl")),
    UnitConversion("tsp", VOLUME, 4.92892, ("teaspoon", "teaspoons")),
    UnitConversion("fl oz", VOLUME, 29.5735, ("fluid ounce", "fluid ounces", "floz", "fl. oz")),
    UnitConversion("pint", VOLUME, 473.176, ("pints", "pt")),
    UnitConversion("quart", VOLUME, 946.353, ("quarts", "qt")),
    UnitConversion("gallon", VOLUME, 3785.41, ("gallons", "gal")),

    # small amounts
    UnitConversion("pinch", OTHER, 0.5, ("pinches",)),
    UnitConversion("dash", OTHER, 0.6, ("dashes",)),
    UnitConversion("smidgen", OTHER, 0.25, ()),
    UnitConversion("splash", OTHER, None, ("splashes",)),
    UnitConversion("handful", OTHER, None, ("handfuls",)),

    # size words (egg-white weights)
    UnitConversion("large", COUNT, 33.0, ()),
    UnitConversion("medium", COUNT, 30.0, ()),
    UnitConversion("small", COUNT, 25.0, ()),
    UnitConversion("extra-large", COUNT, 38.0, ("extra large",)),
    UnitConversion("jumbo", COUNT, 42.0, ()),
    UnitConversion("xl", COUNT, 38.0, ()),

    # counts without a standard weight
    UnitConversion("item", COUNT, None, ("items",)),
    UnitConversion("piece", COUNT, None, ("pieces", "pc", "pcs")),
    UnitConversion("each", COUNT, None, ("ea",)),
    UnitConversion("whole", COUNT, None, ()),
    UnitConversion("slice", COUNT, None, ("slices",)),
    UnitConversion("clove", COUNT, None, ("cloves",)),
    UnitConversion("sprig", COUNT, None, ("sprigs",)),
    UnitConversion("leaf", COUNT, None, ("leaves",)),
    UnitConversion("stalk", COUNT, None, ("stalks",)),
    UnitConversion("head", COUNT, None, ("heads",)),
    UnitConversion("bunch", COUNT, None, ("bunches",)),
    UnitConversion("can", COUNT, None, ("cans",)),
    UnitConversion("package", COUNT, None, ("packages", "pkg", "pkgs")),
)

VAGUE_UNITS = ("some", "a little", "a bit", "bunch", "handful", "splash")

_INDEX: Dict[str, UnitConversion] = {}
for _u in UNIT_TABLE:
    _INDEX[_u.name] = _u
    for _alias in _u.aliases:
        _INDEX.setdefault(_alias, _u)


def normalize_unit(unit: str) -> str:
    """Lowercase, trim, drop a trailing period and collapse inner spaces."""
    u = (unit or "").strip().lower().rstrip(".")
    return re.sub(r"\s+", " ", u)


@lru_cache(maxsize=1024)
def find_unit(unit: str) -> Optional[UnitConversion]:
    u = normalize_unit(unit)
    if not u:
        return None
    if u in _INDEX:
        return _INDEX[u]
    if u.endswith("es") and u[:-2] in _INDEX:
        return _INDEX[u[:-2]]
    if u.endswith("s") and u[:-1] in _INDEX:
        return _INDEX[u[:-1]]
    return None


def canonical_unit(unit: str) -> str:
    """Canonical table name for a unit, or the normalized input when unknown."""
    hit = find_unit(unit)
    return hit.name if hit else normalize_unit(unit)


def grams_per_unit(unit: str) -> Optional[float]:
    hit = find_unit(unit)
    return hit.grams if hit else None


def unit_category(unit: str) -> Optional[str]:
    hit = find_unit(unit)
    return hit.category if hit else None


def is_known_unit(unit: str) -> bool:
    return find_unit(unit) is not None


def is_measurement_unit(unit: str) -> bool:
    return unit_category(unit) in (VOLUME, WEIGHT, OTHER)


def is_count_unit(unit: str) -> bool:
    return unit_category(unit) == COUNT


def is_vague_unit(unit: str) -> bool:
    return normalize_unit(unit) in VAGUE_UNITS


def is_gram_unit(unit: str) -> bool:
    return normalize_unit(unit) in ("g", "gram", "grams")
