"""
===============================================================================
conversions.py — Unit Normalizer (quantity + unit → grams)
===============================================================================

-------------------------------------------------------------------------------
Priority order (convert_to_grams):
    0. unit is already grams              → quantity
    1. custom conversion "<id>:<unit>"    → quantity × grams-per-unit
                                            (a factor <= 0 raises ValueError)
    2. database portion data              → quantity × gramWeight / amount
    3. Unit Table standard equivalence    → quantity × grams-per-unit
    4. otherwise                          → UnknownUnit

    The result records which tier produced it (ConversionResult.source).

-------------------------------------------------------------------------------
Fallback estimator (estimate_grams):
    A separate, lower-confidence path for callers that would rather keep a
    rough number than abort (volume as water, ~150 g per item, sub-gram
    spice amounts, 50 g per unknown unit with a logged warning). It is never
    consulted by convert_to_grams() itself.

===============================================================================
"""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Sequence

from nutrilabel import units
from nutrilabel.datasets import ConversionResult, FoodPortion
from nutrilabel.errors import UnknownUnit

logger = logging.getLogger(__name__)

EXACT = "exact"
CUSTOM = "custom"
PORTION = "portion"
STANDARD = "standard"
FALLBACK = "fallback"

UNKNOWN_UNIT_GRAMS = 50.0


def conversion_key(ingredient_id: Any, unit: str) -> str:
    return f"{ingredient_id}:{unit}"


def find_matching_portion(unit: str, portions: Sequence[FoodPortion]) -> Optional[FoodPortion]:
    """Portion whose measure name, abbreviation or modifier equals `unit`, else contains it."""
    u = (unit or "").strip().lower()
    if not u or not portions:
        return None

    def _fields(p: FoodPortion):
        return (p.measure_name.lower(), p.abbreviation.lower(), p.modifier.lower())

    for p in portions:
        if u in _fields(p):
            return p
    for p in portions:
        if any(u in f for f in _fields(p) if f):
            return p
    return None


def _custom_factor(unit: str, ingredient_id: Any, custom: Optional[Mapping[str, float]]) -> Optional[float]:
    if not custom or ingredient_id is None:
        return None
    for u in (unit, units.canonical_unit(unit)):
        factor = custom.get(conversion_key(ingredient_id, u))
        if factor is None:
            factor = custom.get((ingredient_id, u))
        if factor is None:
            continue
        if float(factor) <= 0:
            raise ValueError(f"custom conversion for {ingredient_id}:{u} must be positive, got {factor}")
        return float(factor)
    return None


def convert_to_grams(
    quantity: float,
    unit: str,
    ingredient_name: str = "",
    ingredient_id: Any = None,
    custom_conversions: Optional[Mapping[str, float]] = None,
    portions: Sequence[FoodPortion] = (),
) -> ConversionResult:
    """Grams for `quantity unit` via the four tiers; raises UnknownUnit when none applies."""
    if units.is_gram_unit(unit):
        return ConversionResult(quantity, EXACT, "high")

    factor = _custom_factor(unit, ingredient_id, custom_conversions)
    if factor is not None:
        return ConversionResult(quantity * factor, CUSTOM, "high")

    portion = find_matching_portion(unit, portions)
    if portion is not None:
        return ConversionResult(quantity * portion.grams_per_unit, PORTION, "high")

    grams = units.grams_per_unit(unit)
    if grams is not None:
        return ConversionResult(quantity * grams, STANDARD, "medium")

    raise UnknownUnit(ingredient_name, unit)


def grams_for(
    quantity: float,
    unit: str,
    ingredient_id: Any = None,
    custom_conversions: Optional[Mapping[str, float]] = None,
    portions: Sequence[FoodPortion] = (),
    ingredient_name: str = "",
) -> float:
    return convert_to_grams(quantity, unit, ingredient_name, ingredient_id, custom_conversions, portions).grams


# (predicate on normalized unit, grams per unit), first match wins
_VOLUME_AS_WATER = (
    (lambda u: "cup" in u, 236.588),
    (lambda u: "tbsp" in u or "tablespoon" in u, 14.7868),
    (lambda u: "tsp" in u or "teaspoon" in u, 4.92892),
)
FALLBACK_RULES = _VOLUME_AS_WATER + (
    (lambda u: "ml" in u or "milliliter" in u, 1.0),
    (lambda u: "liter" in u or u == "l", 1000.0),
    (lambda u: "fl oz" in u or "fluid ounce" in u, 29.5735),
    (lambda u: "pint" in u, 473.176),
    (lambda u: "quart" in u, 946.353),
    (lambda u: "gallon" in u, 3785.41),
    (lambda u: "oz" in u or "ounce" in u, 28.3495),
    (lambda u: "lb" in u or "pound" in u, 453.592),
    (lambda u: "kg" in u or "kilogram" in u, 1000.0),
    (lambda u: u in ("g", "gram", "grams"), 1.0),
    (lambda u: u in ("whole", "item", "piece"), 150.0),
    (lambda u: u == "small", 100.0),
    (lambda u: u == "medium", 150.0),
    (lambda u: u == "large", 200.0),
    (lambda u: u == "pinch", 0.5),
    (lambda u: u == "dash", 0.6),
    (lambda u: u == "smidgen", 0.3),
    (lambda u: u == "sprinkle", 0.4),
    (lambda u: "to taste" in u or u == "taste", 1.0),
)


def estimate_grams(quantity: float, unit: str) -> ConversionResult:
    """Rough grams for any unit; low confidence by construction."""
    u = (unit or "").strip().lower()
    for i, (matches, grams) in enumerate(FALLBACK_RULES):
        if matches(u):
            if i < len(_VOLUME_AS_WATER):
                logger.info('volume conversion "%s" assumes water density; actual weight varies', unit)
            return ConversionResult(quantity * grams, FALLBACK, "low")
    logger.warning('unknown unit "%s": using %.0f g per unit as a fallback estimate', unit, UNKNOWN_UNIT_GRAMS)
    return ConversionResult(quantity * UNKNOWN_UNIT_GRAMS, FALLBACK, "low")
