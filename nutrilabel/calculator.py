"""
===============================================================================
calculator.py — Nutrient Aggregator, Yield Adjuster, Serving Scaler
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    • aggregate(): matched ingredients → one per-100 g profile for the dish
    • adjust_for_yield(): per-100 g raw → per-100 g cooked
    • scale_to_serving() / servings_per_container(): label serving math
    • check_profile(): list the invariant violations of a profile

-------------------------------------------------------------------------------
Aggregation:
    For every ingredient the quantity is converted to grams (conversions.py),
    its per-100 g nutrients are scaled by grams/100 and summed, and the weight
    is added to the running total (skipped/unmatched ingredients still weigh
    something). The sum is then rebased by 100/total.

    Afterwards negative values are clamped to 0 and implausible values are
    flagged; both produce DataQualityWarning records, neither aborts.

-------------------------------------------------------------------------------
Errors:
    ZeroWeight, InvalidYield, InvalidServingSize, and UnknownUnit (unless
    allow_fallback=True) are raised; no partial profile is returned.

===============================================================================
"""
from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Mapping, Optional, Sequence

from nutrilabel.conversions import convert_to_grams, estimate_grams
from nutrilabel.datasets import (
    NUTRIENT_FIELDS,
    AggregationResult,
    DataQualityWarning,
    MatchedIngredient,
    NutrientProfile,
)
from nutrilabel.errors import InvalidServingSize, InvalidYield, UnknownUnit, ZeroWeight

logger = logging.getLogger(__name__)

MAX_YIELD_MULTIPLIER = 2.0

# per 100 g; above these a value is almost certainly a data error
PLAUSIBILITY_CEILINGS: Dict[str, float] = {
    "calories": 9000.0,
    "total_fat": 100.0,
    "protein": 100.0,
    "total_carbohydrate": 100.0,
    "sodium": 100000.0,
    "cholesterol": 3000.0,
}

# final weight as % of raw weight
TYPICAL_YIELDS: Dict[str, float] = {
    "raw": 100.0,
    "baked": 85.0,
    "roasted": 70.0,
    "grilled": 75.0,
    "fried": 90.0,
    "boiled": 100.0,
    "steamed": 95.0,
    "sautéed": 85.0,
    "braised": 80.0,
    "stewed": 90.0,
    "poached": 95.0,
}
_YIELD_ALIASES = {"sauteed": "sautéed"}


def _warn(warnings: List[DataQualityWarning], kind: str, message: str, field: Optional[str] = None,
          original: Optional[float] = None, corrected: Optional[float] = None) -> None:
    logger.warning("%s: %s", kind, message)
    warnings.append(DataQualityWarning(kind, message, field, original, corrected))


def _ingredient_grams(item: MatchedIngredient, custom_conversions: Optional[Mapping[Any, float]],
                      allow_fallback: bool, warnings: List[DataQualityWarning]):
    portions = item.food.portions if item.food is not None else ()
    try:
        return convert_to_grams(item.quantity, item.unit, item.name, item.ingredient_id,
                                custom_conversions, portions)
    except UnknownUnit as exc:
        if not allow_fallback:
            raise
        result = estimate_grams(item.quantity, item.unit)
        _warn(warnings, "fallback_conversion",
              f'{exc} Estimated {result.grams:.1f} g for "{item.name}".', None, None, result.grams)
        return result


def aggregate(
    ingredients: Sequence[MatchedIngredient],
    custom_conversions: Optional[Mapping[Any, float]] = None,
    allow_fallback: bool = False,
    collector: Optional[List[DataQualityWarning]] = None,
) -> AggregationResult:
    """
    Weighted per-100 g profile of the whole dish.

    `collector`, when given, also receives every warning produced here.
    """
    warnings: List[DataQualityWarning] = []
    sums = NutrientProfile.zero()
    total_weight = 0.0
    breakdown: List[Dict[str, Any]] = []

    for item in ingredients:
        conv = _ingredient_grams(item, custom_conversions, allow_fallback, warnings)
        total_weight += conv.grams
        entry = {
            "name": item.name,
            "quantity": item.quantity,
            "unit": item.unit,
            "grams": conv.grams,
            "source": conv.source,
            "confidence": conv.confidence,
            "status": item.status,
            "fdc_id": None if item.food is None else item.food.fdc_id,
            "description": None if item.food is None else item.food.description,
        }
        breakdown.append(entry)
        if item.food is None:
            continue
        warnings.extend(item.food.warnings)
        sums = sums + item.food.nutrients.scaled(conv.grams / 100.0)

    if total_weight == 0:
        raise ZeroWeight()

    rebased = sums.scaled(100.0 / total_weight)
    values = rebased.to_dict()
    for name in NUTRIENT_FIELDS:
        if values[name] < 0:
            _warn(warnings, "negative_value", f"Negative value for {name} ({values[name]:.3f}). Set to 0.",
                  name, values[name], 0.0)
            values[name] = 0.0
        ceiling = PLAUSIBILITY_CEILINGS.get(name)
        if ceiling is not None and values[name] > ceiling:
            _warn(warnings, "implausible_value",
                  f"Extremely high value for {name} ({values[name]:.1f} per 100 g). Please verify ingredient data.",
                  name, values[name])

    if values["saturated_fat"] > values["total_fat"]:
        _warn(warnings, "saturated_fat_exceeds_total",
              f"Saturated fat ({values['saturated_fat']:.2f} g) exceeds total fat ({values['total_fat']:.2f} g).",
              "saturated_fat", values["saturated_fat"])
    if values["added_sugars"] > values["total_sugars"]:
        _warn(warnings, "added_sugar_exceeds_total",
              f"Added sugars ({values['added_sugars']:.2f} g) exceed total sugars ({values['total_sugars']:.2f} g).",
              "added_sugars", values["added_sugars"])

    if collector is not None:
        collector.extend(warnings)
    return AggregationResult(
        profile=NutrientProfile(**values),
        total_weight_g=total_weight,
        warnings=tuple(warnings),
        breakdown=tuple(breakdown),
    )


def calculate_nutrition_profile(
    ingredients: Sequence[MatchedIngredient],
    custom_conversions: Optional[Mapping[Any, float]] = None,
    allow_fallback: bool = False,
) -> NutrientProfile:
    return aggregate(ingredients, custom_conversions, allow_fallback).profile


# =============== Yield ====================================================
def adjust_for_yield(profile: NutrientProfile, multiplier: float) -> NutrientProfile:
    """
    Per-100 g cooked profile from a per-100 g raw one.

    multiplier = final weight / raw weight, in (0, 2]. Losing water
    concentrates nutrients: 0.75 multiplies every value by 1/0.75.
    """
    if multiplier is None or math.isnan(multiplier) or multiplier <= 0 or multiplier > MAX_YIELD_MULTIPLIER:
        raise InvalidYield(multiplier)
    return profile.scaled(1.0 / multiplier)


def yield_multiplier(raw_weight_g: float, final_weight_g: float) -> float:
    if raw_weight_g <= 0:
        raise ZeroWeight("Cannot compute yield: raw weight is zero")
    return final_weight_g / raw_weight_g


def typical_yield_percent(method: str) -> Optional[float]:
    key = (method or "").strip().lower()
    return TYPICAL_YIELDS.get(_YIELD_ALIASES.get(key, key))


# =============== Servings =================================================
def scale_to_serving(profile: NutrientProfile, serving_size_g: float) -> NutrientProfile:
    if serving_size_g <= 0:
        raise InvalidServingSize(serving_size_g)
    return profile.scaled(serving_size_g / 100.0)


def servings_per_container(total_weight_g: float, serving_size_g: float) -> float:
    """Servings rounded half-up to one decimal."""
    if serving_size_g <= 0:
        raise InvalidServingSize(serving_size_g)
    return math.floor(total_weight_g / serving_size_g * 10 + 0.5) / 10


# =============== Validation ===============================================
def check_profile(profile: NutrientProfile) -> List[str]:
    """Human-readable list of invariant violations; empty when the profile is sound."""
    problems = [f"{name} is negative ({value})" for name, value in profile.items() if value < 0]
    for name, ceiling in PLAUSIBILITY_CEILINGS.items():
        if profile.get(name) > ceiling:
            problems.append(f"{name} per 100 g seems too high ({profile.get(name)})")
    if profile.saturated_fat > profile.total_fat:
        problems.append(
            f"saturated fat ({profile.saturated_fat} g) exceeds total fat ({profile.total_fat} g)"
        )
    if profile.added_sugars > profile.total_sugars:
        problems.append(
            f"added sugars ({profile.added_sugars} g) exceed total sugars ({profile.total_sugars} g)"
        )
    return problems
