"""
FDA-style label rounding (21 CFR 101.9) and % Daily Value.

Every function takes the per-serving amount and returns the display string.
Rounding is half-up, so 2.5 g of fat shows as "2.5 g" and 145 mg of sodium
as "150 mg".
"""
from __future__ import annotations

import math
from typing import Any, Callable, Dict, Optional

from nutrilabel.datasets import NUTRIENT_UNITS, NutrientProfile


def _half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _nearest(x: float, step: float) -> int:
    return _half_up(x / step) * int(step)


def _half_gram(x: float) -> str:
    return "%.1f g" % (math.floor(x * 2 + 0.5) / 2)


def _tenth(x: float) -> float:
    return math.floor(x * 10 + 0.5) / 10


def round_calories(kcal: float) -> str:
    if kcal < 5:
        return "0"
    if kcal <= 50:
        return str(_nearest(kcal, 5))
    return str(_nearest(kcal, 10))


def round_total_fat(grams: float) -> str:
    if grams < 0.5:
        return "0 g"
    if grams < 5:
        return _half_gram(grams)
    return f"{_half_up(grams)} g"


def round_saturated_fat(grams: float) -> str:
    if grams < 0.5:
        return "0 g"
    if grams < 1:
        return "Less than 1 g"
    return _half_gram(grams)


def round_trans_fat(grams: float) -> str:
    if grams < 0.5:
        return "0 g"
    return _half_gram(grams)


def round_cholesterol(mg: float) -> str:
    if mg < 2:
        return "0 mg"
    if mg < 5:
        return "Less than 5 mg"
    return f"{_nearest(mg, 5)} mg"


def round_sodium(mg: float) -> str:
    if mg < 5:
        return "0 mg"
    if mg <= 140:
        return f"{_nearest(mg, 5)} mg"
    return f"{_nearest(mg, 10)} mg"


def round_gram_nutrient(grams: float) -> str:
    """Carbohydrate, fiber, sugars, added sugars and protein share one rule."""
    if grams < 0.5:
        return "0 g"
    if grams < 1:
        return "Less than 1 g"
    return f"{_half_up(grams)} g"


round_total_carbohydrate = round_gram_nutrient
round_dietary_fiber = round_gram_nutrient
round_total_sugars = round_gram_nutrient
round_added_sugars = round_gram_nutrient
round_protein = round_gram_nutrient


def round_vitamin_d(mcg: float) -> str:
    if mcg < 0.1:
        return "0 mcg"
    return "%.1f mcg" % _tenth(mcg)


def round_calcium(mg: float) -> str:
    if mg < 5:
        return "0 mg"
    return f"{_nearest(mg, 10)} mg"


round_potassium = round_calcium


def round_iron(mg: float) -> str:
    if mg < 0.5:
        return "0 mg"
    return "%.1f mg" % _tenth(mg)


RULES: Dict[str, Callable[[float], str]] = {
    "calories": round_calories,
    "total_fat": round_total_fat,
    "saturated_fat": round_saturated_fat,
    "trans_fat": round_trans_fat,
    "cholesterol": round_cholesterol,
    "sodium": round_sodium,
    "total_carbohydrate": round_total_carbohydrate,
    "dietary_fiber": round_dietary_fiber,
    "total_sugars": round_total_sugars,
    "added_sugars": round_added_sugars,
    "protein": round_protein,
    "vitamin_d": round_vitamin_d,
    "calcium": round_calcium,
    "iron": round_iron,
    "potassium": round_potassium,
}

# 2,000 kcal diet
FDA_DAILY_VALUES: Dict[str, float] = {
    "total_fat": 78,
    "saturated_fat": 20,
    "cholesterol": 300,
    "sodium": 2300,
    "total_carbohydrate": 275,
    "dietary_fiber": 28,
    "added_sugars": 50,
    "protein": 50,
    "vitamin_d": 20,
    "calcium": 1300,
    "iron": 18,
    "potassium": 4700,
}

# (field, label text) in the order they appear on the panel
LABEL_LINES = (
    ("total_fat", "Total Fat"),
    ("saturated_fat", "Saturated Fat"),
    ("trans_fat", "Trans Fat"),
    ("cholesterol", "Cholesterol"),
    ("sodium", "Sodium"),
    ("total_carbohydrate", "Total Carbohydrate"),
    ("dietary_fiber", "Dietary Fiber"),
    ("total_sugars", "Total Sugars"),
    ("added_sugars", "Includes Added Sugars"),
    ("protein", "Protein"),
    ("vitamin_d", "Vitamin D"),
    ("calcium", "Calcium"),
    ("iron", "Iron"),
    ("potassium", "Potassium"),
)


def percent_daily_value(amount: float, daily_value: Optional[float]) -> str:
    if not daily_value or not amount:
        return "0%"
    return f"{_half_up(amount / daily_value * 100)}%"


def format_nutrient(name: str, value: float) -> Dict[str, Optional[str]]:
    """{"display": ..., "percent_dv": ...}; percent_dv is None for nutrients without a DV."""
    rule = RULES.get(name)
    display = rule(value) if rule else "%.1f %s" % (value, NUTRIENT_UNITS.get(name, "g"))
    dv = FDA_DAILY_VALUES.get(name)
    return {"display": display, "percent_dv": percent_daily_value(value, dv) if dv else None}


def build_label(per_serving: NutrientProfile, serving_size_g: float, servings: Optional[float] = None) -> Dict[str, Any]:
    label: Dict[str, Any] = {
        "servings_per_container": servings,
        "serving_size": f"{_half_up(serving_size_g)} g",
        "calories": round_calories(per_serving.calories),
        "lines": [],
    }
    for name, text in LABEL_LINES:
        formatted = format_nutrient(name, per_serving.get(name))
        label["lines"].append({"nutrient": name, "label": text, **formatted})
    return label
