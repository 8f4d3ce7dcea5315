# runner.py
"""
End-to-end pipeline:
1) parse the pasted recipe (nutrilabel.recipe_parser.parse_recipe)
2) resolve size/variety choices (terminal prompts or defaults)
3) match every ingredient against FoodData Central (nutrilabel.matcher)
4) aggregate each sub-recipe, then the final dish, per 100 g
5) apply cooking yield, scale to a serving, build the rounded label
6) save to data/results_<dish>.json

Run:
  python runner.py recipe.txt --serving-size 150 --cooking-method baked
  cat recipe.txt | python runner.py - --mode offline
"""
from __future__ import annotations

import argparse
import json
import logging
import os
import re
import sys
from dataclasses import replace
from typing import Any, Dict, List, Mapping, Optional

from nutrilabel import config
from nutrilabel.calculator import (
    TYPICAL_YIELDS,
    adjust_for_yield,
    aggregate,
    scale_to_serving,
    servings_per_container,
    typical_yield_percent,
    yield_multiplier,
)
from nutrilabel.datasets import CONFIRMED, DatabaseFood, MatchedIngredient, ParsedRecipe
from nutrilabel.errors import NutritionLabelError
from nutrilabel.matcher import FoodDatabase, resolve_all
from nutrilabel.nutrition_info import FoodDataCentralClient
from nutrilabel.recipe_parser import parse_recipe
from nutrilabel.rounding import build_label
from nutrilabel.user_interface import apply_default_specifications, is_likely_recipe_text, prompt_specifications

logger = logging.getLogger(__name__)

DEFAULT_SERVING_G = 100.0


def _apply_overrides(matched: List[MatchedIngredient],
                     overrides: Optional[Mapping[str, Optional[DatabaseFood]]]) -> List[MatchedIngredient]:
    """overrides: ingredient name (case-insensitive) -> food to use, or None to skip it."""
    if not overrides:
        return matched
    wanted = {k.strip().lower(): v for k, v in overrides.items()}
    out = []
    for m in matched:
        key = m.name.strip().lower()
        if key not in wanted:
            out.append(m)
        elif wanted[key] is None:
            out.append(m.skip())
        else:
            out.append(m.override(wanted[key]))
    return out


def _report(matched: List[MatchedIngredient]) -> None:
    for m in matched:
        desc = m.food.description if m.food is not None else "-"
        print(f"[runner] {m.name} -> {desc} [{m.status}]")


def compute_dish_nutrition(
    parsed: ParsedRecipe,
    database: FoodDatabase,
    serving_size_g: Optional[float] = None,
    final_weight_g: Optional[float] = None,
    cooking_method: Optional[str] = None,
    custom_conversions: Optional[Mapping[Any, float]] = None,
    overrides: Optional[Mapping[str, Optional[DatabaseFood]]] = None,
    allow_fallback: bool = False,
    max_workers: Optional[int] = None,
) -> Dict[str, Any]:
    # sub-recipes first: each becomes a per-100 g "food" for the final dish
    # keyed by identity: two sub-recipes may share a name
    sub_foods: Dict[int, DatabaseFood] = {}
    sub_results = []
    for sr in parsed.sub_recipes:
        matched = _apply_overrides(resolve_all(sr.ingredients, database, max_workers), overrides)
        _report(matched)
        agg = aggregate(matched, custom_conversions, allow_fallback)
        sub_foods[id(sr)] = DatabaseFood.from_profile(sr.name, agg.profile)
        sub_results.append({
            "name": sr.name,
            "quantity_in_final_dish": sr.quantity_in_final_dish,
            "unit_in_final_dish": sr.unit_in_final_dish,
            "total_weight_g": agg.total_weight_g,
            "per_100g": agg.profile.to_dict(),
            "ingredients": [m.to_dict() for m in matched],
            "warnings": [w.to_dict() for w in agg.warnings],
            "breakdown": list(agg.breakdown),
        })

    matched = resolve_all(parsed.final_dish_ingredients, database, max_workers)
    matched = [
        replace(m, food=sub_foods[id(m.line.sub_recipe)], status=CONFIRMED)
        if m.line.is_sub_recipe and id(m.line.sub_recipe) in sub_foods else m
        for m in matched
    ]
    matched = _apply_overrides(matched, overrides)
    _report(matched)
    agg = aggregate(matched, custom_conversions, allow_fallback)

    raw_weight = agg.total_weight_g
    multiplier = 1.0
    if final_weight_g is not None:
        multiplier = yield_multiplier(raw_weight, final_weight_g)
    elif cooking_method:
        pct = typical_yield_percent(cooking_method)
        if pct is None:
            raise ValueError(f"unknown cooking method {cooking_method!r}; expected one of {sorted(TYPICAL_YIELDS)}")
        multiplier = pct / 100.0
    cooked = adjust_for_yield(agg.profile, multiplier)
    cooked_weight = raw_weight * multiplier
    print(f"[runner] raw weight {raw_weight:.1f} g, yield x{multiplier:.2f} -> {cooked_weight:.1f} g")

    if serving_size_g is None:
        if parsed.explicit_servings:
            serving_size_g = cooked_weight / parsed.explicit_servings
        else:
            serving_size_g = DEFAULT_SERVING_G
    per_serving = scale_to_serving(cooked, serving_size_g)
    servings = servings_per_container(cooked_weight, serving_size_g)

    return {
        "title": parsed.final_dish_name,
        "explicit_servings": parsed.explicit_servings,
        "raw_weight_g": raw_weight,
        "yield_multiplier": multiplier,
        "final_weight_g": cooked_weight,
        "serving_size_g": serving_size_g,
        "servings_per_container": servings,
        "per_100g_raw": agg.profile.to_dict(),
        "per_100g": cooked.to_dict(),
        "per_serving": per_serving.to_dict(),
        "label": build_label(per_serving, serving_size_g, servings),
        "ingredients": [m.to_dict() for m in matched],
        "breakdown": list(agg.breakdown),
        "warnings": [w.to_dict() for w in agg.warnings],
        "sub_recipes": sub_results,
        "parse_errors": list(parsed.errors),
    }


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def run_once(
    path: str,
    database: Optional[FoodDatabase] = None,
    out_dir: str = "data",
    mode: str = "auto",
    interactive: bool = False,
    **options: Any,
) -> str:
    text = _read_text(path)
    if not is_likely_recipe_text(text):
        raise NutritionLabelError(
            "This does not look like a recipe. Paste the dish name on the first line and one "
            "ingredient per line, e.g. '2 cups flour'."
        )

    parsed = parse_recipe(text)
    for msg in parsed.errors:
        print(f"[runner][WARN] {msg}")
    if not parsed.final_dish_ingredients:
        raise NutritionLabelError(f"No ingredients found in {path!r}")

    parsed = prompt_specifications(parsed) if interactive else apply_default_specifications(parsed)
    db = database if database is not None else FoodDataCentralClient(mode=mode)
    result = compute_dish_nutrition(parsed, db, **options)

    os.makedirs(out_dir, exist_ok=True)
    safe_name = re.sub(r"\s+", "_", parsed.final_dish_name.strip().lower()) or "recipe"
    safe_name = re.sub(r"[^\w.-]", "", safe_name)
    out_path = os.path.join(out_dir, f"results_{safe_name}.json")

    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(result, f, ensure_ascii=False, indent=2)

    return out_path


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Nutrition label for a pasted recipe (USDA FoodData Central).")
    p.add_argument("recipe", help="recipe text file, or - for stdin")
    p.add_argument("--serving-size", type=float, default=None, help="serving size in grams")
    p.add_argument("--final-weight", type=float, default=None, help="cooked weight of the whole dish in grams")
    p.add_argument("--cooking-method", choices=sorted(TYPICAL_YIELDS), default=None,
                   help="use a typical yield when the final weight is unknown")
    p.add_argument("--mode", choices=("auto", "offline", "refresh"), default="auto",
                   help="FoodData Central cache mode")
    p.add_argument("--interactive", action="store_true", help="ask for produce sizes/varieties")
    p.add_argument("--allow-fallback", action="store_true",
                   help="estimate grams for units that cannot be converted instead of failing")
    p.add_argument("--out-dir", default="data")
    p.add_argument("--log-level", default=None)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_arg_parser().parse_args(argv)
    config.configure_logging(args.log_level)
    try:
        path = run_once(
            args.recipe,
            out_dir=args.out_dir,
            mode=args.mode,
            interactive=args.interactive,
            serving_size_g=args.serving_size,
            final_weight_g=args.final_weight,
            cooking_method=args.cooking_method,
            allow_fallback=args.allow_fallback,
        )
    except (NutritionLabelError, ValueError, OSError) as e:
        print(f"[runner][ERROR] {e}")
        return 1
    print(f"[OK] Results saved to: {path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
