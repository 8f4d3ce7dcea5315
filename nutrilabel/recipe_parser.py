"""
===============================================================================
recipe_parser.py — Recipe Parser (orchestrator)
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    parse_recipe() runs the whole text pipeline on one pasted recipe:

        sanitize → split lines → pick title / serving count → skip noise
                 → per line: sub-recipe? else ingredient line
                 → merge descriptive parentheses → flag specifications

    and returns a ParsedRecipe (final dish + sub-recipes + issues).

-------------------------------------------------------------------------------
Error policy:
    • Oversized input raises InputTooLarge before anything is parsed.
    • A bad line never raises. It is recorded as a ParseIssue on the supplied
      IssueCollector (errors skip the line, warnings keep it) and the rest of
      the recipe is still parsed.
    • ParsedRecipe.errors holds the human-readable messages of this call, in
      the order they were produced.

===============================================================================
"""
from __future__ import annotations

import logging
import re
from dataclasses import replace
from typing import List, Optional

from nutrilabel import errors as E
from nutrilabel import units
from nutrilabel.datasets import (
    IngredientEntry,
    ParsedIngredientLine,
    ParsedRecipe,
    SubRecipe,
    SubRecipeReference,
)
from nutrilabel.errors import IssueCollector
from nutrilabel.ingredient_parser import (
    MAX_NAME_LENGTH,
    has_parentheses,
    merge_descriptive_parentheses,
    parse_ingredient_line,
)
from nutrilabel.line_classifier import extract_serving_count, should_skip_line
from nutrilabel.sanitizer import sanitize_recipe_text
from nutrilabel.search_query import clean_ingredient_for_search
from nutrilabel.sub_recipe import SubRecipeMatch, detect_sub_recipe
from nutrilabel.taxonomy import resolve_specification

logger = logging.getLogger(__name__)

LARGE_QUANTITY_THRESHOLD = 100_000

_EXPLICIT_QUANTITY_RE = re.compile(r"^\s*[\d/.]")
_MASHED_LINE_RE = re.compile(r"\d+\s*(g|gram|oz|cup|tbsp|tsp|lb|kg|ml)", re.IGNORECASE)


def _unbalanced(line: str) -> bool:
    return line.count("(") != line.count(")")


def normalize_parentheses(parsed: ParsedIngredientLine) -> ParsedIngredientLine:
    """
    Merge parentheses into the name for the three shapes the line parser leaves:

        "4 tomatoes (fresh, diced)"        unit=tomatoes, name="(fresh, diced)"
        "2 tomatoes ripe (diced)"          unit is a noun, not a measurement
        "1 cup chicken (boneless, ...)"    real unit, parentheses in the name
    """
    name, unit = parsed.ingredient_name, parsed.unit
    if name.startswith("(") and name.endswith(")"):
        merged, unit = merge_descriptive_parentheses(f"{unit} {name}"), "item"
    elif has_parentheses(name) and not units.is_known_unit(unit):
        merged, unit = merge_descriptive_parentheses(f"{unit} {name}"), "item"
    elif has_parentheses(name):
        merged = merge_descriptive_parentheses(name)
    else:
        return parsed
    merged = merged[:MAX_NAME_LENGTH]
    return replace(parsed, unit=unit, ingredient_name=merged, search_query=clean_ingredient_for_search(merged))


def _check_line(parsed: ParsedIngredientLine, line: str, collector: IssueCollector) -> None:
    name = parsed.ingredient_name
    if parsed.quantity > LARGE_QUANTITY_THRESHOLD:
        collector.warning(
            E.LARGE_QUANTITY,
            f'Warning: Ingredient "{name}" has very large quantity ({parsed.quantity:g} {parsed.unit}). '
            "Please verify this is correct.",
            line,
        )
    if units.is_vague_unit(parsed.unit):
        collector.warning(
            E.VAGUE_UNIT,
            f'Warning: Ingredient "{name}" uses vague unit "{parsed.unit}". '
            'Consider using precise measurements like "cup", "tbsp", "oz".',
            line,
        )
    if parsed.unit == "item" and "item" not in line.lower():
        collector.warning(
            E.MISSING_UNIT,
            f'Warning: "{name}" has no unit specified. Defaulting to "item", which may affect '
            "nutrition calculations.",
            line,
        )


def _parse_regular_line(line: str, collector: IssueCollector) -> Optional[ParsedIngredientLine]:
    parsed = parse_ingredient_line(line)
    if parsed is None:
        collector.error(E.UNPARSEABLE_LINE, f'Failed to parse ingredient: "{line}"', line)
        return None
    parsed = normalize_parentheses(parsed)
    _check_line(parsed, line, collector)
    return resolve_specification(parsed)


def _build_sub_recipe(match: SubRecipeMatch, line: str, collector: IssueCollector,
                      existing: List[SubRecipe]) -> Optional[SubRecipe]:
    if match.has_nested_parentheses:
        collector.warning(
            E.NESTED_PARENTHESES,
            f'Warning: "{match.name}" contains nested parentheses. Only the outermost level is '
            "supported; inner parentheses are treated as regular text.",
            line,
        )

    members: List[ParsedIngredientLine] = []
    for item in match.items:
        parsed = parse_ingredient_line(item)
        if parsed is None:
            collector.error(
                E.UNPARSEABLE_LINE,
                f'Failed to parse sub-recipe ingredient in "{match.name}": "{item}"',
                line,
            )
            continue
        members.append(resolve_specification(normalize_parentheses(parsed)))

    missing = [m.ingredient_name for m in members if not _EXPLICIT_QUANTITY_RE.match(m.original_line)]
    if missing:
        collector.error(
            E.AMBIGUOUS_SUB_RECIPE_QUANTITY,
            f'Error: Sub-recipe "{match.name}" has ingredients without quantities: {", ".join(missing)}. '
            'Please add quantities for all sub-recipe ingredients (e.g., "1 cup", "2 tablespoons").',
            line,
        )
        return None

    if any(sr.name.lower() == match.name.lower() for sr in existing):
        collector.warning(
            E.DUPLICATE_SUB_RECIPE,
            f'Warning: Duplicate sub-recipe name "{match.name}". Each sub-recipe will be created separately.',
            line,
        )

    return SubRecipe(
        name=match.name,
        ingredients=tuple(members),
        quantity_in_final_dish=match.quantity,
        unit_in_final_dish=match.unit,
    )


def parse_recipe(
    text: str,
    collector: Optional[IssueCollector] = None,
    max_bytes: Optional[int] = None,
    max_lines: Optional[int] = None,
) -> ParsedRecipe:
    """
    Parse pasted recipe text into a ParsedRecipe.

    The first non-empty line is the dish title. Raises InputTooLarge for
    oversized input; every other problem is reported through `collector`.
    """
    collector = collector if collector is not None else IssueCollector()
    first_issue = len(collector)

    def _result(name: str, entries: List[IngredientEntry], subs: List[SubRecipe],
                servings: Optional[int]) -> ParsedRecipe:
        issues = collector.issues[first_issue:]
        return ParsedRecipe(
            final_dish_name=name,
            final_dish_ingredients=entries,
            sub_recipes=subs,
            errors=[i.message for i in issues],
            explicit_servings=servings,
            issues=issues,
        )

    sanitized = sanitize_recipe_text(text or "", max_bytes=max_bytes, max_lines=max_lines)
    lines = [l.strip() for l in sanitized.split("\n") if l.strip()]
    if not lines:
        collector.error(E.EMPTY_RECIPE, "Recipe text is empty")
        return _result("", [], [], None)

    servings = extract_serving_count(lines)
    title = lines[0]
    kept = [title] + [
        line for i, line in enumerate(lines[1:], start=1)
        if not should_skip_line(line, title, lines[i - 1])
    ]

    if len(kept) == 1:
        if len(_MASHED_LINE_RE.findall(title)) > 1:
            collector.error(
                E.SINGLE_LINE_RECIPE,
                "It looks like all ingredients are on ONE line. Put the recipe name on the first "
                "line and each ingredient on its own line.",
                title,
            )
        else:
            collector.error(
                E.NO_INGREDIENTS,
                "Recipe must have at least one ingredient. Add ingredients on separate lines after "
                "the recipe name.",
            )
        return _result(title, [], [], servings)

    entries: List[IngredientEntry] = []
    sub_recipes: List[SubRecipe] = []
    for line in kept[1:]:
        if _unbalanced(line):
            collector.error(
                E.UNBALANCED_PARENTHESES,
                f'Error: Line "{line}" has unbalanced parentheses ({line.count("(")} opening, '
                f'{line.count(")")} closing).',
                line,
            )
            continue

        match = detect_sub_recipe(line)
        if match is not None:
            sub = _build_sub_recipe(match, line, collector, sub_recipes)
            if sub is None:
                continue
            sub_recipes.append(sub)
            entries.append(SubRecipeReference(
                quantity=match.quantity,
                unit=match.unit,
                ingredient_name=match.name,
                original_line=line,
                sub_recipe=sub,
            ))
            continue

        parsed = _parse_regular_line(line, collector)
        if parsed is not None:
            entries.append(parsed)

    result = _result(title, entries, sub_recipes, servings)
    logger.info(
        "parsed %r: %d entries, %d sub-recipes, %d issues",
        title, len(entries), len(sub_recipes), len(result.issues),
    )
    return result
