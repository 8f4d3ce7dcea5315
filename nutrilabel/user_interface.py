# user_interface.py
import logging
import re
from dataclasses import replace
from typing import Callable, Dict, Optional

from nutrilabel.datasets import ParsedIngredientLine, ParsedRecipe, SubRecipe, SubRecipeReference
from nutrilabel.taxonomy import DEFAULT_VARIETY_SIZE, apply_specification

logger = logging.getLogger(__name__)

MIN_ALPHA = 3
_URL_RE = re.compile(r"https?://\S+|www\.\S+", re.I)

Chooser = Callable[[ParsedIngredientLine], Optional[str]]


def _count_letters(s: str) -> int:
    return sum(ch.isalpha() for ch in s)


def _count_digits(s: str) -> int:
    return sum(ch.isdigit() for ch in s)


def is_likely_recipe_text(text: str) -> bool:
    """Cheap pre-check before parsing: rejects empty, URL-only and digit-dominated input."""
    if not text:
        return False
    s = text.strip()
    without_urls = _URL_RE.sub("", s).strip()
    if not without_urls:
        return False
    if _count_letters(without_urls) < MIN_ALPHA:
        return False
    if _count_digits(without_urls) > _count_letters(without_urls):
        return False
    return True


def resolve_specifications(parsed: ParsedRecipe, choose: Chooser) -> ParsedRecipe:
    """
    Apply `choose(line)` to every line that needs a size/variety choice.

    `choose` returns the variety text, or None for the default. Sub-recipe
    members are resolved too and the references in the final dish are
    pointed at the updated sub-recipes.
    """
    def _resolve(line: ParsedIngredientLine) -> ParsedIngredientLine:
        if not line.needs_specification:
            return line
        return apply_specification(line, choose(line))

    # keyed by identity: sub-recipes may share a name
    new_subs: Dict[int, SubRecipe] = {}
    for sr in parsed.sub_recipes:
        new_subs[id(sr)] = replace(sr, ingredients=tuple(_resolve(i) for i in sr.ingredients))

    entries = []
    for entry in parsed.final_dish_ingredients:
        if isinstance(entry, SubRecipeReference):
            entries.append(replace(entry, sub_recipe=new_subs.get(id(entry.sub_recipe), entry.sub_recipe)))
        else:
            entries.append(_resolve(entry))

    return replace(
        parsed,
        final_dish_ingredients=entries,
        sub_recipes=[new_subs[id(sr)] for sr in parsed.sub_recipes],
    )


def apply_default_specifications(parsed: ParsedRecipe) -> ParsedRecipe:
    return resolve_specifications(parsed, lambda line: None)


def prompt_specifications(
    parsed: ParsedRecipe,
    input_fn: Callable[[str], str] = input,
    output_fn: Callable[[str], None] = print,
) -> ParsedRecipe:
    """Ask in the terminal, one flagged line at a time. Enter (or EOF) keeps the default."""
    def _ask(line: ParsedIngredientLine) -> Optional[str]:
        options = list(line.specification_options)
        default = f"{DEFAULT_VARIETY_SIZE} {line.base_ingredient}"
        output_fn(f'"{line.original_line.strip()}"')
        output_fn(line.specification_prompt or f"Which {line.base_ingredient}?")
        for i, opt in enumerate(options, start=1):
            output_fn(f"  {i}) {opt}")
        try:
            answer = input_fn(f"Choose 1-{len(options)} or type a variety (Enter for {default}): ").strip()
        except EOFError:
            answer = ""
        if not answer:
            return None
        if answer.isdigit():
            idx = int(answer)
            if 1 <= idx <= len(options):
                return options[idx - 1]
            output_fn(f"⚠️ {idx} is not an option, using {default}")
            return None
        return answer

    if not parsed.needing_specification():
        return parsed
    resolved = resolve_specifications(parsed, _ask)
    logger.info("resolved %d ingredient specification(s)", len(parsed.needing_specification()))
    return resolved
