"""
Exception hierarchy and parse-issue records shared across the pipeline.

Fatal problems are raised as exceptions (the aggregation math cannot produce a
meaningful number). Problems with a single recipe line never raise: they are
recorded as ParseIssue values and handed back with the parse result.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional


class NutritionLabelError(Exception):
    """Base class for every error raised by nutrilabel."""


class InputTooLarge(NutritionLabelError):
    def __init__(self, size: int, limit: int, what: str = "bytes"):
        self.size = size
        self.limit = limit
        self.what = what
        super().__init__(
            f"Recipe text is too large ({size} {what}). Maximum is {limit} {what}. "
            "Please split it into multiple recipes."
        )


class UnknownUnit(NutritionLabelError):
    def __init__(self, ingredient: str, unit: str):
        self.ingredient = ingredient
        self.unit = unit
        super().__init__(
            f'Cannot convert unit "{unit}" for ingredient "{ingredient}". '
            "Please add a custom conversion or use grams."
        )


class ZeroWeight(NutritionLabelError):
    def __init__(self, message: str = "Cannot calculate nutrition: total weight is zero"):
        super().__init__(message)


class InvalidYield(NutritionLabelError):
    def __init__(self, multiplier: float):
        self.multiplier = multiplier
        super().__init__(
            f"Invalid yield multiplier: {multiplier}. "
            "Must be greater than 0 and at most 2 (0% to 200% of original weight)."
        )


class InvalidServingSize(NutritionLabelError):
    def __init__(self, size: float):
        self.size = size
        super().__init__(f"Serving size must be greater than 0 (got {size})")


class FoodDatabaseError(NutritionLabelError):
    """Raised by the food-database client once retries are exhausted."""


# ---- non-fatal parse issues ------------------------------------------------
UNPARSEABLE_LINE = "unparseable_line"
UNBALANCED_PARENTHESES = "unbalanced_parentheses"
AMBIGUOUS_SUB_RECIPE_QUANTITY = "ambiguous_sub_recipe_quantity"
NESTED_PARENTHESES = "nested_parentheses"
DUPLICATE_SUB_RECIPE = "duplicate_sub_recipe"
LARGE_QUANTITY = "large_quantity"
VAGUE_UNIT = "vague_unit"
MISSING_UNIT = "missing_unit"
EMPTY_RECIPE = "empty_recipe"
NO_INGREDIENTS = "no_ingredients"
SINGLE_LINE_RECIPE = "single_line_recipe"

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class ParseIssue:
    kind: str
    message: str
    line: str = ""
    severity: str = ERROR

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message, "line": self.line, "severity": self.severity}


class IssueCollector:
    """
    Collects ParseIssue records for one parse call.

    Pass an instance (or reuse one across calls) to parse_recipe() to observe
    issues as they are produced; the collected issues are also returned on the
    ParsedRecipe.
    """

    def __init__(self, issues: Optional[Iterable[ParseIssue]] = None):
        self._issues: List[ParseIssue] = list(issues or [])

    def error(self, kind: str, message: str, line: str = "") -> ParseIssue:
        return self.add(ParseIssue(kind, message, line, ERROR))

    def warning(self, kind: str, message: str, line: str = "") -> ParseIssue:
        return self.add(ParseIssue(kind, message, line, WARNING))

    def add(self, issue: ParseIssue) -> ParseIssue:
        self._issues.append(issue)
        return issue

    @property
    def issues(self) -> List[ParseIssue]:
        return list(self._issues)

    @property
    def messages(self) -> List[str]:
        return [i.message for i in self._issues]

    def __len__(self) -> int:
        return len(self._issues)

    def __iter__(self) -> Iterator[ParseIssue]:
        return iter(list(self._issues))
