"""
===============================================================================
datasets.py — Core value objects (parsed lines, recipes, foods, profiles)
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Defines the dataclasses passed between the parser, the matcher and the
    nutrition calculator:
        • NutrientProfile: fixed, ordered set of nutrients per 100 g
        • ParsedIngredientLine / SubRecipeReference: the two shapes an entry
          of a parsed dish can take (tagged by `kind`)
        • SubRecipe / ParsedRecipe: parse results
        • FoodPortion / DatabaseFood / SearchResult: food-database records
        • MatchedIngredient: a parsed line plus its chosen database record
        • ConversionResult / DataQualityWarning / AggregationResult

Design Principles:
    • Everything produced by a pipeline step is frozen; a "change" returns a
      new object (dataclasses.replace), so nothing is overwritten silently.
    • Nutrient values are always per 100 g of the referent unless a function
      says otherwise (scale_to_serving, for example).
    • Each object offers `to_dict()` for JSON export.

===============================================================================
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from math import isclose
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Union

from nutrilabel.errors import ParseIssue

NUTRIENT_FIELDS: Tuple[str, ...] = (
    # macronutrients
    "calories", "total_fat", "saturated_fat", "trans_fat", "cholesterol", "sodium",
    "total_carbohydrate", "dietary_fiber", "total_sugars", "added_sugars", "protein",
    # vitamins
    "vitamin_d", "vitamin_a", "vitamin_c", "vitamin_e", "vitamin_k", "thiamin",
    "riboflavin", "niacin", "vitamin_b6", "folate", "vitamin_b12",
    # minerals
    "calcium", "iron", "magnesium", "phosphorus", "potassium", "zinc", "copper",
    "manganese", "selenium",
)

NUTRIENT_UNITS: Dict[str, str] = {
    "calories": "kcal",
    "total_fat": "g", "saturated_fat": "g", "trans_fat": "g",
    "cholesterol": "mg", "sodium": "mg",
    "total_carbohydrate": "g", "dietary_fiber": "g", "total_sugars": "g", "added_sugars": "g",
    "protein": "g",
    "vitamin_d": "mcg", "vitamin_a": "mcg", "vitamin_c": "mg", "vitamin_e": "mg",
    "vitamin_k": "mcg", "thiamin": "mg", "riboflavin": "mg", "niacin": "mg",
    "vitamin_b6": "mg", "folate": "mcg", "vitamin_b12": "mcg",
    "calcium": "mg", "iron": "mg", "magnesium": "mg", "phosphorus": "mg",
    "potassium": "mg", "zinc": "mg", "copper": "mg", "manganese": "mg", "selenium": "mcg",
}


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(p[:1].upper() + p[1:] for p in rest)


_CAMEL_TO_FIELD = {_camel(n): n for n in NUTRIENT_FIELDS}
_CAMEL_TO_FIELD.update({"vitaminB6": "vitamin_b6", "vitaminB12": "vitamin_b12"})


@dataclass(frozen=True)
class NutrientProfile:
    calories: float = 0.0
    total_fat: float = 0.0
    saturated_fat: float = 0.0
    trans_fat: float = 0.0
    cholesterol: float = 0.0
    sodium: float = 0.0
    total_carbohydrate: float = 0.0
    dietary_fiber: float = 0.0
    total_sugars: float = 0.0
    added_sugars: float = 0.0
    protein: float = 0.0
    vitamin_d: float = 0.0
    vitamin_a: float = 0.0
    vitamin_c: float = 0.0
    vitamin_e: float = 0.0
    vitamin_k: float = 0.0
    thiamin: float = 0.0
    riboflavin: float = 0.0
    niacin: float = 0.0
    vitamin_b6: float = 0.0
    folate: float = 0.0
    vitamin_b12: float = 0.0
    calcium: float = 0.0
    iron: float = 0.0
    magnesium: float = 0.0
    phosphorus: float = 0.0
    potassium: float = 0.0
    zinc: float = 0.0
    copper: float = 0.0
    manganese: float = 0.0
    selenium: float = 0.0

    @classmethod
    def zero(cls) -> "NutrientProfile":
        return cls()

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NutrientProfile":
        """Build from snake_case or camelCase keys; unknown keys are ignored, missing ones are 0."""
        values: Dict[str, float] = {}
        for key, raw in (data or {}).items():
            name = key if key in NUTRIENT_FIELDS else _CAMEL_TO_FIELD.get(key)
            if name is None:
                continue
            values[name] = float(raw or 0.0)
        return cls(**values)

    def get(self, name: str) -> float:
        return getattr(self, name)

    def items(self) -> List[Tuple[str, float]]:
        return [(n, getattr(self, n)) for n in NUTRIENT_FIELDS]

    def scaled(self, factor: float) -> "NutrientProfile":
        return NutrientProfile(**{n: v * factor for n, v in self.items()})

    def __add__(self, other: "NutrientProfile") -> "NutrientProfile":
        return NutrientProfile(**{n: getattr(self, n) + getattr(other, n) for n in NUTRIENT_FIELDS})

    def to_dict(self) -> Dict[str, float]:
        return {n: v for n, v in self.items()}


@dataclass(frozen=True)
class DataQualityWarning:
    kind: str
    message: str
    field: Optional[str] = None
    original_value: Optional[float] = None
    corrected_value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "field": self.field,
            "original_value": self.original_value,
            "corrected_value": self.corrected_value,
        }


# ================== Parse results ==================
@dataclass(frozen=True)
class ParsedIngredientLine:
    quantity: float
    unit: str
    ingredient_name: str
    original_line: str
    needs_specification: bool = False
    base_ingredient: Optional[str] = None
    specification_options: Tuple[str, ...] = ()
    specification_prompt: Optional[str] = None
    search_query: str = ""

    kind: ClassVar[str] = "ingredient"
    is_sub_recipe: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "quantity": self.quantity,
            "unit": self.unit,
            "ingredient_name": self.ingredient_name,
            "original_line": self.original_line,
            "is_sub_recipe": False,
            "needs_specification": self.needs_specification,
            "base_ingredient": self.base_ingredient,
            "specification_options": list(self.specification_options),
            "specification_prompt": self.specification_prompt,
            "search_query": self.search_query,
        }


@dataclass(frozen=True)
class SubRecipe:
    """A named group of ingredients; every member line carries an explicit quantity."""
    name: str
    ingredients: Tuple[ParsedIngredientLine, ...]
    quantity_in_final_dish: float
    unit_in_final_dish: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "quantity_in_final_dish": self.quantity_in_final_dish,
            "unit_in_final_dish": self.unit_in_final_dish,
        }


@dataclass(frozen=True)
class SubRecipeReference:
    """Placeholder line in a parent dish pointing at a SubRecipe."""
    quantity: float
    unit: str
    ingredient_name: str
    original_line: str
    sub_recipe: SubRecipe

    kind: ClassVar[str] = "sub_recipe"
    is_sub_recipe: ClassVar[bool] = True
    needs_specification: ClassVar[bool] = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "quantity": self.quantity,
            "unit": self.unit,
            "ingredient_name": self.ingredient_name,
            "original_line": self.original_line,
            "is_sub_recipe": True,
            "sub_recipe": self.sub_recipe.name,
        }


IngredientEntry = Union[ParsedIngredientLine, SubRecipeReference]


@dataclass
class ParsedRecipe:
    final_dish_name: str
    final_dish_ingredients: List[IngredientEntry] = field(default_factory=list)
    sub_recipes: List[SubRecipe] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    explicit_servings: Optional[int] = None
    issues: List[ParseIssue] = field(default_factory=list)

    def ingredient_lines(self) -> List[ParsedIngredientLine]:
        """Every real ingredient line: final-dish lines first, then sub-recipe members."""
        out = [e for e in self.final_dish_ingredients if not e.is_sub_recipe]
        for sr in self.sub_recipes:
            out.extend(sr.ingredients)
        return out

    def needing_specification(self) -> List[ParsedIngredientLine]:
        return [line for line in self.ingredient_lines() if line.needs_specification]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "final_dish_name": self.final_dish_name,
            "final_dish_ingredients": [e.to_dict() for e in self.final_dish_ingredients],
            "sub_recipes": [s.to_dict() for s in self.sub_recipes],
            "errors": list(self.errors),
            "explicit_servings": self.explicit_servings,
            "issues": [i.to_dict() for i in self.issues],
        }


# ================== Food database records ==================
@dataclass(frozen=True)
class FoodPortion:
    gram_weight: float
    amount: float = 1.0
    modifier: str = ""
    measure_name: str = ""
    abbreviation: str = ""
    portion_id: Optional[int] = None

    @property
    def grams_per_unit(self) -> float:
        return self.gram_weight / (self.amount or 1.0)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.portion_id,
            "amount": self.amount,
            "gram_weight": self.gram_weight,
            "modifier": self.modifier,
            "measure_name": self.measure_name,
            "abbreviation": self.abbreviation,
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "FoodPortion":
        return cls(
            gram_weight=float(d.get("gram_weight", 100.0)),
            amount=float(d.get("amount", 1.0)),
            modifier=d.get("modifier", "") or "",
            measure_name=d.get("measure_name", "") or "",
            abbreviation=d.get("abbreviation", "") or "",
            portion_id=d.get("id"),
        )


@dataclass(frozen=True)
class DatabaseFood:
    fdc_id: Union[int, str]
    description: str
    data_type: str
    nutrients: NutrientProfile
    portions: Tuple[FoodPortion, ...] = ()
    brand_owner: Optional[str] = None
    warnings: Tuple[DataQualityWarning, ...] = ()

    @classmethod
    def from_profile(cls, name: str, profile: NutrientProfile, data_type: str = "Sub-recipe") -> "DatabaseFood":
        """Wrap a computed per-100 g profile (e.g. a sub-recipe) so it can feed a parent dish."""
        return cls(fdc_id=f"sub-recipe:{name.strip().lower()}", description=name, data_type=data_type, nutrients=profile)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fdc_id": self.fdc_id,
            "description": self.description,
            "data_type": self.data_type,
            "nutrients": self.nutrients.to_dict(),
            "portions": [p.to_dict() for p in self.portions],
            "brand_owner": self.brand_owner,
            "warnings": [w.to_dict() for w in self.warnings],
        }

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "DatabaseFood":
        return cls(
            fdc_id=d["fdc_id"],
            description=d.get("description", ""),
            data_type=d.get("data_type", "Unknown"),
            nutrients=NutrientProfile.from_mapping(d.get("nutrients") or {}),
            portions=tuple(FoodPortion.from_dict(p) for p in d.get("portions") or ()),
            brand_owner=d.get("brand_owner"),
            warnings=tuple(DataQualityWarning(**w) for w in d.get("warnings") or ()),
        )


@dataclass(frozen=True)
class SearchResult:
    foods: Tuple[DatabaseFood, ...]
    total_hits: int = 0


# ================== Matching & aggregation ==================
AUTO = "auto"
UNMATCHED = "unmatched"
CONFIRMED = "confirmed"
OVERRIDDEN = "overridden"
SKIPPED = "skipped"


@dataclass(frozen=True)
class MatchedIngredient:
    """
    A parsed line plus the database record chosen for it (None = no nutrition).

    Only accept(), override() and skip() change the choice, and each returns
    a new object.
    """
    line: IngredientEntry
    food: Optional[DatabaseFood]
    status: str = AUTO
    search_query: str = ""
    score: Optional[float] = None

    @property
    def name(self) -> str:
        return self.line.ingredient_name

    @property
    def quantity(self) -> float:
        return self.line.quantity

    @property
    def unit(self) -> str:
        return self.line.unit

    @property
    def ingredient_id(self) -> Optional[str]:
        return None if self.food is None else str(self.food.fdc_id)

    def accept(self) -> "MatchedIngredient":
        return replace(self, status=CONFIRMED)

    def override(self, food: DatabaseFood) -> "MatchedIngredient":
        return replace(self, food=food, status=OVERRIDDEN, score=None)

    def skip(self) -> "MatchedIngredient":
        return replace(self, food=None, status=SKIPPED, score=None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "line": self.line.to_dict(),
            "food": None if self.food is None else {
                "fdc_id": self.food.fdc_id,
                "description": self.food.description,
                "data_type": self.food.data_type,
            },
            "status": self.status,
            "search_query": self.search_query,
            "score": self.score,
        }


@dataclass(frozen=True)
class ConversionResult:
    grams: float
    source: str        # exact | custom | portion | standard | fallback
    confidence: str    # high | medium | low


@dataclass(frozen=True)
class AggregationResult:
    profile: NutrientProfile
    total_weight_g: float
    warnings: Tuple[DataQualityWarning, ...] = ()
    breakdown: Tuple[Dict[str, Any], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "total_weight_g": self.total_weight_g,
            "warnings": [w.to_dict() for w in self.warnings],
            "breakdown": [dict(b) for b in self.breakdown],
        }


def profiles_close(a: NutrientProfile, b: NutrientProfile, rel: float = 1e-9, abs_tol: float = 1e-9) -> bool:
    """Field-wise float comparison."""
    return all(isclose(x, y, rel_tol=rel, abs_tol=abs_tol) for (_, x), (_, y) in zip(a.items(), b.items()))

