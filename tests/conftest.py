import threading

import pytest

from nutrilabel.datasets import DatabaseFood, FoodPortion, NutrientProfile, SearchResult
from nutrilabel.errors import FoodDatabaseError


class FakeFoodDatabase:
    """In-memory stand-in for FoodDataCentralClient (search + get_by_id)."""

    def __init__(self, foods=(), failing_queries=()):
        self.foods = {f.fdc_id: f for f in foods}
        self.failing_queries = set(failing_queries)
        self.searches = []
        self._lock = threading.Lock()

    def search(self, query, limit=10):
        with self._lock:
            self.searches.append(query)
        if query in self.failing_queries:
            raise FoodDatabaseError(f"boom: {query}")
        words = query.lower().split()
        hits = [f for f in self.foods.values() if all(w in f.description.lower() for w in words)]
        return SearchResult(tuple(hits[:limit]), len(hits))

    def get_by_id(self, fdc_id):
        try:
            return self.foods[fdc_id]
        except KeyError:
            raise FoodDatabaseError(f"unknown food {fdc_id}")


@pytest.fixture
def flour_profile():
    return NutrientProfile(
        calories=364, total_fat=1.0, saturated_fat=0.2, sodium=2,
        total_carbohydrate=76.3, dietary_fiber=2.7, total_sugars=0.3, protein=10.3,
        calcium=15, iron=4.6, potassium=107,
    )


@pytest.fixture
def butter_profile():
    return NutrientProfile(
        calories=717, total_fat=81.1, saturated_fat=51.4, trans_fat=3.3, cholesterol=215,
        sodium=643, total_carbohydrate=0.1, total_sugars=0.1, protein=0.9, calcium=24,
        potassium=24, vitamin_a=684,
    )


@pytest.fixture
def flour_food(flour_profile):
    return DatabaseFood(
        fdc_id=169761,
        description="Wheat flour, white, all-purpose, enriched, bleached",
        data_type="SR Legacy",
        nutrients=flour_profile,
        portions=(FoodPortion(gram_weight=125.0, amount=1.0, measure_name="cup"),),
    )


@pytest.fixture
def butter_food(butter_profile):
    return DatabaseFood(
        fdc_id=173410,
        description="Butter, salted",
        data_type="SR Legacy",
        nutrients=butter_profile,
        portions=(FoodPortion(gram_weight=14.2, amount=1.0, measure_name="tbsp"),),
    )


@pytest.fixture
def fake_db(flour_food, butter_food):
    return FakeFoodDatabase([flour_food, butter_food])


@pytest.fixture
def simple_recipe_text():
    return "\n".join([
        "Butter Shortbread",
        "Serves 4",
        "Ingredients:",
        "2 cups flour",
        "4 tbsp butter",
        "Instructions",
        "Mix everything together and bake for twenty minutes until golden.",
    ])


@pytest.fixture
def salsa_recipe_text():
    return "\n".join([
        "Chicken Tacos",
        "1 cup salsa (2 tomato, 1 onion, 1 tbsp cilantro)",
        "1 chicken breast (boneless, skinless)",
        "2 tbsp olive oil",
    ])
