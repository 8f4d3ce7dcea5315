from dataclasses import replace

from conftest import FakeFoodDatabase
from nutrilabel.datasets import AUTO, UNMATCHED, ParsedIngredientLine, SearchResult, SubRecipe, SubRecipeReference
from nutrilabel.matcher import match_line, resolve_all, resolve_ingredient


def _line(name, quantity=1.0, unit="cup"):
    return ParsedIngredientLine(quantity, unit, name, f"{quantity} {unit} {name}", search_query=name)


class DetailsUnavailable(FakeFoodDatabase):
    """Search returns a hit whose id get_by_id does not know."""

    def search(self, query, limit=10):
        found = super().search(query, limit)
        return SearchResult(tuple(replace(f, fdc_id=-1) for f in found.foods), found.total_hits)


class TestResolveIngredient:
    def test_first_variant_hits(self, fake_db, flour_food):
        res = resolve_ingredient("flour", fake_db)
        assert res.food == flour_food
        assert res.variant_used == "flour"
        assert res.attempt_number == 1
        assert res.variants_tried == ("flour",)

    def test_nothing_found(self, fake_db):
        assert resolve_ingredient("zzz", fake_db) is None

    def test_failed_search_falls_through(self, flour_food, butter_food):
        db = FakeFoodDatabase([flour_food, butter_food], failing_queries={"butter"})
        res = resolve_ingredient("salted butter", db)
        assert res.attempt_number == 2
        assert res.variant_used == "salted butter"
        assert db.searches[:2] == ["butter", "salted butter"]

    def test_search_hit_used_when_details_fail(self, flour_food):
        res = resolve_ingredient("flour", DetailsUnavailable([flour_food]))
        assert res.food.fdc_id == -1
        assert res.food.description == flour_food.description


class TestMatchLine:
    def test_matched(self, fake_db, butter_food):
        m = match_line(_line("butter", 4, "tbsp"), fake_db)
        assert m.food == butter_food
        assert m.status == AUTO
        assert m.search_query == "butter"
        assert m.ingredient_id == "173410"

    def test_unmatched(self, fake_db):
        m = match_line(_line("dragon fruit"), fake_db)
        assert m.food is None
        assert m.status == UNMATCHED

    def test_sub_recipe_not_searched(self, fake_db):
        sub = SubRecipe("salsa", (_line("tomato", 2, "item"),), 1.0, "cup")
        ref = SubRecipeReference(1.0, "cup", "salsa", "1 cup salsa (2 tomato)", sub)
        m = match_line(ref, fake_db)
        assert m.status == UNMATCHED
        assert fake_db.searches == []

    def test_choice_changes_return_new_objects(self, fake_db, flour_food):
        m = match_line(_line("butter", 4, "tbsp"), fake_db)
        assert m.accept().status == "confirmed"
        assert m.override(flour_food).food == flour_food
        skipped = m.skip()
        assert skipped.food is None and skipped.status == "skipped"
        assert m.status == AUTO


class TestResolveAll:
    def test_keeps_input_order(self, fake_db):
        names = ["butter", "flour", "zzz", "flour", "butter"]
        results = resolve_all([_line(n) for n in names], fake_db, max_workers=4)
        assert [m.name for m in results] == names
        assert [m.food is None for m in results] == [False, False, True, False, False]

    def test_empty(self, fake_db):
        assert resolve_all([], fake_db) == []
