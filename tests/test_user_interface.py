import pytest

from nutrilabel.recipe_parser import parse_recipe
from nutrilabel.user_interface import (
    apply_default_specifications,
    is_likely_recipe_text,
    prompt_specifications,
    resolve_specifications,
)


def _answers(*values):
    it = iter(values)

    def _input(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError
    return _input


def _salsa_names(parsed):
    return [line.ingredient_name for line in parsed.sub_recipes[0].ingredients]


class TestIsLikelyRecipeText:
    @pytest.mark.parametrize("text", ["", "   ", "https://example.com/recipes/123", "12 34 ab", "1 2 3 4 5 abc"])
    def test_rejected(self, text):
        assert not is_likely_recipe_text(text)

    def test_recipe_accepted(self, simple_recipe_text):
        assert is_likely_recipe_text(simple_recipe_text)

    def test_url_with_recipe_accepted(self, simple_recipe_text):
        assert is_likely_recipe_text("https://example.com/shortbread\n" + simple_recipe_text)


class TestPromptSpecifications:
    def test_choices_applied(self, salsa_recipe_text):
        printed = []
        parsed = prompt_specifications(parse_recipe(salsa_recipe_text), _answers("1", ""), printed.append)
        assert _salsa_names(parsed) == ["cherry tomato", "medium onion", "cilantro"]
        assert parsed.needing_specification() == []
        assert parsed.final_dish_ingredients[0].sub_recipe is parsed.sub_recipes[0]
        assert '"2 tomato"' in printed
        assert "  1) cherry tomato" in printed

    def test_eof_uses_defaults(self, salsa_recipe_text):
        parsed = prompt_specifications(parse_recipe(salsa_recipe_text), _answers(), lambda s: None)
        assert _salsa_names(parsed)[:2] == ["medium tomato", "medium onion"]

    def test_out_of_range_number(self, salsa_recipe_text):
        printed = []
        parsed = prompt_specifications(parse_recipe(salsa_recipe_text), _answers("99", "99"), printed.append)
        assert _salsa_names(parsed)[0] == "medium tomato"
        assert "⚠️ 99 is not an option, using medium tomato" in printed

    def test_free_text_variety(self, salsa_recipe_text):
        parsed = prompt_specifications(parse_recipe(salsa_recipe_text), _answers("vidalia tomato", "2"),
                                       lambda s: None)
        assert _salsa_names(parsed)[:2] == ["vidalia tomato", "medium onion"]

    def test_nothing_to_ask(self, simple_recipe_text):
        parsed = parse_recipe(simple_recipe_text)

        def _never(prompt):
            raise AssertionError("should not prompt")
        assert prompt_specifications(parsed, _never) is parsed


class TestDefaults:
    def test_all_flags_cleared(self, salsa_recipe_text):
        parsed = apply_default_specifications(parse_recipe(salsa_recipe_text))
        assert parsed.needing_specification() == []
        assert _salsa_names(parsed)[:2] == ["medium tomato", "medium onion"]

    def test_final_dish_lines_resolved(self):
        parsed = resolve_specifications(parse_recipe("Roast\n3 potato\n1 tbsp oil"), lambda line: "red potato")
        assert parsed.final_dish_ingredients[0].ingredient_name == "red potato"
        assert parsed.final_dish_ingredients[0].unit == "item"


class TestSameNamedSubRecipes:
    def test_kept_apart_when_resolved(self):
        text = "Plate\n1 cup sauce (2 tbsp butter, 1 tsp salt)\n1 cup sauce (1 cup flour, 2 tbsp butter)"
        parsed = apply_default_specifications(parse_recipe(text))
        first, second = parsed.sub_recipes
        assert [line.ingredient_name for line in first.ingredients] == ["butter", "salt"]
        assert [line.ingredient_name for line in second.ingredients] == ["flour", "butter"]
        refs = parsed.final_dish_ingredients
        assert refs[0].sub_recipe is first
        assert refs[1].sub_recipe is second
