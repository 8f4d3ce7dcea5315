from nutrilabel.sub_recipe import (
    DESCRIPTOR_LIKE,
    INGREDIENT_LIKE,
    classify_item,
    detect_sub_recipe,
    find_trailing_group,
    is_bare_measurement,
    split_top_level,
)


class TestDetectSubRecipe:
    def test_ingredient_list_is_a_sub_recipe(self):
        match = detect_sub_recipe("1 cup salsa (2 tomato, 1 onion, 1 tbsp cilantro)")
        assert match is not None
        assert (match.quantity, match.unit, match.name) == (1.0, "cup", "salsa")
        assert match.items == ("2 tomato", "1 onion", "1 tbsp cilantro")
        assert not match.has_nested_parentheses

    def test_descriptors_are_not_a_sub_recipe(self):
        assert detect_sub_recipe("1 chicken breast (boneless, skinless)") is None

    def test_informational_parenthetical(self):
        assert detect_sub_recipe("2 cups flour (about 250 g)") is None
        assert detect_sub_recipe("1 tsp salt (to taste)") is None

    def test_single_bare_item(self):
        assert detect_sub_recipe("1 cup rice (cooked)") is None
        assert detect_sub_recipe("1 can tomatoes (14 oz)") is None

    def test_food_words_without_quantities(self):
        """Still a sub-recipe; the parser rejects it later for missing quantities."""
        match = detect_sub_recipe("1 cup sauce (butter, garlic)")
        assert match is not None
        assert match.items == ("butter", "garlic")

    def test_nested_parentheses_flagged(self):
        match = detect_sub_recipe("1 cup dressing (2 tbsp oil (extra virgin), 1 tbsp vinegar)")
        assert match is not None
        assert match.has_nested_parentheses
        assert match.items == ("2 tbsp oil (extra virgin)", "1 tbsp vinegar")

    def test_no_trailing_group(self):
        assert detect_sub_recipe("2 cups flour") is None
        assert detect_sub_recipe("(2 tomato, 1 onion)") is None


class TestHelpers:
    def test_find_trailing_group_outermost(self):
        assert find_trailing_group("a (b (c))") == (2, 8)
        assert find_trailing_group("a (b) c") is None

    def test_split_top_level(self):
        assert split_top_level("1 cup x, 2 tbsp y (a, b), salt") == ["1 cup x", "2 tbsp y (a, b)", "salt"]

    def test_classify_item(self):
        assert classify_item("2 cups") == INGREDIENT_LIKE
        assert classify_item("tomatoes") == INGREDIENT_LIKE
        assert classify_item("fresh") == DESCRIPTOR_LIKE
        assert classify_item("zesty") == DESCRIPTOR_LIKE
        assert classify_item("fresh basil") == DESCRIPTOR_LIKE
        assert classify_item("a very unusual thing") is None

    def test_is_bare_measurement(self):
        assert is_bare_measurement("1 1/2 cups")
        assert is_bare_measurement("thinly sliced")
        assert not is_bare_measurement("three ripe heirloom tomatoes")
