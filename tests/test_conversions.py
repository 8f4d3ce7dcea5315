import pytest

from nutrilabel.conversions import (
    CUSTOM,
    EXACT,
    FALLBACK,
    PORTION,
    STANDARD,
    UNKNOWN_UNIT_GRAMS,
    convert_to_grams,
    estimate_grams,
    find_matching_portion,
    grams_for,
)
from nutrilabel.datasets import FoodPortion
from nutrilabel.errors import UnknownUnit

CUP_PORTION = FoodPortion(gram_weight=125.0, amount=1.0, measure_name="cup")


class TestConvertToGrams:
    def test_grams_are_exact(self):
        result = convert_to_grams(50, "g")
        assert (result.grams, result.source, result.confidence) == (50, EXACT, "high")

    def test_custom_conversion_wins_over_portion(self):
        result = convert_to_grams(2, "cup", "flour", ingredient_id="123",
                                  custom_conversions={"123:cup": 120.0}, portions=(CUP_PORTION,))
        assert (result.grams, result.source) == (240.0, CUSTOM)

    def test_custom_conversion_tuple_key_and_plural_unit(self):
        result = convert_to_grams(2, "cups", ingredient_id="123", custom_conversions={("123", "cup"): 100.0})
        assert result.grams == 200.0

    @pytest.mark.parametrize("factor", [0, 0.0, -5])
    def test_non_positive_custom_conversion_rejected(self, factor):
        with pytest.raises(ValueError):
            convert_to_grams(1, "cup", ingredient_id="123", custom_conversions={"123:cup": factor},
                             portions=(CUP_PORTION,))

    def test_zero_under_string_key_not_masked_by_tuple_key(self):
        with pytest.raises(ValueError):
            convert_to_grams(1, "cup", ingredient_id="123",
                             custom_conversions={"123:cup": 0, ("123", "cup"): 90.0})

    def test_portion_data(self):
        result = convert_to_grams(2, "cup", portions=(CUP_PORTION,))
        assert (result.grams, result.source, result.confidence) == (250.0, PORTION, "high")

    def test_portion_amount_divides(self):
        portion = FoodPortion(gram_weight=30.0, amount=2.0, measure_name="tbsp")
        assert grams_for(4, "tbsp", portions=(portion,)) == 60.0

    def test_standard_table(self):
        result = convert_to_grams(1, "tbsp")
        assert result.grams == pytest.approx(14.7868)
        assert (result.source, result.confidence) == (STANDARD, "medium")

    def test_unknown_unit_raises(self):
        with pytest.raises(UnknownUnit) as exc:
            convert_to_grams(2, "clove", "garlic")
        assert exc.value.unit == "clove"
        assert exc.value.ingredient == "garlic"


class TestFindMatchingPortion:
    def test_exact_match_preferred(self):
        sliced = FoodPortion(gram_weight=30.0, modifier="cup, sliced")
        assert find_matching_portion("cup", (sliced, CUP_PORTION)) is CUP_PORTION

    def test_substring_match(self):
        sliced = FoodPortion(gram_weight=30.0, modifier="cup, sliced")
        assert find_matching_portion("cup", (sliced,)) is sliced

    def test_no_match(self):
        assert find_matching_portion("clove", (CUP_PORTION,)) is None
        assert find_matching_portion("", (CUP_PORTION,)) is None


class TestEstimateGrams:
    def test_volume_as_water(self):
        result = estimate_grams(2, "cup")
        assert result.grams == pytest.approx(473.176)
        assert (result.source, result.confidence) == (FALLBACK, "low")

    def test_item(self):
        assert estimate_grams(2, "item").grams == 300.0

    def test_unknown_unit_default(self):
        assert estimate_grams(3, "blob").grams == 3 * UNKNOWN_UNIT_GRAMS
