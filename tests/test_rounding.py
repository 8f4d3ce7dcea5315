import pytest

from nutrilabel.datasets import NutrientProfile
from nutrilabel.rounding import (
    FDA_DAILY_VALUES,
    build_label,
    format_nutrient,
    percent_daily_value,
    round_calcium,
    round_calories,
    round_cholesterol,
    round_iron,
    round_protein,
    round_saturated_fat,
    round_sodium,
    round_total_fat,
    round_trans_fat,
    round_vitamin_d,
)


class TestRoundingRules:
    @pytest.mark.parametrize("mg, expected", [(3, "0 mg"), (100, "100 mg"), (250, "250 mg"),
                                              (143, "140 mg"), (145, "150 mg"), (52, "50 mg")])
    def test_sodium(self, mg, expected):
        assert round_sodium(mg) == expected

    @pytest.mark.parametrize("kcal, expected", [(4, "0"), (47, "45"), (50, "50"), (51, "50"),
                                                (123, "120"), (125, "130")])
    def test_calories(self, kcal, expected):
        assert round_calories(kcal) == expected

    def test_total_fat(self):
        assert round_total_fat(0.4) == "0 g"
        assert round_total_fat(2.3) == "2.5 g"
        assert round_total_fat(4.74) == "4.5 g"
        assert round_total_fat(7.5) == "8 g"

    def test_saturated_fat(self):
        assert round_saturated_fat(0.3) == "0 g"
        assert round_saturated_fat(0.7) == "Less than 1 g"
        assert round_saturated_fat(1.2) == "1.0 g"
        assert round_saturated_fat(3.3) == "3.5 g"

    def test_trans_fat(self):
        assert round_trans_fat(0.2) == "0 g"
        assert round_trans_fat(0.6) == "0.5 g"

    def test_cholesterol(self):
        assert round_cholesterol(1) == "0 mg"
        assert round_cholesterol(3) == "Less than 5 mg"
        assert round_cholesterol(22) == "20 mg"

    def test_gram_nutrients(self):
        assert round_protein(0.2) == "0 g"
        assert round_protein(0.7) == "Less than 1 g"
        assert round_protein(12.5) == "13 g"

    def test_micronutrients(self):
        assert round_vitamin_d(0.05) == "0 mcg"
        assert round_vitamin_d(2.44) == "2.4 mcg"
        assert round_calcium(3) == "0 mg"
        assert round_calcium(126) == "130 mg"
        assert round_iron(0.3) == "0 mg"
        assert round_iron(4.56) == "4.6 mg"


class TestDailyValue:
    def test_percent(self):
        assert percent_daily_value(1150, FDA_DAILY_VALUES["sodium"]) == "50%"
        assert percent_daily_value(8, FDA_DAILY_VALUES["total_fat"]) == "10%"

    def test_zero(self):
        assert percent_daily_value(0, 78) == "0%"
        assert percent_daily_value(10, 0) == "0%"

    def test_format_with_dv(self):
        assert format_nutrient("sodium", 250) == {"display": "250 mg", "percent_dv": "11%"}

    def test_format_without_rule(self):
        assert format_nutrient("vitamin_c", 12.34) == {"display": "12.3 mg", "percent_dv": None}


class TestBuildLabel:
    def test_label_lines(self):
        per_serving = NutrientProfile(calories=230, total_fat=8, saturated_fat=1, sodium=160,
                                      total_carbohydrate=37, dietary_fiber=4, total_sugars=12, protein=3)
        label = build_label(per_serving, 55, 8)
        assert label["calories"] == "230"
        assert label["serving_size"] == "55 g"
        assert label["servings_per_container"] == 8
        first = label["lines"][0]
        assert (first["nutrient"], first["display"], first["percent_dv"]) == ("total_fat", "8 g", "10%")
        by_name = {line["nutrient"]: line for line in label["lines"]}
        assert by_name["sodium"]["display"] == "160 mg"
        assert by_name["sodium"]["percent_dv"] == "7%"
        assert by_name["total_sugars"]["percent_dv"] is None
        assert [line["nutrient"] for line in label["lines"]][-1] == "potassium"
