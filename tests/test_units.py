from nutrilabel import units


class TestUnitLookup:
    def test_aliases_and_plurals(self):
        """Case, trailing periods and plurals all resolve to the canonical name."""
        assert units.canonical_unit("Tbsp.") == "tbsp"
        assert units.canonical_unit("cups") == "cup"
        assert units.canonical_unit("Tablespoons") == "tbsp"
        assert units.canonical_unit("lbs") == "lb"

    def test_unknown_unit(self):
        """Unknown tokens normalize but do not resolve."""
        assert units.find_unit("tomatoes") is None
        assert units.canonical_unit("Tomatoes") == "tomatoes"

    def test_gram_equivalents(self):
        assert units.grams_per_unit("cup") == 236.588
        assert units.grams_per_unit("oz") == 28.3495
        assert units.grams_per_unit("clove") is None

    def test_categories(self):
        assert units.is_measurement_unit("tsp")
        assert units.is_count_unit("clove")
        assert units.is_vague_unit("handful")
        assert units.is_gram_unit("grams")
        assert not units.is_gram_unit("kg")
