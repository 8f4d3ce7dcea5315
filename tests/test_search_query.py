from nutrilabel.search_query import MAX_QUERY_LENGTH, MAX_VARIANTS, clean_ingredient_for_search, generate_search_variants


class TestCleanIngredientForSearch:
    def test_symbols_and_parentheses(self):
        assert clean_ingredient_for_search("Boneless/Skinless Chicken Breast (organic)") == \
            "boneless skinless chicken breast"

    def test_descriptors_removed(self):
        assert clean_ingredient_for_search("Fresh Basil, chopped") == "basil"

    def test_ampersand(self):
        assert clean_ingredient_for_search("salt & pepper") == "salt and pepper"

    def test_decimal_point_kept(self):
        assert clean_ingredient_for_search("milk 2.5%") == "milk 2.5"

    def test_all_stripped_falls_back(self):
        assert clean_ingredient_for_search("Fresh") == "fresh"

    def test_truncated(self):
        assert len(clean_ingredient_for_search("x" * 500)) == MAX_QUERY_LENGTH

    def test_non_string(self):
        assert clean_ingredient_for_search("") == ""
        assert clean_ingredient_for_search(None) == ""


class TestGenerateSearchVariants:
    def test_first_variant_is_cleaned_name(self):
        assert generate_search_variants("Fresh Basil, chopped")[0] == "basil"

    def test_synonym_variant(self):
        variants = generate_search_variants("cilantro")
        assert variants[0] == "cilantro"
        assert "coriander leaves" in variants

    def test_tail_words_and_plural_flip(self):
        variants = generate_search_variants("boneless skinless chicken breast")
        assert "chicken breast" in variants
        assert "breast" in variants
        assert "boneless skinless chicken breasts" in variants

    def test_no_duplicates_and_capped(self):
        variants = generate_search_variants("extra virgin olive oil, cold pressed; imported from italy")
        assert len(variants) == len(set(variants))
        assert len(variants) <= MAX_VARIANTS

    def test_empty(self):
        assert generate_search_variants("") == []
