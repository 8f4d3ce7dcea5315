import pytest

from nutrilabel.errors import InputTooLarge
from nutrilabel.sanitizer import check_size, replace_unicode_fractions, sanitize_recipe_text, strip_markup


class TestFractions:
    def test_lone_fraction(self):
        """½ becomes 1/2."""
        assert replace_unicode_fractions("½ cup milk") == "1/2 cup milk"

    def test_mixed_number_keeps_whole_part(self):
        """1½ becomes '1 1/2' so the quantity parser sums both parts."""
        assert sanitize_recipe_text("1½ cups flour") == "1 1/2 cups flour"


class TestMarkup:
    def test_tags_and_entities(self):
        """HTML tags are dropped and entities decoded; line breaks survive."""
        text = "<p>2 cups flour</p>\n<p>1 tsp salt &amp; pepper</p>"
        assert sanitize_recipe_text(text) == "2 cups flour\n1 tsp salt & pepper"

    def test_plain_text_untouched(self):
        """Text without markup characters is returned as-is."""
        assert strip_markup("2 cups flour") == "2 cups flour"


class TestCleanup:
    def test_emoji_removed(self):
        """Pictographs disappear and spacing is collapsed."""
        assert sanitize_recipe_text("🍅  2 tomatoes") == "2 tomatoes"

    def test_zero_width_removed(self):
        """Zero-width spaces are invisible noise."""
        assert sanitize_recipe_text("2\u200b cups\ufeff sugar") == "2 cups sugar"

    def test_crlf_normalized(self):
        """Windows line endings become plain newlines."""
        assert sanitize_recipe_text("Soup\r\n1 cup broth\r\n") == "Soup\n1 cup broth"

    def test_empty(self):
        assert sanitize_recipe_text("") == ""


class TestSizeLimits:
    def test_too_many_bytes(self):
        """Byte limit is checked on the raw input."""
        with pytest.raises(InputTooLarge) as exc:
            check_size("a" * 11, max_bytes=10, max_lines=100)
        assert exc.value.size == 11
        assert exc.value.limit == 10

    def test_too_many_lines(self):
        """Line limit is checked as well."""
        with pytest.raises(InputTooLarge):
            sanitize_recipe_text("a\nb\nc", max_bytes=1000, max_lines=2)

    def test_within_limits(self):
        check_size("a\nb", max_bytes=10, max_lines=2)
