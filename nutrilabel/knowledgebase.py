"""
===============================================================================
knowledgebase.py — Static vocabularies for recipe-text parsing and search
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Centralizes every hand-curated word list the parser, the sub-recipe
    detector and the search-query builder depend on, so the heuristics that
    use them stay small and the lists can be reviewed in one place.

-------------------------------------------------------------------------------
Contents:
    • UNICODE_FRACTIONS: vulgar fraction glyph → ASCII fraction text
    • INFORMATIONAL_PREFIXES: words opening a purely informational
      parenthetical ("about 1 cup", "optional", "to taste", ...)
    • COLOR_WORDS / PREP_WORDS / BODY_PART_WORDS: descriptor classes used
      when merging "(boneless, skinless breast)" into an ingredient name
    • SUB_RECIPE_FOOD_WORDS / SUB_RECIPE_DESCRIPTOR_WORDS: ingredient-like vs
      descriptor-like vocabulary for sub-recipe detection
    • SEARCH_DESCRIPTORS: cooking descriptors removed from search queries
    • SEARCH_SUBSTITUTIONS: rewrites that match FoodData Central naming
    • SYNONYMS: regional / alternate ingredient names → database wording

-------------------------------------------------------------------------------
Design Principles:
    • English only, lowercase, one-directional mappings (alias → canonical).
    • Membership is deliberately fixed: parser tests pin these lists.
    • No dependencies; safe to import anywhere.

===============================================================================
"""

UNICODE_FRACTIONS = {
    "½": "1/2",
    "⅓": "1/3",
    "⅔": "2/3",
    "¼": "1/4",
    "¾": "3/4",
    "⅕": "1/5",
    "⅖": "2/5",
    "⅗": "3/5",
    "⅘": "4/5",
    "⅙": "1/6",
    "⅚": "5/6",
    "⅐": "1/7",
    "⅛": "1/8",
    "⅜": "3/8",
    "⅝": "5/8",
    "⅞": "7/8",
    "⅑": "1/9",
    "⅒": "1/10",
}

INFORMATIONAL_PREFIXES = (
    "about", "approximately", "approx", "roughly", "around", "optional",
    "to taste", "as needed", "or more", "or less", "plus more", "divided",
)

# ---- parenthesis merge descriptor classes ---------------------------------
COLOR_WORDS = ("red", "green", "yellow", "orange", "white", "black", "purple", "brown", "pink")

PREP_WORDS = (
    "diced", "chopped", "sliced", "minced", "shredded", "grated", "crushed", "fresh",
    "dried", "cooked", "raw", "roasted", "grilled", "boneless", "skinless",
)

BODY_PART_WORDS = (
    "breast", "thigh", "leg", "wing", "fillet", "loin", "rib", "back", "neck",
    "shoulder", "drumstick",
)

# ---- sub-recipe detection ----------------------------------------------------
# Regex alternations, kept verbatim so detection stays reproducible.
SUB_RECIPE_SINGLE_ITEM_UNITS = "cup|tbsp|tsp|tablespoon|teaspoon|oz|ounce|pound|lb|gram|g|kg|ml|liter|l"
SUB_RECIPE_ITEM_UNITS = "cup|tbsp|tsp|tablespoon|teaspoon|oz|ounce|pound|lb|gram|kg|ml|liter"

SUB_RECIPE_FOOD_WORDS = (
    "tomatoes?", "onions?", "garlics?", "peppers?", "oils?", "water", "salt", "sugars?",
    "flours?", "cheeses?", "meats?", "chickens?", "beef", "pork", "fish", "rice", "beans?",
    "carrots?", "celer[yi]", "basil", "cilantro", "parsley", "eggs?", "milk", "creams?",
    "butters?", "sauces?", "broths?", "stocks?",
)

SUB_RECIPE_DESCRIPTOR_WORDS = (
    "boneless", "skinless", "fresh", "raw", "cooked", "dried", "frozen", "canned",
    "organic", "chopped", "diced", "minced", "sliced", "shredded", "grated", "whole",
    "ground", "breast", "thigh", "leg", "wing", "fillet", "loin", "rib", "back", "neck",
    "shoulder",
)

# ---- search-query building -------------------------------------------------
SEARCH_DESCRIPTORS = (
    "fresh", "raw", "cooked", "dried", "frozen", "canned", "chopped", "diced", "minced",
    "sliced", "shredded", "grated", "julienned", "peddled", "organic", "free-range",
    "grass-fed", "wild-caught", "extra", "virgin", "pure", "natural", "whole", "part-skim",
    "low-fat", "non-fat", "reduced-fat", "unsalted", "salted", "sweetened", "unsweetened",
)

SEARCH_SUBSTITUTIONS = (
    (r"\bboneless\s+skinless\s+chicken\b", "chicken breast"),
    (r"\bground\s+beef\b", "beef ground"),
    (r"\bextra\s+virgin\s+olive\s+oil\b", "olive oil"),
    (r"\bheavy\s+cream\b", "cream"),
    (r"\bsour\s+cream\b", "cream sour"),
    (r"\ball\s+purpose\s+flour\b", "flour wheat"),
    (r"\bbrown\s+sugar\b", "sugar brown"),
    (r"\bwhite\s+sugar\b", "sugar"),
)

SYNONYMS = {
    # onions & herbs
    "scallion": "onions spring or scallions",
    "scallions": "onions spring or scallions",
    "green onion": "onions spring or scallions",
    "green onions": "onions spring or scallions",
    "spring onions": "onions spring or scallions",
    "coriander": "coriander leaves",
    "cilantro": "coriander leaves",
    "flat leaf parsley": "parsley",

    # peppers
    "capsicum": "peppers sweet",
    "bell pepper": "peppers sweet",
    "bell peppers": "peppers sweet",
    "red bell pepper": "peppers sweet red",
    "green bell pepper": "peppers sweet green",
    "jalapeño": "peppers jalapeno",
    "jalapeno": "peppers jalapeno",
    "chilli": "peppers hot chili",

    # UK vs US produce
    "aubergine": "eggplant",
    "courgette": "squash summer zucchini",
    "zucchini": "squash summer zucchini",
    "rocket": "arugula",
    "beetroot": "beets",

    # legumes
    "garbanzo beans": "chickpeas",
    "garbanzo bean": "chickpeas",
    "edamame": "edamame frozen prepared",

    # dairy
    "yoghurt": "yogurt",
    "double cream": "cream fluid heavy whipping",
    "whipping cream": "cream fluid heavy whipping",
    "half and half": "cream fluid half and half",

    # sugars & baking
    "caster sugar": "sugars granulated",
    "granulated sugar": "sugars granulated",
    "icing sugar": "sugars powdered",
    "confectioners sugar": "sugars powdered",
    "powdered sugar": "sugars powdered",
    "bicarbonate of soda": "leavening agents baking soda",
    "baking soda": "leavening agents baking soda",
    "cornflour": "cornstarch",
    "plain flour": "wheat flour white all-purpose enriched",

    # oils
    "rapeseed oil": "oil canola",
    "veg oil": "oil vegetable",

    # meats & seafood
    "minced beef": "beef ground",
    "beef mince": "beef ground",
    "pork mince": "pork ground",
    "prawns": "crustaceans shrimp",
    "shrimp": "crustaceans shrimp",
}
