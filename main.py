"""
===============================================================================
main.py — Primary entry point
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Single executable entry point. Parses a pasted recipe, matches its
    ingredients against USDA FoodData Central, and writes the per-100 g,
    per-serving and FDA-rounded label values to data/results_<dish>.json.

    Usage:
        python main.py recipe.txt [--serving-size G] [--final-weight G]
                                  [--cooking-method METHOD] [--mode MODE]
                                  [--interactive] [--allow-fallback]

-------------------------------------------------------------------------------
Notes:
    • No absolute paths; output goes to ./data relative to the working dir.
    • The FoodData Central cache (nutrilabel/cache) enables offline runs
      with --mode offline.
    • USDA_API_KEY is read from the environment or a .env file.

===============================================================================
"""
from runner import main

if __name__ == "__main__":
    raise SystemExit(main())
