"""
===============================================================================
match_scorer.py — External Match Scorer
===============================================================================

-------------------------------------------------------------------------------
Purpose:
    Ranks food-database candidates for one search query and picks the best.
    Generic reference foods ("Wheat flour, white, all-purpose, enriched") beat
    specialty variants (almond flour, tipo 00, powders, branded products)
    unless the query itself asks for the specialty.

-------------------------------------------------------------------------------
How it works:
    Every candidate starts at 0. SCORING_RULES is an ordered table of
    (name, weight, predicate); each rule whose predicate holds for the
    lowercased description / lowercased query / data type adds its weight.
    Candidates are sorted by score, highest first; Python's sort is stable,
    so ties keep their input order.

-------------------------------------------------------------------------------
Notes:
    • Pure: no I/O, no state besides the candidate list and the query.
    • Each ScoredCandidate keeps the rules that fired, so a choice can be
      explained (MatchDecision.trail).

===============================================================================
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from nutrilabel.datasets import DatabaseFood

Predicate = Callable[[str, str, str], bool]   # (description, query, data_type)


@dataclass(frozen=True)
class ScoringRule:
    name: str
    weight: int
    applies: Predicate


def _has(*terms: str) -> Predicate:
    return lambda d, q, t: any(term in d for term in terms)


def _has_all(*terms: str) -> Predicate:
    return lambda d, q, t: all(term in d for term in terms)


def _when(condition: Callable[[str], bool], predicate: Predicate) -> Predicate:
    return lambda d, q, t: condition(q) and predicate(d, q, t)


def _unless_query(query_term: str, predicate: Predicate) -> Predicate:
    return lambda d, q, t: query_term not in q and predicate(d, q, t)


def _bare_flour(q: str) -> bool:
    return q.strip() in ("flour", "flours")


def _sifted_flour(q: str) -> bool:
    return "flour, sifted" in q or "sifted flour" in q


CANONICAL_FLOUR = "wheat flour, white, all-purpose, enriched, bleached"
ENRICHED_FLOUR = "wheat flour, white, all-purpose, enriched"

# (description term, query term that lifts the penalty)
SPECIALTY_TERMS: Tuple[Tuple[str, str], ...] = (
    ("almond", "almond"), ("coconut", "coconut"), ("amaranth", "amaranth"), ("barley", "barley"),
    ("rye", "rye"), ("spelt", "spelt"), ("cassava", "cassava"), ("tapioca", "tapioca"),
    ("chestnut", "chestnut"), ("chickpea", "chickpea"), ("soy", "soy"), ("lentil", "lentil"),
    ("quinoa", "quinoa"), ("arrowroot", "arrowroot"), ("carob", "carob"), ("buckwheat", "buckwheat"),
    ("rice flour", "rice"), ("oat flour", "oat"), ("corn flour", "corn"), ("potato flour", "potato"),
    ("sorghum", "sorghum"), ("millet", "millet"), ("teff", "teff"), ("kamut", "kamut"),
    ("einkorn", "einkorn"), ("emmer", "emmer"), ("farro", "farro"), ("semolina", "semolina"),
)

SCORING_RULES: Tuple[ScoringRule, ...] = (
    # generic / standard terms
    ScoringRule("all-purpose", 100, _has("all-purpose", "all purpose")),
    ScoringRule("white flour", 80, _has_all("white", "flour")),
    ScoringRule("wheat flour", 70, _has("wheat flour")),
    ScoringRule("enriched", 50, _has("unenriched", "enriched")),
    ScoringRule("raw or fresh", 30, _has("raw", "fresh")),

    # bare "flour" query
    ScoringRule("flour: canonical bleached", 600, _when(_bare_flour, _has(CANONICAL_FLOUR))),
    ScoringRule("flour: canonical enriched", 500, _when(_bare_flour, _has(ENRICHED_FLOUR))),
    ScoringRule("flour: all-purpose wheat bleached", 450,
                _when(_bare_flour, _has_all("all-purpose", "wheat", "bleached"))),
    ScoringRule("flour: all-purpose wheat", 400, _when(_bare_flour, _has_all("all-purpose", "wheat"))),
    ScoringRule("flour: white wheat", 300, _when(_bare_flour, _has_all("white flour", "wheat"))),

    # "flour, sifted" / "sifted flour"
    ScoringRule("sifted: canonical bleached", 1000, _when(_sifted_flour, _has(CANONICAL_FLOUR))),
    ScoringRule("sifted: canonical enriched", 800, _when(_sifted_flour, _has(ENRICHED_FLOUR))),
    ScoringRule("sifted: all-purpose wheat", 600, _when(_sifted_flour, _has_all("all-purpose", "wheat"))),
    ScoringRule("sifted: all-purpose flour", 400, _when(_sifted_flour, _has_all("all-purpose", "flour"))),

    # eggs
    ScoringRule("fresh egg", 50, lambda d, q, t: "egg" in d and ("raw" in d or "fresh" in d)),
    ScoringRule("egg white", 40, lambda d, q, t: "egg white" in d and "dried" not in d and "powder" not in d),
) + tuple(
    ScoringRule(f"specialty: {term}", -100, _unless_query(query_term, _has(term)))
    for term, query_term in SPECIALTY_TERMS
) + (
    ScoringRule("gluten-free", -70, _unless_query("gluten", _has("gluten-free", "gluten free"))),
    ScoringRule("organic", -40, _unless_query("organic", _has("organic"))),
    ScoringRule("whole grain", -50, _unless_query("whole", _has("whole wheat", "whole grain"))),
    ScoringRule("alternative flour", -80, lambda d, q, t: (
        any(x in d for x in ("buckwheat", "rice flour", "oat flour"))
        and not any(x in q for x in ("buckwheat", "rice", "oat"))
    )),

    # wrong category
    ScoringRule("sauce", -100, _unless_query("sauce", _has("sauce"))),

    # processed forms
    ScoringRule("dried", -60, _unless_query("dried", _has("dried"))),
    ScoringRule("powder", -60, _unless_query("powder", _has("powder"))),
    ScoringRule("freeze-dried", -80, _has("freeze-dried", "freeze dried")),
    ScoringRule("dehydrated", -60, _unless_query("dehydrated", _has("dehydrated"))),
    ScoringRule("tipo 00", -100, _unless_query("00", _has("00", "tipo 00"))),
    ScoringRule("sifted: tipo 00", -500, _when(_sifted_flour, _has("00", "tipo 00"))),
    ScoringRule("sifted: bread or cake flour", -300, _when(_sifted_flour, _has("bread flour", "cake flour"))),

    # data source tier
    ScoringRule("Foundation", 150, lambda d, q, t: t == "Foundation"),
    ScoringRule("SR Legacy", 120, lambda d, q, t: t == "SR Legacy"),
    ScoringRule("Branded", -80, lambda d, q, t: t == "Branded"),

    # description length
    ScoringRule("short description", 20, lambda d, q, t: len(d) < 30),
    ScoringRule("long description", -20, lambda d, q, t: len(d) > 60),
)


@dataclass(frozen=True)
class ScoredCandidate:
    food: DatabaseFood
    score: int
    fired: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class MatchDecision:
    query: str
    best: Optional[DatabaseFood]
    score: Optional[int]
    ranked: Tuple[ScoredCandidate, ...] = ()

    @property
    def trail(self) -> List[str]:
        """One line per candidate: score, description and the rules that fired."""
        lines = []
        for c in self.ranked:
            rules = ", ".join(f"{name} {weight:+d}" for name, weight in c.fired) or "no rules"
            lines.append(f"{c.score:+d}  {c.food.description} [{c.food.data_type}] ({rules})")
        return lines


def _evaluate(description: str, data_type: str, query: str) -> Tuple[int, Tuple[Tuple[str, int], ...]]:
    d = (description or "").lower()
    q = (query or "").lower()
    fired = tuple((r.name, r.weight) for r in SCORING_RULES if r.applies(d, q, data_type or ""))
    return sum(w for _, w in fired), fired


def score_candidate(food: DatabaseFood, query: str) -> ScoredCandidate:
    total, fired = _evaluate(food.description, food.data_type, query)
    return ScoredCandidate(food, total, fired)


def score_candidates(candidates: Sequence[DatabaseFood], query: str) -> List[ScoredCandidate]:
    """Score every candidate; highest first, ties in input order."""
    scored = [score_candidate(f, query) for f in candidates]
    return sorted(scored, key=lambda c: c.score, reverse=True)


def select_best_match(candidates: Sequence[DatabaseFood], query: str) -> MatchDecision:
    ranked = score_candidates(candidates, query)
    if not ranked:
        return MatchDecision(query=query, best=None, score=None)
    return MatchDecision(query=query, best=ranked[0].food, score=ranked[0].score, ranked=tuple(ranked))
