"""
Resolve parsed ingredient lines to food-database records.

For each line the search variants are tried in order; the first variant with
any hits is scored by match_scorer and the winner's full record (with
portion data) is fetched. Lines are independent, so resolve_all() fans them
out over a thread pool and returns results in input order.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence, Tuple

from nutrilabel import config
from nutrilabel.datasets import (
    AUTO,
    UNMATCHED,
    DatabaseFood,
    IngredientEntry,
    MatchedIngredient,
    SearchResult,
)
from nutrilabel.errors import FoodDatabaseError
from nutrilabel.match_scorer import MatchDecision, select_best_match
from nutrilabel.search_query import generate_search_variants

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 10


class FoodDatabase(Protocol):
    def search(self, query: str, limit: int = 10) -> SearchResult: ...

    def get_by_id(self, fdc_id: Any) -> DatabaseFood: ...


@dataclass(frozen=True)
class MatchResolution:
    food: DatabaseFood
    variant_used: str
    attempt_number: int
    variants_tried: Tuple[str, ...]
    decision: MatchDecision


def _full_record(db: FoodDatabase, hit: DatabaseFood) -> DatabaseFood:
    try:
        return db.get_by_id(hit.fdc_id)
    except FoodDatabaseError as exc:
        logger.warning("details for %s unavailable, using search hit: %s", hit.fdc_id, exc)
        return hit


def resolve_ingredient(name: str, db: FoodDatabase, limit: int = SEARCH_LIMIT) -> Optional[MatchResolution]:
    """Best food for `name` from the first search variant with any hits; None when all are empty."""
    variants = generate_search_variants(name)
    for attempt, variant in enumerate(variants, start=1):
        try:
            result = db.search(variant, limit=limit)
        except FoodDatabaseError as exc:
            logger.warning("search %r failed: %s", variant, exc)
            continue
        if not result.foods:
            logger.debug("no results for variant %r", variant)
            continue
        decision = select_best_match(result.foods, variant)
        logger.info("%r -> %r via %r (attempt %d/%d, score %s)", name, decision.best.description,
                    variant, attempt, len(variants), decision.score)
        return MatchResolution(
            food=_full_record(db, decision.best),
            variant_used=variant,
            attempt_number=attempt,
            variants_tried=tuple(variants[:attempt]),
            decision=decision,
        )
    logger.warning("all %d variants failed for %r", len(variants), name)
    return None


def match_line(entry: IngredientEntry, db: FoodDatabase, limit: int = SEARCH_LIMIT) -> MatchedIngredient:
    """MatchedIngredient for one entry; sub-recipe placeholders are left unmatched for the caller."""
    if entry.is_sub_recipe:
        return MatchedIngredient(line=entry, food=None, status=UNMATCHED)
    resolution = resolve_ingredient(entry.search_query or entry.ingredient_name, db, limit=limit)
    if resolution is None:
        return MatchedIngredient(line=entry, food=None, status=UNMATCHED)
    return MatchedIngredient(
        line=entry,
        food=resolution.food,
        status=AUTO,
        search_query=resolution.variant_used,
        score=resolution.decision.score,
    )


def resolve_all(entries: Sequence[IngredientEntry], db: FoodDatabase,
                max_workers: Optional[int] = None) -> List[MatchedIngredient]:
    if not entries:
        return []
    workers = max(1, min(max_workers or config.FDC_MAX_WORKERS, len(entries)))
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda entry: match_line(entry, db), entries))
