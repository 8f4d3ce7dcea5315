"""
USDA FoodData Central client with disk caching and mode control.

Features:
- search(query, limit) and get_by_id(fdc_id): the two read operations the
  matcher and the calculator rely on, returning DatabaseFood records.
- Retries with exponential backoff (+ jitter) on 429, 5xx, timeouts and
  connection errors; honors Retry-After. Other failures raise FoodDatabaseError.
- Disk cache (cross-run) + in-process memo.
- Modes:
    - "offline": use disk cache only, never hit the API.
    - "auto":    use cache when valid; fetch missing/expired and write back.
    - "refresh": always hit the API and overwrite the cache.
- Nutrient transform: FDC nutrient ids -> NutrientProfile fields, with the
  known FDC data fixes recorded as DataQualityWarning values.

Dependencies: requests, python-dotenv (via nutrilabel.config)
"""

from __future__ import annotations

import json
import logging
import random
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Literal, Mapping, Optional, Tuple

import requests

from nutrilabel import config
from nutrilabel.datasets import DatabaseFood, DataQualityWarning, FoodPortion, NutrientProfile, SearchResult
from nutrilabel.errors import FoodDatabaseError

logger = logging.getLogger(__name__)

Mode = Literal["auto", "offline", "refresh"]

MAX_PAGE_SIZE = 200
RETRY_BASE_DELAY = 1.0
RETRY_MAX_DELAY = 10.0

# FoodData Central nutrient id -> NutrientProfile field
NUTRIENT_MAP: Dict[int, str] = {
    1008: "calories",            # Energy (kcal)
    1004: "total_fat",           # Total lipid (fat)
    1258: "saturated_fat",       # Fatty acids, total saturated
    1257: "trans_fat",           # Fatty acids, total trans
    1253: "cholesterol",
    1093: "sodium",
    1005: "total_carbohydrate",  # Carbohydrate, by difference
    1079: "dietary_fiber",
    2000: "total_sugars",        # Sugars, total including NLEA
    1235: "added_sugars",
    1003: "protein",
    1114: "vitamin_d",           # D2 + D3
    1106: "vitamin_a",           # RAE
    1162: "vitamin_c",
    1109: "vitamin_e",           # alpha-tocopherol
    1185: "vitamin_k",           # phylloquinone
    1165: "thiamin",
    1166: "riboflavin",
    1167: "niacin",
    1175: "vitamin_b6",
    1190: "folate",              # DFE
    1178: "vitamin_b12",
    1087: "calcium",
    1089: "iron",
    1090: "magnesium",
    1091: "phosphorus",
    1092: "potassium",
    1095: "zinc",
    1098: "copper",
    1101: "manganese",
    1103: "selenium",
}


# =============== Transform (raw FDC JSON -> value objects) ==============
def _nutrient_id_and_value(raw: Mapping[str, Any]) -> Tuple[Optional[int], float]:
    """Search hits use nutrientId/value; food details nest nutrient.id with amount."""
    if "nutrientId" in raw:
        return raw.get("nutrientId"), float(raw.get("value") or 0.0)
    nested = raw.get("nutrient") or {}
    return nested.get("id"), float(raw.get("amount") or raw.get("value") or 0.0)


def _cap(values: Dict[str, float], warnings: List[DataQualityWarning], kind: str, field: str,
         limit: float, message: str) -> None:
    warnings.append(DataQualityWarning(kind, message, field, values[field], limit))
    logger.warning("FDC data fix (%s): %s", kind, message)
    values[field] = limit


def transform_nutrients(raw_nutrients: Iterable[Mapping[str, Any]]) -> Tuple[NutrientProfile, List[DataQualityWarning]]:
    """Map FDC nutrient rows onto a NutrientProfile and repair known inconsistencies."""
    values = {name: 0.0 for name in NUTRIENT_MAP.values()}
    for row in raw_nutrients or ():
        nid, value = _nutrient_id_and_value(row)
        field = NUTRIENT_MAP.get(nid) if nid is not None else None
        if field:
            values[field] = value

    warnings: List[DataQualityWarning] = []
    carbs, fat = values["total_carbohydrate"], values["total_fat"]

    # e.g. "Sugars, granulated" reports 0 g sugars but ~100 g carbohydrate
    if values["total_sugars"] == 0 and carbs >= 95:
        warnings.append(DataQualityWarning(
            "missing_sugar",
            f"Sugar data missing. Inferred {carbs:.1f}g sugar from carbohydrate content.",
            "total_sugars", 0.0, carbs,
        ))
        logger.warning("FDC data fix (missing_sugar): total_sugars=0 with carbs=%.1f", carbs)
        values["total_sugars"] = carbs
        values["added_sugars"] = carbs

    if values["total_sugars"] > carbs > 0:
        _cap(values, warnings, "sugar_exceeds_carbs", "total_sugars", carbs,
             f"Sugar ({values['total_sugars']:.1f}g) cannot exceed carbohydrates ({carbs:.1f}g). "
             f"Corrected to {carbs:.1f}g.")
        if values["added_sugars"] > carbs:
            values["added_sugars"] = carbs

    sugars = values["total_sugars"]
    if values["added_sugars"] > sugars > 0:
        _cap(values, warnings, "added_sugar_exceeds_total", "added_sugars", sugars,
             f"Added sugars ({values['added_sugars']:.1f}g) cannot exceed total sugars ({sugars:.1f}g). "
             f"Corrected to {sugars:.1f}g.")

    if values["dietary_fiber"] > carbs > 0:
        _cap(values, warnings, "fiber_exceeds_carbs", "dietary_fiber", carbs,
             f"Fiber ({values['dietary_fiber']:.1f}g) cannot exceed carbohydrates ({carbs:.1f}g). "
             f"Corrected to {carbs:.1f}g.")

    if values["saturated_fat"] > fat > 0:
        _cap(values, warnings, "saturated_fat_exceeds_total", "saturated_fat", fat,
             f"Saturated fat ({values['saturated_fat']:.1f}g) cannot exceed total fat ({fat:.1f}g). "
             f"Corrected to {fat:.1f}g.")

    if values["trans_fat"] > fat > 0:
        _cap(values, warnings, "trans_fat_exceeds_total", "trans_fat", fat,
             f"Trans fat ({values['trans_fat']:.1f}g) cannot exceed total fat ({fat:.1f}g). "
             f"Corrected to {fat:.1f}g.")

    return NutrientProfile(**values), warnings


def transform_food_portions(raw_food: Mapping[str, Any]) -> Tuple[FoodPortion, ...]:
    portions = []
    for p in raw_food.get("foodPortions") or ():
        unit = p.get("measureUnit") or {}
        portions.append(FoodPortion(
            gram_weight=float(p.get("gramWeight") or 100.0),
            amount=float(p.get("amount") or 1.0),
            modifier=p.get("modifier") or "",
            measure_name=unit.get("name") or "",
            abbreviation=unit.get("abbreviation") or "",
            portion_id=p.get("id"),
        ))
    return tuple(portions)


def transform_food(raw_food: Mapping[str, Any]) -> DatabaseFood:
    profile, warnings = transform_nutrients(raw_food.get("foodNutrients") or ())
    return DatabaseFood(
        fdc_id=raw_food.get("fdcId"),
        description=raw_food.get("description") or "",
        data_type=raw_food.get("dataType") or "Unknown",
        nutrients=profile,
        portions=transform_food_portions(raw_food),
        brand_owner=raw_food.get("brandOwner"),
        warnings=tuple(warnings),
    )


# =============== Client ==================================================
_CACHE_VERSION = 1


def _now() -> int:
    return int(time.time())


def _normalize_key(text: str) -> str:
    return " ".join((text or "").strip().lower().split())


class FoodDataCentralClient:
    """
    Thin FoodData Central client.

    All arguments default to nutrilabel.config values. `session` and `sleep`
    are injectable so tests can run without network or real waiting.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        cache_file: Optional[Path] = None,
        cache_ttl: Optional[int] = None,
        mode: Mode = "auto",
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.api_key = api_key if api_key is not None else config.USDA_API_KEY
        self.base_url = (base_url or config.FDC_BASE_URL).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = config.FDC_TIMEOUT if timeout is None else timeout
        self.max_retries = config.FDC_MAX_RETRIES if max_retries is None else max_retries
        self.cache_file = Path(cache_file) if cache_file is not None else config.FDC_CACHE_FILE
        self.cache_ttl = config.FDC_CACHE_TTL if cache_ttl is None else cache_ttl
        self.mode: Mode = mode
        self._sleep = sleep
        self._lock = threading.Lock()
        self._memo: Dict[str, Any] = {}

    # ---- HTTP ----------------------------------------------------------
    def _retry_delay(self, attempt: int, response: Optional[requests.Response] = None) -> float:
        if response is not None:
            retry_after = response.headers.get("Retry-After")
            if retry_after and retry_after.strip().isdigit():
                return float(retry_after)
        delay = RETRY_BASE_DELAY * (2 ** attempt)
        return min(delay + random.uniform(0, 0.3 * delay), RETRY_MAX_DELAY)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        if not self.api_key:
            raise FoodDatabaseError("Missing USDA_API_KEY")
        url = f"{self.base_url}{path}"
        query = dict(params or {}, api_key=self.api_key)

        for attempt in range(self.max_retries + 1):
            last_try = attempt == self.max_retries
            try:
                resp = self.session.get(url, params=query, timeout=self.timeout)
            except (requests.Timeout, requests.ConnectionError) as exc:
                if last_try:
                    raise FoodDatabaseError(f"FoodData Central unreachable after {attempt + 1} attempts: {exc}") from exc
                delay = self._retry_delay(attempt)
                logger.warning("FDC %s; retrying in %.1fs (%d/%d)", type(exc).__name__, delay,
                               attempt + 1, self.max_retries)
                self._sleep(delay)
                continue

            if resp.status_code == 429 or resp.status_code >= 500:
                if last_try:
                    raise FoodDatabaseError(
                        f"FoodData Central request failed ({resp.status_code}) after {attempt + 1} attempts"
                    )
                delay = self._retry_delay(attempt, resp)
                logger.warning("FDC HTTP %d; retrying in %.1fs (%d/%d)", resp.status_code, delay,
                               attempt + 1, self.max_retries)
                self._sleep(delay)
                continue

            if not resp.ok:
                raise FoodDatabaseError(f"FoodData Central request failed: {resp.status_code} {resp.text[:200]}")
            return resp.json()

        raise FoodDatabaseError("FoodData Central request failed")

    def search_raw(self, query: str, page_size: int = 50, page_number: int = 1,
                   data_type: Optional[str] = None) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "query": query,
            "pageSize": min(page_size, MAX_PAGE_SIZE),
            "pageNumber": page_number,
        }
        if data_type:
            params["dataType"] = data_type
        return self._get("/foods/search", params)

    def food_details_raw(self, fdc_id: Any) -> Dict[str, Any]:
        return self._get(f"/food/{fdc_id}")

    # ---- Disk cache ----------------------------------------------------
    def _cache_read(self) -> dict:
        if self.cache_file.exists():
            try:
                return json.loads(self.cache_file.read_text("utf-8"))
            except (OSError, ValueError) as exc:
                logger.warning("ignoring unreadable FDC cache %s: %s", self.cache_file, exc)
                return {}
        return {}

    def _cache_write(self, data: dict) -> None:
        self.cache_file.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.cache_file.with_suffix(".tmp")
        tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(self.cache_file)

    def _cache_get(self, key: str) -> Optional[Any]:
        if self.mode == "refresh":
            return None
        with self._lock:
            if key in self._memo:
                return self._memo[key]
            entry = (self._cache_read().get("data") or {}).get(key)
        if not isinstance(entry, dict):
            return None
        if self.mode == "offline" or (_now() - int(entry.get("ts", 0))) <= self.cache_ttl:
            return entry.get("value")
        return None

    def _cache_set(self, key: str, value: Any) -> None:
        with self._lock:
            self._memo[key] = value
            raw = self._cache_read()
            if not isinstance(raw.get("data"), dict):
                raw = {"version": _CACHE_VERSION, "data": {}}
            raw["data"][key] = {"value": value, "ts": _now()}
            self._cache_write(raw)

    # ---- Public API ----------------------------------------------------
    def search(self, query: str, limit: int = 10, data_type: Optional[str] = None) -> SearchResult:
        """Top `limit` foods for `query` (nutrients from the search hit itself)."""
        key = f"search:{_normalize_key(query)}:{limit}:{data_type or ''}"
        cached = self._cache_get(key)
        if cached is not None:
            return SearchResult(tuple(DatabaseFood.from_dict(f) for f in cached["foods"]), cached["total_hits"])
        if self.mode == "offline":
            logger.info("offline: no cached search for %r", query)
            return SearchResult((), 0)

        raw = self.search_raw(query, page_size=limit, data_type=data_type)
        foods = tuple(transform_food(f) for f in (raw.get("foods") or [])[:limit] if f.get("fdcId"))
        total = int(raw.get("totalHits") or len(foods))
        logger.info("FDC search %r: %d of %d hits", query, len(foods), total)
        self._cache_set(key, {"foods": [f.to_dict() for f in foods], "total_hits": total})
        return SearchResult(foods, total)

    def get_by_id(self, fdc_id: Any) -> DatabaseFood:
        """Full record (nutrients and portions) for one FDC id."""
        key = f"food:{fdc_id}"
        cached = self._cache_get(key)
        if cached is not None:
            return DatabaseFood.from_dict(cached)
        if self.mode == "offline":
            raise FoodDatabaseError(f"offline mode: food {fdc_id} is not cached")

        food = transform_food(self.food_details_raw(fdc_id))
        self._cache_set(key, food.to_dict())
        return food

    def test_connection(self) -> bool:
        try:
            return bool(self.search("apple", limit=1).foods)
        except FoodDatabaseError as exc:
            logger.warning("FDC connection test failed: %s", exc)
            return False
