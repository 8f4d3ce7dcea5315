import json
from unittest import mock

import pytest
import requests

from nutrilabel.errors import FoodDatabaseError
from nutrilabel.nutrition_info import FoodDataCentralClient, transform_food, transform_nutrients

SEARCH_PAYLOAD = {
    "totalHits": 1,
    "foods": [{
        "fdcId": 169761,
        "description": "Wheat flour, white, all-purpose, enriched, bleached",
        "dataType": "SR Legacy",
        "foodNutrients": [
            {"nutrientId": 1008, "value": 364},
            {"nutrientId": 1003, "value": 10.3},
            {"nutrientId": 1005, "value": 76.3},
        ],
    }],
}

DETAIL_PAYLOAD = {
    "fdcId": 169761,
    "description": "Wheat flour, white, all-purpose, enriched, bleached",
    "dataType": "SR Legacy",
    "foodNutrients": [
        {"nutrient": {"id": 1008}, "amount": 364},
        {"nutrient": {"id": 1004}, "amount": 0.98},
    ],
    "foodPortions": [
        {"id": 88, "amount": 1, "gramWeight": 125, "modifier": "",
         "measureUnit": {"name": "cup", "abbreviation": "c"}},
    ],
}


def _response(status=200, payload=None, headers=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = status < 400
    resp.headers = headers or {}
    resp.text = json.dumps(payload or {})
    resp.json.return_value = payload
    return resp


@pytest.fixture
def session():
    s = mock.Mock()
    s.get.return_value = _response(payload=SEARCH_PAYLOAD)
    return s


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_client(session, sleeps, tmp_path):
    def _make(**kw):
        kw.setdefault("api_key", "test-key")
        kw.setdefault("session", session)
        kw.setdefault("cache_file", tmp_path / ".cache_fdc.json")
        kw.setdefault("max_retries", 2)
        return FoodDataCentralClient(sleep=sleeps.append, **kw)
    return _make


class TestTransformNutrients:
    def test_search_row_shape(self):
        profile, warnings = transform_nutrients(SEARCH_PAYLOAD["foods"][0]["foodNutrients"])
        assert (profile.calories, profile.protein, profile.total_carbohydrate) == (364, 10.3, 76.3)
        assert warnings == []

    def test_detail_row_shape(self):
        profile, _ = transform_nutrients(DETAIL_PAYLOAD["foodNutrients"])
        assert profile.total_fat == 0.98

    def test_missing_sugar_inferred(self):
        profile, warnings = transform_nutrients([{"nutrientId": 1005, "value": 99.8}])
        assert profile.total_sugars == 99.8
        assert profile.added_sugars == 99.8
        assert [w.kind for w in warnings] == ["missing_sugar"]

    def test_saturated_fat_capped(self):
        profile, warnings = transform_nutrients([
            {"nutrientId": 1004, "value": 5.0},
            {"nutrientId": 1258, "value": 7.0},
        ])
        assert profile.saturated_fat == 5.0
        assert warnings[0].kind == "saturated_fat_exceeds_total"
        assert (warnings[0].original_value, warnings[0].corrected_value) == (7.0, 5.0)

    def test_fiber_capped(self):
        profile, _ = transform_nutrients([
            {"nutrientId": 1005, "value": 10.0},
            {"nutrientId": 1079, "value": 12.0},
            {"nutrientId": 2000, "value": 1.0},
        ])
        assert profile.dietary_fiber == 10.0

    def test_unknown_nutrients_ignored(self):
        profile, _ = transform_nutrients([{"nutrientId": 9999, "value": 1.0}])
        assert all(v == 0 for _, v in profile.items())


class TestTransformFood:
    def test_portions(self):
        food = transform_food(DETAIL_PAYLOAD)
        assert food.fdc_id == 169761
        assert food.portions[0].measure_name == "cup"
        assert food.portions[0].grams_per_unit == 125.0


class TestSearch:
    def test_request_and_result(self, make_client, session):
        result = make_client().search("Flour", limit=5)
        assert result.total_hits == 1
        assert result.foods[0].description.startswith("Wheat flour")
        url = session.get.call_args.args[0]
        params = session.get.call_args.kwargs["params"]
        assert url.endswith("/foods/search")
        assert params["query"] == "Flour"
        assert params["pageSize"] == 5
        assert params["api_key"] == "test-key"
        assert "dataType" not in params

    def test_cached_across_clients(self, make_client, session):
        make_client().search("flour")
        again = make_client().search("  FLOUR ")
        assert session.get.call_count == 1
        assert again.foods[0].fdc_id == 169761

    def test_offline_uses_cache_only(self, make_client, session):
        make_client().search("flour")
        offline = make_client(mode="offline")
        assert offline.search("flour").foods
        assert offline.search("sugar").foods == ()
        assert session.get.call_count == 1

    def test_refresh_ignores_cache(self, make_client, session):
        make_client().search("flour")
        make_client(mode="refresh").search("flour")
        assert session.get.call_count == 2

    def test_missing_api_key(self, make_client, session):
        with pytest.raises(FoodDatabaseError):
            make_client(api_key="").search("flour")
        session.get.assert_not_called()


class TestRetries:
    def test_retries_server_error(self, make_client, session, sleeps):
        session.get.side_effect = [_response(503), _response(payload=SEARCH_PAYLOAD)]
        assert make_client().search("flour").foods
        assert session.get.call_count == 2
        assert len(sleeps) == 1

    def test_honors_retry_after(self, make_client, session, sleeps):
        session.get.side_effect = [_response(429, headers={"Retry-After": "3"}), _response(payload=SEARCH_PAYLOAD)]
        make_client().search("flour")
        assert sleeps == [3.0]

    def test_gives_up_after_max_retries(self, make_client, session, sleeps):
        session.get.return_value = _response(500)
        with pytest.raises(FoodDatabaseError):
            make_client().search("flour")
        assert session.get.call_count == 3
        assert len(sleeps) == 2

    def test_connection_errors_retried(self, make_client, session):
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(FoodDatabaseError):
            make_client().search("flour")
        assert session.get.call_count == 3

    def test_client_error_not_retried(self, make_client, session, sleeps):
        session.get.return_value = _response(404, payload={"error": "not found"})
        with pytest.raises(FoodDatabaseError):
            make_client().search("flour")
        assert session.get.call_count == 1
        assert sleeps == []

    def test_backoff_is_bounded(self, make_client):
        client = make_client()
        for attempt in range(6):
            assert 0 < client._retry_delay(attempt) <= 10.0


class TestGetById:
    def test_details_cached(self, make_client, session):
        session.get.return_value = _response(payload=DETAIL_PAYLOAD)
        client = make_client()
        food = client.get_by_id(169761)
        assert food.portions[0].gram_weight == 125
        assert session.get.call_args.args[0].endswith("/food/169761")
        assert client.get_by_id(169761) == food
        assert session.get.call_count == 1

    def test_offline_miss_raises(self, make_client, session):
        with pytest.raises(FoodDatabaseError):
            make_client(mode="offline").get_by_id(1)
        session.get.assert_not_called()

    def test_connection_check(self, make_client, session):
        assert make_client().test_connection()
        session.get.return_value = _response(500)
        assert not make_client(mode="refresh").test_connection()
