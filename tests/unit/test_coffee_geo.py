"""
Unit tests for distance ranking and name search.
"""
import random

import pytest

from coffee_api import ShopMarker
from coffee_geo import (
    distance_to,
    filter_shops,
    fmt_distance,
    haversine_m,
    parse_origin,
    rank_by_distance,
    search_shops,
)

ORIGIN = (53.4060, -2.9660)

SHOPS = [
    ShopMarker("1", "Costa", 53.4000, -2.9000),
    ShopMarker("2", "Starbucks Library", 53.4050, -2.9650),
    ShopMarker("3", "Caffe Nero", 53.4100, -2.9800),
    ShopMarker("4", "Guild Coffee", 53.4061, -2.9661),
]


def test_haversine_known_distance():
    # Liverpool Lime Street to Manchester Piccadilly, roughly 50 km
    d = haversine_m(53.4075, -2.9779, 53.4774, -2.2309)
    assert 49_000 < d < 51_000


def test_haversine_zero_and_symmetric():
    assert haversine_m(53.4, -2.9, 53.4, -2.9) == 0
    assert haversine_m(53.4, -2.9, 51.5, -0.1) == pytest.approx(haversine_m(51.5, -0.1, 53.4, -2.9))


def test_rank_by_distance_closest_first():
    ranked = rank_by_distance(SHOPS, ORIGIN)
    assert [s.id for s in ranked] == ["4", "2", "3", "1"]


def test_rank_by_distance_is_non_decreasing_for_random_lists():
    rng = random.Random(7)
    for _ in range(25):
        shops = [ShopMarker(str(i), f"s{i}", rng.uniform(53.3, 53.5), rng.uniform(-3.1, -2.8))
                 for i in range(rng.randint(1, 30))]
        origin = (rng.uniform(53.3, 53.5), rng.uniform(-3.1, -2.8))
        dists = [distance_to(s, origin) for s in rank_by_distance(shops, origin)]
        assert dists == sorted(dists)


def test_rank_by_distance_ties_keep_input_order():
    twins = [ShopMarker("a", "A", 53.41, -2.97), ShopMarker("b", "B", 53.41, -2.97),
             ShopMarker("c", "C", 53.41, -2.97)]
    assert rank_by_distance(twins, ORIGIN) == twins
    assert rank_by_distance(list(reversed(twins)), ORIGIN) == list(reversed(twins))


def test_rank_does_not_mutate_input():
    shops = list(SHOPS)
    rank_by_distance(shops, ORIGIN)
    assert shops == SHOPS


class TestFilter:

    def test_empty_query_returns_everything_in_order(self):
        assert filter_shops(SHOPS, "") == SHOPS
        assert filter_shops(SHOPS, "   ") == SHOPS

    def test_case_insensitive_substring(self):
        assert [s.id for s in filter_shops(SHOPS, "COFFEE")] == ["4"]
        assert [s.id for s in filter_shops(SHOPS, "ca")] == ["3"]
        assert [s.id for s in filter_shops(SHOPS, "st")] == ["1", "2"]

    def test_no_match(self):
        assert filter_shops(SHOPS, "tea") == []

    @pytest.mark.parametrize("query", ["", "c", "co", "library", "xyz", "Nero"])
    def test_idempotent(self, query):
        once = filter_shops(SHOPS, query)
        assert filter_shops(once, query) == once


class TestSearch:

    def test_ranks_then_filters(self):
        assert [s.id for s in search_shops(SHOPS, "o", ORIGIN)] == ["4", "3", "1"]
        assert [s.id for s in search_shops(SHOPS, "st", ORIGIN)] == ["2", "1"]

    def test_without_origin_filters_unranked_list(self):
        assert [s.id for s in search_shops(SHOPS, "st", None)] == ["1", "2"]
        assert search_shops(SHOPS, "", None) == SHOPS


def test_fmt_distance():
    assert fmt_distance(85.7) == "85m"
    assert fmt_distance(999) == "999m"
    assert fmt_distance(1234) == "1.2 km"


class TestParseOrigin:

    def test_valid(self):
        assert parse_origin("53.406, -2.966") == (53.406, -2.966)

    @pytest.mark.parametrize("text", ["", "53.4", "53.4,-2.9,1", "north,west", "91,0", "0,181", "nan,0"])
    def test_invalid(self, text):
        with pytest.raises(ValueError):
            parse_origin(text)
