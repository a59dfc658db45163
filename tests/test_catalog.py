"""Tests for the catalog index: search, category/mood filters and grouping."""

import itertools

import pytest

from conftest import make_track
from soundlibrary.catalog import (
    CatalogIndex, artwork_for, category_options, group_tracks, mood_options, view,
)
from soundlibrary.config import ALL, UNCLASSIFIED
from soundlibrary.models import FilterState


@pytest.fixture
def tracks():
    return [
        make_track(1, "Ethereal Dreams", artist="SoundScape Studio", category="Ambient",
                   mood="Relaxed", tags={"chill", "meditation"}),
        make_track(2, "Urban Pulse", artist="Beat Collective", category="Hip Hop",
                   mood="Energetic", tags={"urban", "upbeat"}),
        make_track(3, "Rock Anthem", artist=None, category="Rock"),
        make_track(4, "Nameless", artist="Someone"),
    ]


@pytest.mark.parametrize(
    "filter_state",
    [
        FilterState(),
        FilterState(search_text="x"),
        FilterState(category="Rock"),
        FilterState(mood="Epic"),
        FilterState(search_text="a", category="Pop", mood="Calm"),
    ],
)
def test_view_of_empty_collection_is_empty(filter_state):
    assert view([], filter_state) == []


@pytest.mark.parametrize("text", ["ethereal", "DREAMS", "medit", "Studio"])
def test_search_is_case_insensitive_over_title_artist_and_tags(tracks, text):
    result = view(tracks, FilterState(search_text=text))
    assert [t.id for t in result] == [1]


def test_search_without_match_excludes_track(tracks):
    assert view(tracks, FilterState(search_text="polka")) == []


def test_search_with_missing_artist_does_not_fail(tracks):
    result = view(tracks, FilterState(search_text="anthem"))
    assert [t.id for t in result] == [3]


def test_category_filter_without_matches_is_empty(tracks):
    assert view(tracks[1:], FilterState(category="Ambient")) == []


def test_category_filter_is_exact_and_case_sensitive(tracks):
    assert [t.id for t in view(tracks, FilterState(category="Rock"))] == [3]
    assert view(tracks, FilterState(category="rock")) == []


def test_missing_category_is_unclassified(tracks):
    result = view(tracks, FilterState(category=UNCLASSIFIED))
    assert [t.id for t in result] == [4]


def test_mood_filter_never_matches_missing_mood(tracks):
    assert [t.id for t in view(tracks, FilterState(mood="Energetic"))] == [2]
    assert view(tracks, FilterState(mood="")) == []


def test_predicates_commute(tracks):
    state = FilterState(search_text="u", category="Hip Hop", mood="Energetic")
    expected = view(tracks, state)
    for order in itertools.permutations(tracks):
        assert {t.id for t in view(list(order), state)} == {t.id for t in expected}


def test_view_preserves_order_and_returns_new_list(tracks):
    result = view(tracks, FilterState())
    assert result == tracks
    assert result is not tracks


def test_rock_scenario():
    catalog = [
        make_track(1, "A", category="Rock"),
        make_track(2, "B", category="Pop"),
    ]
    result = view(catalog, FilterState(search_text="", category="Rock", mood=ALL))
    assert [t.id for t in result] == [1]


def test_group_tracks_single_group_when_disabled(tracks):
    assert group_tracks(tracks, by_category=False) == [(None, tracks)]


def test_group_tracks_by_category_first_seen_order():
    catalog = [
        make_track(1, category="Pop"),
        make_track(2, category="Rock"),
        make_track(3, category="Pop"),
        make_track(4),
    ]
    groups = group_tracks(catalog, by_category=True)
    assert [(name, [t.id for t in ts]) for name, ts in groups] == [
        ("Pop", [1, 3]),
        ("Rock", [2]),
        (UNCLASSIFIED, [4]),
    ]


def test_options_start_with_all(tracks):
    assert category_options(tracks) == [ALL, "Ambient", "Hip Hop", "Rock", UNCLASSIFIED]
    assert mood_options(tracks) == [ALL, "Relaxed", "Energetic"]


def test_artwork_fallback_is_deterministic(tracks):
    assert artwork_for(tracks[0]) == artwork_for(tracks[0])
    assert artwork_for(tracks[0]) != artwork_for(tracks[1])
    with_art = make_track(9, artwork_url="https://img.test/9.jpg")
    assert artwork_for(with_art) == "https://img.test/9.jpg"


def test_index_rejects_duplicate_ids():
    with pytest.raises(ValueError):
        CatalogIndex([make_track(1), make_track(1)])


def test_index_setters_replace_filter_wholesale(tracks):
    index = CatalogIndex(tracks)
    original = index.filter

    index.set_category("Rock")
    assert original == FilterState()
    assert [t.id for t in index.view()] == [3]

    index.set_search("anthem")
    index.set_mood(ALL)
    assert index.filter == FilterState(search_text="anthem", category="Rock")

    index.clear_search()
    assert index.filter.search_text == ""
    assert index.filter.category == "Rock"

    index.clear_filters()
    assert index.filter == FilterState()
    assert len(index.view()) == len(tracks)


def test_index_get_accepts_string_ids(tracks):
    index = CatalogIndex(tracks)
    assert index.get("2").title == "Urban Pulse"
    assert index.get(2).title == "Urban Pulse"
    assert index.get("99") is None
