from playlistgen.schemas.preferences import PreferenceSet
from playlistgen.services.seeds import MAX_TOTAL_SEEDS, RecommendationQuery, select_seed_queries


def _prefs(artists=0, genres=0, tracks=0) -> PreferenceSet:
    return PreferenceSet(
        artists=[{"id": f"a{i}", "name": f"Artist {i}"} for i in range(artists)],
        genres=[f"g{i}" for i in range(genres)],
        tracks=[{"id": f"t{i}"} for i in range(tracks)],
    )


def test_no_seeds_yields_no_queries():
    assert select_seed_queries(PreferenceSet()) == []


def test_single_query_when_everything_fits():
    queries = select_seed_queries(_prefs(artists=2, genres=2, tracks=1))
    assert len(queries) == 1
    primary = queries[0]
    assert primary.seed_artists == ["a0", "a1"]
    assert primary.seed_genres == ["g0", "g1"]
    assert primary.seed_tracks == ["t0"]
    assert primary.limit == 20


def test_variation_query_when_material_overflows():
    queries = select_seed_queries(_prefs(artists=3, genres=1, tracks=2), variation_limit=15)
    assert len(queries) == 2
    variation = queries[1]
    assert variation.seed_artists == ["a0", "a1", "a2"]
    assert variation.seed_genres == ["g0"]
    assert variation.seed_tracks == []
    assert variation.limit == 15


def test_extra_tracks_alone_do_not_create_empty_variation():
    queries = select_seed_queries(_prefs(tracks=3))
    assert len(queries) == 1
    assert queries[0].seed_tracks == ["t0"]


def test_third_query_uses_later_genres():
    queries = select_seed_queries(_prefs(artists=5, genres=5, tracks=4))
    assert len(queries) == 3
    assert queries[2].seed_artists == ["a0", "a1"]
    assert queries[2].seed_genres == ["g2", "g3"]
    assert queries[2].seed_tracks == []


def test_every_query_respects_seed_cap():
    for shape in [(5, 5, 10), (3, 4, 1), (0, 5, 0), (5, 0, 5)]:
        for query in select_seed_queries(_prefs(*shape)):
            assert 0 < query.seed_count <= MAX_TOTAL_SEEDS


def test_earliest_preferences_win():
    prefs = PreferenceSet(
        artists=[{"id": "first"}, {"id": "second"}, {"id": "third"}],
        genres=["jazz", "jazz", "soul"],
    )
    primary = select_seed_queries(prefs)[0]
    assert primary.seed_artists == ["first", "second"]
    assert primary.seed_genres == ["jazz", "soul"]


def test_target_params_are_shared():
    queries = select_seed_queries(_prefs(artists=3, genres=4), target_params={"target_energy": 0.5})
    assert all(query.target_params == {"target_energy": 0.5} for query in queries)


def test_bounded_truncates_without_error():
    query = RecommendationQuery(seed_artists=["a", "b", "c"], seed_genres=["x", "y"], seed_tracks=["t"])
    bounded = query.bounded()
    assert bounded.seed_count == 5
    assert bounded.seed_tracks == []
