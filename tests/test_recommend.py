import pytest

from filmrate.config import RecommendConfig
from filmrate.engine import SimilarityRecommender
from filmrate.errors import NotFoundError

from conftest import make_film, make_user


def test_recommends_unseen_film_from_similar_user(services) -> None:
    f1 = make_film(services, "F1")
    f2 = make_film(services, "F2")
    f3 = make_film(services, "F3")
    x = make_user(services, "userx")
    y = make_user(services, "usery")
    services.ratings.rate(f1.id, x.id, 8)
    services.ratings.rate(f2.id, x.id, 6)
    services.ratings.rate(f1.id, y.id, 9)
    services.ratings.rate(f2.id, y.id, 5)
    services.ratings.rate(f3.id, y.id, 7)

    neighbors = services.recommender.neighbors(x.id)
    assert [(n.user_id, n.weight, n.shared) for n in neighbors] == [(y.id, 2, 2)]
    assert [f.id for f in services.recommender.recommend(x.id)] == [f3.id]


def test_never_recommends_rated_films(services) -> None:
    films = [make_film(services, f"Film {i}") for i in range(4)]
    x = make_user(services, "userx")
    y = make_user(services, "usery")
    for film in films:
        services.ratings.rate(film.id, y.id, 8)
    services.ratings.rate(films[0].id, x.id, 8)
    services.ratings.rate(films[1].id, x.id, 2)

    recommended = {f.id for f in services.recommender.recommend(x.id)}

    assert recommended == {films[2].id, films[3].id}
    assert not recommended & {films[0].id, films[1].id}


def test_quality_floor_excludes_weak_films(services) -> None:
    shared = make_film(services, "Shared")
    weak = make_film(services, "Weak")
    strong = make_film(services, "Strong")
    x = make_user(services, "userx")
    y = make_user(services, "usery")
    services.ratings.rate(shared.id, x.id, 7)
    services.ratings.rate(shared.id, y.id, 7)
    services.ratings.rate(weak.id, y.id, 5)
    services.ratings.rate(strong.id, y.id, 6)

    assert [f.id for f in services.recommender.recommend(x.id)] == [strong.id]


def test_dissimilar_users_are_not_neighbors(services) -> None:
    shared = make_film(services, "Shared")
    other = make_film(services, "Other")
    x = make_user(services, "userx")
    y = make_user(services, "usery")
    services.ratings.rate(shared.id, x.id, 2)
    services.ratings.rate(shared.id, y.id, 9)
    services.ratings.rate(other.id, y.id, 9)

    assert services.recommender.neighbors(x.id) == []
    assert services.recommender.recommend(x.id) == []


def test_user_without_ratings_gets_nothing(services) -> None:
    make_film(services, "Lonely")
    x = make_user(services, "userx")

    assert services.recommender.recommend(x.id) == []


def test_unknown_user_is_not_found(services) -> None:
    with pytest.raises(NotFoundError):
        services.recommender.recommend(404)


def test_candidates_rank_by_best_neighbor_weight(services) -> None:
    a = make_film(services, "A")
    b = make_film(services, "B")
    close_pick = make_film(services, "Close Pick")
    loose_pick = make_film(services, "Loose Pick")
    x = make_user(services, "userx")
    close = make_user(services, "close")
    loose = make_user(services, "loose")
    services.ratings.rate(a.id, x.id, 8)
    services.ratings.rate(b.id, x.id, 4)
    services.ratings.rate(a.id, close.id, 8)
    services.ratings.rate(b.id, close.id, 5)
    services.ratings.rate(a.id, loose.id, 9)
    services.ratings.rate(b.id, loose.id, 10)
    services.ratings.rate(close_pick.id, close.id, 6)
    services.ratings.rate(loose_pick.id, loose.id, 10)
    services.ratings.rate(close_pick.id, loose.id, 6)

    candidates = services.recommender.candidates(x.id)

    assert [c.film_id for c in candidates] == [close_pick.id, loose_pick.id]
    assert candidates[0].neighbor_id == close.id
    assert candidates[0].weight == 2
    assert candidates[1].weight == 1


def test_similarity_threshold_is_configurable(services) -> None:
    shared = make_film(services, "Shared")
    pick = make_film(services, "Pick")
    x = make_user(services, "userx")
    y = make_user(services, "usery")
    services.ratings.rate(shared.id, x.id, 5)
    services.ratings.rate(shared.id, y.id, 8)
    services.ratings.rate(pick.id, y.id, 9)

    assert services.recommender.recommend(x.id) == []

    lenient = SimilarityRecommender(services.db, RecommendConfig(similarity_threshold=3))
    assert [f.id for f in lenient.recommend(x.id)] == [pick.id]
