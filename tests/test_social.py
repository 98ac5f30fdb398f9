import pytest

from filmrate.errors import NotFoundError, ValidationError
from filmrate.models.entities import EventType, Operation

from conftest import make_film, make_user


def test_common_friends(services) -> None:
    a, b, c, d, e = (make_user(services, login) for login in ("a", "b", "c", "d", "e"))
    services.users.add_friend(a.id, c.id)
    services.users.add_friend(a.id, d.id)
    services.users.add_friend(b.id, c.id)
    services.users.add_friend(b.id, e.id)

    assert [u.id for u in services.social.common_friends(a.id, b.id)] == [c.id]


def test_friendship_is_directed(services) -> None:
    a = make_user(services, "a")
    b = make_user(services, "b")
    services.users.add_friend(a.id, b.id)

    assert [u.id for u in services.social.friends(a.id)] == [b.id]
    assert services.social.friends(b.id) == []
    assert services.users.get(a.id).friends == frozenset({b.id})


def test_add_friend_twice_keeps_one_edge(services) -> None:
    a = make_user(services, "a")
    b = make_user(services, "b")
    services.users.add_friend(a.id, b.id)
    services.users.add_friend(a.id, b.id)

    assert [u.id for u in services.social.friends(a.id)] == [b.id]
    assert len(services.events.feed(a.id)) == 1


def test_friend_changes_reach_the_feed(services) -> None:
    a = make_user(services, "a")
    b = make_user(services, "b")
    services.users.add_friend(a.id, b.id)
    services.users.remove_friend(a.id, b.id)

    events = services.events.feed(a.id)
    assert [(e.event_type, e.operation, e.entity_id) for e in events] == [
        (EventType.FRIEND, Operation.ADD, b.id),
        (EventType.FRIEND, Operation.REMOVE, b.id),
    ]


def test_friend_edge_errors(services) -> None:
    a = make_user(services, "a")
    b = make_user(services, "b")

    with pytest.raises(ValidationError):
        services.users.add_friend(a.id, a.id)
    with pytest.raises(NotFoundError):
        services.users.add_friend(a.id, 999)
    with pytest.raises(NotFoundError):
        services.users.remove_friend(a.id, b.id)


def test_common_films_ordered_by_score_then_popularity(services) -> None:
    a = make_user(services, "a")
    b = make_user(services, "b")
    extra = make_user(services, "extra")
    f1 = make_film(services, "F1")
    f2 = make_film(services, "F2")
    f3 = make_film(services, "F3")
    only_a = make_film(services, "Only A")
    for film, value in ((f1, 6), (f2, 9), (f3, 6)):
        services.ratings.rate(film.id, a.id, value)
        services.ratings.rate(film.id, b.id, value)
    services.ratings.rate(f3.id, extra.id, 6)
    services.ratings.rate(only_a.id, a.id, 10)

    assert [f.id for f in services.social.common_films(a.id, b.id)] == [f2.id, f3.id, f1.id]


def test_social_queries_require_known_users(services) -> None:
    a = make_user(services, "a")

    with pytest.raises(NotFoundError):
        services.social.common_friends(a.id, 999)
    with pytest.raises(NotFoundError):
        services.social.common_films(999, a.id)
    with pytest.raises(NotFoundError):
        services.social.friends(999)
