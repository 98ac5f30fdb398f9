from datetime import date, timedelta

import pytest

from filmrate.errors import NotFoundError, ValidationError
from filmrate.models.entities import DirectorSort, Film, Genre, Mpa, Review, User

from conftest import make_film, make_user


def test_seeded_reference_data(services) -> None:
    assert [m.name for m in services.mpa.all()] == ["G", "PG", "PG-13", "R", "NC-17"]
    assert services.genres.name_by_id(1) == "Comedy"
    assert services.genres.exists_by_id(6)
    assert not services.genres.exists_by_id(42)
    with pytest.raises(NotFoundError):
        services.mpa.get(9)


def test_film_keeps_genre_order_and_drops_duplicates(services) -> None:
    film = make_film(services, "Mixed", genres=[4, 1, 4, 2], mpa_id=3)

    assert [g.id for g in film.genres] == [4, 1, 2]
    assert [g.name for g in film.genres] == ["Thriller", "Comedy", "Drama"]
    assert film.mpa.name == "PG-13"
    assert film.score == 0.0


@pytest.mark.parametrize(
    "changes",
    [
        {"name": "  "},
        {"description": "x" * 201},
        {"release_date": date(1895, 12, 27)},
        {"duration": 0},
    ],
)
def test_invalid_film_rejected(services, changes) -> None:
    fields = {
        "id": None,
        "name": "Valid",
        "description": "ok",
        "release_date": date(2001, 5, 5),
        "duration": 90,
        "mpa": Mpa(id=1),
    }
    fields.update(changes)

    with pytest.raises(ValidationError):
        services.films.create(Film(**fields))
    assert services.films.all() == []


def test_film_with_unknown_references(services) -> None:
    with pytest.raises(NotFoundError):
        make_film(services, "Bad Genre", genres=[99])
    with pytest.raises(NotFoundError):
        make_film(services, "Bad Mpa", mpa_id=12)


def test_duplicate_film_identity_rejected(services) -> None:
    make_film(services, "Twin", year=1999)
    make_film(services, "Twin", year=2005)

    with pytest.raises(ValidationError):
        make_film(services, "Twin", year=1999)


def test_update_film_keeps_score(services) -> None:
    film = make_film(services, "Draft", genres=[1])
    user = make_user(services, "critic")
    services.ratings.rate(film.id, user.id, 9)

    updated = services.films.update(
        Film(
            id=film.id,
            name="Final Cut",
            description=film.description,
            release_date=film.release_date,
            duration=120,
            mpa=Mpa(id=2),
            genres=(Genre(id=2),),
        )
    )

    assert updated.name == "Final Cut"
    assert [g.id for g in updated.genres] == [2]
    assert updated.score == 9.0


def test_director_films_sorting(services) -> None:
    director = services.directors.create("Agnes Varda")
    old = make_film(services, "Old", year=1962, directors=[director])
    new = make_film(services, "New", year=2000, directors=[director])
    make_film(services, "Elsewhere", year=1980)
    user = make_user(services, "fan")
    services.ratings.rate(new.id, user.id, 9)
    services.ratings.rate(old.id, user.id, 4)

    by_year = services.films.director_films(director.id, "year")
    by_likes = services.films.director_films(director.id, DirectorSort.LIKES)

    assert [f.id for f in by_year] == [old.id, new.id]
    assert [f.id for f in by_likes] == [new.id, old.id]
    assert by_year[0].directors[0].name == "Agnes Varda"


def test_director_films_rejects_unknown_sort(services) -> None:
    director = services.directors.create("Someone")

    with pytest.raises(ValidationError):
        services.films.director_films(director.id, "rating")
    with pytest.raises(NotFoundError):
        services.films.director_films(999, "year")


def test_director_name_required(services) -> None:
    with pytest.raises(ValidationError):
        services.directors.create("   ")


def test_delete_film_removes_ratings_reviews_and_events(services) -> None:
    film = make_film(services, "Doomed")
    user = make_user(services, "viewer")
    services.ratings.rate(film.id, user.id, 7)
    services.reviews.create(
        Review(id=None, content="Meh", is_positive=False, user_id=user.id, film_id=film.id)
    )

    services.films.delete(film.id)

    assert not services.films.exists(film.id)
    assert services.reviews.for_film(film.id) == []
    assert services.events.feed(user.id) == []
    with pytest.raises(NotFoundError):
        services.films.delete(film.id)


def test_user_name_defaults_to_login(services) -> None:
    user = make_user(services, "nameless", name="")

    assert user.name == "nameless"


def test_user_validation(services) -> None:
    with pytest.raises(ValidationError):
        make_user(services, "bad", email="not-an-email")
    with pytest.raises(ValidationError):
        make_user(services, "has space")
    with pytest.raises(ValidationError):
        make_user(services, "future", birthday=date.today() + timedelta(days=1))


def test_email_must_be_unique(services) -> None:
    first = make_user(services, "first", email="same@example.com")
    second = make_user(services, "second")

    with pytest.raises(ValidationError):
        make_user(services, "third", email="same@example.com")
    with pytest.raises(ValidationError):
        services.users.update(
            User(id=second.id, email="same@example.com", login="second", name="Second")
        )
    assert services.users.get(first.id).email == "same@example.com"


def test_review_update_keeps_usefulness(services) -> None:
    film = make_film(services, "Reviewed")
    author = make_user(services, "author")
    voter = make_user(services, "voter")
    review = services.reviews.create(
        Review(id=None, content="Good", is_positive=True, user_id=author.id, film_id=film.id)
    )
    services.review_votes.like(review.id, voter.id)

    updated = services.reviews.update(
        Review(
            id=review.id,
            content="Actually bad",
            is_positive=False,
            user_id=author.id,
            film_id=film.id,
            usefulness=100,
        )
    )

    assert updated.content == "Actually bad"
    assert updated.is_positive is False
    assert updated.usefulness == 1


def test_reviews_for_film_by_usefulness(services) -> None:
    film = make_film(services, "Debated")
    other = make_film(services, "Other")
    users = [make_user(services, f"user{i}") for i in range(3)]
    reviews = [
        services.reviews.create(
            Review(id=None, content=f"Take {i}", is_positive=True, user_id=u.id, film_id=film.id)
        )
        for i, u in enumerate(users)
    ]
    services.reviews.create(
        Review(id=None, content="Elsewhere", is_positive=True, user_id=users[0].id, film_id=other.id)
    )
    services.review_votes.like(reviews[2].id, users[0].id)
    services.review_votes.dislike(reviews[0].id, users[1].id)

    listed = services.reviews.for_film(film.id)

    assert [r.id for r in listed] == [reviews[2].id, reviews[1].id, reviews[0].id]
    assert len(services.reviews.for_film(count=2)) == 2
    with pytest.raises(ValidationError):
        services.reviews.for_film(film.id, count=0)


@pytest.mark.parametrize("value", [None, 3])
def test_director_sort_rejects_non_strings(value) -> None:
    with pytest.raises(ValidationError):
        DirectorSort.parse(value)


def test_review_needs_boolean_verdict(services) -> None:
    film = make_film(services, "Ambiguous")
    author = make_user(services, "author")

    with pytest.raises(ValidationError):
        services.reviews.create(
            Review(id=None, content="Hmm", is_positive="yes", user_id=author.id, film_id=film.id)
        )
    assert services.reviews.for_film(film.id) == []
