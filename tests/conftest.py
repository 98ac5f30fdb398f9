from datetime import date

import pytest

from filmrate.config import default_config
from filmrate.models.entities import Film, Genre, Mpa, User
from filmrate.services import build_services


@pytest.fixture
def services(tmp_path):
    cfg = default_config(str(tmp_path / "test.sqlite"))
    return build_services(cfg)


def make_film(services, name: str, year: int = 2000, genres=(), directors=(), **kwargs):
    film = Film(
        id=None,
        name=name,
        description=kwargs.get("description", f"About {name}"),
        release_date=kwargs.get("release_date", date(year, 1, 1)),
        duration=kwargs.get("duration", 100),
        mpa=Mpa(id=kwargs.get("mpa_id", 1)),
        genres=tuple(Genre(id=g) for g in genres),
        directors=tuple(directors),
    )
    return services.films.create(film)


def make_user(services, login: str, **kwargs):
    user = User(
        id=None,
        email=kwargs.get("email", f"{login}@example.com"),
        login=login,
        name=kwargs.get("name", login.title()),
        birthday=kwargs.get("birthday", date(1990, 1, 1)),
    )
    return services.users.create(user)
