from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TypeVar

import typer
from rich.console import Console
from rich.table import Table

from filmrate.config import load_config
from filmrate.db.conn import ensure_db
from filmrate.errors import (
    ConflictError,
    FilmrateError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from filmrate.models.entities import Film, User
from filmrate.services import Services, build_services
from filmrate.util.logging import configure_logging

app = typer.Typer(add_completion=False)
console = Console()

T = TypeVar("T")

_EXIT_CODES: dict[type[FilmrateError], int] = {
    ValidationError: 2,
    ConflictError: 3,
    NotFoundError: 4,
    StorageError: 1,
}

ConfigOption = typer.Option(None, "--config", "-c", help="Path to config.toml")


def _services(config: Path | None) -> Services:
    cfg = load_config(config)
    configure_logging()
    return build_services(cfg)


def _run(func: Callable[[], T]) -> T:
    try:
        return func()
    except FilmrateError as exc:
        console.print(f"[red]{type(exc).__name__}: {exc}[/red]")
        raise typer.Exit(code=_EXIT_CODES.get(type(exc), 1)) from exc


def _print_films(films: list[Film]) -> None:
    if not films:
        console.print("[yellow]No films.[/yellow]")
        return
    table = Table("#", "id", "score", "title", "year", "genres")
    for rank, film in enumerate(films, start=1):
        genres = ", ".join(g.name or str(g.id) for g in film.genres)
        table.add_row(
            str(rank),
            str(film.id),
            f"{film.score:.1f}",
            film.name,
            str(film.release_date.year),
            genres,
        )
    console.print(table)


def _print_users(users: list[User]) -> None:
    if not users:
        console.print("[yellow]No users.[/yellow]")
        return
    for user in users:
        console.print(f"{user.id:>5}  {user.login}  ({user.name}, {user.email})")


@app.command()
def init_db(config: Path | None = ConfigOption) -> None:
    """Create the database and seed reference tables."""
    cfg = load_config(config)
    ensure_db(cfg.database_path)
    console.print(f"Database ready at {cfg.database_path}")


@app.command()
def rate(film_id: int, user_id: int, score: int, config: Path | None = ConfigOption) -> None:
    """Rate a film on behalf of a user (replaces an earlier rating)."""
    services = _services(config)
    film = _run(lambda: services.ratings.rate(film_id, user_id, score))
    console.print(f"{film.name}: score={film.score:.1f}")


@app.command()
def unrate(film_id: int, user_id: int, config: Path | None = ConfigOption) -> None:
    """Remove a user's rating of a film."""
    services = _services(config)
    film = _run(lambda: services.ratings.unrate(film_id, user_id))
    console.print(f"{film.name}: score={film.score:.1f}")


@app.command()
def popular(
    count: int | None = None,
    genre: int | None = None,
    year: int | None = None,
    config: Path | None = ConfigOption,
) -> None:
    """List films by score, optionally filtered by genre id and year."""
    services = _services(config)
    _print_films(_run(lambda: services.popularity.popular(count=count, genre_id=genre, year=year)))


@app.command()
def recommend(user_id: int, explain: bool = False, config: Path | None = ConfigOption) -> None:
    """Recommend unseen films liked by users with similar ratings."""
    services = _services(config)
    console.print(f"Recommending for user {user_id}")
    _print_films(_run(lambda: services.recommender.recommend(user_id)))
    if explain:
        neighbors = _run(lambda: services.recommender.neighbors(user_id))
        console.print("\nNeighbours:")
        for neighbor in neighbors:
            console.print(
                f"  user {neighbor.user_id:>5}  weight={neighbor.weight}  shared={neighbor.shared}"
            )


@app.command()
def common_friends(user_id: int, other_id: int, config: Path | None = ConfigOption) -> None:
    """Show friends both users have added."""
    services = _services(config)
    _print_users(_run(lambda: services.social.common_friends(user_id, other_id)))


@app.command()
def common_films(user_id: int, other_id: int, config: Path | None = ConfigOption) -> None:
    """Show films both users have rated."""
    services = _services(config)
    _print_films(_run(lambda: services.social.common_films(user_id, other_id)))


@app.command()
def like_review(review_id: int, user_id: int, config: Path | None = ConfigOption) -> None:
    """Mark a review useful."""
    services = _services(config)
    review = _run(lambda: services.review_votes.like(review_id, user_id))
    console.print(f"Review {review.id}: usefulness={review.usefulness}")


@app.command()
def dislike_review(review_id: int, user_id: int, config: Path | None = ConfigOption) -> None:
    """Mark a review not useful."""
    services = _services(config)
    review = _run(lambda: services.review_votes.dislike(review_id, user_id))
    console.print(f"Review {review.id}: usefulness={review.usefulness}")


@app.command()
def remove_review_like(review_id: int, user_id: int, config: Path | None = ConfigOption) -> None:
    """Retract a like on a review."""
    services = _services(config)
    review = _run(lambda: services.review_votes.remove_like(review_id, user_id))
    console.print(f"Review {review.id}: usefulness={review.usefulness}")


@app.command()
def remove_review_dislike(review_id: int, user_id: int, config: Path | None = ConfigOption) -> None:
    """Retract a dislike on a review."""
    services = _services(config)
    review = _run(lambda: services.review_votes.remove_dislike(review_id, user_id))
    console.print(f"Review {review.id}: usefulness={review.usefulness}")


@app.command()
def feed(user_id: int, config: Path | None = ConfigOption) -> None:
    """Print a user's activity feed."""
    services = _services(config)
    events = _run(lambda: services.events.feed(user_id))
    if not events:
        console.print("[yellow]No events.[/yellow]")
        return
    for event in events:
        when = datetime.fromtimestamp(event.timestamp / 1000).isoformat(timespec="seconds")
        console.print(
            f"{when}  {event.event_type.value:<6} {event.operation.value:<6} {event.entity_id}"
        )


@app.command()
def director_films(
    director_id: int,
    sort_by: str = "year",
    config: Path | None = ConfigOption,
) -> None:
    """List a director's films sorted by release year or score."""
    services = _services(config)
    _print_films(_run(lambda: services.films.director_films(director_id, sort_by)))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
