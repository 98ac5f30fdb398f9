from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum

from filmrate.errors import ValidationError


class EventType(str, Enum):
    LIKE = "LIKE"
    REVIEW = "REVIEW"
    FRIEND = "FRIEND"


class Operation(str, Enum):
    ADD = "ADD"
    REMOVE = "REMOVE"
    UPDATE = "UPDATE"


class Vote(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class VoteState(str, Enum):
    NONE = "none"
    LIKED = "liked"
    DISLIKED = "disliked"


class DirectorSort(str, Enum):
    YEAR = "year"
    LIKES = "likes"

    @classmethod
    def parse(cls, value: str | DirectorSort) -> DirectorSort:
        if isinstance(value, DirectorSort):
            return value
        allowed = ", ".join(member.value for member in cls)
        if not isinstance(value, str):
            raise ValidationError(f"Unknown sort: {value!r} (expected one of {allowed})")
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown sort: {value!r} (expected one of {allowed})") from None


@dataclass(frozen=True)
class Mpa:
    id: int
    name: str | None = None


@dataclass(frozen=True)
class Genre:
    id: int
    name: str | None = None


@dataclass(frozen=True)
class Director:
    id: int | None
    name: str


@dataclass(frozen=True)
class Film:
    id: int | None
    name: str
    description: str | None
    release_date: date
    duration: int
    mpa: Mpa
    genres: tuple[Genre, ...] = ()
    directors: tuple[Director, ...] = ()
    score: float = 0.0

    @property
    def identity(self) -> tuple[str, date]:
        """Duplicate-detection key."""
        return (self.name, self.release_date)


@dataclass(frozen=True)
class User:
    id: int | None
    email: str
    login: str
    name: str | None = None
    birthday: date | None = None
    friends: frozenset[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Review:
    id: int | None
    content: str
    is_positive: bool
    user_id: int
    film_id: int
    usefulness: int = 0


@dataclass(frozen=True)
class Event:
    event_id: int
    user_id: int
    timestamp: int
    event_type: EventType
    operation: Operation
    entity_id: int
