from __future__ import annotations

from dataclasses import dataclass

from filmrate.config import RecommendConfig
from filmrate.db import repo
from filmrate.db.conn import Database
from filmrate.db.loaders import load_films
from filmrate.errors import NotFoundError
from filmrate.models.entities import Film
from filmrate.util.logging import get_logger

LOG = get_logger(__name__)


@dataclass(frozen=True)
class Neighbor:
    user_id: int
    weight: int
    shared: int


@dataclass(frozen=True)
class Candidate:
    film_id: int
    score: float
    weight: int
    neighbor_id: int


class SimilarityRecommender:
    """Collaborative filtering over shared ratings.

    A neighbour's weight is the number of films both users rated where the
    two ratings differ by at most ``similarity_threshold``. Films the
    neighbours rated, that the user never rated and that score at least
    ``quality_floor``, are returned by their best neighbour weight.
    """

    def __init__(self, db: Database, config: RecommendConfig | None = None) -> None:
        self.db = db
        self.config = config or RecommendConfig()

    def neighbors(self, user_id: int) -> list[Neighbor]:
        with self.db.connect() as conn:
            if not repo.user_exists(conn, user_id):
                raise NotFoundError(f"User {user_id} not found")
            rows = repo.select_neighbor_rows(conn, user_id, self.config.similarity_threshold)
        neighbors = [
            Neighbor(
                user_id=int(row["neighbor_id"]),
                weight=int(row["weight"] or 0),
                shared=int(row["shared"]),
            )
            for row in rows
        ]
        neighbors = [n for n in neighbors if n.weight >= self.config.min_neighbor_weight]
        neighbors.sort(key=lambda n: (-n.weight, n.user_id))
        return neighbors

    def candidates(self, user_id: int) -> list[Candidate]:
        neighbors = self.neighbors(user_id)
        if not neighbors:
            return []
        weights = {n.user_id: n.weight for n in neighbors}
        with self.db.connect() as conn:
            rows = repo.select_unseen_neighbor_films(
                conn,
                user_id,
                list(weights),
                self.config.quality_floor,
            )

        best: dict[int, Candidate] = {}
        for row in rows:
            film_id = int(row["film_id"])
            neighbor_id = int(row["neighbor_id"])
            weight = weights[neighbor_id]
            existing = best.get(film_id)
            if existing is None or (weight, -neighbor_id) > (existing.weight, -existing.neighbor_id):
                best[film_id] = Candidate(
                    film_id=film_id,
                    score=float(row["score"]),
                    weight=weight,
                    neighbor_id=neighbor_id,
                )
        return sorted(best.values(), key=lambda c: (-c.weight, -c.score, c.film_id))

    def recommend(self, user_id: int) -> list[Film]:
        ranked = self.candidates(user_id)
        if not ranked:
            LOG.info("No recommendations for user %s", user_id)
            return []
        with self.db.connect() as conn:
            return load_films(conn, [c.film_id for c in ranked])
