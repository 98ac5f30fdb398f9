from __future__ import annotations

from dataclasses import dataclass

from filmrate.catalog.films import FilmStore
from filmrate.catalog.reference import DirectorStore, GenreLookup, MpaLookup
from filmrate.catalog.reviews import ReviewStore
from filmrate.catalog.users import UserStore
from filmrate.config import Config
from filmrate.db.conn import Database, ensure_db
from filmrate.engine import (
    PopularityRanker,
    RatingAggregator,
    ReviewVoteLedger,
    SimilarityRecommender,
    SocialGraphQuery,
)
from filmrate.events import EventLedger


@dataclass(frozen=True)
class Services:
    db: Database
    events: EventLedger
    films: FilmStore
    users: UserStore
    reviews: ReviewStore
    genres: GenreLookup
    mpa: MpaLookup
    directors: DirectorStore
    ratings: RatingAggregator
    review_votes: ReviewVoteLedger
    popularity: PopularityRanker
    recommender: SimilarityRecommender
    social: SocialGraphQuery


def build_services(cfg: Config) -> Services:
    ensure_db(cfg.database_path)
    db = Database.from_config(cfg)
    events = EventLedger(db)
    return Services(
        db=db,
        events=events,
        films=FilmStore(db),
        users=UserStore(db, events),
        reviews=ReviewStore(db, events),
        genres=GenreLookup(db),
        mpa=MpaLookup(db),
        directors=DirectorStore(db),
        ratings=RatingAggregator(db, events, cfg.ratings),
        review_votes=ReviewVoteLedger(db),
        popularity=PopularityRanker(db),
        recommender=SimilarityRecommender(db, cfg.recommend),
        social=SocialGraphQuery(db),
    )
