"""Rating, review-usefulness and recommendation engine."""

from filmrate.engine.popularity import PopularityRanker
from filmrate.engine.ratings import RatingAggregator
from filmrate.engine.recommend import Neighbor, SimilarityRecommender
from filmrate.engine.review_votes import ReviewVoteLedger, VoteAction, transition
from filmrate.engine.social import SocialGraphQuery

__all__ = [
    "Neighbor",
    "PopularityRanker",
    "RatingAggregator",
    "ReviewVoteLedger",
    "SimilarityRecommender",
    "SocialGraphQuery",
    "VoteAction",
    "transition",
]
