from lectern.ranking.weighted_rating import (
    CRITERIA,
    DEFAULT_RATING_WEIGHTS,
    POSITION_WEIGHTS,
    CriterionScores,
    RatingSummary,
    RatingWeights,
    calculate_weighted_rating,
    filter_reviews,
    rating_bucket,
    sort_reviews,
    summarize_ratings,
)
from lectern.ranking.taxonomy import (
    BookTerm,
    CandidateBook,
    RankedBook,
    SelectedTerm,
    rank_books_by_taxonomy,
)
from lectern.ranking.compatibility import calculate_reading_compatibility

__all__ = [
    "CRITERIA",
    "DEFAULT_RATING_WEIGHTS",
    "POSITION_WEIGHTS",
    "CriterionScores",
    "RatingSummary",
    "RatingWeights",
    "calculate_weighted_rating",
    "filter_reviews",
    "rating_bucket",
    "sort_reviews",
    "summarize_ratings",
    "BookTerm",
    "CandidateBook",
    "RankedBook",
    "SelectedTerm",
    "rank_books_by_taxonomy",
    "calculate_reading_compatibility",
]
