"""Weighted multi-criteria ratings.

A rating scores a book on five fixed criteria. The headline figure shown to a
reader is a weighted sum of those criteria, using the reader's own weights
when they have stored some and ``DEFAULT_RATING_WEIGHTS`` otherwise.

Aggregates over many ratings average each criterion first and weight the
averaged tuple once, so the per-criterion figures stay the raw community
averages and only ``overall`` reflects the reader's weighting.
"""
import dataclasses
import typing

CRITERIA: typing.Tuple[str, ...] = (
    "enjoyment",
    "writing",
    "themes",
    "characters",
    "worldbuilding",
)

# Weight given to each slot of a reader's criteria ranking, most important first.
POSITION_WEIGHTS: typing.Tuple[float, ...] = (0.35, 0.25, 0.20, 0.12, 0.08)

ALL_BUCKET = "all"
RATING_BUCKETS: typing.Tuple[str, ...] = ("5", "4", "3", "2", "1")

# Lower bound (inclusive) of each star bucket; anything below 1.5 is "1".
_BUCKET_FLOORS: typing.Tuple[typing.Tuple[str, float], ...] = (
    ("5", 4.5),
    ("4", 3.5),
    ("3", 2.5),
    ("2", 1.5),
)


@dataclasses.dataclass(frozen=True)
class RatingWeights:
    enjoyment: float
    writing: float
    themes: float
    characters: float
    worldbuilding: float

    @classmethod
    def from_criteria_order(cls, order: typing.Sequence[str]) -> "RatingWeights":
        """Build weights from a ranking of the five criteria.

        The first criterion gets ``POSITION_WEIGHTS[0]``, the second
        ``POSITION_WEIGHTS[1]`` and so on. ``order`` must name every criterion
        exactly once.
        """
        if len(order) != len(CRITERIA) or set(order) != set(CRITERIA):
            raise ValueError("invalid_criteria_order")
        return cls(**dict(zip(order, POSITION_WEIGHTS)))

    @classmethod
    def from_mapping(cls, values: typing.Mapping[str, typing.Any]) -> "RatingWeights":
        return cls(**{name: float(values[name]) for name in CRITERIA})

    def as_dict(self) -> typing.Dict[str, float]:
        return {name: getattr(self, name) for name in CRITERIA}

    def total(self) -> float:
        return sum(self.as_dict().values())


DEFAULT_RATING_WEIGHTS = RatingWeights(
    enjoyment=0.35,
    writing=0.25,
    themes=0.20,
    characters=0.12,
    worldbuilding=0.08,
)


@dataclasses.dataclass(frozen=True)
class CriterionScores:
    enjoyment: float
    writing: float
    themes: float
    characters: float
    worldbuilding: float

    def as_dict(self) -> typing.Dict[str, float]:
        return {name: getattr(self, name) for name in CRITERIA}


@dataclasses.dataclass(frozen=True)
class RatingSummary:
    averages: CriterionScores
    overall: float
    rating_count: int

    def as_dict(self) -> typing.Dict[str, typing.Any]:
        return {
            "averages": self.averages.as_dict(),
            "overall": self.overall,
            "rating_count": self.rating_count,
        }


def calculate_weighted_rating(
    rating: typing.Any,
    preferences: typing.Optional[RatingWeights] = None
) -> float:
    """Return ``sum(score * weight)`` over the five criteria.

    ``rating`` is anything exposing the five criteria as attributes (an ORM
    row, ``CriterionScores``...). Scores are used as-is, out-of-range values
    propagate into the result.
    """
    weights = preferences or DEFAULT_RATING_WEIGHTS
    return sum(float(getattr(rating, name)) * getattr(weights, name) for name in CRITERIA)


def average_scores(ratings: typing.Sequence[typing.Any]) -> typing.Optional[CriterionScores]:
    if not ratings:
        return None
    count = len(ratings)
    return CriterionScores(**{
        name: sum(float(getattr(r, name)) for r in ratings) / count
        for name in CRITERIA
    })


def summarize_ratings(
    ratings: typing.Sequence[typing.Any],
    preferences: typing.Optional[RatingWeights] = None
) -> typing.Optional[RatingSummary]:
    averages = average_scores(ratings)
    if averages is None:
        return None
    return RatingSummary(
        averages=averages,
        overall=calculate_weighted_rating(averages, preferences),
        rating_count=len(ratings),
    )


def rating_bucket(score: float) -> str:
    for bucket, floor in _BUCKET_FLOORS:
        if score >= floor:
            return bucket
    return "1"


def filter_reviews(
    ratings: typing.Iterable[typing.Any],
    bucket: str,
    preferences: typing.Optional[RatingWeights] = None
) -> typing.List[typing.Any]:
    if bucket == ALL_BUCKET:
        return list(ratings)
    if bucket not in RATING_BUCKETS:
        raise ValueError("invalid_rating_filter")
    return [
        r for r in ratings
        if rating_bucket(calculate_weighted_rating(r, preferences)) == bucket
    ]


def sort_reviews(
    ratings: typing.Iterable[typing.Any],
    preferences: typing.Optional[RatingWeights] = None
) -> typing.List[typing.Any]:
    """Featured reviews first, then by weighted score, highest first."""
    return sorted(
        ratings,
        key=lambda r: (not r.featured, -calculate_weighted_rating(r, preferences))
    )
