"""Reading compatibility between two readers' criterion weights."""
import dataclasses
import typing

import lectern.ranking.weighted_rating as weighted_rating

# Upper bound (inclusive) of the weight difference for each level, tightest first,
# with its label and its score on the -3..+3 scale.
_COMPATIBILITY_LEVELS: typing.Tuple[typing.Tuple[float, str, int], ...] = (
    (0.02, "Overwhelmingly Compatible", 3),
    (0.05, "Very Compatible", 2),
    (0.10, "Mostly Compatible", 1),
    (0.20, "Mixed", 0),
    (0.35, "Mostly Incompatible", -1),
    (0.40, "Not Compatible", -2),
)
LEAST_COMPATIBLE = "Overwhelmingly Not Compatible"
LEAST_COMPATIBLE_SCORE = -3


@dataclasses.dataclass(frozen=True)
class CriterionCompatibility:
    compatibility: str
    difference: float


@dataclasses.dataclass(frozen=True)
class CompatibilityReport:
    overall: str
    score: int
    overall_difference: float
    criteria: typing.Dict[str, CriterionCompatibility]

    def as_dict(self) -> typing.Dict[str, typing.Any]:
        return {
            "overall": self.overall,
            "score": self.score,
            "overall_difference": self.overall_difference,
            "criteria": {
                name: {"compatibility": c.compatibility, "difference": c.difference}
                for name, c in self.criteria.items()
            },
        }


def compatibility_label(difference: float) -> str:
    for upper, label, _ in _COMPATIBILITY_LEVELS:
        if difference <= upper:
            return label
    return LEAST_COMPATIBLE


def compatibility_score(difference: float) -> int:
    for upper, _, score in _COMPATIBILITY_LEVELS:
        if difference <= upper:
            return score
    return LEAST_COMPATIBLE_SCORE


def calculate_reading_compatibility(
    first: typing.Optional[weighted_rating.RatingWeights],
    second: typing.Optional[weighted_rating.RatingWeights]
) -> CompatibilityReport:
    first = first or weighted_rating.DEFAULT_RATING_WEIGHTS
    second = second or weighted_rating.DEFAULT_RATING_WEIGHTS

    criteria: typing.Dict[str, CriterionCompatibility] = {}
    weighted_difference = 0.0
    total_weight = 0.0

    for name in weighted_rating.CRITERIA:
        a = getattr(first, name)
        b = getattr(second, name)
        difference = abs(a - b)
        criteria[name] = CriterionCompatibility(
            compatibility=compatibility_label(difference),
            difference=difference,
        )
        # Criteria both readers care about count more towards the overall figure.
        criterion_weight = (a + b) / 2
        weighted_difference += difference * criterion_weight
        total_weight += criterion_weight

    overall_difference = weighted_difference / total_weight if total_weight > 0 else 0.0

    return CompatibilityReport(
        overall=compatibility_label(overall_difference),
        score=compatibility_score(overall_difference),
        overall_difference=overall_difference,
        criteria=criteria,
    )
