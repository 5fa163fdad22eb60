import decimal
import logging
import typing
import sqlalchemy
import sqlalchemy.dialects.postgresql
import sqlalchemy.ext.asyncio
import lectern.config
import lectern.models.rating_preferences
import lectern.ranking.weighted_rating as weighted_rating

logger = logging.getLogger(__name__)


def validate_weights(weights: weighted_rating.RatingWeights) -> None:
    values = weights.as_dict().values()
    if any(v < 0.0 or v > 1.0 for v in values):
        raise ValueError("invalid_weights")
    if abs(weights.total() - 1.0) > lectern.config.settings.weight_sum_tolerance:
        raise ValueError("invalid_weights")


# Scale of the Numeric weight columns.
WEIGHT_PRECISION = decimal.Decimal("0.001")


def normalize_weights(weights: weighted_rating.RatingWeights) -> weighted_rating.RatingWeights:
    """Round weights to storage precision so the stored row still sums to 1.

    Rounding each weight on its own can leave the stored total a few
    thousandths short; the remainder goes to the heaviest criterion.
    """
    quantized = {
        name: decimal.Decimal(str(value)).quantize(WEIGHT_PRECISION, rounding=decimal.ROUND_HALF_UP)
        for name, value in weights.as_dict().items()
    }
    heaviest = max(weighted_rating.CRITERIA, key=lambda name: quantized[name])
    quantized[heaviest] += decimal.Decimal(1) - sum(quantized.values())
    return weighted_rating.RatingWeights.from_mapping(quantized)


def resolve_preferences(
    weights: typing.Optional[weighted_rating.RatingWeights],
    criteria_order: typing.Optional[typing.List[str]]
) -> typing.Tuple[weighted_rating.RatingWeights, typing.Optional[typing.List[str]]]:
    """Pick the weights to store and the order that produced them.

    Explicit weights win over an order; the order is only kept when the
    weights were derived from it.
    """
    if criteria_order is not None:
        derived = weighted_rating.RatingWeights.from_criteria_order(criteria_order)
        if weights is None:
            return derived, list(criteria_order)
    if weights is None:
        raise ValueError("invalid_weights")
    validate_weights(weights)
    return normalize_weights(weights), None


def to_weights(
    row: typing.Optional[lectern.models.rating_preferences.RatingPreferences]
) -> typing.Optional[weighted_rating.RatingWeights]:
    if row is None:
        return None
    values = {name: getattr(row, name) for name in weighted_rating.CRITERIA}
    if any(v is None for v in values.values()):
        return None
    return weighted_rating.RatingWeights.from_mapping(values)


async def get_rating_preferences(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int
) -> typing.Optional[lectern.models.rating_preferences.RatingPreferences]:
    stmt = sqlalchemy.select(lectern.models.rating_preferences.RatingPreferences).where(
        lectern.models.rating_preferences.RatingPreferences.user_id == user_id
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_rating_weights(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: typing.Optional[int]
) -> typing.Optional[weighted_rating.RatingWeights]:
    if user_id is None:
        return None
    return to_weights(await get_rating_preferences(session, user_id))


async def save_rating_preferences(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    weights: typing.Optional[weighted_rating.RatingWeights],
    criteria_order: typing.Optional[typing.List[str]]
) -> lectern.models.rating_preferences.RatingPreferences:
    """Store a reader's criterion weights.

    Either explicit ``weights`` or a ``criteria_order`` ranking is required.
    When only the order is given the weights are derived from it. Weights are
    validated and rounded here so that every stored row is usable by the
    calculator as-is.
    """
    weights, stored_order = resolve_preferences(weights, criteria_order)

    values: typing.Dict[str, typing.Any] = dict(weights.as_dict())
    values["criteria_order"] = stored_order

    stmt = sqlalchemy.dialects.postgresql.insert(
        lectern.models.rating_preferences.RatingPreferences
    ).values(
        user_id=user_id,
        **values
    ).on_conflict_do_update(
        index_elements=["user_id"],
        set_={**values, "updated_at": sqlalchemy.func.now()}
    ).returning(lectern.models.rating_preferences.RatingPreferences)

    result = await session.execute(stmt)
    row = result.scalar_one()
    await session.commit()
    logger.info(f"Saved rating preferences for user {user_id}")
    return row
