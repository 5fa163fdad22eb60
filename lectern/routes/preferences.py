import logging
import typing
import fastapi
from fastapi import Path
import sqlalchemy.ext.asyncio
import lectern.db
import lectern.middleware.auth
import lectern.middleware.rate_limit
import lectern.ranking.compatibility
import lectern.ranking.weighted_rating as weighted_rating
import lectern.schemas.requests
import lectern.services.preferences_service
import lectern.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1", tags=["Rating Preferences"])

limiter = lectern.middleware.rate_limit.limiter


def _preferences_to_dict(row) -> typing.Dict[str, typing.Any]:
    weights = lectern.services.preferences_service.to_weights(row)
    return {
        "user_id": row.user_id,
        "weights": weights.as_dict() if weights is not None else None,
        "criteria_order": list(row.criteria_order) if row.criteria_order else None,
        "updated_at": row.updated_at.isoformat() if row.updated_at else None,
    }


@router.get(
    "/rating-preferences",
    summary="Get your rating preferences",
    description="""
    Returns your stored preferences (or `null`) together with the weights
    actually applied to your ratings, which fall back to the defaults.
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_rating_preferences(
    request: fastapi.Request,
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        row = await lectern.services.preferences_service.get_rating_preferences(
            session, current_user["user_id"]
        )
        weights = lectern.services.preferences_service.to_weights(row)
        effective = weights or weighted_rating.DEFAULT_RATING_WEIGHTS
        return lectern.utils.responses.success_response({
            "preferences": _preferences_to_dict(row) if row is not None else None,
            "effective_weights": effective.as_dict(),
        })
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_rating_preferences", e)


@router.put(
    "/rating-preferences",
    summary="Save your rating preferences",
    description="""
    Provide either all five criterion weights (each 0..1, summing to 1.0) or
    `criteria_order`, a ranking of the five criteria from most to least
    important. A ranking is converted to weights 35/25/20/12/8%.
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def save_rating_preferences(
    request: fastapi.Request,
    body: lectern.schemas.requests.RatingPreferencesRequest,
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        row = await lectern.services.preferences_service.save_rating_preferences(
            session,
            current_user["user_id"],
            body.weights(),
            body.criteria_order
        )
        return lectern.utils.responses.success_response(_preferences_to_dict(row))
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("save_rating_preferences", e)


@router.get(
    "/users/{user_id}/compatibility",
    summary="Reading compatibility with another reader",
    description="""
    Compares your criterion weights with another reader's. Readers without
    stored preferences are compared using the default weights.
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_reading_compatibility(
    request: fastapi.Request,
    user_id: int = Path(..., ge=1, description="The other reader's user ID"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        mine = await lectern.services.preferences_service.get_rating_weights(
            session, current_user["user_id"]
        )
        theirs = await lectern.services.preferences_service.get_rating_weights(session, user_id)
        report = lectern.ranking.compatibility.calculate_reading_compatibility(mine, theirs)
        data = report.as_dict()
        data["user_id"] = user_id
        return lectern.utils.responses.success_response(data)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_reading_compatibility", e)
