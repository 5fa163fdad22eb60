import logging
import typing
import fastapi
from fastapi import Path, Query
import sqlalchemy.ext.asyncio
import lectern.db
import lectern.middleware.auth
import lectern.middleware.rate_limit
import lectern.ranking.weighted_rating as weighted_rating
import lectern.schemas.requests
import lectern.schemas.responses
import lectern.services.book_service
import lectern.services.preferences_service
import lectern.services.rating_service
import lectern.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1", tags=["Books"])

limiter = lectern.middleware.rate_limit.limiter


def rating_to_dict(
    r,
    weighted: typing.Optional[float] = None
) -> typing.Dict[str, typing.Any]:
    return {
        "rating_id": r.rating_id,
        "user_id": r.user_id,
        "book_id": r.book_id,
        "enjoyment": r.enjoyment,
        "writing": r.writing,
        "themes": r.themes,
        "characters": r.characters,
        "worldbuilding": r.worldbuilding,
        "review_text": r.review_text,
        "featured": bool(r.featured),
        "report_status": r.report_status,
        "created_at": r.created_at.isoformat() if r.created_at else None,
        "updated_at": r.updated_at.isoformat() if r.updated_at else None,
        "weighted_rating": round(weighted, 4) if weighted is not None else None,
    }


async def _viewer_weights(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user: typing.Optional[typing.Dict[str, typing.Any]]
) -> typing.Optional[weighted_rating.RatingWeights]:
    if user is None:
        return None
    return await lectern.services.preferences_service.get_rating_weights(session, user["user_id"])


@router.get(
    "/books/{book_id}",
    response_model=lectern.schemas.responses.BookDetailResponse,
    summary="Get book details with rating summary",
    description="""
    Get a book, its taxonomy terms and its rating summary.

    `rating_summary.averages` holds the plain community average of each
    criterion. `rating_summary.overall` weights that averaged tuple with the
    viewer's rating preferences when authenticated, otherwise with the
    default weights (enjoyment 35%, writing 25%, themes 20%, characters 12%,
    worldbuilding 8%).

    `rating_summary` is `null` when the book has no ratings yet.
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_book(
    request: fastapi.Request,
    book_id: int = Path(..., ge=1, description="Book ID"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Optional[typing.Dict[str, typing.Any]] = fastapi.Depends(
        lectern.middleware.auth.get_current_user_optional
    )
):
    try:
        book = await lectern.services.book_service.get_book(session, book_id)
        if book is None:
            return lectern.utils.responses.error_response(
                "NOT_FOUND", f"Book {book_id} not found", status_code=404
            )

        weights = await _viewer_weights(session, current_user)
        data = dict(book)
        data["rating_summary"] = await lectern.services.book_service.get_book_rating_summary(
            session, book_id, weights
        )
        return lectern.utils.responses.success_response(data)
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_book", e)


@router.get(
    "/books/{book_id}/ratings",
    response_model=lectern.schemas.responses.RatingListResponse,
    summary="List reviews of a book",
    description="""
    Featured reviews come first, then reviews by weighted score, highest first.

    **Filter Options** (applied to the weighted score):
    - `all`: no filter (default)
    - `5`: 4.5 and above
    - `4`: 3.5 up to 4.5
    - `3`: 2.5 up to 3.5
    - `2`: 1.5 up to 2.5
    - `1`: below 1.5
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_book_ratings(
    request: fastapi.Request,
    book_id: int = Path(..., ge=1, description="Book ID"),
    filter: str = Query("all", pattern="^(all|5|4|3|2|1)$", description="Star bucket"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Optional[typing.Dict[str, typing.Any]] = fastapi.Depends(
        lectern.middleware.auth.get_current_user_optional
    )
):
    try:
        weights = await _viewer_weights(session, current_user)
        reviews = await lectern.services.rating_service.list_book_reviews(
            session, book_id, filter, weights
        )
        return lectern.utils.responses.success_response({
            "ratings": [rating_to_dict(r, score) for r, score in reviews],
            "total_count": len(reviews),
            "filter": filter,
            "weighted_with": "preferences" if weights is not None else "defaults",
        })
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_book_ratings", e)


@router.post(
    "/books/{book_id}/ratings",
    summary="Rate a book",
    description="""
    Create or replace the authenticated user's rating of a book. Each of the
    five criteria is an integer from 1 to 5.
    """,
    responses={
        200: {"description": "Rating saved"},
        401: {"description": "Not authenticated"},
        404: {"description": "Book not found"}
    }
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def upsert_rating(
    request: fastapi.Request,
    body: lectern.schemas.requests.RatingRequest,
    book_id: int = Path(..., ge=1, description="Book ID"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        rating = await lectern.services.rating_service.upsert_rating(
            session,
            current_user["user_id"],
            book_id,
            body.scores(),
            body.review_text
        )
        weights = await _viewer_weights(session, current_user)
        return lectern.utils.responses.success_response(
            rating_to_dict(rating, weighted_rating.calculate_weighted_rating(rating, weights))
        )
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("upsert_rating", e)


@router.get(
    "/books/{book_id}/user-rating",
    summary="Get your rating of a book",
    description="Returns `data: null` when you have not rated the book."
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_user_rating(
    request: fastapi.Request,
    book_id: int = Path(..., ge=1, description="Book ID"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        rating = await lectern.services.rating_service.get_user_rating(
            session, current_user["user_id"], book_id
        )
        if rating is None:
            return lectern.utils.responses.success_response(None)
        weights = await _viewer_weights(session, current_user)
        return lectern.utils.responses.success_response(
            rating_to_dict(rating, weighted_rating.calculate_weighted_rating(rating, weights))
        )
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_user_rating", e)


@router.delete(
    "/books/{book_id}/ratings",
    summary="Delete your rating of a book"
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def delete_rating(
    request: fastapi.Request,
    book_id: int = Path(..., ge=1, description="Book ID"),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        await lectern.services.rating_service.delete_rating(
            session, current_user["user_id"], book_id
        )
        return lectern.utils.responses.success_response({"deleted": True})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("delete_rating", e)
