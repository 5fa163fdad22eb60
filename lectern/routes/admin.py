import logging
import typing
import fastapi
from fastapi import Path
import sqlalchemy.ext.asyncio
import lectern.db
import lectern.middleware.auth
import lectern.middleware.rate_limit
import lectern.ranking.weighted_rating as weighted_rating
import lectern.routes.books
import lectern.schemas.requests
import lectern.services.rating_service
import lectern.services.taxonomy_service
import lectern.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1/admin", tags=["Admin"])

limiter = lectern.middleware.rate_limit.limiter


@router.patch(
    "/ratings/{rating_id}/featured",
    summary="Feature or unfeature a review",
    description="Featured reviews are listed before all others on a book's page."
)
@limiter.limit(lectern.middleware.rate_limit.get_admin_limit())
async def set_rating_featured(
    request: fastapi.Request,
    body: lectern.schemas.requests.FeaturedRequest,
    rating_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    admin: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_admin)
):
    try:
        rating = await lectern.services.rating_service.set_featured(session, rating_id, body.featured)
        return lectern.utils.responses.success_response(
            lectern.routes.books.rating_to_dict(rating, weighted_rating.calculate_weighted_rating(rating))
        )
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("set_rating_featured", e)


@router.put(
    "/books/{book_id}/taxonomies",
    summary="Replace the taxonomy terms of a book",
    description="""
    Terms without an explicit `rank` are ranked by their position in the list
    (first = 1 = most definitive for the book).
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_admin_limit())
async def set_book_taxonomies(
    request: fastapi.Request,
    body: lectern.schemas.requests.BookTaxonomiesRequest,
    book_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    admin: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_admin)
):
    try:
        taxonomies = await lectern.services.taxonomy_service.set_book_taxonomies(
            session,
            book_id,
            [(t.taxonomy_id, t.rank) for t in body.taxonomies]
        )
        return lectern.utils.responses.success_response({"book_id": book_id, "taxonomies": taxonomies})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("set_book_taxonomies", e)
