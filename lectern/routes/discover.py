import logging
import fastapi
from fastapi import Path, Query
import sqlalchemy.ext.asyncio
import lectern.config
import lectern.db
import lectern.middleware.rate_limit
import lectern.schemas.responses
import lectern.services.discover_service
import lectern.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1/discover", tags=["Discover"])

limiter = lectern.middleware.rate_limit.limiter


@router.get(
    "/genre/{view_id}",
    response_model=lectern.schemas.responses.DiscoverResponse,
    summary="Discover books for a genre view",
    description="""
    Books carrying any of the view's taxonomy terms, ranked by
    `taxonomic_score`: the sum over matching terms of
    `importance / rank`, where `rank` is how central the term is to the book
    (1 = most central). Ties are broken by `matching_taxonomies`.

    A view without terms yields an empty list. When no book matches, the most
    recent books are returned unranked.

    **Example:** `/api/v1/discover/genre/12?limit=50`
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def discover_by_genre_view(
    request: fastapi.Request,
    view_id: int = Path(..., ge=1, description="Genre view ID"),
    limit: int = Query(
        lectern.config.settings.discover_default_limit,
        ge=1,
        le=lectern.config.settings.discover_max_limit,
        description="Maximum number of books"
    ),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session)
):
    try:
        books = await lectern.services.discover_service.discover_by_view(session, view_id, limit)
        return lectern.utils.responses.success_response({"view_id": view_id, "books": books})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("discover_by_genre_view", e)
