import logging
import typing
import fastapi
from fastapi import Path, Query
import sqlalchemy.ext.asyncio
import lectern.db
import lectern.middleware.auth
import lectern.middleware.rate_limit
import lectern.schemas.requests
import lectern.services.genre_view_service
import lectern.services.taxonomy_service
import lectern.utils.responses

logger = logging.getLogger(__name__)

router = fastapi.APIRouter(prefix="/api/v1/genres", tags=["Genres"])

limiter = lectern.middleware.rate_limit.limiter


def _taxonomy_to_dict(t) -> typing.Dict[str, typing.Any]:
    return {
        "taxonomy_id": t.taxonomy_id,
        "name": t.name,
        "slug": t.slug,
        "type": t.type,
        "description": t.description,
    }


@router.get(
    "",
    summary="List taxonomy terms",
    description="""
    **Type Filter Options:** `genre`, `subgenre`, `theme`, `trope`. Omit to list all.
    """
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def list_taxonomies(
    request: fastapi.Request,
    type: typing.Optional[str] = Query(
        None, pattern="^(genre|subgenre|theme|trope)$", description="Filter by type"
    ),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session)
):
    try:
        taxonomies = await lectern.services.taxonomy_service.list_taxonomies(session, type)
        return lectern.utils.responses.success_response({"taxonomies": taxonomies})
    except Exception as e:
        return lectern.utils.responses.internal_error_response("list_taxonomies", e)


@router.post(
    "",
    summary="Create a taxonomy term (admin)",
    status_code=201
)
@limiter.limit(lectern.middleware.rate_limit.get_admin_limit())
async def create_taxonomy(
    request: fastapi.Request,
    body: lectern.schemas.requests.TaxonomyCreateRequest,
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    admin: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_admin)
):
    try:
        taxonomy = await lectern.services.taxonomy_service.create_taxonomy(
            session, body.name, body.type, body.description
        )
        return lectern.utils.responses.success_response(_taxonomy_to_dict(taxonomy), status_code=201)
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("create_taxonomy", e)


@router.put(
    "/{taxonomy_id}",
    summary="Update a taxonomy term (admin)"
)
@limiter.limit(lectern.middleware.rate_limit.get_admin_limit())
async def update_taxonomy(
    request: fastapi.Request,
    body: lectern.schemas.requests.TaxonomyUpdateRequest,
    taxonomy_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    admin: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_admin)
):
    try:
        taxonomy = await lectern.services.taxonomy_service.update_taxonomy(
            session, taxonomy_id, body.name, body.type, body.description
        )
        return lectern.utils.responses.success_response(_taxonomy_to_dict(taxonomy))
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("update_taxonomy", e)


@router.delete(
    "/{taxonomy_id}",
    summary="Delete a taxonomy term (admin)"
)
@limiter.limit(lectern.middleware.rate_limit.get_admin_limit())
async def delete_taxonomy(
    request: fastapi.Request,
    taxonomy_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    admin: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_admin)
):
    try:
        await lectern.services.taxonomy_service.delete_taxonomy(session, taxonomy_id)
        return lectern.utils.responses.success_response({"deleted": True})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("delete_taxonomy", e)


# ============================================================
# Genre views
# ============================================================

@router.post(
    "/views",
    summary="Create a genre view",
    description="""
    Save a named selection of taxonomy terms. Terms are ranked in the order
    given; `importance` (default 1.0) scales how much a term counts when
    books are ranked for this view.
    """,
    status_code=201
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def create_view(
    request: fastapi.Request,
    body: lectern.schemas.requests.GenreViewCreateRequest,
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        view = await lectern.services.genre_view_service.create_view(
            session,
            current_user["user_id"],
            body.name,
            [(t.taxonomy_id, t.importance) for t in body.taxonomies]
        )
        return lectern.utils.responses.success_response(view, status_code=201)
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("create_view", e)


@router.delete(
    "/views/{view_id}",
    summary="Delete one of your genre views"
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def delete_view(
    request: fastapi.Request,
    view_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session),
    current_user: typing.Dict[str, typing.Any] = fastapi.Depends(lectern.middleware.auth.require_user)
):
    try:
        await lectern.services.genre_view_service.delete_view(
            session, current_user["user_id"], view_id
        )
        return lectern.utils.responses.success_response({"deleted": True})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("delete_view", e)


@router.get(
    "/view-taxonomies/{view_id}",
    summary="List the terms of a genre view",
    description="Terms are ordered by their rank within the view."
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def get_view_taxonomies(
    request: fastapi.Request,
    view_id: int = Path(..., ge=1),
    session: sqlalchemy.ext.asyncio.AsyncSession = fastapi.Depends(lectern.db.get_session)
):
    try:
        taxonomies = await lectern.services.genre_view_service.get_view_taxonomies(session, view_id)
        return lectern.utils.responses.success_response({"view_id": view_id, "taxonomies": taxonomies})
    except ValueError as e:
        return lectern.utils.responses.domain_error_response(e)
    except Exception as e:
        return lectern.utils.responses.internal_error_response("get_view_taxonomies", e)
