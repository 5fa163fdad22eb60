import logging
import typing
import sqlalchemy
import sqlalchemy.ext.asyncio
import lectern.models.genre_view
import lectern.models.taxonomy
import lectern.ranking.taxonomy

logger = logging.getLogger(__name__)


def _view_to_dict(view: lectern.models.genre_view.GenreView) -> typing.Dict[str, typing.Any]:
    return {
        "view_id": view.view_id,
        "user_id": view.user_id,
        "name": view.name,
        "created_at": view.created_at.isoformat() if view.created_at else None,
    }


async def create_view(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    name: str,
    terms: typing.List[typing.Tuple[int, float]]
) -> typing.Dict[str, typing.Any]:
    """Create a named selection of taxonomy terms for a reader.

    ``terms`` is a list of ``(taxonomy_id, importance)``; a term's rank in the
    view is its 1-based position in the list.
    """
    taxonomy_ids = [taxonomy_id for taxonomy_id, _ in terms]
    if len(set(taxonomy_ids)) != len(taxonomy_ids):
        raise ValueError("duplicate_taxonomy")
    if taxonomy_ids:
        known_stmt = sqlalchemy.select(lectern.models.taxonomy.GenreTaxonomy.taxonomy_id).where(
            lectern.models.taxonomy.GenreTaxonomy.taxonomy_id.in_(taxonomy_ids)
        )
        known = set((await session.execute(known_stmt)).scalars().all())
        if known != set(taxonomy_ids):
            raise ValueError("taxonomy_not_found")

    view = lectern.models.genre_view.GenreView(user_id=user_id, name=name)
    session.add(view)
    await session.flush()

    for position, (taxonomy_id, importance) in enumerate(terms, start=1):
        session.add(lectern.models.genre_view.ViewTaxonomy(
            view_id=view.view_id,
            taxonomy_id=taxonomy_id,
            rank=position,
            importance=importance,
        ))

    await session.commit()
    await session.refresh(view)
    logger.info(f"User {user_id} created genre view {view.view_id} with {len(terms)} terms")
    return _view_to_dict(view)


async def get_view(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    view_id: int
) -> lectern.models.genre_view.GenreView:
    view = await session.get(lectern.models.genre_view.GenreView, view_id)
    if view is None:
        raise ValueError("view_not_found")
    return view


async def get_view_taxonomies(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    view_id: int
) -> typing.List[typing.Dict[str, typing.Any]]:
    await get_view(session, view_id)

    stmt = sqlalchemy.select(
        lectern.models.genre_view.ViewTaxonomy,
        lectern.models.taxonomy.GenreTaxonomy,
    ).join(
        lectern.models.taxonomy.GenreTaxonomy,
        lectern.models.taxonomy.GenreTaxonomy.taxonomy_id == lectern.models.genre_view.ViewTaxonomy.taxonomy_id
    ).where(
        lectern.models.genre_view.ViewTaxonomy.view_id == view_id
    ).order_by(lectern.models.genre_view.ViewTaxonomy.rank)

    result = await session.execute(stmt)
    return [
        {
            "view_id": view_taxonomy.view_id,
            "taxonomy_id": view_taxonomy.taxonomy_id,
            "rank": view_taxonomy.rank,
            "importance": float(view_taxonomy.importance),
            "name": taxonomy.name,
            "type": taxonomy.type,
        }
        for view_taxonomy, taxonomy in result.all()
    ]


async def get_selected_terms(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    view_id: int
) -> typing.List[lectern.ranking.taxonomy.SelectedTerm]:
    taxonomies = await get_view_taxonomies(session, view_id)
    return [
        lectern.ranking.taxonomy.SelectedTerm(
            taxonomy_id=t["taxonomy_id"],
            importance=t["importance"],
        )
        for t in taxonomies
    ]


async def delete_view(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    view_id: int
) -> None:
    view = await get_view(session, view_id)
    if view.user_id != user_id:
        raise ValueError("permission_denied")

    await session.delete(view)
    await session.commit()
