import logging
import re
import typing
import unicodedata
import sqlalchemy
import sqlalchemy.exc
import sqlalchemy.ext.asyncio
import lectern.cache
import lectern.config
import lectern.models.book
import lectern.models.taxonomy
import lectern.ranking.taxonomy

logger = logging.getLogger(__name__)


def slugify(name: str) -> str:
    normalized = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug


def _taxonomy_to_dict(taxonomy: lectern.models.taxonomy.GenreTaxonomy) -> typing.Dict[str, typing.Any]:
    return {
        "taxonomy_id": taxonomy.taxonomy_id,
        "name": taxonomy.name,
        "slug": taxonomy.slug,
        "type": taxonomy.type,
        "description": taxonomy.description,
    }


async def _invalidate_taxonomy_lists() -> None:
    keys = [lectern.cache.taxonomies_key(t) for t in lectern.ranking.taxonomy.TAXONOMY_TYPES]
    keys.append(lectern.cache.taxonomies_key(""))
    await lectern.cache.delete_cached(*keys)


async def list_taxonomies(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    type_filter: typing.Optional[str] = None
) -> typing.List[typing.Dict[str, typing.Any]]:
    cache_key = lectern.cache.taxonomies_key(type_filter or "")
    cached = await lectern.cache.get_cached(cache_key)
    if cached is not None:
        return cached

    stmt = sqlalchemy.select(lectern.models.taxonomy.GenreTaxonomy)
    if type_filter:
        stmt = stmt.where(lectern.models.taxonomy.GenreTaxonomy.type == type_filter)
    stmt = stmt.order_by(lectern.models.taxonomy.GenreTaxonomy.name)

    result = await session.execute(stmt)
    taxonomies = [_taxonomy_to_dict(t) for t in result.scalars().all()]

    await lectern.cache.set_cached(
        cache_key, taxonomies, lectern.config.settings.cache_taxonomies_ttl
    )
    return taxonomies


async def create_taxonomy(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    name: str,
    taxonomy_type: str,
    description: typing.Optional[str]
) -> lectern.models.taxonomy.GenreTaxonomy:
    taxonomy = lectern.models.taxonomy.GenreTaxonomy(
        name=name,
        slug=slugify(name),
        type=taxonomy_type,
        description=description,
    )
    session.add(taxonomy)
    try:
        await session.commit()
    except sqlalchemy.exc.IntegrityError:
        await session.rollback()
        raise ValueError("already_exists")

    await session.refresh(taxonomy)
    await _invalidate_taxonomy_lists()
    logger.info(f"Created {taxonomy_type} taxonomy '{name}'")
    return taxonomy


async def update_taxonomy(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    taxonomy_id: int,
    name: typing.Optional[str],
    taxonomy_type: typing.Optional[str],
    description: typing.Optional[str]
) -> lectern.models.taxonomy.GenreTaxonomy:
    taxonomy = await session.get(lectern.models.taxonomy.GenreTaxonomy, taxonomy_id)
    if taxonomy is None:
        raise ValueError("taxonomy_not_found")

    if name is not None:
        taxonomy.name = name
        taxonomy.slug = slugify(name)
    if taxonomy_type is not None:
        taxonomy.type = taxonomy_type
    if description is not None:
        taxonomy.description = description

    try:
        await session.commit()
    except sqlalchemy.exc.IntegrityError:
        await session.rollback()
        raise ValueError("already_exists")

    await _invalidate_taxonomy_lists()
    return taxonomy


async def delete_taxonomy(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    taxonomy_id: int
) -> None:
    stmt = sqlalchemy.delete(lectern.models.taxonomy.GenreTaxonomy).where(
        lectern.models.taxonomy.GenreTaxonomy.taxonomy_id == taxonomy_id
    ).returning(lectern.models.taxonomy.GenreTaxonomy.taxonomy_id)

    result = await session.execute(stmt)
    if result.scalar_one_or_none() is None:
        raise ValueError("taxonomy_not_found")

    await session.commit()
    await _invalidate_taxonomy_lists()


async def get_book_taxonomies(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int
) -> typing.List[typing.Dict[str, typing.Any]]:
    stmt = sqlalchemy.select(
        lectern.models.taxonomy.GenreTaxonomy,
        lectern.models.taxonomy.BookTaxonomy.rank,
    ).join(
        lectern.models.taxonomy.BookTaxonomy,
        lectern.models.taxonomy.BookTaxonomy.taxonomy_id == lectern.models.taxonomy.GenreTaxonomy.taxonomy_id
    ).where(
        lectern.models.taxonomy.BookTaxonomy.book_id == book_id
    )

    result = await session.execute(stmt)
    taxonomies = []
    for taxonomy, rank in result.all():
        item = _taxonomy_to_dict(taxonomy)
        item["rank"] = rank
        taxonomies.append(item)

    taxonomies.sort(key=lambda t: lectern.ranking.taxonomy.taxonomy_sort_key(t["type"], t["rank"]))
    return taxonomies


async def set_book_taxonomies(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int,
    terms: typing.List[typing.Tuple[int, typing.Optional[int]]]
) -> typing.List[typing.Dict[str, typing.Any]]:
    """Replace the terms attached to a book.

    ``terms`` is a list of ``(taxonomy_id, rank)``; a missing rank defaults to
    the term's 1-based position in the list.
    """
    book = await session.get(lectern.models.book.Book, book_id)
    if book is None:
        raise ValueError("book_not_found")

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

    await session.execute(
        sqlalchemy.delete(lectern.models.taxonomy.BookTaxonomy).where(
            lectern.models.taxonomy.BookTaxonomy.book_id == book_id
        )
    )
    for position, (taxonomy_id, rank) in enumerate(terms, start=1):
        session.add(lectern.models.taxonomy.BookTaxonomy(
            book_id=book_id,
            taxonomy_id=taxonomy_id,
            rank=rank if rank is not None else position,
        ))

    await session.commit()
    await lectern.cache.delete_cached(lectern.cache.book_detail_key(book_id))
    return await get_book_taxonomies(session, book_id)
