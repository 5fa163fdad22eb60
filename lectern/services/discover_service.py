import logging
import typing
import sqlalchemy
import sqlalchemy.ext.asyncio
import lectern.models.book
import lectern.models.taxonomy
import lectern.ranking.taxonomy
import lectern.services.book_service
import lectern.services.genre_view_service

logger = logging.getLogger(__name__)


async def _matching_book_ids(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    taxonomy_ids: typing.List[int]
) -> typing.List[int]:
    stmt = sqlalchemy.select(lectern.models.taxonomy.BookTaxonomy.book_id).where(
        lectern.models.taxonomy.BookTaxonomy.taxonomy_id.in_(taxonomy_ids)
    ).distinct()
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _recent_book_ids(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    limit: int
) -> typing.List[int]:
    stmt = sqlalchemy.select(lectern.models.book.Book.book_id).order_by(
        lectern.models.book.Book.created_at.desc()
    ).limit(limit)
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def _load_candidates(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_ids: typing.List[int]
) -> typing.List[lectern.ranking.taxonomy.CandidateBook]:
    books_stmt = sqlalchemy.select(lectern.models.book.Book).where(
        lectern.models.book.Book.book_id.in_(book_ids)
    ).order_by(lectern.models.book.Book.book_id)
    books = (await session.execute(books_stmt)).scalars().all()

    terms_stmt = sqlalchemy.select(lectern.models.taxonomy.BookTaxonomy).where(
        lectern.models.taxonomy.BookTaxonomy.book_id.in_(book_ids)
    )
    terms_by_book: typing.Dict[int, typing.List[lectern.ranking.taxonomy.BookTerm]] = {}
    for row in (await session.execute(terms_stmt)).scalars().all():
        terms_by_book.setdefault(row.book_id, []).append(
            lectern.ranking.taxonomy.BookTerm(taxonomy_id=row.taxonomy_id, rank=row.rank)
        )

    return [
        lectern.ranking.taxonomy.CandidateBook(
            book_id=book.book_id,
            terms=terms_by_book.get(book.book_id, []),
            payload=book,
        )
        for book in books
    ]


async def discover_by_view(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    view_id: int,
    limit: int
) -> typing.List[typing.Dict[str, typing.Any]]:
    selected = await lectern.services.genre_view_service.get_selected_terms(session, view_id)
    if not selected:
        logger.info(f"No taxonomies found for genre view {view_id}")
        return []

    book_ids = await _matching_book_ids(session, [t.taxonomy_id for t in selected])
    if not book_ids:
        logger.info(f"No books match genre view {view_id}, falling back to recent books")
        book_ids = await _recent_book_ids(session, limit)
    if not book_ids:
        return []

    candidates = await _load_candidates(session, book_ids)
    ranked = lectern.ranking.taxonomy.rank_books_by_taxonomy(candidates, selected)

    results = []
    for item in ranked[:limit]:
        book_data = lectern.services.book_service.book_to_dict(item.candidate.payload)
        book_data["taxonomic_score"] = round(item.taxonomic_score, 4)
        book_data["matching_taxonomies"] = item.matching_taxonomies
        results.append(book_data)

    logger.info(f"Returning {len(results)} books for genre view {view_id}")
    return results
