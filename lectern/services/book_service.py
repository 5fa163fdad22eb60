import logging
import typing
import sqlalchemy
import sqlalchemy.ext.asyncio
import lectern.cache
import lectern.config
import lectern.models.book
import lectern.ranking.weighted_rating as weighted_rating
import lectern.services.rating_service
import lectern.services.taxonomy_service

logger = logging.getLogger(__name__)


def book_to_dict(book: lectern.models.book.Book) -> typing.Dict[str, typing.Any]:
    return {
        "book_id": book.book_id,
        "title": book.title,
        "slug": book.slug,
        "author_name": book.author_name or "",
        "description": book.description or "",
        "created_at": book.created_at.isoformat() if book.created_at else "",
        "updated_at": book.updated_at.isoformat() if book.updated_at else "",
    }


async def get_book(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int
) -> typing.Optional[typing.Dict[str, typing.Any]]:
    cache_key = lectern.cache.book_detail_key(book_id)
    cached = await lectern.cache.get_cached(cache_key)
    if cached:
        return cached

    stmt = sqlalchemy.select(lectern.models.book.Book).where(
        lectern.models.book.Book.book_id == book_id
    )
    result = await session.execute(stmt)
    book = result.scalar_one_or_none()

    if not book:
        return None

    book_data = book_to_dict(book)
    book_data["taxonomies"] = await lectern.services.taxonomy_service.get_book_taxonomies(
        session, book_id
    )

    await lectern.cache.set_cached(
        cache_key, book_data, lectern.config.settings.cache_book_detail_ttl
    )
    return book_data


async def get_book_rating_summary(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int,
    weights: typing.Optional[weighted_rating.RatingWeights]
) -> typing.Optional[typing.Dict[str, typing.Any]]:
    ratings = await lectern.services.rating_service.get_book_ratings(session, book_id)
    summary = weighted_rating.summarize_ratings(ratings, weights)
    if summary is None:
        return None
    return summary.as_dict()
