import logging
import typing
import sqlalchemy
import sqlalchemy.dialects.postgresql
import sqlalchemy.ext.asyncio
import lectern.cache
import lectern.models.book
import lectern.models.rating
import lectern.ranking.weighted_rating as weighted_rating

logger = logging.getLogger(__name__)


async def _ensure_book_exists(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int
) -> None:
    stmt = sqlalchemy.select(lectern.models.book.Book.book_id).where(
        lectern.models.book.Book.book_id == book_id
    )
    result = await session.execute(stmt)
    if result.scalar_one_or_none() is None:
        raise ValueError("book_not_found")


async def upsert_rating(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    book_id: int,
    scores: typing.Dict[str, int],
    review_text: typing.Optional[str]
) -> lectern.models.rating.Rating:
    await _ensure_book_exists(session, book_id)

    criterion_values = {name: scores[name] for name in weighted_rating.CRITERIA}

    insert_values: typing.Dict[str, typing.Any] = {
        "user_id": user_id,
        "book_id": book_id,
        "review_text": review_text,
    }
    insert_values.update(criterion_values)

    update_values: typing.Dict[str, typing.Any] = {
        "review_text": review_text,
        "updated_at": sqlalchemy.func.now()
    }
    update_values.update(criterion_values)

    stmt = sqlalchemy.dialects.postgresql.insert(lectern.models.rating.Rating).values(
        **insert_values
    ).on_conflict_do_update(
        constraint="uq_ratings_user_book",
        set_=update_values
    ).returning(lectern.models.rating.Rating)

    result = await session.execute(stmt)
    row = result.scalar_one()
    await session.commit()
    await lectern.cache.delete_cached(lectern.cache.book_detail_key(book_id))
    return row


async def delete_rating(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    book_id: int
) -> None:
    stmt = sqlalchemy.delete(lectern.models.rating.Rating).where(
        lectern.models.rating.Rating.user_id == user_id,
        lectern.models.rating.Rating.book_id == book_id
    ).returning(lectern.models.rating.Rating.rating_id)

    result = await session.execute(stmt)
    if result.scalar_one_or_none() is None:
        raise ValueError("not_found")

    await session.commit()
    await lectern.cache.delete_cached(lectern.cache.book_detail_key(book_id))


async def get_user_rating(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    user_id: int,
    book_id: int
) -> typing.Optional[lectern.models.rating.Rating]:
    stmt = sqlalchemy.select(lectern.models.rating.Rating).where(
        lectern.models.rating.Rating.user_id == user_id,
        lectern.models.rating.Rating.book_id == book_id
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_book_ratings(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int
) -> typing.List[lectern.models.rating.Rating]:
    stmt = sqlalchemy.select(lectern.models.rating.Rating).where(
        lectern.models.rating.Rating.book_id == book_id
    ).order_by(lectern.models.rating.Rating.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def list_book_reviews(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    book_id: int,
    bucket: str,
    weights: typing.Optional[weighted_rating.RatingWeights]
) -> typing.List[typing.Tuple[lectern.models.rating.Rating, float]]:
    """Reviews of a book filtered to a star bucket, featured first, best first.

    Each review is paired with its weighted score under ``weights``.
    """
    await _ensure_book_exists(session, book_id)
    ratings = await get_book_ratings(session, book_id)
    visible = weighted_rating.filter_reviews(ratings, bucket, weights)
    ordered = weighted_rating.sort_reviews(visible, weights)
    return [(r, weighted_rating.calculate_weighted_rating(r, weights)) for r in ordered]


async def set_featured(
    session: sqlalchemy.ext.asyncio.AsyncSession,
    rating_id: int,
    featured: bool
) -> lectern.models.rating.Rating:
    stmt = sqlalchemy.update(lectern.models.rating.Rating).where(
        lectern.models.rating.Rating.rating_id == rating_id
    ).values(
        featured=featured,
        updated_at=sqlalchemy.func.now()
    ).returning(lectern.models.rating.Rating)

    result = await session.execute(stmt)
    row = result.scalar_one_or_none()
    if row is None:
        raise ValueError("not_found")

    await session.commit()
    await lectern.cache.delete_cached(lectern.cache.book_detail_key(row.book_id))
    logger.info(f"Rating {rating_id} featured={featured}")
    return row
