from unittest.mock import AsyncMock

import lectern.services.book_service as book_service
import pytest
from tests.conftest import make_book, make_rating, make_scalar_result


class TestBookToDict:
    def test_fields(self):
        data = book_service.book_to_dict(make_book())
        assert data["book_id"] == 100
        assert data["title"] == "The Hobbit"
        assert data["slug"] == "the-hobbit"
        assert data["created_at"] == "2026-01-01T12:00:00"

    def test_missing_optional_fields(self):
        book = make_book()
        book.author_name = None
        book.description = None
        data = book_service.book_to_dict(book)
        assert data["author_name"] == ""
        assert data["description"] == ""


class TestGetBook:
    @pytest.mark.asyncio
    async def test_cache_hit(self, mock_session, mock_cache):
        cached = {"book_id": 100, "title": "The Hobbit"}
        mock_cache.get_cached.return_value = cached
        assert await book_service.get_book(mock_session, 100) == cached
        mock_session.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_miss(self, mock_session, mock_cache, mocker):
        taxonomies = [{"taxonomy_id": 1, "name": "Fantasy", "type": "genre", "rank": 1}]
        mocker.patch(
            "lectern.services.taxonomy_service.get_book_taxonomies",
            new=AsyncMock(return_value=taxonomies)
        )
        mock_session.execute.return_value = make_scalar_result(make_book())

        result = await book_service.get_book(mock_session, 100)

        assert result["title"] == "The Hobbit"
        assert result["taxonomies"] == taxonomies
        assert mock_cache.set_cached.call_args[0][0] == "book:100"

    @pytest.mark.asyncio
    async def test_not_found(self, mock_session, mock_cache):
        mock_session.execute.return_value = make_scalar_result(None)
        assert await book_service.get_book(mock_session, 999) is None
        mock_cache.set_cached.assert_not_called()


class TestGetBookRatingSummary:
    @pytest.mark.asyncio
    async def test_no_ratings(self, mock_session):
        mock_session.execute.return_value = make_scalar_result([])
        assert await book_service.get_book_rating_summary(mock_session, 100, None) is None

    @pytest.mark.asyncio
    async def test_summary(self, mock_session):
        mock_session.execute.return_value = make_scalar_result([
            make_rating(rating_id=1, enjoyment=5, writing=5, themes=5, characters=5, worldbuilding=5),
            make_rating(rating_id=2, enjoyment=3, writing=3, themes=3, characters=3, worldbuilding=3),
        ])
        summary = await book_service.get_book_rating_summary(mock_session, 100, None)
        assert summary["rating_count"] == 2
        assert summary["averages"]["enjoyment"] == 4.0
        assert summary["overall"] == pytest.approx(4.0)
