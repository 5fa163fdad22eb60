from unittest.mock import MagicMock

import lectern.ranking.weighted_rating as weighted_rating
import lectern.services.rating_service as rating_service
import pytest
from tests.conftest import make_rating, make_scalar_result

SCORES = {"enjoyment": 5, "writing": 4, "themes": 4, "characters": 3, "worldbuilding": 2}


class TestUpsertRating:
    @pytest.mark.asyncio
    async def test_upsert_success(self, mock_session, mock_cache):
        rating = make_rating()
        mock_session.execute.side_effect = [make_scalar_result(100), make_scalar_result(rating)]
        result = await rating_service.upsert_rating(mock_session, 10, 100, SCORES, "Great book")
        assert result == rating
        assert mock_session.execute.call_count == 2
        mock_session.commit.assert_called_once()
        mock_cache.delete_cached.assert_called_once_with("book:100")

    @pytest.mark.asyncio
    async def test_upsert_unknown_book_raises(self, mock_session, mock_cache):
        mock_session.execute.return_value = make_scalar_result(None)
        with pytest.raises(ValueError, match="book_not_found"):
            await rating_service.upsert_rating(mock_session, 10, 999, SCORES, None)
        mock_session.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_upsert_missing_criterion_raises(self, mock_session, mock_cache):
        mock_session.execute.return_value = make_scalar_result(100)
        with pytest.raises(KeyError):
            await rating_service.upsert_rating(mock_session, 10, 100, {"enjoyment": 5}, None)


class TestDeleteRating:
    @pytest.mark.asyncio
    async def test_delete_success(self, mock_session, mock_cache):
        mock_session.execute.return_value = make_scalar_result(1)
        await rating_service.delete_rating(mock_session, 10, 100)
        mock_session.commit.assert_called_once()
        mock_cache.delete_cached.assert_called_once_with("book:100")

    @pytest.mark.asyncio
    async def test_delete_not_found_raises(self, mock_session, mock_cache):
        mock_session.execute.return_value = make_scalar_result(None)
        with pytest.raises(ValueError, match="not_found"):
            await rating_service.delete_rating(mock_session, 10, 999)
        mock_session.commit.assert_not_called()


class TestGetUserRating:
    @pytest.mark.asyncio
    async def test_found(self, mock_session):
        rating = make_rating()
        mock_session.execute.return_value = make_scalar_result(rating)
        assert await rating_service.get_user_rating(mock_session, 10, 100) == rating

    @pytest.mark.asyncio
    async def test_missing_returns_none(self, mock_session):
        mock_session.execute.return_value = make_scalar_result(None)
        assert await rating_service.get_user_rating(mock_session, 10, 100) is None


class TestListBookReviews:
    @pytest.mark.asyncio
    async def test_sorted_with_weighted_scores(self, mock_session):
        low = make_rating(rating_id=1, enjoyment=2, writing=2, themes=2, characters=2, worldbuilding=2)
        high = make_rating(rating_id=2, enjoyment=5, writing=5, themes=5, characters=5, worldbuilding=5)
        mock_session.execute.side_effect = [make_scalar_result(100), make_scalar_result([low, high])]

        reviews = await rating_service.list_book_reviews(mock_session, 100, "all", None)

        assert [r.rating_id for r, _ in reviews] == [2, 1]
        assert reviews[0][1] == pytest.approx(5.0)
        assert reviews[1][1] == pytest.approx(2.0)

    @pytest.mark.asyncio
    async def test_bucket_filter(self, mock_session):
        low = make_rating(rating_id=1, enjoyment=2, writing=2, themes=2, characters=2, worldbuilding=2)
        high = make_rating(rating_id=2, enjoyment=5, writing=5, themes=5, characters=5, worldbuilding=5)
        mock_session.execute.side_effect = [make_scalar_result(100), make_scalar_result([low, high])]

        reviews = await rating_service.list_book_reviews(mock_session, 100, "2", None)

        assert [r.rating_id for r, _ in reviews] == [1]

    @pytest.mark.asyncio
    async def test_uses_reader_weights(self, mock_session):
        rating = make_rating(enjoyment=5, writing=5, themes=5, characters=5, worldbuilding=1)
        mock_session.execute.side_effect = [make_scalar_result(100), make_scalar_result([rating])]
        weights = weighted_rating.RatingWeights(0.0, 0.0, 0.0, 0.0, 1.0)

        reviews = await rating_service.list_book_reviews(mock_session, 100, "all", weights)

        assert reviews[0][1] == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_invalid_bucket_raises(self, mock_session):
        mock_session.execute.side_effect = [make_scalar_result(100), make_scalar_result([make_rating()])]
        with pytest.raises(ValueError, match="invalid_rating_filter"):
            await rating_service.list_book_reviews(mock_session, 100, "9", None)

    @pytest.mark.asyncio
    async def test_missing_book_raises(self, mock_session):
        mock_session.execute.return_value = make_scalar_result(None)
        with pytest.raises(ValueError, match="book_not_found"):
            await rating_service.list_book_reviews(mock_session, 999, "all", None)
        mock_session.execute.assert_called_once()


class TestSetFeatured:
    @pytest.mark.asyncio
    async def test_feature_success(self, mock_session, mock_cache):
        rating = make_rating(featured=True)
        mock_session.execute.return_value = make_scalar_result(rating)
        result = await rating_service.set_featured(mock_session, 1, True)
        assert result.featured is True
        mock_session.commit.assert_called_once()
        mock_cache.delete_cached.assert_called_once_with("book:100")

    @pytest.mark.asyncio
    async def test_not_found_raises(self, mock_session, mock_cache):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_session.execute.return_value = result
        with pytest.raises(ValueError, match="not_found"):
            await rating_service.set_featured(mock_session, 999, True)
        mock_session.commit.assert_not_called()
