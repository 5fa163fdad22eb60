import datetime
import pytest
import fastapi.testclient
import jwt
from unittest.mock import AsyncMock, MagicMock
from sqlalchemy.ext.asyncio import AsyncSession
import lectern.config
import lectern.db
import lectern.main


def make_token(user_id: int = 1, role: str = "user") -> str:
    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": datetime.datetime.now(datetime.timezone.utc) + datetime.timedelta(minutes=15)
    }
    return jwt.encode(
        payload,
        lectern.config.settings.jwt_secret_key,
        algorithm=lectern.config.settings.jwt_algorithm
    )


USER_HEADERS = {"Authorization": f"Bearer {make_token()}"}
ADMIN_HEADERS = {"Authorization": f"Bearer {make_token(user_id=99, role='admin')}"}


@pytest.fixture
def client():
    async def override_get_session():
        yield MagicMock()

    lectern.main.app.dependency_overrides[lectern.db.get_session] = override_get_session
    yield fastapi.testclient.TestClient(lectern.main.app)
    lectern.main.app.dependency_overrides.clear()


@pytest.fixture
def mock_session():
    return AsyncMock(spec=AsyncSession)


@pytest.fixture
def mock_cache(mocker):
    cache = MagicMock()
    cache.get_cached = mocker.patch("lectern.cache.get_cached", new=AsyncMock(return_value=None))
    cache.set_cached = mocker.patch("lectern.cache.set_cached", new=AsyncMock(return_value=True))
    cache.delete_cached = mocker.patch("lectern.cache.delete_cached", new=AsyncMock(return_value=True))
    return cache


def make_rating(
    rating_id=1,
    user_id=10,
    book_id=100,
    enjoyment=4,
    writing=4,
    themes=4,
    characters=4,
    worldbuilding=4,
    featured=False,
):
    row = MagicMock()
    row.rating_id = rating_id
    row.user_id = user_id
    row.book_id = book_id
    row.enjoyment = enjoyment
    row.writing = writing
    row.themes = themes
    row.characters = characters
    row.worldbuilding = worldbuilding
    row.review_text = "Great book"
    row.featured = featured
    row.report_status = "none"
    row.created_at = datetime.datetime(2026, 1, 1, 12, 0, 0)
    row.updated_at = datetime.datetime(2026, 1, 1, 12, 0, 0)
    return row


def make_book(book_id=100, title="The Hobbit"):
    row = MagicMock()
    row.book_id = book_id
    row.title = title
    row.slug = title.lower().replace(" ", "-")
    row.author_name = "J.R.R. Tolkien"
    row.description = "There and back again"
    row.created_at = datetime.datetime(2026, 1, 1, 12, 0, 0)
    row.updated_at = datetime.datetime(2026, 1, 1, 12, 0, 0)
    return row


def make_taxonomy(taxonomy_id=1, name="Fantasy", taxonomy_type="genre"):
    row = MagicMock()
    row.taxonomy_id = taxonomy_id
    row.name = name
    row.slug = name.lower()
    row.type = taxonomy_type
    row.description = None
    return row


def make_scalar_result(value):
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalar_one.return_value = value
    result.scalars.return_value.all.return_value = value if isinstance(value, list) else []
    return result


def make_rows_result(rows):
    result = MagicMock()
    result.all.return_value = rows
    return result
