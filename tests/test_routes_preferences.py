import datetime
from unittest.mock import AsyncMock, MagicMock

import lectern.ranking.weighted_rating as weighted_rating
import pytest
from tests.conftest import USER_HEADERS


def _preferences_row(weights, criteria_order=None):
    row = MagicMock()
    row.user_id = 1
    for name, value in weights.as_dict().items():
        setattr(row, name, value)
    row.criteria_order = criteria_order
    row.updated_at = datetime.datetime(2026, 1, 1, 12, 0, 0)
    return row


def test_get_preferences_defaults(client, mocker):
    mocker.patch(
        "lectern.services.preferences_service.get_rating_preferences",
        new=AsyncMock(return_value=None)
    )

    response = client.get("/api/v1/rating-preferences", headers=USER_HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["preferences"] is None
    assert data["effective_weights"] == weighted_rating.DEFAULT_RATING_WEIGHTS.as_dict()


def test_get_preferences_stored(client, mocker):
    weights = weighted_rating.RatingWeights(0.2, 0.2, 0.2, 0.2, 0.2)
    mocker.patch(
        "lectern.services.preferences_service.get_rating_preferences",
        new=AsyncMock(return_value=_preferences_row(weights))
    )

    response = client.get("/api/v1/rating-preferences", headers=USER_HEADERS)

    data = response.json()["data"]
    assert data["preferences"]["weights"]["themes"] == 0.2
    assert data["effective_weights"]["enjoyment"] == 0.2


def test_get_preferences_requires_auth(client):
    assert client.get("/api/v1/rating-preferences").status_code == 401


def test_save_preferences_with_order(client, mocker):
    order = ["characters", "enjoyment", "writing", "themes", "worldbuilding"]
    weights = weighted_rating.RatingWeights.from_criteria_order(order)
    save = mocker.patch(
        "lectern.services.preferences_service.save_rating_preferences",
        new=AsyncMock(return_value=_preferences_row(weights, order))
    )

    response = client.put(
        "/api/v1/rating-preferences", json={"criteria_order": order}, headers=USER_HEADERS
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["criteria_order"] == order
    assert data["weights"]["characters"] == 0.35
    args = save.call_args[0]
    assert args[2] is None
    assert args[3] == order


def test_save_preferences_with_weights(client, mocker):
    weights = weighted_rating.RatingWeights(0.2, 0.2, 0.2, 0.2, 0.2)
    save = mocker.patch(
        "lectern.services.preferences_service.save_rating_preferences",
        new=AsyncMock(return_value=_preferences_row(weights))
    )

    response = client.put(
        "/api/v1/rating-preferences", json=weights.as_dict(), headers=USER_HEADERS
    )

    assert response.status_code == 200
    assert save.call_args[0][2] == weights


def test_save_preferences_partial_weights_rejected(client):
    response = client.put(
        "/api/v1/rating-preferences", json={"enjoyment": 0.5, "writing": 0.5}, headers=USER_HEADERS
    )
    assert response.status_code == 422


def test_save_preferences_empty_body_rejected(client):
    response = client.put("/api/v1/rating-preferences", json={}, headers=USER_HEADERS)
    assert response.status_code == 422


def test_save_preferences_invalid_sum(client, mocker):
    mocker.patch(
        "lectern.services.preferences_service.save_rating_preferences",
        new=AsyncMock(side_effect=ValueError("invalid_weights"))
    )

    response = client.put(
        "/api/v1/rating-preferences",
        json={"enjoyment": 0.5, "writing": 0.5, "themes": 0.5, "characters": 0.0, "worldbuilding": 0.0},
        headers=USER_HEADERS
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "INVALID_ARGUMENT"


def test_compatibility(client, mocker):
    mocker.patch(
        "lectern.services.preferences_service.get_rating_weights",
        new=AsyncMock(return_value=None)
    )

    response = client.get("/api/v1/users/2/compatibility", headers=USER_HEADERS)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["user_id"] == 2
    assert data["overall"] == "Overwhelmingly Compatible"
    assert data["score"] == 3
    assert set(data["criteria"]) == set(weighted_rating.CRITERIA)
