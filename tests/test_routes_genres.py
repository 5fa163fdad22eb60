from unittest.mock import AsyncMock

from tests.conftest import ADMIN_HEADERS, USER_HEADERS, make_taxonomy


def test_list_taxonomies(client, mocker):
    list_mock = mocker.patch(
        "lectern.services.taxonomy_service.list_taxonomies",
        new=AsyncMock(return_value=[{"taxonomy_id": 1, "name": "Fantasy", "type": "genre"}])
    )

    response = client.get("/api/v1/genres?type=genre")

    assert response.status_code == 200
    assert response.json()["data"]["taxonomies"][0]["name"] == "Fantasy"
    assert list_mock.call_args[0][1] == "genre"


def test_list_taxonomies_invalid_type(client):
    assert client.get("/api/v1/genres?type=mood").status_code == 422


def test_create_taxonomy_admin(client, mocker):
    mocker.patch(
        "lectern.services.taxonomy_service.create_taxonomy",
        new=AsyncMock(return_value=make_taxonomy(7, "Heist", "trope"))
    )

    response = client.post(
        "/api/v1/genres", json={"name": "Heist", "type": "trope"}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 201
    assert response.json()["data"]["taxonomy_id"] == 7


def test_create_taxonomy_requires_admin(client):
    response = client.post(
        "/api/v1/genres", json={"name": "Heist", "type": "trope"}, headers=USER_HEADERS
    )
    assert response.status_code == 403


def test_create_taxonomy_conflict(client, mocker):
    mocker.patch(
        "lectern.services.taxonomy_service.create_taxonomy",
        new=AsyncMock(side_effect=ValueError("already_exists"))
    )

    response = client.post(
        "/api/v1/genres", json={"name": "Fantasy", "type": "genre"}, headers=ADMIN_HEADERS
    )

    assert response.status_code == 409
    assert response.json()["error"]["code"] == "ALREADY_EXISTS"


def test_update_taxonomy_not_found(client, mocker):
    mocker.patch(
        "lectern.services.taxonomy_service.update_taxonomy",
        new=AsyncMock(side_effect=ValueError("taxonomy_not_found"))
    )

    response = client.put("/api/v1/genres/999", json={"name": "X"}, headers=ADMIN_HEADERS)

    assert response.status_code == 404


def test_delete_taxonomy(client, mocker):
    mocker.patch("lectern.services.taxonomy_service.delete_taxonomy", new=AsyncMock(return_value=None))

    response = client.delete("/api/v1/genres/3", headers=ADMIN_HEADERS)

    assert response.status_code == 200
    assert response.json()["data"] == {"deleted": True}


def test_create_view(client, mocker):
    create = mocker.patch(
        "lectern.services.genre_view_service.create_view",
        new=AsyncMock(return_value={"view_id": 5, "user_id": 1, "name": "Cozy", "created_at": None})
    )

    response = client.post(
        "/api/v1/genres/views",
        json={"name": "Cozy", "taxonomies": [{"taxonomy_id": 3}, {"taxonomy_id": 17, "importance": 0.5}]},
        headers=USER_HEADERS
    )

    assert response.status_code == 201
    assert response.json()["data"]["view_id"] == 5
    args = create.call_args[0]
    assert args[1] == 1
    assert args[3] == [(3, 1.0), (17, 0.5)]


def test_create_view_requires_terms(client):
    response = client.post(
        "/api/v1/genres/views", json={"name": "Empty", "taxonomies": []}, headers=USER_HEADERS
    )
    assert response.status_code == 422


def test_create_view_duplicate_terms(client, mocker):
    mocker.patch(
        "lectern.services.genre_view_service.create_view",
        new=AsyncMock(side_effect=ValueError("duplicate_taxonomy"))
    )

    response = client.post(
        "/api/v1/genres/views",
        json={"name": "Cozy", "taxonomies": [{"taxonomy_id": 3}, {"taxonomy_id": 3}]},
        headers=USER_HEADERS
    )

    assert response.status_code == 400


def test_delete_view_permission_denied(client, mocker):
    mocker.patch(
        "lectern.services.genre_view_service.delete_view",
        new=AsyncMock(side_effect=ValueError("permission_denied"))
    )

    response = client.delete("/api/v1/genres/views/5", headers=USER_HEADERS)

    assert response.status_code == 403


def test_get_view_taxonomies(client, mocker):
    terms = [
        {"view_id": 5, "taxonomy_id": 3, "rank": 1, "importance": 1.0, "name": "Fantasy", "type": "genre"},
    ]
    mocker.patch(
        "lectern.services.genre_view_service.get_view_taxonomies",
        new=AsyncMock(return_value=terms)
    )

    response = client.get("/api/v1/genres/view-taxonomies/5")

    assert response.status_code == 200
    assert response.json()["data"] == {"view_id": 5, "taxonomies": terms}


def test_get_view_taxonomies_not_found(client, mocker):
    mocker.patch(
        "lectern.services.genre_view_service.get_view_taxonomies",
        new=AsyncMock(side_effect=ValueError("view_not_found"))
    )

    assert client.get("/api/v1/genres/view-taxonomies/999").status_code == 404
