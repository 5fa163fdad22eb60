import lectern.utils.responses
import pytest


def test_success_response_default_status():
    response = lectern.utils.responses.success_response({"key": "value"})

    assert response.status_code == 200

    body = response.body.decode()
    assert '"success":true' in body or '"success": true' in body
    assert '"key"' in body


def test_success_response_custom_status():
    response = lectern.utils.responses.success_response({"created": True}, status_code=201)
    assert response.status_code == 201


def test_error_response_with_details():
    response = lectern.utils.responses.error_response(
        code="VALIDATION_ERROR",
        message="Validation failed",
        details={"field": "weights"},
        status_code=422
    )

    assert response.status_code == 422

    body = response.body.decode()
    assert '"success":false' in body or '"success": false' in body
    assert '"VALIDATION_ERROR"' in body
    assert '"weights"' in body


@pytest.mark.parametrize("key,status,code", [
    ("not_found", 404, "NOT_FOUND"),
    ("book_not_found", 404, "NOT_FOUND"),
    ("view_not_found", 404, "NOT_FOUND"),
    ("taxonomy_not_found", 404, "NOT_FOUND"),
    ("permission_denied", 403, "PERMISSION_DENIED"),
    ("already_exists", 409, "ALREADY_EXISTS"),
    ("invalid_weights", 400, "INVALID_ARGUMENT"),
    ("duplicate_taxonomy", 400, "INVALID_ARGUMENT"),
])
def test_domain_error_response(key, status, code):
    response = lectern.utils.responses.domain_error_response(ValueError(key))

    assert response.status_code == status
    assert f'"{code}"' in response.body.decode()


def test_internal_error_response_hides_details():
    response = lectern.utils.responses.internal_error_response("op", RuntimeError("secret detail"))

    assert response.status_code == 500
    body = response.body.decode()
    assert "INTERNAL_ERROR" in body
    assert "secret detail" not in body
