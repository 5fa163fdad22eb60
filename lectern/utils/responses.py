import logging
import typing
import fastapi
import lectern.schemas.responses

logger = logging.getLogger(__name__)

_NOT_FOUND_ERRORS = {"not_found", "book_not_found", "view_not_found", "taxonomy_not_found"}
_PERMISSION_ERRORS = {"permission_denied"}
_ALREADY_EXISTS_ERRORS = {"already_exists"}


def success_response(data: typing.Any, status_code: int = 200) -> fastapi.responses.JSONResponse:
    response = lectern.schemas.responses.APIResponse(
        success=True,
        data=data,
        error=None
    )
    return fastapi.responses.JSONResponse(
        status_code=status_code,
        content=response.model_dump()
    )


def error_response(
    code: str,
    message: str,
    details: typing.Dict[str, typing.Any] = None,
    status_code: int = 400
) -> fastapi.responses.JSONResponse:
    response = lectern.schemas.responses.APIResponse(
        success=False,
        data=None,
        error=lectern.schemas.responses.ErrorDetail(
            code=code,
            message=message,
            details=details or {}
        )
    )
    return fastapi.responses.JSONResponse(
        status_code=status_code,
        content=response.model_dump()
    )


def domain_error_response(error: ValueError) -> fastapi.responses.JSONResponse:
    error_key = str(error)
    if error_key in _NOT_FOUND_ERRORS:
        return error_response("NOT_FOUND", f"Resource not found: {error_key}", status_code=404)
    if error_key in _PERMISSION_ERRORS:
        return error_response("PERMISSION_DENIED", f"Permission denied: {error_key}", status_code=403)
    if error_key in _ALREADY_EXISTS_ERRORS:
        return error_response("ALREADY_EXISTS", f"Resource already exists: {error_key}", status_code=409)
    return error_response("INVALID_ARGUMENT", f"Invalid argument: {error_key}", status_code=400)


def internal_error_response(operation: str, error: Exception) -> fastapi.responses.JSONResponse:
    logger.error(f"Error in {operation}: {error}")
    return error_response("INTERNAL_ERROR", "An internal error occurred", status_code=500)
