import typing
import logging
import jwt
import fastapi
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
import lectern.config

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ADMIN = "admin"

_bearer_scheme = HTTPBearer(auto_error=False)


def decode_access_token(token: str) -> typing.Optional[typing.Dict[str, typing.Any]]:
    """Verify a bearer token issued by the auth service.

    Tokens must carry ``sub`` (the numeric user id), ``role`` and ``exp``.
    Returns the reader as ``{"user_id": int, "role": str}`` or None.
    """
    try:
        payload = jwt.decode(
            token,
            lectern.config.settings.jwt_secret_key,
            algorithms=[lectern.config.settings.jwt_algorithm],
            leeway=lectern.config.settings.jwt_leeway_seconds,
            options={"require": ["exp", "sub"]}
        )
    except jwt.ExpiredSignatureError:
        logger.debug("Access token expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.debug(f"Invalid access token: {e}")
        return None

    role = payload.get("role")
    if role not in (ROLE_USER, ROLE_ADMIN):
        logger.debug(f"Access token has unknown role {role!r}")
        return None

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        logger.debug(f"Access token has non-numeric subject {payload['sub']!r}")
        return None

    return {"user_id": user_id, "role": role}


async def get_current_user_optional(
    credentials: typing.Optional[HTTPAuthorizationCredentials] = fastapi.Depends(_bearer_scheme)
) -> typing.Optional[typing.Dict[str, typing.Any]]:
    """The reader behind the request, or None for anonymous browsing.

    An invalid token is treated like no token, so public pages still render
    with the default rating weights.
    """
    if not credentials:
        return None
    return decode_access_token(credentials.credentials)


async def require_user(
    user: typing.Optional[typing.Dict[str, typing.Any]] = fastapi.Depends(get_current_user_optional)
) -> typing.Dict[str, typing.Any]:
    if user is None:
        raise fastapi.HTTPException(
            status_code=401,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return user


async def require_admin(
    user: typing.Dict[str, typing.Any] = fastapi.Depends(require_user)
) -> typing.Dict[str, typing.Any]:
    if user["role"] != ROLE_ADMIN:
        logger.info(f"User {user['user_id']} denied admin access")
        raise fastapi.HTTPException(
            status_code=403,
            detail="Admin privileges required"
        )
    return user
