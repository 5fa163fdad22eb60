import fastapi
from slowapi import Limiter
from slowapi.util import get_remote_address
import lectern.config
import lectern.middleware.auth


def rate_limit_key(request: fastapi.Request) -> str:
    """Limit signed-in readers per account and everyone else per address."""
    authorization = request.headers.get("Authorization", "")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() == "bearer" and token:
        user = lectern.middleware.auth.decode_access_token(token)
        if user is not None:
            return f"user:{user['user_id']}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(
    key_func=rate_limit_key,
    default_limits=[f"{lectern.config.settings.rate_limit_per_minute}/minute"],
    enabled=lectern.config.settings.rate_limit_enabled
)


def get_admin_limit() -> str:
    return f"{lectern.config.settings.rate_limit_admin_per_minute}/minute"


def get_default_limit() -> str:
    return f"{lectern.config.settings.rate_limit_per_minute}/minute"
