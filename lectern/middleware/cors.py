import fastapi
import fastapi.middleware.cors
import lectern.config
import lectern.middleware.logging

# Headers the web client reads from responses.
EXPOSED_HEADERS = [
    lectern.middleware.logging.PROCESS_TIME_HEADER,
    "X-RateLimit-Limit",
    "X-RateLimit-Remaining",
    "Retry-After",
]


def _split(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


def setup_cors(app: fastapi.FastAPI):
    settings = lectern.config.settings
    app.add_middleware(
        fastapi.middleware.cors.CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=_split(settings.cors_allow_methods),
        allow_headers=_split(settings.cors_allow_headers),
        expose_headers=EXPOSED_HEADERS,
    )
