import logging
import sys
import signal
import contextlib
import fastapi
import uvicorn
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
import lectern.cache
import lectern.config
import lectern.db
import lectern.routes.admin
import lectern.routes.books
import lectern.routes.discover
import lectern.routes.genres
import lectern.routes.health
import lectern.routes.preferences
import lectern.middleware.cors as cors_middleware
import lectern.middleware.logging as logging_middleware
import lectern.middleware.rate_limit as rate_limit_middleware

settings = lectern.config.settings
limiter = rate_limit_middleware.limiter

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    logger.info("Starting Lectern service...")
    await lectern.db.init_db()
    await lectern.cache.init_redis()
    logger.info("Lectern service started successfully")

    yield

    logger.info("Shutting down Lectern service...")
    await lectern.cache.close_redis()
    await lectern.db.close_db()
    logger.info("Lectern service shut down successfully")


app = fastapi.FastAPI(
    title="Lectern API",
    description="""
    ## Lectern

    Book discovery backed by weighted multi-criteria ratings.

    ### Ratings

    Readers score books on five criteria: enjoyment, writing, themes,
    characters and worldbuilding (1-5 each). The overall score is a weighted
    sum, using the reader's own rating preferences when set.

    ### Discovery

    Books are ranked against a genre view (a reader's selection of genres,
    subgenres, themes and tropes) by how central each matching term is to
    the book and how much it matters to the reader.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

if settings.env == "development":
    cors_middleware.setup_cors(app)

logging_middleware.setup_logging_middleware(app)

if settings.rate_limit_enabled:
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(lectern.routes.health.router)
app.include_router(lectern.routes.books.router)
app.include_router(lectern.routes.preferences.router)
app.include_router(lectern.routes.genres.router)
app.include_router(lectern.routes.discover.router)
app.include_router(lectern.routes.admin.router)


def handle_shutdown(signum, frame):
    logger.info(f"Received signal {signum}, initiating graceful shutdown...")
    sys.exit(0)


if __name__ == "__main__":
    signal.signal(signal.SIGTERM, handle_shutdown)
    signal.signal(signal.SIGINT, handle_shutdown)

    uvicorn.run(
        "lectern.main:app",
        host=settings.host,
        port=settings.http_port,
        workers=settings.workers,
        log_level=settings.log_level.lower(),
        access_log=True
    )
