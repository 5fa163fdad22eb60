import datetime
import fastapi
import lectern.cache
import lectern.db
import lectern.middleware.rate_limit
import lectern.schemas.responses

router = fastapi.APIRouter(prefix="/health", tags=["Health"])

limiter = lectern.middleware.rate_limit.limiter

SERVICE_NAME = "lectern"
SERVICE_VERSION = "1.0.0"


@router.get(
    "",
    response_model=lectern.schemas.responses.HealthResponse,
    summary="Basic health check",
    description="Returns basic health status of the service"
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def health(request: fastapi.Request):
    return lectern.schemas.responses.HealthResponse(
        status="healthy",
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=datetime.datetime.now().isoformat()
    )


@router.get(
    "/deep",
    response_model=lectern.schemas.responses.DeepHealthResponse,
    summary="Deep health check",
    description="Returns health status of the service and its database and cache"
)
@limiter.limit(lectern.middleware.rate_limit.get_default_limit())
async def deep_health(request: fastapi.Request):
    dependencies = {}

    try:
        await lectern.db.ping()
        dependencies["database"] = "healthy"
    except Exception as e:
        dependencies["database"] = f"error: {str(e)}"

    try:
        healthy = await lectern.cache.ping()
        dependencies["redis"] = "healthy" if healthy else "unhealthy"
    except Exception as e:
        dependencies["redis"] = f"error: {str(e)}"

    overall_status = "healthy" if all(v == "healthy" for v in dependencies.values()) else "degraded"

    return lectern.schemas.responses.DeepHealthResponse(
        status=overall_status,
        service=SERVICE_NAME,
        version=SERVICE_VERSION,
        timestamp=datetime.datetime.now().isoformat(),
        dependencies=dependencies
    )
