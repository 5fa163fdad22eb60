import time
import logging
import fastapi
import starlette.middleware.base

logger = logging.getLogger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time"

# Logged at debug level unless they fail.
_QUIET_PREFIXES = ("/health",)


class LoggingMiddleware(starlette.middleware.base.BaseHTTPMiddleware):
    async def dispatch(self, request: fastapi.Request, call_next):
        start_time = time.perf_counter()
        path = request.url.path
        quiet = path.startswith(_QUIET_PREFIXES)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(f"Unhandled error: {request.method} {path}")
            raise

        process_time = time.perf_counter() - start_time
        message = (
            f"{request.method} {path} - Status: {response.status_code} "
            f"- Duration: {process_time * 1000:.1f}ms"
        )
        if response.status_code >= 500:
            logger.error(message)
        elif quiet:
            logger.debug(message)
        else:
            logger.info(message)

        response.headers[PROCESS_TIME_HEADER] = f"{process_time:.6f}"
        return response


def setup_logging_middleware(app: fastapi.FastAPI):
    app.add_middleware(LoggingMiddleware)
