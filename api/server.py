# api/server.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from loguru import logger
from prometheus_client import make_asgi_app
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from api.routes.access import router as access_router
from api.routes.displays import router as displays_router
from api.routes.roles import router as roles_router
from viewaccess.config import get_settings
from viewaccess.models import dispose_db_manager, get_db_manager

settings = get_settings()


# --- Lifespan Manager (Startup/Shutdown) ---


@asynccontextmanager
async def lifespan(app: FastAPI):
    db = get_db_manager()
    if db.health_check():
        logger.info(f"Database ready: {db.engine.url.render_as_string(hide_password=True)}")
    else:
        logger.warning("Database health check failed at startup")

    yield

    dispose_db_manager()


# --- App Definition ---
app = FastAPI(title="viewaccess API", lifespan=lifespan)

# --- Rate Limiting (SlowAPI) ---


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit],
    enabled=settings.rate_limit_enabled,
)
app.state.limiter = limiter


@app.exception_handler(RateLimitExceeded)
def rate_limit_handler(request, exc):
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded"},
    )


app.add_middleware(SlowAPIMiddleware)


# Mount Prometheus Metrics Endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


@app.get("/")
def root():
    return {"message": "viewaccess API is running"}


@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(access_router)
app.include_router(roles_router)
app.include_router(displays_router)
