# phm/main.py
import time

import sentry_sdk
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sentry_sdk.integrations.fastapi import FastApiIntegration
from slowapi.middleware import SlowAPIMiddleware

from phm import models  # noqa: F401  (registers SQLAlchemy models)
from phm.core.clock import utcnow
from phm.core.errors import register_exception_handlers
from phm.core.logging_config import logger, setup_logging
from phm.core.rate_limit import limiter
from phm.core.settings import settings
from phm.db import Base, engine
from phm.middleware import RequestIdMiddleware
from phm.observability.metrics import REQUEST_COUNT, REQUEST_LATENCY, endpoint_label
from phm.observability.metrics import router as metrics_router
from phm.routers import (
    appointments,
    auth,
    boilers,
    customers,
    dashboard,
    leads,
    media,
    products,
    profiles,
    public,
    quotes,
    transcription,
    users,
    visits,
)

setup_logging()

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.APP_ENV,
        integrations=[FastApiIntegration()],
        traces_sample_rate=0.1,
    )

# ----------------------------------------------------
# App init
# ----------------------------------------------------
app = FastAPI(title="PHM API", version="0.1.0")

logger.info("startup", service="phm-api", env=settings.APP_ENV)


# ----------------------------------------------------
# Health
# ----------------------------------------------------
@app.get("/health", include_in_schema=True)
def health() -> dict:
    return {"status": "ok", "timestamp": utcnow().isoformat(), "service": "phm-api"}


# ----------------------------------------------------
# Logging middleware
# ----------------------------------------------------
@app.middleware("http")
async def logging_middleware(request: Request, call_next):
    start = time.time()

    request_id = getattr(request.state, "request_id", None) or request.headers.get(
        "X-Request-ID", "unknown"
    )
    client_ip = request.client.host if request.client else "unknown"

    bound_logger = logger.bind(
        request_id=request_id,
        ip=client_ip,
        endpoint=str(request.url.path),
        method=request.method,
    )

    bound_logger.info("request_started")
    response = await call_next(request)
    elapsed = time.time() - start
    latency_ms = round(elapsed * 1000, 2)

    endpoint = endpoint_label(request)
    REQUEST_COUNT.labels(request.method, endpoint, str(response.status_code)).inc()
    REQUEST_LATENCY.labels(request.method, endpoint).observe(elapsed)

    # set by the auth dependency once the caller is known
    account_id = getattr(request.state, "account_id", None)
    bound_logger.bind(
        account_id=account_id, status_code=response.status_code, latency_ms=latency_ms
    ).info("request_finished")
    return response


# ----------------------------------------------------
# Middleware
# ----------------------------------------------------
app.add_middleware(RequestIdMiddleware)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


# ----------------------------------------------------
# Routers
# ----------------------------------------------------
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(customers.router)
app.include_router(leads.router)
app.include_router(products.router)
app.include_router(quotes.router)
app.include_router(appointments.router)
app.include_router(visits.router)
app.include_router(media.router)
app.include_router(transcription.router)
app.include_router(boilers.router)
app.include_router(dashboard.router)
app.include_router(profiles.router)
app.include_router(public.router)
app.include_router(metrics_router)  # /metrics


# ----------------------------------------------------
# Startup
# ----------------------------------------------------
@app.on_event("startup")
def on_startup():
    # dev convenience; production schemas come from alembic
    if not settings.is_production:
        Base.metadata.create_all(bind=engine)
