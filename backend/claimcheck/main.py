import logging
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from claimcheck.api.routes import (
    RateLimitExceeded,
    rate_limit_exceeded_handler,
    router,
)
from claimcheck.config import get_settings
from claimcheck.database import engine, init_db
from claimcheck.services.evidence import (
    EvidenceRetriever,
    LinkValidator,
    select_evidence_source,
)
from claimcheck.services.pipeline import AnalysisPipeline
from claimcheck.services.rate_limiter import FixedWindowRateLimiter

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def build_pipeline(client: httpx.AsyncClient) -> AnalysisPipeline:
    """
    Wire the analysis pipeline for the configured evidence mode.

    The evidence source is picked here, once: Bing if BING_API_KEY is set,
    reference fallback otherwise.
    """
    source = select_evidence_source(settings, client)

    validator = None
    if settings.evidence_validate:
        validator = LinkValidator(client, timeout_ms=settings.evidence_validate_timeout_ms)

    return AnalysisPipeline(EvidenceRetriever(source, validator))


# =============================================================================
# LIFESPAN: Startup and Shutdown Logic
# =============================================================================
#
# - Before 'yield': create tables, open the shared HTTP client, build the
#   pipeline and rate limiter (startup)
# - After 'yield': close the HTTP client and the database pool (shutdown)
#
@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""

    # === STARTUP ===
    await init_db()

    # One client for search calls and link probes, reused across requests
    client = httpx.AsyncClient(headers={"User-Agent": "claimcheck/0.1"})

    app.state.pipeline = build_pipeline(client)
    app.state.rate_limiter = FixedWindowRateLimiter(
        window_ms=settings.analyze_rate_limit_window_ms,
        max_requests=settings.analyze_rate_limit_max,
    )
    logger.info(
        f"Evidence validation {'enabled' if settings.evidence_validate else 'disabled'}"
    )

    yield

    # === SHUTDOWN ===
    await client.aclose()
    await engine.dispose()


app = FastAPI(
    title="Claim Check",
    description="Claim-level trust scoring for free text",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
