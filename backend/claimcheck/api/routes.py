"""
API Routes: The endpoints that tie everything together.

ENDPOINTS:
- POST /api/analyze          → Main endpoint: text → stored analysis
- GET  /api/history          → All past analyses, newest first
- GET  /api/analysis/{id}    → One past analysis

FLOW:
1. POST /api/analyze with {"text": "..."} (rate limited per client IP)
2. The pipeline extracts claims, gathers evidence, scores, aggregates
3. The verdict is stored and returned with its id and timestamp
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from claimcheck.config import Settings, get_settings
from claimcheck.database import get_db
from claimcheck.models.schemas import (
    AnalysisResponse,
    AnalyzeRequest,
    RateLimitError,
)
from claimcheck.services.analysis_service import AnalysisService
from claimcheck.services.pipeline import AnalysisPipeline
from claimcheck.services.rate_limiter import FixedWindowRateLimiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


# =============================================================================
# DEPENDENCIES
# =============================================================================
#
# The pipeline and the rate limiter are built once in the app lifespan
# (see main.py) and read from app.state here. Tests override these.
#

def get_pipeline(request: Request) -> AnalysisPipeline:
    return request.app.state.pipeline


def get_rate_limiter(request: Request) -> FixedWindowRateLimiter:
    return request.app.state.rate_limiter


class RateLimitExceeded(Exception):
    """Raised by enforce_rate_limit; turned into a 429 by the handler below."""

    def __init__(self, retry_after_ms: int):
        super().__init__(f"Rate limit exceeded, retry after {retry_after_ms} ms")
        self.retry_after_ms = retry_after_ms


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Exception handler registered on the app in main.py."""
    body = RateLimitError(retry_after_ms=exc.retry_after_ms)
    retry_after_s = max(1, -(-exc.retry_after_ms // 1000))
    return JSONResponse(
        status_code=429,
        content=body.model_dump(),
        headers={"Retry-After": str(retry_after_s)},
    )


def client_key(request: Request, trust_forwarded_for: bool = False) -> str:
    """
    Caller identity for rate limiting.

    The socket peer address, or the first X-Forwarded-For hop when the
    app sits behind a trusted proxy. Clients choose that header freely,
    so it is ignored otherwise.
    """
    if trust_forwarded_for:
        first_hop = request.headers.get("x-forwarded-for", "").split(",")[0].strip()
        if first_hop:
            return first_hop
    if request.client and request.client.host:
        return request.client.host
    return "unknown"


async def enforce_rate_limit(
    request: Request,
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> None:
    key = client_key(request, trust_forwarded_for=settings.trust_forwarded_for)
    decision = limiter.hit(key)
    if not decision.allowed:
        logger.warning(f"Rate limit exceeded for {key}")
        raise RateLimitExceeded(decision.retry_after_ms)


# =============================================================================
# MAIN ANALYZE ENDPOINT
# =============================================================================

@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    dependencies=[Depends(enforce_rate_limit)],
)
async def analyze(
    request: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
    db: AsyncSession = Depends(get_db),
) -> AnalysisResponse:
    """
    The main endpoint: analyze text, store and return the verdict.

    Example:
        POST /api/analyze
        {"text": "The Earth orbits the Sun. Water boils at 100 degrees Celsius."}

        Returns AnalysisResponse with trust_score, status_text,
        explanation, claims, id and created_at
    """
    verdict = await pipeline.analyze(request.text)

    analysis = await AnalysisService(db).create(request.text, verdict)
    return AnalysisResponse.model_validate(analysis)


# =============================================================================
# HISTORY
# =============================================================================

@router.get("/history", response_model=list[AnalysisResponse])
async def history(
    db: AsyncSession = Depends(get_db),
) -> list[AnalysisResponse]:
    """
    All stored analyses, newest first.

    Example:
        GET /api/history
    """
    analyses = await AnalysisService(db).list_all()
    return [AnalysisResponse.model_validate(a) for a in analyses]


@router.get("/analysis/{analysis_id}", response_model=AnalysisResponse)
async def get_analysis(
    analysis_id: str,
    db: AsyncSession = Depends(get_db),
) -> AnalysisResponse:
    """
    Get a single analysis by id.

    Example:
        GET /api/analysis/3f2b6c1e-...
    """
    analysis = await AnalysisService(db).get(analysis_id)

    if not analysis:
        raise HTTPException(status_code=404, detail=f"Analysis {analysis_id} not found")

    return AnalysisResponse.model_validate(analysis)
