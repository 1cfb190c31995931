"""
Pydantic schemas for API request/response validation.

These define the shape of data that goes in and out of the API.
The AnalysisVerdict is the core output of the entire system.

FLOW OVERVIEW:
==============
1. User sends AnalyzeRequest to /api/analyze
2. ClaimExtractor splits the text into claim strings
3. EvidenceRetriever gathers EvidenceSnippet[] for each claim
4. ClaimScorer turns (claim, evidence) into a scored Claim
5. TrustAggregator folds all Claims into an AnalysisVerdict
6. AnalysisService stores it and the API returns an AnalysisResponse
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


# Tri-state verdict for a single claim.
# Derived from the claim score only (see ClaimScorer.status_for_score).
ClaimStatus = Literal["Supported", "Unclear", "Contradicted"]


# =============================================================================
# EVIDENCE + CLAIM SCHEMAS (the core of the project)
# =============================================================================
#
# WHEN USED:
# - EvidenceSnippet: Produced by EvidenceRetriever, one per search result
# - Claim: Produced by ClaimScorer from a claim string + its evidence
# - AnalysisVerdict: Produced by the pipeline once per analyzed text
#
# PIPELINE:
# ClaimExtractor → EvidenceRetriever → ClaimScorer → TrustAggregator → Verdict
#

class EvidenceSnippet(BaseModel):
    """
    One external reference item backing (or failing to back) a claim.

    USED BY: EvidenceRetriever (creates), ClaimScorer (reads)
    DISPLAYED: As a cited source under each claim
    """
    model_config = ConfigDict(frozen=True)

    title: str
    snippet: str
    url: str
    relevance_score: float = Field(
        ge=0, le=100,
        description="How relevant the source ranked this result (0-100)"
    )


class Claim(BaseModel):
    """
    A claim extracted from the input text, scored against its evidence.

    LIFECYCLE:
    1. ClaimExtractor produces the raw claim text
    2. EvidenceRetriever collects evidence for it
    3. ClaimScorer creates this object (immutable from here on)

    Example:
        Input: "Hello there. The Earth orbits the Sun."
        Claim: text="The Earth orbits the Sun", score=61, status="Unclear"
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier for this claim")
    text: str = Field(description="The claim text itself")
    score: int = Field(ge=0, le=100, description="Evidence score (0-100)")
    status: ClaimStatus
    evidence: list[EvidenceSnippet] = Field(
        default_factory=list,
        description="Evidence in the order it was retrieved"
    )
    verification_method: str = Field(
        default="keyword-match",
        description="Which evidence mode produced the evidence (e.g. 'web-search-bing')"
    )


class AnalysisVerdict(BaseModel):
    """
    Result of one pipeline run, before it is stored.

    The pipeline knows nothing about ids or timestamps; those are
    assigned by AnalysisService when the verdict is persisted.
    """
    trust_score: int = Field(ge=0, le=100, description="Aggregate trust (0-100)")
    status_text: str
    explanation: str
    claims: list[Claim] = Field(
        default_factory=list,
        description="Scored claims in extraction order"
    )


# =============================================================================
# API SCHEMAS
# =============================================================================

class AnalyzeRequest(BaseModel):
    """
    Request body for the /api/analyze endpoint.

    Example:
        POST /api/analyze
        {"text": "The Earth orbits the Sun. Water boils at 100 degrees Celsius."}
    """
    text: str = Field(
        min_length=10,
        description="Text to analyze (at least 10 characters)"
    )


class AnalysisResponse(AnalysisVerdict):
    """
    A stored analysis as returned by the API.

    USED BY: POST /api/analyze, GET /api/history, GET /api/analysis/{id}
    """
    model_config = ConfigDict(from_attributes=True)

    id: str
    input_text: str
    created_at: datetime


class RateLimitError(BaseModel):
    """Body of a 429 response from /api/analyze."""
    error: str = "Rate limit exceeded"
    retry_after_ms: int
