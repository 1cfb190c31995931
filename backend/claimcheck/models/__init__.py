# Database models and API schemas
from claimcheck.models.analysis import Analysis
from claimcheck.models.schemas import (
    AnalysisResponse,
    AnalysisVerdict,
    AnalyzeRequest,
    Claim,
    ClaimStatus,
    EvidenceSnippet,
)

__all__ = [
    "Analysis",
    "AnalysisResponse",
    "AnalysisVerdict",
    "AnalyzeRequest",
    "Claim",
    "ClaimStatus",
    "EvidenceSnippet",
]
