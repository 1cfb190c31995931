"""
Analysis Pipeline: Orchestrates claim extraction, evidence and scoring.

WHAT THIS DOES:
Turns one block of text into an AnalysisVerdict. This is the "brain"
that ties the Trust Layer services together.

WHY THIS EXISTS:
- Keeps API routes thin and focused on HTTP concerns
- Makes the pipeline testable in isolation (inject a fake retriever)
- Single place to understand the full flow

PIPELINE STAGES:
1. Extraction: text → up to 8 claim strings
2. Evidence + Scoring: for every claim, concurrently,
   retrieve evidence then score it
3. Aggregation: scored claims → trust score, label, explanation

CONCURRENCY:
Claims are independent, so stage 2 fans out with asyncio.gather.
gather returns results in input order, so claims come back in
extraction order no matter which search finishes first.

FAILURE MODEL:
The pipeline doesn't fail on missing evidence or unreachable services;
those degrade to low scores. Input length is validated before we get
here (AnalyzeRequest).

USAGE:
    pipeline = AnalysisPipeline(retriever)
    verdict = await pipeline.analyze("The Earth orbits the Sun. ...")
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Optional

from claimcheck.models.schemas import AnalysisVerdict, Claim
from claimcheck.services.evidence.retriever import EvidenceRetriever
from claimcheck.services.trust.claim_extractor import ClaimExtractor
from claimcheck.services.trust.claim_scorer import ClaimScorer
from claimcheck.services.trust.trust_aggregator import TrustAggregator, TrustSummary

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Intermediate result tracking through the pipeline."""

    # Input
    text: str

    # Extraction stage
    claim_texts: list[str] = field(default_factory=list)

    # Evidence + scoring stage
    claims: list[Claim] = field(default_factory=list)

    # Aggregation stage
    summary: Optional[TrustSummary] = None


class AnalysisPipeline:
    """
    Orchestrates the full analysis from text to AnalysisVerdict.

    Holds no per-run state: one instance serves every request.
    """

    def __init__(
        self,
        retriever: EvidenceRetriever,
        extractor: Optional[ClaimExtractor] = None,
        scorer: Optional[ClaimScorer] = None,
        aggregator: Optional[TrustAggregator] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            retriever: Evidence retriever (owns the network boundary)
            extractor: Claim extractor, default ClaimExtractor()
            scorer: Claim scorer, default ClaimScorer()
            aggregator: Trust aggregator, default TrustAggregator()
        """
        self.retriever = retriever
        self.extractor = extractor or ClaimExtractor()
        self.scorer = scorer or ClaimScorer()
        self.aggregator = aggregator or TrustAggregator()

    async def analyze(self, text: str) -> AnalysisVerdict:
        """
        Run the full pipeline and return a verdict.

        Args:
            text: The text to analyze (already length-validated)

        Returns:
            AnalysisVerdict with trust score, label, explanation and claims
        """
        logger.info(f"Pipeline starting ({len(text)} chars)")

        result = PipelineResult(text=text)

        # Stage 1: Extraction
        result.claim_texts = self.extractor.extract(text)
        logger.info(f"Extracted {len(result.claim_texts)} claims")

        # Stage 2: Evidence + scoring (one task per claim)
        result.claims = await self._stage_verify(result.claim_texts)

        # Stage 3: Aggregation
        result.summary = self.aggregator.aggregate(result.claims)

        logger.info(
            f"Pipeline complete: trust={result.summary.trust_score}, "
            f"status='{result.summary.status_text}', claims={len(result.claims)}"
        )

        return self._build_verdict(result)

    # =========================================================================
    # STAGE 2: EVIDENCE + SCORING
    # =========================================================================

    async def _stage_verify(self, claim_texts: list[str]) -> list[Claim]:
        """Verify all claims concurrently, returning them in input order."""
        if not claim_texts:
            return []
        return list(await asyncio.gather(*(self.verify_claim(t) for t in claim_texts)))

    async def verify_claim(self, claim_text: str) -> Claim:
        """
        Retrieve evidence for one claim and score it.

        Example:
            claim = await pipeline.verify_claim("Water boils at 100 degrees Celsius")
            claim.status  # "Supported" / "Unclear" / "Contradicted"
        """
        evidence = await self.retriever.retrieve(claim_text)
        claim = self.scorer.score(
            claim_text,
            evidence.snippets,
            verification_method=evidence.method,
        )

        logger.debug(
            f"Claim scored {claim.score} ({claim.status}) with "
            f"{len(claim.evidence)} snippet(s) via {claim.verification_method}"
        )
        return claim

    # =========================================================================
    # STAGE 3: BUILD VERDICT
    # =========================================================================

    def _build_verdict(self, result: PipelineResult) -> AnalysisVerdict:
        """Assemble the final AnalysisVerdict from pipeline results."""
        return AnalysisVerdict(
            trust_score=result.summary.trust_score,
            status_text=result.summary.status_text,
            explanation=result.summary.explanation,
            claims=result.claims,
        )
