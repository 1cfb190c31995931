"""
Trust Aggregator Service.

WHAT THIS DOES:
Folds the scored claims of one analysis into a single trust score
(0-100), a short status label and a one-paragraph explanation.

FORMULA:
    avg_score          = mean(claim.score)
    contradicted_ratio = contradicted claims / all claims
    trust_score        = round(clamp(avg_score - contradicted_ratio × 25, 0, 100))

The penalty can only lower the score: a text where every claim is
uncorroborated loses a further 25 points on top of its low average.

STATUS LABELS (coarser than per-claim thresholds):
    trust ≥ 75 → "Mostly Supported"
    trust ≥ 50 → "Mixed Results"
    otherwise  → "Low Confidence"

No claims at all is its own case: trust 0, "No Claims Found".

USAGE:
    aggregator = TrustAggregator()
    summary = aggregator.aggregate(claims)
    summary.trust_score, summary.status_text, summary.explanation
"""

import logging
from dataclasses import dataclass

from claimcheck.models.schemas import Claim
from claimcheck.services.trust.claim_scorer import round_half_up

logger = logging.getLogger(__name__)

# Points subtracted when every claim is Contradicted (scaled by the ratio)
CONTRADICTION_PENALTY = 25

MOSTLY_SUPPORTED_THRESHOLD = 75
MIXED_RESULTS_THRESHOLD = 50

NO_CLAIMS_STATUS = "No Claims Found"
NO_CLAIMS_EXPLANATION = "No verifiable claims were found in the input text."


@dataclass(frozen=True)
class TrustSummary:
    """Aggregate verdict for one analysis (without the claims themselves)."""
    trust_score: int
    status_text: str
    explanation: str


def status_text_for_score(trust_score: int) -> str:
    if trust_score >= MOSTLY_SUPPORTED_THRESHOLD:
        return "Mostly Supported"
    if trust_score >= MIXED_RESULTS_THRESHOLD:
        return "Mixed Results"
    return "Low Confidence"


def _explanation_tail(trust_score: int) -> str:
    if trust_score >= MOSTLY_SUPPORTED_THRESHOLD:
        return "Content is mostly supported by available evidence."
    if trust_score >= MIXED_RESULTS_THRESHOLD:
        return "Content has some unclear or contradicted claims."
    return "Content has significant unsupported or contradicted claims."


class TrustAggregator:
    """
    Computes the overall trust verdict from scored claims.

    Pipeline position:
    ClaimScorer → [TrustAggregator] → AnalysisVerdict
    """

    def aggregate(self, claims: list[Claim]) -> TrustSummary:
        """
        Aggregate claim scores into a trust summary.

        Args:
            claims: Scored claims of one analysis

        Returns:
            TrustSummary with trust_score, status_text and explanation

        Example:
            summary = TrustAggregator().aggregate([])
            # TrustSummary(trust_score=0, status_text="No Claims Found", ...)
        """
        if not claims:
            return TrustSummary(
                trust_score=0,
                status_text=NO_CLAIMS_STATUS,
                explanation=NO_CLAIMS_EXPLANATION,
            )

        total = len(claims)
        avg_score = sum(c.score for c in claims) / total

        supported = sum(1 for c in claims if c.status == "Supported")
        unclear = sum(1 for c in claims if c.status == "Unclear")
        contradicted = sum(1 for c in claims if c.status == "Contradicted")

        penalty = (contradicted / total) * CONTRADICTION_PENALTY
        trust_score = round_half_up(max(0.0, min(100.0, avg_score - penalty)))

        plural = "s" if total != 1 else ""
        explanation = (
            f"Overall score: {trust_score}/100. "
            f"Analysis found {supported} supported, {unclear} unclear, "
            f"and {contradicted} contradicted claim{plural}. "
            f"{_explanation_tail(trust_score)}"
        )

        logger.info(
            f"Trust score {trust_score} (avg={avg_score:.1f}, penalty={penalty:.1f}, "
            f"claims={total})"
        )

        return TrustSummary(
            trust_score=trust_score,
            status_text=status_text_for_score(trust_score),
            explanation=explanation,
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def aggregate_trust(claims: list[Claim]) -> TrustSummary:
    """Convenience function to aggregate claim scores."""
    aggregator = TrustAggregator()
    return aggregator.aggregate(claims)
