"""
Claim Scorer Service.

WHAT THIS DOES:
Scores one claim (0-100) against its evidence and labels it
Supported / Unclear / Contradicted.

FORMULA (domain-quality-weighted keyword overlap):
    keywords   = lowercase words of the claim longer than 3 characters
    for each snippet:
        match_ratio = keywords found in (title + snippet) / len(keywords)
        weighted    = snippet.relevance_score × domain_quality_weight(url)
        total      += match_ratio × weighted
    score = round(clamp(total / len(evidence), 0, 100))

EDGE CASES:
- No evidence at all → 0 (nothing corroborates the claim)
- No keywords (e.g. "It is what it is, is it") → 50, neutral rather
  than penalized, since there is nothing to match

STATUS THRESHOLDS (fixed):
    score ≥ 70 → Supported
    score ≥ 40 → Unclear
    otherwise  → Contradicted

"Contradicted" here means "not corroborated", the scorer does no
entailment and can't tell a refuting source from an unrelated one.

EXAMPLE:
    Claim: "The Earth orbits the Sun"
    keywords = ["earth", "orbits"]
    Snippet (Wikipedia, relevance 80): "Earth orbits the Sun once a year"
    → match_ratio 1.0, weighted 80 × 0.8 = 64 → score 64 → Unclear

USAGE:
    scorer = ClaimScorer()
    claim = scorer.score(claim_text, evidence, verification_method="web-search-bing")
"""

import logging
import math
import re
import uuid

from claimcheck.models.schemas import Claim, ClaimStatus, EvidenceSnippet
from claimcheck.services.evidence.domains import domain_quality_weight

logger = logging.getLogger(__name__)

TOKEN_SPLIT = re.compile(r"\W+")

# Words this short ("the", "is", "of") carry no signal
MIN_KEYWORD_LENGTH = 4

NO_KEYWORDS_SCORE = 50

SUPPORTED_THRESHOLD = 70
UNCLEAR_THRESHOLD = 40


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (Python's round() is banker's)."""
    return int(math.floor(value + 0.5))


def tokenize(text: str) -> list[str]:
    """
    Lowercased keywords of a claim, in order, duplicates kept.

    Example:
        tokenize("The Earth orbits the Sun")  # ["earth", "orbits"]
    """
    words = TOKEN_SPLIT.split(text.lower())
    return [w for w in words if len(w) >= MIN_KEYWORD_LENGTH]


def status_for_score(score: int) -> ClaimStatus:
    """Map a 0-100 claim score to its status."""
    if score >= SUPPORTED_THRESHOLD:
        return "Supported"
    if score >= UNCLEAR_THRESHOLD:
        return "Unclear"
    return "Contradicted"


class ClaimScorer:
    """
    Turns a claim and its evidence into a scored Claim.

    Pipeline position:
    EvidenceRetriever → [ClaimScorer] → TrustAggregator
    """

    def keyword_score(self, claim: str, evidence: list[EvidenceSnippet]) -> float:
        """
        Raw (unrounded) keyword-overlap score in [0, 100].

        Args:
            claim: The claim text
            evidence: Snippets retrieved for the claim

        Returns:
            Weighted average match score
        """
        if not evidence:
            return 0.0

        keywords = tokenize(claim)
        if not keywords:
            return float(NO_KEYWORDS_SCORE)

        total = 0.0
        for snippet in evidence:
            haystack = f"{snippet.title} {snippet.snippet}".lower()
            matches = sum(1 for word in keywords if word in haystack)

            match_ratio = matches / len(keywords)
            weighted_relevance = snippet.relevance_score * domain_quality_weight(snippet.url)
            total += match_ratio * weighted_relevance

        average = total / len(evidence)
        return max(0.0, min(100.0, average))

    def score(
        self,
        claim: str,
        evidence: list[EvidenceSnippet],
        verification_method: str = "keyword-match",
    ) -> Claim:
        """
        Score a claim against its evidence.

        Args:
            claim: The claim text
            evidence: Snippets in retrieval order (kept as-is on the Claim)
            verification_method: Tag of the evidence mode that produced them

        Returns:
            Immutable Claim with score, status and evidence
        """
        score = round_half_up(self.keyword_score(claim, evidence))

        return Claim(
            id=str(uuid.uuid4()),
            text=claim,
            score=score,
            status=status_for_score(score),
            evidence=list(evidence),
            verification_method=verification_method,
        )


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def score_claim(
    claim: str,
    evidence: list[EvidenceSnippet],
    verification_method: str = "keyword-match",
) -> Claim:
    """
    Convenience function to score a single claim.

    Example:
        claim = score_claim("The Earth orbits the Sun", snippets)
    """
    scorer = ClaimScorer()
    return scorer.score(claim, evidence, verification_method)
