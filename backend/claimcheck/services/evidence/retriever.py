"""
Evidence Retriever Service.

WHAT THIS DOES:
Given one claim, returns the evidence snippets we are willing to cite:
1. Ask the configured EvidenceSource (Bing or reference fallback)
2. Drop every snippet whose host is not on the allow-list
3. Optionally drop snippets whose link doesn't answer (LinkValidator)

WHY THE ALLOW-LIST IS MANDATORY:
Search results can point anywhere, including spam or pages crafted to
"confirm" a claim. Citing only a curated set of hosts keeps the trust
score from being steered by arbitrary URLs.

FAILURE MODEL:
Never raises for network problems. A claim can legitimately end up with
zero evidence, which the scorer turns into a score of 0.

USAGE:
    retriever = EvidenceRetriever(source, validator)
    evidence = await retriever.retrieve("The Earth orbits the Sun")
"""

import logging
from typing import Optional

from claimcheck.models.schemas import EvidenceSnippet
from claimcheck.services.evidence.domains import is_allowed_domain
from claimcheck.services.evidence.link_validator import LinkValidator
from claimcheck.services.evidence.sources import EvidenceSource, RetrievedEvidence

logger = logging.getLogger(__name__)


def filter_allowed(snippets: list[EvidenceSnippet]) -> list[EvidenceSnippet]:
    """Keep snippets whose URL host is allow-listed, preserving order."""
    return [s for s in snippets if is_allowed_domain(s.url)]


class EvidenceRetriever:
    """
    Collects allow-listed, optionally validated evidence for a claim.

    Pipeline position:
    ClaimExtractor → [EvidenceRetriever] → ClaimScorer → TrustAggregator
    """

    def __init__(
        self,
        source: EvidenceSource,
        validator: Optional[LinkValidator] = None,
    ):
        """
        Args:
            source: Where evidence comes from (chosen once at startup)
            validator: Reachability filter, None to skip validation
        """
        self.source = source
        self.validator = validator

    @property
    def method(self) -> str:
        """Verification method tag of the configured source."""
        return self.source.method

    async def retrieve(self, claim: str) -> RetrievedEvidence:
        """
        Retrieve evidence for a single claim.

        Args:
            claim: The claim text

        Returns:
            RetrievedEvidence with snippets in retrieval order and the
            tag of the mode that actually produced them
        """
        found = await self.source.search(claim)

        snippets = filter_allowed(found.snippets)
        if len(snippets) < len(found.snippets):
            logger.info(
                f"Allow-list dropped {len(found.snippets) - len(snippets)} snippet(s)"
            )

        if self.validator is not None:
            snippets = await self.validator.validate(snippets)

        return RetrievedEvidence(snippets=snippets, method=found.method)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

async def retrieve_evidence(
    claim: str,
    source: EvidenceSource,
    validator: Optional[LinkValidator] = None,
) -> list[EvidenceSnippet]:
    """
    Convenience function returning just the snippets for a claim.

    Example:
        snippets = await retrieve_evidence(claim, ReferenceFallbackSource())
    """
    retriever = EvidenceRetriever(source, validator)
    evidence = await retriever.retrieve(claim)
    return evidence.snippets
