"""
Evidence Retrieval: finding sources for each claim.

Components:
- EvidenceSource: Strategy interface (Bing search or reference fallback)
- LinkValidator: Drops snippets whose URL doesn't answer
- EvidenceRetriever: Source → allow-list → validation

Usage:
    from claimcheck.services.evidence import EvidenceRetriever, select_evidence_source

    source = select_evidence_source(settings, http_client)
    retriever = EvidenceRetriever(source, LinkValidator(http_client))
    evidence = await retriever.retrieve(claim)
"""

from claimcheck.services.evidence.domains import (
    ALLOWED_DOMAINS,
    domain_quality_weight,
    is_allowed_domain,
)
from claimcheck.services.evidence.link_validator import LinkValidator
from claimcheck.services.evidence.retriever import (
    EvidenceRetriever,
    filter_allowed,
    retrieve_evidence,
)
from claimcheck.services.evidence.sources import (
    METHOD_BING,
    METHOD_FALLBACK,
    BingSearchSource,
    EvidenceSource,
    ReferenceFallbackSource,
    RetrievedEvidence,
    select_evidence_source,
)

__all__ = [
    "ALLOWED_DOMAINS",
    "domain_quality_weight",
    "is_allowed_domain",
    "LinkValidator",
    "EvidenceRetriever",
    "filter_allowed",
    "retrieve_evidence",
    "METHOD_BING",
    "METHOD_FALLBACK",
    "BingSearchSource",
    "EvidenceSource",
    "ReferenceFallbackSource",
    "RetrievedEvidence",
    "select_evidence_source",
]
