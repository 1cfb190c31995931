"""
Evidence Sources: where evidence snippets come from.

WHAT THIS IS:
Two interchangeable strategies for turning a claim into evidence:

1. BingSearchSource (API-backed)
   Calls the Bing Web Search API and maps the top 3 results to snippets.
   If the API answers with an error (or can't be reached), it falls back
   to the reference snippets below for that claim.

2. ReferenceFallbackSource (no credentials)
   Builds search links into fixed reference sites (Google Scholar,
   Britannica, Wikipedia, ...) with the claim as the query.

WHICH ONE RUNS:
Decided once at startup by select_evidence_source(): an API key in the
settings means Bing, no key means reference fallback. A missing key is
never an error.

KNOWN LIMITATION:
Reference fallback snippets are the same three sites for every claim,
only the query string changes, and their text is built from the claim
itself. They say "here is where to look", not "here is what a source
says", so fallback scores mostly reflect domain weights.

USAGE:
    source = select_evidence_source(settings, http_client)
    result = await source.search("The Earth orbits the Sun")
    result.snippets  # list[EvidenceSnippet]
    result.method    # "web-search-bing" or "web-search-fallback"
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from claimcheck.config import Settings
from claimcheck.models.schemas import EvidenceSnippet
from claimcheck.services.evidence.domains import is_allowed_domain

logger = logging.getLogger(__name__)

# Verification method tags recorded on every Claim
METHOD_BING = "web-search-bing"
METHOD_FALLBACK = "web-search-fallback"

# Snippets taken per claim, for both modes
MAX_RESULTS = 3

# Reference search pages, in preference order.
# {q} is replaced with the URL-encoded claim.
REFERENCE_URL_TEMPLATES = (
    "https://scholar.google.com/scholar?q={q}",
    "https://www.britannica.com/search?query={q}",
    "https://en.wikipedia.org/wiki/Special:Search?search={q}",
    "https://www.who.int/search?q={q}",
    "https://www.nature.com/search?q={q}",
    "https://www.sciencedirect.com/search?qs={q}",
)

USER_AGENT = "claimcheck/0.1"


@dataclass
class RetrievedEvidence:
    """Evidence for one claim plus the tag of the mode that produced it."""

    snippets: list[EvidenceSnippet] = field(default_factory=list)
    """Snippets in retrieval order."""

    method: str = METHOD_FALLBACK
    """Verification method tag (METHOD_BING or METHOD_FALLBACK)."""


def build_reference_urls(claim: str) -> list[str]:
    """Reference search URLs for a claim, one per reference site."""
    q = quote(claim, safe="")
    return [template.format(q=q) for template in REFERENCE_URL_TEMPLATES]


def build_reference_snippets(claim: str) -> list[EvidenceSnippet]:
    """
    Build fallback snippets pointing at reference sites.

    Relevance is 60, 70, 80 for the first three allowed URLs.

    Example:
        snippets = build_reference_snippets("The Earth orbits the Sun")
        snippets[0].url  # "https://scholar.google.com/scholar?q=The%20Earth..."
    """
    urls = [url for url in build_reference_urls(claim) if is_allowed_domain(url)]

    return [
        EvidenceSnippet(
            title=f"Reference {i + 1}: {claim[:48]}...",
            snippet=f"Reference page relevant to: {claim[:120]}...",
            url=url,
            relevance_score=60 + i * 10,
        )
        for i, url in enumerate(urls[:MAX_RESULTS])
    ]


class EvidenceSource(ABC):
    """
    Abstract base class for evidence strategies.

    Implement this to plug in another search backend.
    Implementations must not raise on network failures; they return
    fewer (or zero) snippets instead.
    """

    @property
    @abstractmethod
    def method(self) -> str:
        """Verification method tag for evidence from this source."""
        pass

    @abstractmethod
    async def search(self, claim: str) -> RetrievedEvidence:
        """
        Find evidence for one claim.

        Args:
            claim: The claim text

        Returns:
            RetrievedEvidence with at most MAX_RESULTS snippets
        """
        pass


class ReferenceFallbackSource(EvidenceSource):
    """Evidence from fixed reference sites, no network calls."""

    @property
    def method(self) -> str:
        return METHOD_FALLBACK

    async def search(self, claim: str) -> RetrievedEvidence:
        return RetrievedEvidence(
            snippets=build_reference_snippets(claim),
            method=self.method,
        )


class BingSearchSource(EvidenceSource):
    """
    Evidence from the Bing Web Search API.

    One request per claim, no retries. Any failure (transport error,
    non-2xx status, body that isn't JSON) falls back to reference
    snippets for that claim. Individual results that don't fit an
    EvidenceSnippet are skipped.
    """

    def __init__(
        self,
        api_key: str,
        client: httpx.AsyncClient,
        endpoint: str = "https://api.bing.microsoft.com/v7.0/search",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.client = client
        self.endpoint = endpoint
        self.timeout = timeout
        self._fallback = ReferenceFallbackSource()

    @property
    def method(self) -> str:
        return METHOD_BING

    async def search(self, claim: str) -> RetrievedEvidence:
        params = {
            "q": claim,
            "textDecorations": "false",
            "textFormat": "Raw",
        }
        headers = {
            "Ocp-Apim-Subscription-Key": self.api_key,
            "User-Agent": USER_AGENT,
        }

        try:
            response = await self.client.get(
                self.endpoint, params=params, headers=headers, timeout=self.timeout
            )
        except httpx.HTTPError as e:
            logger.warning(f"Bing search failed, using reference fallback: {e}")
            return await self._fallback.search(claim)

        if not response.is_success:
            logger.warning(
                f"Bing search returned HTTP {response.status_code}, using reference fallback"
            )
            return await self._fallback.search(claim)

        try:
            data = response.json()
        except ValueError as e:
            logger.warning(f"Bing search returned invalid JSON, using reference fallback: {e}")
            return await self._fallback.search(claim)

        items = self._extract_items(data)
        snippets = []
        for i, item in enumerate(items[:MAX_RESULTS]):
            try:
                snippets.append(self._to_snippet(item, i))
            except ValidationError as e:
                logger.warning(f"Skipping malformed Bing result {i + 1}: {e.error_count()} error(s)")

        logger.info(f"Bing returned {len(items)} result(s) for claim ({len(claim)} chars)")
        return RetrievedEvidence(snippets=snippets, method=self.method)

    def _extract_items(self, data: object) -> list[dict]:
        """Pull webPages.value out of a Bing response, tolerating odd shapes."""
        if not isinstance(data, dict):
            return []
        web_pages = data.get("webPages") or {}
        items = web_pages.get("value") if isinstance(web_pages, dict) else None
        if not isinstance(items, list):
            return []
        return [item for item in items if isinstance(item, dict)]

    def _to_snippet(self, item: dict, rank: int) -> EvidenceSnippet:
        return EvidenceSnippet(
            title=item.get("name") or f"Result {rank + 1}",
            snippet=(
                item.get("snippet")
                or item.get("description")
                or "Web result related to the claim"
            ),
            url=item.get("url") or "",
            relevance_score=min(100, 70 + rank * 10),
        )


# =============================================================================
# SOURCE SELECTION
# =============================================================================

def select_evidence_source(
    settings: Settings,
    client: Optional[httpx.AsyncClient] = None,
) -> EvidenceSource:
    """
    Pick the evidence source once, based on configured credentials.

    Args:
        settings: Application settings (bing_api_key decides the mode)
        client: Shared HTTP client, required for the API-backed mode

    Returns:
        BingSearchSource if a key is configured, else ReferenceFallbackSource
    """
    if settings.bing_api_key:
        if client is None:
            raise ValueError("An HTTP client is required for Bing search")
        logger.info("Evidence source: Bing Web Search")
        return BingSearchSource(
            api_key=settings.bing_api_key,
            client=client,
            endpoint=settings.bing_search_endpoint,
            timeout=settings.search_timeout,
        )

    logger.info("Evidence source: reference fallback (no BING_API_KEY)")
    return ReferenceFallbackSource()
