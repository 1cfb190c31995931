"""
Tests for evidence retrieval: allow-list, sources, link validation.

All HTTP is stubbed with httpx.MockTransport, no internet access needed.
Run with: pytest backend/tests/test_evidence.py -v
"""

import asyncio
from urllib.parse import parse_qs, urlsplit

import httpx
import pytest

from claimcheck.config import Settings
from claimcheck.services.evidence import (
    ALLOWED_DOMAINS,
    METHOD_BING,
    METHOD_FALLBACK,
    BingSearchSource,
    EvidenceRetriever,
    LinkValidator,
    ReferenceFallbackSource,
    domain_quality_weight,
    is_allowed_domain,
    retrieve_evidence,
    select_evidence_source,
)
from claimcheck.services.evidence.domains import parse_host
from claimcheck.services.evidence.sources import build_reference_snippets

CLAIM = "The Earth orbits the Sun"


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def bing_payload(urls: list[str]) -> dict:
    return {
        "webPages": {
            "value": [
                {"name": f"Page {i}", "snippet": f"About the Earth {i}", "url": url}
                for i, url in enumerate(urls)
            ]
        }
    }


# =============================================================================
# ALLOW-LIST + DOMAIN WEIGHTS
# =============================================================================

@pytest.mark.parametrize("url", [
    "https://scholar.google.com/scholar?q=x",
    "https://www.britannica.com/search?query=x",
    "https://en.wikipedia.org/wiki/Sun",
    "https://www.who.int/search?q=x",
    "https://www.nature.com/search?q=x",
    "https://www.sciencedirect.com/search?qs=x",
    "HTTPS://EN.WIKIPEDIA.ORG/wiki/Sun",
])
def test_allowed_domains(url):
    assert is_allowed_domain(url)


@pytest.mark.parametrize("url", [
    "https://wikipedia.org/wiki/Sun",           # not the exact host
    "https://de.wikipedia.org/wiki/Sonne",      # no subdomain wildcarding
    "https://evil.com/?ref=en.wikipedia.org",
    "http://localhost/wiki",
    "http://127.0.0.1:8000/",
    "https://example.com/",
    "https://www.nature.com.example.com/",      # nested under a denied domain
    "ftp://en.wikipedia.org/wiki/Sun",
    "not a url",
    "",
])
def test_rejected_domains(url):
    assert not is_allowed_domain(url)


def test_domain_quality_weights():
    assert domain_quality_weight("https://scholar.google.com/scholar?q=x") == 1.0
    assert domain_quality_weight("https://www.who.int/") == 0.95
    assert domain_quality_weight("https://en.wikipedia.org/wiki/Sun") == 0.8
    assert domain_quality_weight("https://unknown.org/") == 0.75
    assert domain_quality_weight("garbage") == 0.7


def test_parse_host_lowercases():
    assert parse_host("https://WWW.Nature.com/articles") == "www.nature.com"
    assert parse_host("/relative/path") is None


# =============================================================================
# REFERENCE FALLBACK SOURCE
# =============================================================================

def test_reference_snippets_shape():
    snippets = build_reference_snippets(CLAIM)

    assert [s.relevance_score for s in snippets] == [60, 70, 80]
    assert [parse_host(s.url) for s in snippets] == [
        "scholar.google.com",
        "www.britannica.com",
        "en.wikipedia.org",
    ]
    for s in snippets:
        assert "The%20Earth%20orbits%20the%20Sun" in s.url
        assert s.title.startswith("Reference ")
        assert CLAIM in s.snippet


def test_reference_snippets_encode_special_characters():
    snippets = build_reference_snippets("Salt & pepper? 50% off/now")

    assert "Salt%20%26%20pepper%3F%2050%25%20off%2Fnow" in snippets[0].url


@pytest.mark.asyncio
async def test_reference_fallback_source():
    result = await ReferenceFallbackSource().search(CLAIM)

    assert result.method == METHOD_FALLBACK
    assert len(result.snippets) == 3


# =============================================================================
# BING SOURCE
# =============================================================================

@pytest.mark.asyncio
async def test_bing_maps_top_three_results():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["key"] = request.headers.get("Ocp-Apim-Subscription-Key")
        seen["query"] = parse_qs(urlsplit(str(request.url)).query)
        return httpx.Response(200, json=bing_payload([
            "https://en.wikipedia.org/wiki/Earth",
            "https://www.nature.com/articles/1",
            "https://www.who.int/a",
            "https://www.britannica.com/b",
        ]))

    async with mock_client(handler) as client:
        source = BingSearchSource("secret", client, endpoint="https://bing.test/search")
        result = await source.search(CLAIM)

    assert result.method == METHOD_BING
    assert [s.relevance_score for s in result.snippets] == [70, 80, 90]
    assert [s.title for s in result.snippets] == ["Page 0", "Page 1", "Page 2"]
    assert seen["key"] == "secret"
    assert seen["query"]["q"] == [CLAIM]
    assert seen["query"]["textFormat"] == ["Raw"]


@pytest.mark.asyncio
async def test_bing_result_defaults():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"webPages": {"value": [
            {"url": "https://en.wikipedia.org/wiki/Earth", "description": "desc only"},
            {"url": "https://www.nature.com/x"},
        ]}})

    async with mock_client(handler) as client:
        result = await BingSearchSource("k", client).search(CLAIM)

    assert result.snippets[0].title == "Result 1"
    assert result.snippets[0].snippet == "desc only"
    assert result.snippets[1].snippet == "Web result related to the claim"


@pytest.mark.asyncio
async def test_bing_skips_malformed_results():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"webPages": {"value": [
            {"name": 123, "url": "https://en.wikipedia.org/wiki/Earth"},
            {"name": "Sun", "url": ["https://www.nature.com/x"]},
            {"name": "Orbit", "url": "https://www.britannica.com/science/orbit"},
        ]}})

    async with mock_client(handler) as client:
        result = await EvidenceRetriever(BingSearchSource("k", client)).retrieve(CLAIM)

    assert [s.url for s in result.snippets] == ["https://www.britannica.com/science/orbit"]
    assert result.snippets[0].relevance_score == 90
    assert result.method == METHOD_BING


@pytest.mark.asyncio
async def test_bing_without_web_pages_returns_no_snippets():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"_type": "SearchResponse"})

    async with mock_client(handler) as client:
        result = await BingSearchSource("k", client).search(CLAIM)

    assert result.snippets == []
    assert result.method == METHOD_BING


@pytest.mark.asyncio
async def test_bing_error_status_falls_back_to_references():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": "bad key"})

    async with mock_client(handler) as client:
        result = await BingSearchSource("k", client).search(CLAIM)

    assert result.method == METHOD_FALLBACK
    assert result.snippets == build_reference_snippets(CLAIM)


@pytest.mark.asyncio
async def test_bing_transport_error_falls_back_to_references():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with mock_client(handler) as client:
        result = await BingSearchSource("k", client).search(CLAIM)

    assert result.method == METHOD_FALLBACK
    assert len(result.snippets) == 3


@pytest.mark.asyncio
async def test_bing_invalid_json_falls_back_to_references():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    async with mock_client(handler) as client:
        result = await BingSearchSource("k", client).search(CLAIM)

    assert result.method == METHOD_FALLBACK


@pytest.mark.asyncio
async def test_select_evidence_source_by_credentials():
    async with mock_client(lambda r: httpx.Response(200)) as client:
        with_key = select_evidence_source(Settings(bing_api_key="abc"), client)
        without_key = select_evidence_source(Settings(bing_api_key=""), client)

    assert isinstance(with_key, BingSearchSource)
    assert isinstance(without_key, ReferenceFallbackSource)


# =============================================================================
# LINK VALIDATOR
# =============================================================================

@pytest.mark.asyncio
async def test_validator_keeps_reachable_and_preserves_order(make_snippet):
    snippets = [
        make_snippet(url="https://en.wikipedia.org/ok1"),
        make_snippet(url="https://en.wikipedia.org/missing"),
        make_snippet(url="https://en.wikipedia.org/ok2"),
    ]

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404 if request.url.path == "/missing" else 200)

    async with mock_client(handler) as client:
        kept = await LinkValidator(client).validate(snippets)

    assert [s.url for s in kept] == [
        "https://en.wikipedia.org/ok1",
        "https://en.wikipedia.org/ok2",
    ]


@pytest.mark.asyncio
async def test_validator_falls_back_to_get_when_head_is_rejected(make_snippet):
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(405 if request.method == "HEAD" else 200)

    async with mock_client(handler) as client:
        kept = await LinkValidator(client).validate([make_snippet()])

    assert len(kept) == 1
    assert methods == ["HEAD", "GET"]


@pytest.mark.asyncio
async def test_validator_drops_on_probe_error(make_snippet):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async with mock_client(handler) as client:
        kept = await LinkValidator(client).validate([make_snippet()])

    assert kept == []


@pytest.mark.asyncio
async def test_validator_shared_budget_cancels_slow_probes(make_snippet):
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/slow":
            await asyncio.sleep(5)
        return httpx.Response(200)

    snippets = [
        make_snippet(url="https://en.wikipedia.org/slow"),
        make_snippet(url="https://en.wikipedia.org/fast"),
    ]

    async with mock_client(handler) as client:
        kept = await LinkValidator(client, timeout_ms=100).validate(snippets)

    assert [s.url for s in kept] == ["https://en.wikipedia.org/fast"]


@pytest.mark.asyncio
async def test_validator_with_no_snippets():
    async with mock_client(lambda r: httpx.Response(200)) as client:
        assert await LinkValidator(client).validate([]) == []


# =============================================================================
# RETRIEVER
# =============================================================================

@pytest.mark.asyncio
async def test_retriever_applies_allow_list_to_api_results():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=bing_payload([
            "https://evil.com/earth",
            "https://en.wikipedia.org/wiki/Earth",
            "https://sub.example.com/earth",
        ]))

    async with mock_client(handler) as client:
        retriever = EvidenceRetriever(BingSearchSource("k", client))
        result = await retriever.retrieve(CLAIM)

    assert [s.url for s in result.snippets] == ["https://en.wikipedia.org/wiki/Earth"]
    # relevance keeps the original rank (second result)
    assert result.snippets[0].relevance_score == 80
    assert result.method == METHOD_BING


@pytest.mark.asyncio
async def test_retriever_validates_when_configured():
    def handler(request: httpx.Request) -> httpx.Response:
        # Only Wikipedia answers
        return httpx.Response(200 if request.url.host == "en.wikipedia.org" else 503)

    async with mock_client(handler) as client:
        retriever = EvidenceRetriever(ReferenceFallbackSource(), LinkValidator(client))
        result = await retriever.retrieve(CLAIM)

    assert [parse_host(s.url) for s in result.snippets] == ["en.wikipedia.org"]
    assert result.method == METHOD_FALLBACK


@pytest.mark.asyncio
async def test_retrieved_snippets_are_allowed_and_in_range():
    snippets = await retrieve_evidence(CLAIM, ReferenceFallbackSource())

    assert snippets
    for s in snippets:
        assert 0 <= s.relevance_score <= 100
        assert parse_host(s.url) in ALLOWED_DOMAINS
