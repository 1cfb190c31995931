"""
Evidence source domains: the allow-list and per-domain quality weights.

Only a fixed set of hosts may ever be cited as evidence. Matching is
exact on the hostname: "www.nature.com" is allowed, "nature.com" and
"blog.nature.com" are not. Loopback and example hosts are rejected even
if someone adds them to the allow-list by mistake.
"""

from typing import Optional
from urllib.parse import urlsplit

ALLOWED_DOMAINS = frozenset({
    "scholar.google.com",
    "www.britannica.com",
    "en.wikipedia.org",
    "www.who.int",
    "www.nature.com",
    "www.sciencedirect.com",
})

# Rejected on exact match and as a parent domain ("api.example.com")
DENIED_DOMAINS = ("example.com", "localhost", "127.0.0.1")

# Higher weight = more influence on the claim score
DOMAIN_QUALITY_WEIGHTS = {
    "scholar.google.com": 1.0,
    "www.who.int": 0.95,
    "www.nature.com": 0.9,
    "www.sciencedirect.com": 0.9,
    "www.britannica.com": 0.85,
    "en.wikipedia.org": 0.8,
}

# Host parsed fine but has no entry in the table
DEFAULT_QUALITY_WEIGHT = 0.75

# URL could not be parsed at all
UNPARSEABLE_QUALITY_WEIGHT = 0.7


def parse_host(url: str) -> Optional[str]:
    """
    Lowercased hostname of an http(s) URL, or None if it has none.

    Example:
        parse_host("https://EN.Wikipedia.org/wiki/Sun")  # "en.wikipedia.org"
        parse_host("not a url")                           # None
    """
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None

    if parts.scheme not in ("http", "https") or not host:
        return None
    return host


def is_denied_host(host: str) -> bool:
    return any(host == d or host.endswith(f".{d}") for d in DENIED_DOMAINS)


def is_allowed_domain(url: str) -> bool:
    """True if the URL's host is on the allow-list and not denied."""
    host = parse_host(url)
    if host is None or is_denied_host(host):
        return False
    return host in ALLOWED_DOMAINS


def domain_quality_weight(url: str) -> float:
    """
    Quality weight for the URL's host.

    Example:
        domain_quality_weight("https://www.who.int/search?q=x")  # 0.95
        domain_quality_weight("https://other.org/")              # 0.75
    """
    host = parse_host(url)
    if host is None:
        return UNPARSEABLE_QUALITY_WEIGHT
    return DOMAIN_QUALITY_WEIGHTS.get(host, DEFAULT_QUALITY_WEIGHT)
