"""
Claim Extractor Service.

WHAT THIS DOES:
Breaks free text into sentence-sized claims that can each be checked
against evidence. This is the first step of the Trust Layer.

WHY THIS MATTERS:
You can't verify a paragraph, you verify individual statements.
By splitting the text first, every claim gets its own evidence and score.

HOW IT WORKS:
Purely lexical, no model calls:
1. Split on sentence-ending punctuation (runs of . ! ?)
2. Drop tiny fragments (abbreviations, stray words)
3. Keep sentences between 15 and 500 characters
4. Drop greetings and notes ("Hello ...", "Thanks ...", "Note: ...")
5. Keep the first 8

KNOWN LIMITATION:
This is a heuristic. "Dr. Smith" splits into two pieces, and a question
is happily treated as a claim. It is meant to be cheap and predictable,
not linguistically correct.

EXAMPLE:
    Text: "Hello, thanks for reading. The Earth orbits the Sun."

    Extracted claims:
    1. "The Earth orbits the Sun"

USAGE:
    extractor = ClaimExtractor()
    claims = extractor.extract(text)
"""

import logging
import re

logger = logging.getLogger(__name__)

# Runs of sentence-ending punctuation ("...", "?!" count as one boundary)
SENTENCE_BOUNDARY = re.compile(r"[.!?]+")

# Fragments this short are noise left over from splitting
MIN_FRAGMENT_LENGTH = 10

MIN_CLAIM_LENGTH = 15
MAX_CLAIM_LENGTH = 500

# Upper bound on claims per analysis (each claim costs a search + probes)
MAX_CLAIMS = 8

# Lowercased prefixes of sentences that are never factual claims
REJECT_PREFIXES = ("hello", "hi ", "thanks", "note:")


class ClaimExtractor:
    """
    Splits input text into candidate claims.

    Pipeline position:
    Text → [ClaimExtractor] → Claims → EvidenceRetriever → ClaimScorer → ...
    """

    def __init__(self, max_claims: int = MAX_CLAIMS):
        self.max_claims = max_claims

    def extract(self, text: str) -> list[str]:
        """
        Extract claim strings from text.

        Args:
            text: Raw input text

        Returns:
            Up to max_claims trimmed sentences, in their original order

        Example:
            extractor = ClaimExtractor()
            extractor.extract("Hi there, friend! Water boils at 100 degrees Celsius.")
            # Returns: ["Water boils at 100 degrees Celsius"]
        """
        sentences = [s.strip() for s in SENTENCE_BOUNDARY.split(text)]
        sentences = [s for s in sentences if len(s) > MIN_FRAGMENT_LENGTH]

        claims = [s for s in sentences if self._is_claim(s)]

        logger.debug(
            f"Extracted {len(claims)} claim(s) from {len(sentences)} sentence(s), "
            f"keeping {min(len(claims), self.max_claims)}"
        )
        return claims[:self.max_claims]

    def _is_claim(self, sentence: str) -> bool:
        """Length bounds plus the greeting/metadata blacklist."""
        if len(sentence) < MIN_CLAIM_LENGTH or len(sentence) > MAX_CLAIM_LENGTH:
            return False

        return not sentence.lower().startswith(REJECT_PREFIXES)


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def extract_claims(text: str) -> list[str]:
    """
    Convenience function to extract claims from text.

    Example:
        claims = extract_claims("The Earth orbits the Sun. Hi all.")
    """
    extractor = ClaimExtractor()
    return extractor.extract(text)
