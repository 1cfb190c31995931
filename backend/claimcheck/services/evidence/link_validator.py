"""
Link Validator: drops evidence whose URL doesn't answer.

WHAT THIS DOES:
Probes every evidence URL and keeps only the ones that respond with a
2xx status. A dead link is not evidence.

HOW IT WORKS:
1. All probes for one claim run concurrently
2. Each probe sends HEAD (cheap); if the server answers non-2xx
   (plenty of sites reject HEAD) it retries once with a streamed GET
   that only reads the status line and headers
3. All probes share ONE time budget (default 3s). When it runs out,
   unfinished probes are cancelled and their snippets dropped
4. Surviving snippets keep their original order

Nothing here raises: a probe error or timeout just means "drop this
snippet".

USAGE:
    validator = LinkValidator(http_client, timeout_ms=3000)
    reachable = await validator.validate(snippets)
"""

import asyncio
import logging

import httpx

from claimcheck.models.schemas import EvidenceSnippet

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 3000


class LinkValidator:
    """
    Reachability filter for evidence snippets.

    Pipeline position:
    EvidenceSource → allow-list → [LinkValidator] → ClaimScorer
    """

    def __init__(self, client: httpx.AsyncClient, timeout_ms: int = DEFAULT_TIMEOUT_MS):
        """
        Args:
            client: Shared HTTP client used for the probes
            timeout_ms: Budget for the whole validation step, not per probe
        """
        self.client = client
        self.timeout_ms = timeout_ms

    async def validate(self, snippets: list[EvidenceSnippet]) -> list[EvidenceSnippet]:
        """
        Keep only snippets whose URL is reachable within the budget.

        Args:
            snippets: Candidate evidence (already allow-listed)

        Returns:
            Reachable snippets, in the same relative order
        """
        if not snippets:
            return []

        tasks = [asyncio.create_task(self._probe(s.url)) for s in snippets]

        done, pending = await asyncio.wait(tasks, timeout=self.timeout_ms / 1000)

        # Budget exhausted: abort whatever is still in flight
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.debug(f"Validation budget exceeded, dropped {len(pending)} pending probe(s)")

        reachable = [
            snippet
            for snippet, task in zip(snippets, tasks)
            if task in done and task.result()
        ]

        dropped = len(snippets) - len(reachable)
        if dropped:
            logger.info(f"Link validation dropped {dropped} of {len(snippets)} snippet(s)")

        return reachable

    async def _probe(self, url: str) -> bool:
        """HEAD, then GET if HEAD was answered with a non-2xx status."""
        try:
            response = await self.client.head(url, follow_redirects=True)
            if response.is_success:
                return True

            async with self.client.stream("GET", url, follow_redirects=True) as response:
                return response.is_success
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"Probe failed for {url}: {e}")
            return False
