"""
Analysis Service: Handles storage and retrieval of finished analyses.

WHAT THIS DOES:
Provides a clean interface for saving verdicts and reading them back.
The pipeline never touches the database; routes hand its verdict here.

WHY THIS EXISTS:
- Single responsibility: database operations in one place
- The pipeline stays id- and timestamp-agnostic; this service assigns both
- Testable: easy to swap for an in-memory database in tests
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from claimcheck.models.analysis import Analysis
from claimcheck.models.schemas import AnalysisVerdict

logger = logging.getLogger(__name__)


class AnalysisService:
    """
    Service for analysis storage operations.

    Handles:
    - Saving a verdict together with its input text
    - Looking up one analysis by id
    - Listing the history, newest first
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, input_text: str, verdict: AnalysisVerdict) -> Analysis:
        """
        Persist a verdict as a new analysis.

        Args:
            input_text: The text that was analyzed
            verdict: Pipeline output

        Returns:
            The stored Analysis, with id and created_at assigned
        """
        analysis = Analysis(
            input_text=input_text,
            trust_score=verdict.trust_score,
            status_text=verdict.status_text,
            explanation=verdict.explanation,
            claims=[claim.model_dump(mode="json") for claim in verdict.claims],
        )
        self.db.add(analysis)
        await self.db.commit()
        await self.db.refresh(analysis)

        logger.info(f"Saved analysis {analysis.id} (trust={analysis.trust_score})")
        return analysis

    async def get(self, analysis_id: str) -> Optional[Analysis]:
        """Get an analysis by its id."""
        result = await self.db.execute(
            select(Analysis).where(Analysis.id == analysis_id)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Analysis]:
        """All analyses, newest first."""
        result = await self.db.execute(
            select(Analysis).order_by(Analysis.created_at.desc())
        )
        return list(result.scalars().all())
