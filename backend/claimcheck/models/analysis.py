"""
SQLAlchemy model for the analyses table.

Each row is one finished analysis: the input text, the verdict,
and the scored claims (stored as JSON, in extraction order).
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from claimcheck.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Analysis(Base):
    """
    A stored analysis record.

    Records are append-only: the API creates and reads them,
    nothing updates or deletes them.
    """

    __tablename__ = "analyses"

    # Primary key - random UUID string
    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)

    # What the user submitted
    input_text: Mapped[str] = mapped_column(Text)

    # Verdict
    trust_score: Mapped[int] = mapped_column(Integer)
    status_text: Mapped[str] = mapped_column(String(64))
    explanation: Mapped[str] = mapped_column(Text)

    # Scored claims as a list of dicts (Claim.model_dump())
    # Evidence order inside each claim is the retrieval order
    claims: Mapped[list[dict[str, Any]]] = mapped_column(JSON, default=list)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=_utcnow, index=True
    )

    def __repr__(self) -> str:
        return f"<Analysis id={self.id} trust_score={self.trust_score}>"
