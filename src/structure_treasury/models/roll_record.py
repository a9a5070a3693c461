"""RollRecord model - History of roll events."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from structure_treasury.core.database import Base
from structure_treasury.models.structure import utcnow


class RollStatus(str, Enum):
    """Roll status."""
    PENDING = "PENDING"
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"


class RollRecord(Base):
    """One executed roll with pre- and post-roll leg snapshots.

    Rolls are never deleted automatically, not even with their structure.
    """

    __tablename__ = "roll_records"
    __table_args__ = {"extend_existing": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    structure_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    original_legs: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    new_legs: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    roll_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    realized_profit: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255))
    notes: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=RollStatus.EXECUTED.value)

    rolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<RollRecord(id={self.id}, "
            f"structure_id={self.structure_id}, "
            f"legs={len(self.original_legs or [])})>"
        )
