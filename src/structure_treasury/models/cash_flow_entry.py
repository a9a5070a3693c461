"""CashFlowEntry model - Append-only cash ledger rows."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Date, DateTime, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from structure_treasury.core.database import Base
from structure_treasury.models.structure import utcnow


class EntryType(str, Enum):
    """Cash flow entry types."""
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    STRUCTURE_COST = "STRUCTURE_COST"
    STRUCTURE_PREMIUM = "STRUCTURE_PREMIUM"
    ROLL_COST = "ROLL_COST"
    EXERCISE_COST = "EXERCISE_COST"
    BROKERAGE = "BROKERAGE"
    TAX = "TAX"
    PROFIT = "PROFIT"


class CashFlowEntry(Base):
    """One ledger row.

    Entries are ordered per user by ``id`` (creation order) and satisfy
    ``balance[n] == balance[n-1] + amount[n]``.
    """

    __tablename__ = "cash_flow_entries"
    __table_args__ = {"extend_existing": True}

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    date: Mapped[date] = mapped_column(Date, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    description: Mapped[str] = mapped_column(String(255), nullable=False)

    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)

    related_structure_id: Mapped[str | None] = mapped_column(String(36), index=True)
    related_roll_id: Mapped[int | None] = mapped_column(Integer)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CashFlowEntry(id={self.id}, "
            f"type={self.type}, "
            f"amount={self.amount}, "
            f"balance={self.balance})>"
        )

    @property
    def is_structure_linked(self) -> bool:
        """Check if the entry belongs to a structure."""
        return self.related_structure_id is not None
