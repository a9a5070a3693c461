"""Structure model - Named bundle of legs with a lifecycle status."""

import uuid
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from sqlalchemy import JSON, Date, DateTime, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from structure_treasury.core.database import Base


def utcnow() -> datetime:
    """Return current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def new_id() -> str:
    """Generate an opaque string identifier."""
    return str(uuid.uuid4())


class StructureStatus(str, Enum):
    """Structure lifecycle status. Transitions only move forward."""
    DRAFTING = "DRAFTING"
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"


class Structure(Base):
    """A user's structure: ordered legs plus lifecycle metadata."""

    __tablename__ = "structures"
    __table_args__ = {"extend_existing": True}

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    underlying: Mapped[str | None] = mapped_column(String(20))

    # Legs are stored as JSON dicts; see schemas.leg for the typed view
    legs: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    # Custody changes applied at activation, one per leg id: leg_id, symbol, side, quantity
    custody_movements: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    net_premium: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    assembly_cost: Mapped[Decimal] = mapped_column(Numeric(18, 2), default=Decimal("0.00"), nullable=False)
    expiration: Mapped[date | None] = mapped_column(Date)

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=StructureStatus.DRAFTING.value, index=True
    )
    activated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    closed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<Structure(id={self.id}, "
            f"name={self.name}, "
            f"legs={len(self.legs or [])}, "
            f"status={self.status})>"
        )

    @property
    def is_active(self) -> bool:
        """Check if the structure is active."""
        return self.status == StructureStatus.ACTIVE.value

    @property
    def was_activated(self) -> bool:
        """Check if the structure ever went through activation."""
        return self.activated_at is not None
