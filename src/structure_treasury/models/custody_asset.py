"""CustodyAsset model - Holdings with weighted-average cost."""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from sqlalchemy import Boolean, DateTime, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from structure_treasury.core.database import Base
from structure_treasury.models.structure import utcnow


class AssetKind(str, Enum):
    """Custody asset kinds."""
    STOCK = "STOCK"
    OPTION = "OPTION"
    FUTURE = "FUTURE"
    FIXED_INCOME = "FIXED_INCOME"


class CustodyAsset(Base):
    """A user's holding of one symbol (real stock or synthetic option/future)."""

    __tablename__ = "custody_assets"
    __table_args__ = (
        UniqueConstraint("user_id", "symbol", name="uq_custody_assets_user_symbol"),
        {"extend_existing": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    symbol: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    # Synthetic symbols: "<ticker>_OPT" for long options, "<ticker>_FUT" for long futures
    name: Mapped[str | None] = mapped_column(String(120))
    kind: Mapped[str] = mapped_column(String(20), nullable=False, default=AssetKind.STOCK.value)

    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_price: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"))
    market_price: Mapped[Decimal] = mapped_column(Numeric(18, 6), nullable=False, default=Decimal("0"))

    guarantee_percent: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=Decimal("0"))
    used_as_guarantee: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"<CustodyAsset(symbol={self.symbol}, "
            f"qty={self.quantity}, "
            f"avg={self.average_price})>"
        )

    @property
    def market_value(self) -> Decimal:
        """Quantity times market price."""
        return self.quantity * self.market_price

    @property
    def guarantee_value(self) -> Decimal:
        """Guarantee this asset releases, zero when not pledged."""
        if not self.used_as_guarantee:
            return Decimal("0")
        return self.market_value * self.guarantee_percent / 100
