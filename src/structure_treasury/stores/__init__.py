"""Persistent store interfaces and implementations."""

from structure_treasury.stores.base import LedgerStore, TreasuryStore
from structure_treasury.stores.sqlalchemy_store import (
    SqlAlchemyLedgerStore,
    SqlAlchemyTreasuryStore,
)

__all__ = [
    "LedgerStore",
    "TreasuryStore",
    "SqlAlchemyLedgerStore",
    "SqlAlchemyTreasuryStore",
]
