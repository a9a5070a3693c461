"""Engine exception hierarchy."""


class TreasuryEngineError(Exception):
    """Base exception for the treasury engine."""


class ValidationError(TreasuryEngineError):
    """Hard rejection before any ledger effect (empty name, no legs, bad leg)."""


class NotFoundError(TreasuryEngineError):
    """Referenced structure, asset, entry or roll does not exist for the user."""


class PersistenceError(TreasuryEngineError):
    """A store operation failed; already-written rows are left in place."""
