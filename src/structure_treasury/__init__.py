"""Structure Treasury - structure lifecycle and treasury reconciliation engine."""

__version__ = "0.1.0"
