"""Persistence-related exceptions."""


class PersistenceError(Exception):
    """Base exception for persistence-related errors."""


class KeyValueStoreError(PersistenceError):
    """Key-value store is unreachable or rejected an operation."""
