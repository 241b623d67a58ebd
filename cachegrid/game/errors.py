"""Errors — the exception taxonomy shared by every cachegrid module.

Core modules (store, player, rules) raise these eagerly.  The engine
decides whether a caller sequencing bug is fatal (``strict`` config) or
logged and ignored, and it always recovers from persistence failures.
"""

from __future__ import annotations


class CachegridError(Exception):
    """Base class for all cachegrid errors."""


class InvalidStateError(CachegridError):
    """An operation was sequenced against state that does not allow it.

    Examples: mutating a cell that was never materialized, or holding a
    token while already holding one.
    """


class IllegalActionError(InvalidStateError):
    """A token action was attempted outside its precondition or range."""


class PersistenceUnavailableError(CachegridError):
    """Durable storage could not be read or written."""


class MalformedPersistedStateError(CachegridError):
    """A persisted field is missing or has the wrong type."""


class ConfigError(CachegridError, ValueError):
    """A configuration value is out of its allowed range."""
