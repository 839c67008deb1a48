"""Exception hierarchy for TuneCast.

Nothing on the decision path lets these escape to the host; they exist so
that collaborators (store, config) can fail loudly at their own boundary
and the services above them can log and degrade.
"""


class TuneCastError(Exception):
    """Base class for all TuneCast errors."""


class ConfigError(TuneCastError, ValueError):
    """Raised when a configuration value is invalid."""


class StoreError(TuneCastError):
    """Raised when the persistent store cannot complete an operation."""


class DatabaseLockedError(StoreError):
    """Raised when the database is locked and retries are exhausted."""
