# biketrail/errors

"""
biketrail.errors

Central exception hierarchy for BikeTrail.

Rationale:
  - Library code raises specific, meaningful errors.
  - Callers can catch BikeTrailError (broad) or specific subclasses (narrow).
  - The ride state machine itself never raises for gating reasons; rejected
    transitions and dropped fixes are reported as False.
"""


class BikeTrailError(RuntimeError):
    """Base class for all BikeTrail runtime errors."""


# ---- Location source errors --------------------

class LocationError(BikeTrailError):
    """Errors related to obtaining location fixes."""

class LocationPermissionError(LocationError):
    """The location source refused permission; the ride cannot start."""

class InvalidGpxError(LocationError):
    """GPX file could not be parsed or did not contain expected data structures."""


# ---- Storage errors ----------------------------

class StorageError(BikeTrailError):
    """Errors interacting with the ride history database."""

class PersistenceError(StorageError):
    """A read or write against SQLite failed."""

class RideNotFoundError(StorageError):
    """No stored ride exists with the requested id."""


# ---- Configuration / CLI errors ----------------

class ConfigError(BikeTrailError):
    """A config file exists but could not be parsed."""

class FzfNotFoundError(BikeTrailError):
    """fzf is required but not available on PATH."""
