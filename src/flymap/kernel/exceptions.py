"""Unified exception hierarchy for flymap.

All library exceptions inherit from FlymapException, enabling unified
error handling across modules.

Categories:
- ConfigurationException: invalid mapping configuration, raised while
  profiles are registered or a type pair is compiled
- MappingException: a destination object could not be produced at runtime
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FlymapException(Exception):
    """Base exception for all flymap errors.

    Carries an optional error code and context dict for structured error data.
    Catch FlymapException to handle every library error, or catch specific
    subclasses for targeted handling.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "MAPPING_001").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(FlymapException):
    """Mapping configuration is invalid.

    Always raised at setup time (profile registration or type-pair
    compilation), never deferred to an unrelated mapping call.
    """


# =============================================================================
# Runtime Exceptions
# =============================================================================


class MappingException(FlymapException):
    """A destination instance could not be created or populated."""
