"""
Pulseboard Shared Utilities

This package contains shared infrastructure:
- Error taxonomy for external services
- Health tracking for external calls
- Schema validation and pre-storage sanitization
"""

from .resilience import (
    # Exceptions
    ResilienceError,
    ServiceNotConfiguredError,
    ServiceUnavailableError,

    # Health Tracking
    ServiceHealth,
    get_health_tracker,
    get_all_health_status,
    tracked_call,

    # Status
    get_system_status,
    reset_all,
)

from .validation import (
    ValidationSeverity,
    ValidationIssue,
    ValidationResult,
    SchemaValidator,
    StorageValidator,
)

__all__ = [
    "ResilienceError",
    "ServiceNotConfiguredError",
    "ServiceUnavailableError",
    "ServiceHealth",
    "get_health_tracker",
    "get_all_health_status",
    "tracked_call",
    "get_system_status",
    "reset_all",
    "ValidationSeverity",
    "ValidationIssue",
    "ValidationResult",
    "SchemaValidator",
    "StorageValidator",
]
