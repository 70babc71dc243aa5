"""
PULSEBOARD RESILIENCE MODULE
Shared error taxonomy and call health tracking for external services

The only external service is the text generation collaborator (Anthropic).
Calls to it are never retried: a failure is reported once, tracked here, and
each caller decides whether to fall back or surface it.
"""

import time
import logging
import functools
from datetime import datetime, timezone
from typing import Callable, Optional, Dict, Any, List
from dataclasses import dataclass, field
from threading import Lock

logger = logging.getLogger(__name__)


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class ResilienceError(Exception):
    """Base exception for external service errors"""
    pass


class ServiceNotConfiguredError(ResilienceError):
    """Service credentials are missing, no call was attempted"""
    def __init__(self, service_name: str, setting: Optional[str] = None):
        self.service_name = service_name
        self.setting = setting
        msg = f"{service_name} is not configured"
        if setting:
            msg += f" (set {setting})"
        super().__init__(msg)


class ServiceUnavailableError(ResilienceError):
    """Service was called and failed (unreachable, timed out or errored)"""
    def __init__(self, service_name: str, message: str, last_exception: Optional[Exception] = None):
        self.service_name = service_name
        self.last_exception = last_exception
        super().__init__(f"{service_name} unavailable: {message}")


# =============================================================================
# HEALTH TRACKING
# =============================================================================

def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ServiceHealth:
    """Track health metrics for a service"""
    name: str
    total_calls: int = 0
    successful_calls: int = 0
    failed_calls: int = 0
    last_success: Optional[datetime] = None
    last_failure: Optional[datetime] = None
    last_error: Optional[str] = None
    avg_response_time_ms: float = 0.0
    last_call_failed: bool = False
    _response_times: List[float] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock)

    def record_call(self, success: bool, response_time_ms: float, error: Optional[str] = None):
        """Record a call result"""
        with self._lock:
            self.total_calls += 1
            self.last_call_failed = not success

            if success:
                self.successful_calls += 1
                self.last_success = _now()
            else:
                self.failed_calls += 1
                self.last_failure = _now()
                self.last_error = error

            # Keep the last 100 response times
            self._response_times.append(response_time_ms)
            if len(self._response_times) > 100:
                self._response_times.pop(0)

            self.avg_response_time_ms = sum(self._response_times) / len(self._response_times)

    @property
    def success_rate(self) -> float:
        """Success rate as percentage"""
        if self.total_calls == 0:
            return 100.0
        return (self.successful_calls / self.total_calls) * 100

    @property
    def is_healthy(self) -> bool:
        """Healthy if >80% success rate and the last call did not fail"""
        if self.success_rate < 80:
            return False
        if self.last_call_failed:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for reporting"""
        return {
            "name": self.name,
            "total_calls": self.total_calls,
            "successful_calls": self.successful_calls,
            "failed_calls": self.failed_calls,
            "success_rate": round(self.success_rate, 2),
            "avg_response_time_ms": round(self.avg_response_time_ms, 2),
            "last_success": self.last_success.isoformat() if self.last_success else None,
            "last_failure": self.last_failure.isoformat() if self.last_failure else None,
            "last_error": self.last_error,
            "is_healthy": self.is_healthy,
        }


# Global health registry
_health_trackers: Dict[str, ServiceHealth] = {}
_health_lock = Lock()


def get_health_tracker(name: str) -> ServiceHealth:
    """Get or create a health tracker by name"""
    with _health_lock:
        if name not in _health_trackers:
            _health_trackers[name] = ServiceHealth(name=name)
        return _health_trackers[name]


def get_all_health_status() -> Dict[str, Dict[str, Any]]:
    """Get health status for all tracked services"""
    with _health_lock:
        return {name: tracker.to_dict() for name, tracker in _health_trackers.items()}


# =============================================================================
# TRACKED CALL DECORATOR
# =============================================================================

def tracked_call(service_name: str):
    """
    Decorator to track call health metrics.

    The wrapped call runs exactly once; exceptions are recorded and re-raised.

    Usage:
        @tracked_call("anthropic")
        def call_model():
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            tracker = get_health_tracker(service_name)
            start_time = time.time()

            try:
                result = func(*args, **kwargs)
                response_time = (time.time() - start_time) * 1000
                tracker.record_call(success=True, response_time_ms=response_time)
                return result
            except Exception as e:
                response_time = (time.time() - start_time) * 1000
                tracker.record_call(
                    success=False,
                    response_time_ms=response_time,
                    error=str(e)[:200]
                )
                logger.warning(f"[{service_name}] call failed after {response_time:.0f}ms: {e}")
                raise

        return wrapper
    return decorator


# =============================================================================
# STATUS AND RESET
# =============================================================================

def reset_all():
    """Clear all health trackers (for testing)"""
    with _health_lock:
        _health_trackers.clear()

    logger.debug("All resilience state reset")


def get_system_status() -> Dict[str, Any]:
    """Get complete service health status"""
    return {
        "timestamp": _now().isoformat(),
        "health": get_all_health_status(),
    }
