# taskgate/errors.py
"""
Error taxonomy for routing and hook dispatch.

Only InvalidArgumentError (and InvalidHandlerError at registration time)
ever reaches callers. Everything raised on the hook execution path is
caught by the dispatcher and turned into an allow-with-warning result.
"""

from __future__ import annotations
from typing import Optional


class TaskGateError(Exception):
    """Base exception for taskgate errors"""
    def __init__(self, message: str, error_type: str = "fatal"):
        super().__init__(message)
        self.error_type = error_type
        self.message = message


class InvalidArgumentError(TaskGateError):
    """Malformed input to the classifier, selector or router"""
    def __init__(self, message: str):
        super().__init__(message, error_type="invalid_argument")


class HandlerNotFoundError(TaskGateError):
    """No handler registered under the requested name"""
    def __init__(self, handler_name: str):
        super().__init__(f"Hook {handler_name} not found", error_type="handler_not_found")
        self.handler_name = handler_name


class HandlerTimeoutError(TaskGateError):
    """Handler did not settle within the dispatcher timeout"""
    def __init__(self, handler_name: str, timeout_ms: int):
        super().__init__(
            f"Hook {handler_name} timed out after {timeout_ms}ms",
            error_type="handler_timeout",
        )
        self.handler_name = handler_name
        self.timeout_ms = timeout_ms


class HandlerExecutionError(TaskGateError):
    """Handler body raised or returned a malformed result"""
    def __init__(self, handler_name: str, message: str, cause: Optional[BaseException] = None):
        super().__init__(message, error_type="handler_execution")
        self.handler_name = handler_name
        self.cause = cause


class CacheSerializationError(TaskGateError):
    """Context could not be serialized deterministically for the cache key"""
    def __init__(self, message: str):
        super().__init__(message, error_type="cache_serialization")


class InvalidHandlerError(TaskGateError):
    """Registered object does not implement the hook contract"""
    def __init__(self, message: str):
        super().__init__(message, error_type="invalid_handler")
