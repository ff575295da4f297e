# taskgate/__init__.py
"""
TaskGate - task routing with guarded hook dispatch.

Usage:
    from taskgate import TaskRouter, create_default_dispatcher

    dispatcher = create_default_dispatcher()
    router = TaskRouter(dispatcher)
    result = await router.route_and_execute("implement", ["user", "auth", "api"])
"""

from taskgate.errors import (
    TaskGateError,
    InvalidArgumentError,
    HandlerNotFoundError,
    HandlerTimeoutError,
    HandlerExecutionError,
    CacheSerializationError,
    InvalidHandlerError,
)
from taskgate.hooks.base import BaseHook, HookResult
from taskgate.hooks.dispatcher import DispatcherConfig, HookDispatcher, create_default_dispatcher
from taskgate.routing.router import RoutingResult, TaskAnalysis, TaskRouter

__version__ = "1.0.0"

__all__ = [
    # Errors
    "TaskGateError",
    "InvalidArgumentError",
    "HandlerNotFoundError",
    "HandlerTimeoutError",
    "HandlerExecutionError",
    "CacheSerializationError",
    "InvalidHandlerError",
    # Hooks
    "BaseHook",
    "HookResult",
    "DispatcherConfig",
    "HookDispatcher",
    "create_default_dispatcher",
    # Routing
    "TaskRouter",
    "TaskAnalysis",
    "RoutingResult",
]
