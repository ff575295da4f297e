# taskgate/hooks/__init__.py
"""
Hook system.

Built-in hooks and the names create_default_dispatcher() registers them under:
- pre-execution: SecurityHook
- post-execution: QualityHook
- completion: CompletionHook
- consciousness-check: ConsciousnessHook
- resource-monitor: ResourceHook
"""

from taskgate.hooks.base import BaseHook, HookResult
from taskgate.hooks.dispatcher import DispatcherConfig, HookDispatcher, create_default_dispatcher
from taskgate.hooks.security import SecurityHook
from taskgate.hooks.quality import QualityHook
from taskgate.hooks.completion import CompletionHook
from taskgate.hooks.consciousness import ConsciousnessHook
from taskgate.hooks.resource import ResourceHook

__all__ = [
    "BaseHook",
    "HookResult",
    "DispatcherConfig",
    "HookDispatcher",
    "create_default_dispatcher",
    "SecurityHook",
    "QualityHook",
    "CompletionHook",
    "ConsciousnessHook",
    "ResourceHook",
]
