# taskgate/hooks/dispatcher.py
"""
Guarded Hook Dispatcher - runs named hooks safely.

Guarantees:
- execute() never raises (except CancelledError from the caller)
- unknown, switched-off, disabled, failing and timed-out hooks all
  resolve to allow=True ("fail open")

Per-call pipeline:
1. hook not registered      → {allow: True, message: "Hook X not found"}
2. hook.enabled is False    → {allow: True, message: "Hook X is switched off"}
3. >= threshold failures within the window → short-circuit,
   {allow: True, warning: "Hook disabled due to failures", disabled: True}
4. cache hit within TTL     → cached result, hook body not invoked
5. run hook under asyncio.wait_for(timeout)
   - success: cache if allow and not a fallback, reset failure record
   - raise/timeout/malformed: record failure, {allow: True, warning, failed: True}

Usage:
    dispatcher = create_default_dispatcher()
    result = await dispatcher.execute("pre-execution", {"command": "ls"})
"""

from __future__ import annotations
import asyncio
import copy
import hashlib
import json
import logging
import time
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Mapping, Optional

from config.settings import cfg
from taskgate.errors import (
    CacheSerializationError,
    HandlerExecutionError,
    HandlerNotFoundError,
    HandlerTimeoutError,
    InvalidHandlerError,
)
from taskgate.hooks.base import BaseHook, HookResult


# ============================================================================
# CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class DispatcherConfig:
    cache_ttl_ms: int = 5 * 60 * 1000
    timeout_ms: int = 10000
    failure_threshold: int = 3
    failure_window_ms: int = 60000

    @classmethod
    def from_settings(cls, settings: Any = None) -> "DispatcherConfig":
        settings = settings or cfg
        return cls(**settings.get_dispatcher_config())

    def as_dict(self) -> Dict[str, int]:
        return {
            "cache_ttl_ms": self.cache_ttl_ms,
            "timeout_ms": self.timeout_ms,
            "failure_threshold": self.failure_threshold,
            "failure_window_ms": self.failure_window_ms,
        }


@dataclass
class _CacheEntry:
    result: HookResult
    timestamp: float


# ============================================================================
# DISPATCHER
# ============================================================================

class HookDispatcher:
    """
    Registry of named hooks plus the cache and failure tracker that guard them.

    The cache and the failure tracker are owned by the dispatcher; nothing
    else mutates them.
    """

    def __init__(
        self,
        config: Optional[DispatcherConfig] = None,
        logger: Optional[Any] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.config = config or DispatcherConfig.from_settings()
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock
        self.hooks: Dict[str, BaseHook] = {}
        self.cache: Dict[str, _CacheEntry] = {}
        self.failure_tracker: Dict[str, List[float]] = {}

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, name: str, hook: BaseHook) -> None:
        """
        Register (or replace) a hook under name.

        Raises:
            InvalidHandlerError: hook does not extend BaseHook
        """
        if not isinstance(hook, BaseHook):
            raise InvalidHandlerError(
                f"Hook {name} must extend BaseHook, got {type(hook).__name__}"
            )
        replaced = name in self.hooks
        self.hooks[name] = hook
        self.logger.info(
            f"{'Replaced' if replaced else 'Registered'} hook: {name} ({type(hook).__name__})"
        )

    def unregister(self, name: str) -> bool:
        if name not in self.hooks:
            return False
        del self.hooks[name]
        self.failure_tracker.pop(name, None)
        prefix = f"{name}:"
        for key in [k for k in self.cache if k.startswith(prefix)]:
            del self.cache[key]
        self.logger.info(f"Unregistered hook: {name}")
        return True

    def has_handler(self, name: str) -> bool:
        return name in self.hooks

    def handler_names(self) -> List[str]:
        return list(self.hooks)

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def execute(self, name: str, context: Optional[Mapping[str, Any]] = None) -> HookResult:
        """
        Execute hook `name` against context.

        Returns:
            HookResult; allow is only False when the hook itself said so
        """
        context = context if context is not None else {}

        hook = self.hooks.get(name)
        if hook is None:
            error = HandlerNotFoundError(name)
            self.logger.debug(error.message)
            return HookResult(handler=name, allow=True, message=error.message)

        if not hook.enabled:
            return HookResult(handler=name, allow=True, message=f"Hook {name} is switched off")

        if self.is_hook_disabled(name):
            self.logger.warning(
                f"Hook {name} disabled due to repeated failures",
                extra={"ctx": {"hook": name, "recent_failures": len(self.failure_tracker.get(name, []))}},
            )
            return HookResult(
                handler=name,
                allow=True,
                warning="Hook disabled due to failures",
                disabled=True,
            )

        try:
            cache_key: Optional[str] = self.generate_cache_key(name, context)
        except CacheSerializationError as e:
            # Кэш для этого вызова просто не используется
            self.logger.debug(f"Hook {name}: cache bypassed ({e.message})")
            cache_key = None

        if cache_key is not None:
            cached = self.get_from_cache(cache_key)
            if cached is not None:
                self.logger.debug(f"Hook {name}: cache hit")
                return replace(copy.deepcopy(cached), cached=True)

        try:
            output = await self._execute_with_timeout(name, hook, context)
            if not isinstance(output, Mapping) or "allow" not in output:
                raise HandlerExecutionError(
                    name, f"Hook {name} returned a malformed result: {type(output).__name__}"
                )
            result = HookResult.from_hook_output(name, output)
        except (HandlerTimeoutError, HandlerExecutionError) as e:
            return self._handle_failure(name, e.message)
        except Exception as e:
            return self._handle_failure(name, str(e) or type(e).__name__)

        if cache_key is not None and result.allow and not output.get("fallback"):
            self.set_cache(cache_key, result)

        self.reset_failure_count(name)
        return result

    async def _execute_with_timeout(
        self,
        name: str,
        hook: BaseHook,
        context: Mapping[str, Any],
    ) -> Any:
        timeout = self.config.timeout_ms / 1000
        try:
            return await asyncio.wait_for(hook.execute(context), timeout=timeout)
        except asyncio.TimeoutError:
            raise HandlerTimeoutError(name, self.config.timeout_ms)

    def _handle_failure(self, name: str, message: str) -> HookResult:
        self.track_failure(name)
        self.logger.warning(
            f"Hook {name} failed, allowing operation: {message}",
            extra={"ctx": {"hook": name, "recent_failures": len(self.failure_tracker.get(name, []))}},
        )
        return HookResult(handler=name, allow=True, warning=message, failed=True)

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def generate_cache_key(self, name: str, context: Mapping[str, Any]) -> str:
        """
        name + first 16 hex chars of sha256 over the key-sorted JSON of context.

        Raises:
            CacheSerializationError: context is not JSON-serializable
        """
        try:
            context_string = json.dumps(
                context, sort_keys=True, separators=(",", ":"), ensure_ascii=False
            )
        except (TypeError, ValueError) as e:
            raise CacheSerializationError(f"context is not serializable: {e}")
        digest = hashlib.sha256(context_string.encode("utf-8")).hexdigest()[:16]
        return f"{name}:{digest}"

    def get_from_cache(self, key: str) -> Optional[HookResult]:
        entry = self.cache.get(key)
        if entry is None:
            return None
        if (self.clock() - entry.timestamp) * 1000 > self.config.cache_ttl_ms:
            del self.cache[key]
            return None
        return entry.result

    def set_cache(self, key: str, result: HookResult) -> None:
        """Stores a private copy; callers may mutate the result they got"""
        try:
            stored = copy.deepcopy(result)
        except Exception as e:
            self.logger.debug(f"Hook {result.handler}: result not cached ({e})")
            return
        self.cache[key] = _CacheEntry(result=stored, timestamp=self.clock())

    def clear_cache(self) -> None:
        self.cache.clear()
        self.logger.info("Hook cache cleared")

    # ------------------------------------------------------------------
    # Failure tracking
    # ------------------------------------------------------------------

    def _recent_failures(self, name: str) -> List[float]:
        """Failure timestamps inside the window; prunes the stored list"""
        failures = self.failure_tracker.get(name)
        if not failures:
            return []
        now = self.clock()
        window = self.config.failure_window_ms
        recent = [t for t in failures if (now - t) * 1000 < window]
        if recent:
            self.failure_tracker[name] = recent
        else:
            del self.failure_tracker[name]
        return recent

    def track_failure(self, name: str) -> None:
        recent = self._recent_failures(name)
        recent.append(self.clock())
        self.failure_tracker[name] = recent

    def is_hook_disabled(self, name: str) -> bool:
        return len(self._recent_failures(name)) >= self.config.failure_threshold

    def reset_failure_count(self, name: str) -> None:
        self.failure_tracker.pop(name, None)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_status(self) -> Dict[str, Any]:
        hook_status = {}
        for name, hook in self.hooks.items():
            failures = self._recent_failures(name)
            last_failure = None
            if failures:
                last_failure = datetime.fromtimestamp(max(failures), tz=timezone.utc).isoformat()
            hook_status[name] = {
                "registered": True,
                "type": type(hook).__name__,
                "enabled": hook.enabled,
                "recent_failures": len(failures),
                "disabled": len(failures) >= self.config.failure_threshold,
                "last_failure": last_failure,
            }

        return {
            "total_hooks": len(self.hooks),
            "cache_entries": len(self.cache),
            "hook_status": hook_status,
            "config": self.config.as_dict(),
        }


# ============================================================================
# FACTORY
# ============================================================================

def create_default_dispatcher(
    settings: Any = None,
    notifier: Optional[Any] = None,
    logger: Optional[Any] = None,
    clock: Callable[[], float] = time.time,
) -> HookDispatcher:
    """
    Dispatcher with the five built-in hooks registered:
    pre-execution, post-execution, completion, consciousness-check, resource-monitor
    """
    from taskgate.hooks.completion import CompletionHook
    from taskgate.hooks.consciousness import ConsciousnessHook
    from taskgate.hooks.quality import QualityHook
    from taskgate.hooks.resource import ResourceHook
    from taskgate.hooks.security import SecurityHook

    settings = settings or cfg
    dispatcher = HookDispatcher(
        config=DispatcherConfig.from_settings(settings),
        logger=logger,
        clock=clock,
    )
    dispatcher.register("pre-execution", SecurityHook(settings))
    dispatcher.register("post-execution", QualityHook())
    dispatcher.register("completion", CompletionHook(notifier=notifier, settings=settings, logger=logger))
    dispatcher.register("consciousness-check", ConsciousnessHook(settings))
    dispatcher.register("resource-monitor", ResourceHook(settings))
    return dispatcher
