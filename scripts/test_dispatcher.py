# scripts/test_dispatcher.py
"""
Guarded Hook Dispatcher tests.

Time is driven by FakeClock, so TTL and failure-window tests do not sleep.
"""

import asyncio
import json
import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
project_root = Path(__file__).resolve().parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from taskgate.errors import InvalidHandlerError
from taskgate.hooks.base import BaseHook, HookResult
from taskgate.hooks.dispatcher import DispatcherConfig, HookDispatcher, create_default_dispatcher


# ============================================================================
# HELPERS
# ============================================================================

class FakeClock:
    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingHook(BaseHook):
    def __init__(self, output=None):
        super().__init__("counting")
        self.calls = 0
        self.output = output if output is not None else {"allow": True, "note": "ok"}

    async def execute(self, context):
        self.calls += 1
        return dict(self.output)


class FailingHook(BaseHook):
    def __init__(self):
        super().__init__("failing")
        self.calls = 0

    async def execute(self, context):
        self.calls += 1
        raise RuntimeError("boom")


class FlakyHook(BaseHook):
    """Fails `failures` times, then succeeds"""

    def __init__(self, failures):
        super().__init__("flaky")
        self.failures = failures
        self.calls = 0

    async def execute(self, context):
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return {"allow": True}


class SlowHook(BaseHook):
    def __init__(self):
        super().__init__("slow")
        self.cancelled = False

    async def execute(self, context):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return {"allow": True}


class MalformedHook(BaseHook):
    def __init__(self):
        super().__init__("malformed")

    async def execute(self, context):
        return "yes"


def make_dispatcher(clock=None, **config):
    return HookDispatcher(config=DispatcherConfig(**config), clock=clock or FakeClock())


# ============================================================================
# TESTS
# ============================================================================

def test_unknown_hook_allows():
    dispatcher = make_dispatcher()
    result = asyncio.run(dispatcher.execute("missing", {}))
    assert result.allow is True
    assert result.message == "Hook missing not found"
    assert not result.failed


def test_failing_hook_fails_open():
    dispatcher = make_dispatcher()
    dispatcher.register("failing", FailingHook())
    result = asyncio.run(dispatcher.execute("failing", {"a": 1}))
    assert result.allow is True
    assert result.failed is True
    assert result.warning == "boom"
    assert dispatcher.get_status()["hook_status"]["failing"]["recent_failures"] == 1


def test_same_context_invokes_hook_once():
    dispatcher = make_dispatcher()
    hook = CountingHook()
    dispatcher.register("counting", hook)

    async def run():
        first = await dispatcher.execute("counting", {"b": 2, "a": 1})
        second = await dispatcher.execute("counting", {"a": 1, "b": 2})
        return first, second

    first, second = asyncio.run(run())
    assert hook.calls == 1
    assert not first.cached
    assert second.cached
    assert second.details == {"note": "ok"}


def test_different_context_misses_cache():
    dispatcher = make_dispatcher()
    hook = CountingHook()
    dispatcher.register("counting", hook)

    async def run():
        await dispatcher.execute("counting", {"a": 1})
        await dispatcher.execute("counting", {"a": 2})

    asyncio.run(run())
    assert hook.calls == 2


def test_denials_and_fallbacks_are_not_cached():
    dispatcher = make_dispatcher()
    deny = CountingHook({"allow": False, "reason": "no"})
    fallback = CountingHook({"allow": True, "fallback": True})
    dispatcher.register("deny", deny)
    dispatcher.register("fallback", fallback)

    async def run():
        for _ in range(2):
            await dispatcher.execute("deny", {})
            await dispatcher.execute("fallback", {})

    asyncio.run(run())
    assert deny.calls == 2
    assert fallback.calls == 2


def test_cache_entries_expire_after_ttl():
    clock = FakeClock()
    dispatcher = make_dispatcher(clock=clock)
    hook = CountingHook()
    dispatcher.register("counting", hook)

    asyncio.run(dispatcher.execute("counting", {}))
    clock.advance(299)
    asyncio.run(dispatcher.execute("counting", {}))
    assert hook.calls == 1

    clock.advance(2)
    asyncio.run(dispatcher.execute("counting", {}))
    assert hook.calls == 2


def test_three_failures_disable_the_hook():
    clock = FakeClock()
    dispatcher = make_dispatcher(clock=clock)
    hook = FailingHook()
    dispatcher.register("failing", hook)

    async def run():
        return [await dispatcher.execute("failing", {}) for _ in range(4)]

    results = asyncio.run(run())
    assert hook.calls == 3
    assert all(r.allow for r in results)
    assert results[3].disabled is True
    assert results[3].warning == "Hook disabled due to failures"
    assert dispatcher.is_hook_disabled("failing")


def test_disabled_hook_recovers_after_window():
    clock = FakeClock()
    dispatcher = make_dispatcher(clock=clock)
    hook = FlakyHook(failures=3)
    dispatcher.register("flaky", hook)

    async def run():
        for _ in range(3):
            await dispatcher.execute("flaky", {})
        blocked = await dispatcher.execute("flaky", {})
        clock.advance(61)
        recovered = await dispatcher.execute("flaky", {})
        return blocked, recovered

    blocked, recovered = asyncio.run(run())
    assert blocked.disabled
    assert not recovered.disabled and not recovered.failed
    assert hook.calls == 4
    assert "flaky" not in dispatcher.failure_tracker


def test_success_resets_failures():
    dispatcher = make_dispatcher()
    hook = FlakyHook(failures=2)
    dispatcher.register("flaky", hook)

    async def run():
        return [await dispatcher.execute("flaky", {"n": i}) for i in range(3)]

    results = asyncio.run(run())
    assert [r.failed for r in results] == [True, True, False]
    assert dispatcher.failure_tracker == {}


def test_timeout_is_a_failure_and_cancels_the_hook():
    dispatcher = HookDispatcher(config=DispatcherConfig(timeout_ms=50))
    hook = SlowHook()
    dispatcher.register("slow", hook)

    result = asyncio.run(dispatcher.execute("slow", {}))
    assert result.allow is True
    assert result.failed is True
    assert result.warning == "Hook slow timed out after 50ms"
    assert hook.cancelled


def test_malformed_result_is_a_failure():
    dispatcher = make_dispatcher()
    dispatcher.register("malformed", MalformedHook())
    result = asyncio.run(dispatcher.execute("malformed", {}))
    assert result.allow and result.failed
    assert "malformed" in result.warning


def test_unserializable_context_bypasses_cache():
    dispatcher = make_dispatcher()
    hook = CountingHook()
    dispatcher.register("counting", hook)
    context = {"handle": object()}

    async def run():
        return [await dispatcher.execute("counting", context) for _ in range(2)]

    results = asyncio.run(run())
    assert hook.calls == 2
    assert all(r.allow and not r.failed for r in results)
    assert dispatcher.cache == {}


def test_switched_off_hook_is_skipped():
    dispatcher = make_dispatcher()
    hook = CountingHook()
    hook.disable()
    dispatcher.register("counting", hook)

    result = asyncio.run(dispatcher.execute("counting", {}))
    assert result.allow
    assert result.message == "Hook counting is switched off"
    assert hook.calls == 0
    assert dispatcher.failure_tracker == {}

    hook.enable()
    asyncio.run(dispatcher.execute("counting", {}))
    assert hook.calls == 1


def test_cache_key_is_stable():
    dispatcher = make_dispatcher()
    key = dispatcher.generate_cache_key("pre-execution", {"b": [1, 2], "a": "é"})
    assert key == dispatcher.generate_cache_key("pre-execution", {"a": "é", "b": [1, 2]})
    name, digest = key.split(":", 1)
    assert name == "pre-execution"
    assert len(digest) == 16


def test_register_rejects_non_hooks():
    dispatcher = make_dispatcher()
    with pytest.raises(InvalidHandlerError):
        dispatcher.register("bad", object())


def test_register_replaces_and_unregister_cleans_up():
    dispatcher = make_dispatcher()
    first, second = CountingHook(), CountingHook()
    dispatcher.register("counting", first)
    dispatcher.register("counting", second)
    asyncio.run(dispatcher.execute("counting", {}))
    assert (first.calls, second.calls) == (0, 1)
    assert len(dispatcher.cache) == 1

    assert dispatcher.unregister("counting") is True
    assert dispatcher.cache == {}
    assert not dispatcher.has_handler("counting")
    assert dispatcher.unregister("counting") is False


def test_clear_cache():
    dispatcher = make_dispatcher()
    hook = CountingHook()
    dispatcher.register("counting", hook)
    asyncio.run(dispatcher.execute("counting", {}))
    dispatcher.clear_cache()
    asyncio.run(dispatcher.execute("counting", {}))
    assert hook.calls == 2


def test_cached_result_is_isolated_from_callers():
    dispatcher = make_dispatcher()
    hook = CountingHook({"allow": True, "items": []})
    dispatcher.register("counting", hook)

    first = asyncio.run(dispatcher.execute("counting", {}))
    first.allow = False
    first.details["items"].append("x")

    second = asyncio.run(dispatcher.execute("counting", {}))
    assert second.cached is True
    assert second.allow is True
    assert second.details == {"items": []}

    second.details["items"].append("y")
    third = asyncio.run(dispatcher.execute("counting", {}))
    assert third.details == {"items": []}
    assert hook.calls == 1


def test_status_reports_failures():
    clock = FakeClock()
    dispatcher = make_dispatcher(clock=clock)
    dispatcher.register("failing", FailingHook())
    dispatcher.register("counting", CountingHook())

    async def run():
        for _ in range(3):
            await dispatcher.execute("failing", {})

    asyncio.run(run())
    status = dispatcher.get_status()
    assert status["total_hooks"] == 2
    failing = status["hook_status"]["failing"]
    assert failing["type"] == "FailingHook"
    assert failing["recent_failures"] == 3
    assert failing["disabled"] is True
    assert failing["last_failure"].startswith("2023-11-14T22:13:20")
    assert status["hook_status"]["counting"]["last_failure"] is None
    assert status["config"]["failure_threshold"] == 3

    clock.advance(120)
    assert dispatcher.get_status()["hook_status"]["failing"]["recent_failures"] == 0


def test_concurrent_calls_resolve_independently():
    dispatcher = make_dispatcher()
    dispatcher.register("failing", FailingHook())
    dispatcher.register("counting", CountingHook())

    async def run():
        return await asyncio.gather(
            dispatcher.execute("failing", {}),
            dispatcher.execute("counting", {}),
        )

    failing, counting = asyncio.run(run())
    assert failing.failed and not counting.failed


def test_result_to_dict_is_flat():
    result = HookResult(handler="h", allow=True, warning="w", failed=True, details={"x": 1})
    assert result.to_dict() == {"handler": "h", "allow": True, "warning": "w", "failed": True, "x": 1}
    json.dumps(result.to_dict())


def test_default_dispatcher_registers_builtins():
    dispatcher = create_default_dispatcher()
    assert set(dispatcher.handler_names()) == {
        "pre-execution", "post-execution", "completion", "consciousness-check", "resource-monitor",
    }


def main() -> int:
    tests = [(name, fn) for name, fn in sorted(globals().items())
             if name.startswith("test_") and callable(fn)]
    failed = 0
    for name, fn in tests:
        try:
            fn()
            print(f"✅ {name}")
        except Exception as e:
            failed += 1
            print(f"❌ {name}: {e!r}")
    print(f"\n{len(tests) - failed}/{len(tests)} passed")
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
