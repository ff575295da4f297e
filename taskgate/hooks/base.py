# taskgate/hooks/base.py
"""
Hook contract shared by all handlers.

A hook is an object with an async execute(context) returning a mapping
that contains at least "allow". The dispatcher wraps that mapping into a
HookResult.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional


class BaseHook:
    """Base class for all hook implementations"""

    def __init__(self, name: str):
        self.name = name
        self.enabled = True

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        raise NotImplementedError("Hook execute method must be implemented")

    def disable(self) -> None:
        self.enabled = False

    def enable(self) -> None:
        self.enabled = True


# Keys lifted out of a hook's raw result into HookResult fields
_RESERVED_KEYS = ("allow", "warning", "message")


def ensure_list(value: Any) -> List[Any]:
    """
    Context value as a list: None/empty → [], list/tuple/set → list,
    anything else (str included) → [value]
    """
    if value is None or value == "":
        return []
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


@dataclass
class HookResult:
    """Structured decision returned by the dispatcher for one hook call"""
    handler: str
    allow: bool
    warning: Optional[str] = None
    message: Optional[str] = None
    failed: bool = False
    disabled: bool = False
    cached: bool = False
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_hook_output(cls, handler: str, output: Mapping[str, Any]) -> "HookResult":
        return cls(
            handler=handler,
            allow=bool(output["allow"]),
            warning=output.get("warning"),
            message=output.get("message"),
            details={k: v for k, v in output.items() if k not in _RESERVED_KEYS},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Flat {allow, ...metadata} mapping; unset optional fields are dropped"""
        data = asdict(self)
        details = data.pop("details")
        flat = {k: v for k, v in data.items() if v is not None}
        for key in ("failed", "disabled", "cached"):
            if not flat.get(key):
                flat.pop(key, None)
        for key, value in details.items():
            flat.setdefault(key, value)
        return flat
