# taskgate/routing/request.py
"""
Task request normalization.

Every public entry point of the routing package funnels its
(command, args, context) through TaskRequest.create so that malformed
input is rejected in one place with InvalidArgumentError.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Optional, Tuple

from taskgate.errors import InvalidArgumentError


# Scalars that are coerced with str(); anything else in args is rejected
_COERCIBLE_ARG_TYPES = (int, float, bool)


@dataclass(frozen=True)
class TaskRequest:
    """Immutable (command, args, context) triple for one classification pass"""
    command: str
    args: Tuple[str, ...] = ()
    context: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def create(
        cls,
        command: Any,
        args: Optional[Iterable[Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> "TaskRequest":
        if command is None:
            command = ""
        if not isinstance(command, str):
            raise InvalidArgumentError(
                f"command must be a string, got {type(command).__name__}"
            )
        return cls(
            command=command,
            args=normalize_args(args),
            context=normalize_context(context),
        )

    @property
    def description(self) -> str:
        return f"{self.command} {' '.join(self.args)}"

    @property
    def text(self) -> str:
        """Lowercased command + args, the string all keyword tables match against"""
        return self.description.lower()

    @property
    def session_id(self) -> Optional[str]:
        value = self.context.get("session_id", self.context.get("sessionId"))
        return str(value) if value is not None else None

    @property
    def previous_task_count(self) -> int:
        tasks = self.context.get("previousTasks", self.context.get("previous_tasks"))
        if tasks is None:
            return 0
        if isinstance(tasks, (str, bytes)) or not hasattr(tasks, "__len__"):
            raise InvalidArgumentError("context.previousTasks must be a collection")
        return len(tasks)


def normalize_args(args: Optional[Iterable[Any]]) -> Tuple[str, ...]:
    if args is None:
        return ()
    if isinstance(args, (str, bytes)):
        raise InvalidArgumentError("args must be a sequence of strings, not a single string")
    try:
        items = list(args)
    except TypeError:
        raise InvalidArgumentError(f"args must be iterable, got {type(args).__name__}")

    normalized = []
    for index, item in enumerate(items):
        if isinstance(item, str):
            normalized.append(item)
        elif isinstance(item, _COERCIBLE_ARG_TYPES):
            normalized.append(str(item))
        else:
            raise InvalidArgumentError(
                f"args[{index}] must be a string, got {type(item).__name__}"
            )
    return tuple(normalized)


def normalize_context(context: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    if context is None:
        return MappingProxyType({})
    if not isinstance(context, Mapping):
        raise InvalidArgumentError(
            f"context must be a mapping, got {type(context).__name__}"
        )
    return MappingProxyType(dict(context))
