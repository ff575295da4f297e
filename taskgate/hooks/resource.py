# taskgate/hooks/resource.py
"""Resource hook - allow while process memory stays under the limit."""

from __future__ import annotations
from typing import Any, Callable, Dict, Mapping, Optional

import psutil

from config.settings import cfg
from taskgate.hooks.base import BaseHook


def current_memory_mb() -> float:
    """Resident set size of this process in MB"""
    return psutil.Process().memory_info().rss / 1024 / 1024


class ResourceHook(BaseHook):
    def __init__(
        self,
        settings: Any = None,
        memory_sampler: Optional[Callable[[], float]] = None,
    ):
        super().__init__("resource")
        settings = settings or cfg
        self.memory_limit_mb = settings.MAX_MEMORY_MB
        self.memory_sampler = memory_sampler or current_memory_mb

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        memory_mb = self.memory_sampler()
        memory_ok = memory_mb < self.memory_limit_mb

        return {
            "allow": memory_ok,
            "resource_status": {
                "memory_mb": round(memory_mb),
                "memory_limit": self.memory_limit_mb,
                "cpu_usage": "not_monitored",
                "disk_space": "not_monitored",
            },
            "warning": None if memory_ok else "Memory usage high",
            "resource_check": True,
        }
