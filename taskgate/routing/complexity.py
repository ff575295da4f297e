# taskgate/routing/complexity.py
"""
Complexity Classifier - scores how much coordination a task needs.

Scoring:
- start at base 0.3
- each keyword / scope word / technology term found as a substring of the
  lowercased task text adds weight * multiplier (0.3 / 0.2 / 0.1)
- argument count adds min(len(args) * 0.05, 0.2)
- previous tasks in context add min(count * 0.02, 0.1)
- result clamped to [0.0, 1.0]

Overlapping keywords ("complete" is both a keyword and a scope word)
count twice. That is part of the heuristic.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, Mapping, Optional

from config.settings import cfg
from taskgate.routing.request import TaskRequest


class ComplexityAnalyzer:
    """Weighted keyword/scope/technology scorer"""

    def __init__(self, settings: Any = None):
        settings = settings or cfg
        self.base = settings.COMPLEXITY_BASE
        self.factors: Dict[str, Dict[str, float]] = {
            table: dict(weights) for table, weights in settings.COMPLEXITY_FACTORS.items()
        }
        self.multipliers: Dict[str, float] = dict(settings.FACTOR_MULTIPLIERS)
        self.args_weight = settings.ARGS_WEIGHT
        self.args_weight_cap = settings.ARGS_WEIGHT_CAP
        self.previous_tasks_weight = settings.PREVIOUS_TASKS_WEIGHT
        self.previous_tasks_weight_cap = settings.PREVIOUS_TASKS_WEIGHT_CAP

    def score(
        self,
        command: Any,
        args: Optional[Iterable[Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> float:
        """
        Score a task in [0, 1].

        Raises:
            InvalidArgumentError: command/args/context are malformed
        """
        return self.score_request(TaskRequest.create(command, args, context))

    def score_request(self, request: TaskRequest) -> float:
        text = request.text
        complexity = self.base

        for table, weights in self.factors.items():
            multiplier = self.multipliers.get(table, 0.0)
            for term, weight in weights.items():
                if term in text:
                    complexity += weight * multiplier

        complexity += min(len(request.args) * self.args_weight, self.args_weight_cap)

        previous = request.previous_task_count
        if previous:
            complexity += min(previous * self.previous_tasks_weight, self.previous_tasks_weight_cap)

        return max(0.0, min(complexity, 1.0))

    def breakdown(self, command: Any, args: Optional[Iterable[Any]] = None) -> Dict[str, list]:
        """Matched terms per table, for diagnostics"""
        text = TaskRequest.create(command, args).text
        return {
            table: [term for term in weights if term in text]
            for table, weights in self.factors.items()
        }


def score(
    command: Any,
    args: Optional[Iterable[Any]] = None,
    context: Optional[Mapping[str, Any]] = None,
) -> float:
    """Score with the default configuration"""
    return ComplexityAnalyzer().score(command, args, context)
