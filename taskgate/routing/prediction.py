# taskgate/routing/prediction.py
"""
Predictive collaborator used by the router.

There is no model behind this: PatternDatabase counts what it has seen,
WorkflowPredictor always answers with the same suggestion set.
"""

from __future__ import annotations
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence


@dataclass
class StoredPattern:
    command: str
    args: List[str]
    blocked: bool
    route_type: Optional[str]
    timestamp: float = field(default_factory=time.time)


class PatternDatabase:
    """In-memory history of routed requests"""

    def __init__(self, max_history: int = 1000):
        self.max_history = max_history
        self.patterns: Dict[str, List[StoredPattern]] = {}
        self.pattern_history: List[StoredPattern] = []

    @staticmethod
    def pattern_key(command: str, args: Sequence[str]) -> str:
        return "-".join([command, *args])

    def store_pattern(self, command: str, args: Sequence[str], outcome: Mapping[str, Any]) -> bool:
        pattern = StoredPattern(
            command=command,
            args=list(args),
            blocked=bool(outcome.get("blocked", False)),
            route_type=outcome.get("type"),
        )
        self.patterns.setdefault(self.pattern_key(command, args), []).append(pattern)
        self.pattern_history.append(pattern)

        # Старые записи вытесняются
        if len(self.pattern_history) > self.max_history:
            dropped = self.pattern_history.pop(0)
            bucket = self.patterns.get(self.pattern_key(dropped.command, dropped.args), [])
            if dropped in bucket:
                bucket.remove(dropped)
        return True

    def find_similar_patterns(self, command: str, args: Sequence[str]) -> Dict[str, Any]:
        same_command = [p for p in self.pattern_history if p.command == command]
        total = len(self.pattern_history)

        frequency = len(same_command) / total if total else 0.0
        if same_command:
            success_rate = sum(1 for p in same_command if not p.blocked) / len(same_command)
        else:
            success_rate = 1.0

        return {
            "similar_commands": [command],
            "frequency": frequency,
            "success_rate": success_rate,
            "patterns": list(self.patterns.get(self.pattern_key(command, args), [])),
        }


class WorkflowPredictor:
    """Fixed-response predictor"""

    def predict(self, patterns: Mapping[str, Any], context: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        return {
            "likely_next_commands": ["status", "analyze"],
            "required_tools": ["consciousness", "coordination"],
            "potential_issues": [],
            "suggested_optimizations": ["parallel_execution"],
            "confidence_score": 0.85,
        }


class PredictiveEngine:
    def __init__(
        self,
        pattern_database: Optional[PatternDatabase] = None,
        workflow_predictor: Optional[WorkflowPredictor] = None,
    ):
        self.pattern_database = pattern_database or PatternDatabase()
        self.workflow_predictor = workflow_predictor or WorkflowPredictor()

    def predict_next_steps(
        self,
        command: str,
        args: Sequence[str],
        context: Optional[Mapping[str, Any]] = None,
    ) -> Dict[str, Any]:
        patterns = self.pattern_database.find_similar_patterns(command, args)
        predictions = self.workflow_predictor.predict(patterns, context)

        return {
            "next_commands": predictions["likely_next_commands"],
            "required_tools": predictions["required_tools"],
            "potential_issues": predictions["potential_issues"],
            "optimizations": predictions["suggested_optimizations"],
            "confidence": predictions["confidence_score"],
        }

    def record(self, command: str, args: Sequence[str], outcome: Mapping[str, Any]) -> None:
        self.pattern_database.store_pattern(command, args, outcome)
