# taskgate/routing/__init__.py
"""
Routing module.

Provides:
- ComplexityAnalyzer: heuristic complexity score in [0, 1]
- DomainSelector: domains and specialists for a task
- decide / RoutingDecision: four-tier route selection
- TaskRouter: analysis + route + hook plan execution
"""

from taskgate.routing.request import TaskRequest
from taskgate.routing.complexity import ComplexityAnalyzer
from taskgate.routing.domains import (
    Domain,
    DOMAIN_PRIORITY,
    DomainSelector,
    order_domains,
    select_domains,
)
from taskgate.routing.strategy import (
    RouteType,
    RoutingDecision,
    assess_executive_need,
    decide,
)
from taskgate.routing.prediction import PatternDatabase, PredictiveEngine, WorkflowPredictor
from taskgate.routing.router import RoutingResult, TaskAnalysis, TaskRouter

__all__ = [
    "TaskRequest",
    "ComplexityAnalyzer",
    "Domain",
    "DOMAIN_PRIORITY",
    "DomainSelector",
    "order_domains",
    "select_domains",
    "RouteType",
    "RoutingDecision",
    "assess_executive_need",
    "decide",
    "PatternDatabase",
    "PredictiveEngine",
    "WorkflowPredictor",
    "RoutingResult",
    "TaskAnalysis",
    "TaskRouter",
]
