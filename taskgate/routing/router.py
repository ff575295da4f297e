# taskgate/routing/router.py
"""
Task Router - top-level orchestration.

Flow for one request:
1. analyze_task     → complexity, domains, specialists, executive need, predictions
2. determine_route  → RoutingDecision (pure)
3. route_and_execute → runs the hook plan of that route through the dispatcher

Hook plan (config ROUTE_HOOK_PLANS) is executed sequentially. Right after
pre-execution, a "department:<domain>" hook runs for each engaged domain
when one is registered. A deny from a blocking hook stops the plan; every
other hook is advisory.

Only malformed input raises (InvalidArgumentError). Everything the
dispatcher does resolves to a HookResult.
"""

from __future__ import annotations
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.settings import cfg
from taskgate.hooks.base import HookResult, ensure_list
from taskgate.hooks.dispatcher import HookDispatcher
from taskgate.routing.complexity import ComplexityAnalyzer
from taskgate.routing.domains import (
    Domain,
    DomainSelector,
    domains_as_strings,
    order_domains,
    specialists_as_strings,
)
from taskgate.routing.prediction import PredictiveEngine
from taskgate.routing.request import TaskRequest
from taskgate.routing.strategy import (
    RouteType,
    RoutingDecision,
    assess_executive_need,
    decide,
)


# ============================================================================
# DATA STRUCTURES
# ============================================================================

@dataclass
class TaskAnalysis:
    """Everything the router learned about a request before routing it"""
    complexity: float
    domains: List[Domain]
    specialists: Dict[Domain, List[str]]
    executive_need: bool
    predictions: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity": self.complexity,
            "domains": domains_as_strings(self.domains),
            "specialists": specialists_as_strings(self.specialists),
            "executive_need": self.executive_need,
            "predictions": dict(self.predictions),
            "timestamp": self.timestamp,
        }


@dataclass
class RoutingResult:
    """Outcome of route_and_execute"""
    type: RouteType
    domains: List[str]
    dispatcher_results: List[HookResult] = field(default_factory=list)
    complexity: float = 0.0
    executive_need: bool = False
    blocked: bool = False
    blocked_by: Optional[str] = None
    decision: Optional[RoutingDecision] = None
    predictions: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "domains": list(self.domains),
            "dispatcher_results": [r.to_dict() for r in self.dispatcher_results],
            "complexity": self.complexity,
            "executive_need": self.executive_need,
            "blocked": self.blocked,
            "blocked_by": self.blocked_by,
            "decision": self.decision.to_dict() if self.decision else None,
            "predictions": dict(self.predictions),
        }


# ============================================================================
# ROUTER
# ============================================================================

class TaskRouter:
    """
    Routes a task to a coordination shape and runs its hook plan.

    All collaborators are injected; only the dispatcher is required.
    """

    def __init__(
        self,
        dispatcher: HookDispatcher,
        settings: Any = None,
        classifier: Optional[ComplexityAnalyzer] = None,
        selector: Optional[DomainSelector] = None,
        predictive_engine: Optional[PredictiveEngine] = None,
        trace_storage: Optional[Any] = None,
        logger: Optional[Any] = None,
    ):
        self.settings = settings or cfg
        self.dispatcher = dispatcher
        self.classifier = classifier or ComplexityAnalyzer(self.settings)
        self.selector = selector or DomainSelector(self.settings)
        self.predictive_engine = predictive_engine or PredictiveEngine()
        self.trace_storage = trace_storage
        self.logger = logger or logging.getLogger(__name__)

        self.blocking_hooks = set(self.settings.BLOCKING_HOOKS)
        self.department_prefix = self.settings.DEPARTMENT_HOOK_PREFIX
        self.department_hooks_after = self.settings.DEPARTMENT_HOOKS_AFTER

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def analyze_task(
        self,
        command: Any,
        args: Optional[Iterable[Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> TaskAnalysis:
        """
        Raises:
            InvalidArgumentError: command/args/context are malformed
        """
        return self._analyze(TaskRequest.create(command, args, context))

    def _analyze(self, request: TaskRequest) -> TaskAnalysis:
        complexity = self.classifier.score_request(request)
        domains = order_domains(self.selector.select_for_request(request))
        specialists = self.selector.specialists_for_request(request, domains)
        executive_need = assess_executive_need(request, complexity, self.settings)
        predictions = self.predictive_engine.predict_next_steps(
            request.command, list(request.args), request.context
        )
        return TaskAnalysis(
            complexity=complexity,
            domains=domains,
            specialists=specialists,
            executive_need=executive_need,
            predictions=predictions,
        )

    def determine_route(self, analysis: TaskAnalysis) -> RoutingDecision:
        return decide(
            analysis.complexity,
            analysis.domains,
            analysis.executive_need,
            thresholds=self.settings.get_routing_thresholds(),
            specialists=analysis.specialists,
        )

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def route_and_execute(
        self,
        command: Any,
        args: Optional[Iterable[Any]] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> RoutingResult:
        """
        Classify the task, pick a route and run that route's hook plan.

        Raises:
            InvalidArgumentError: command/args/context are malformed
        """
        request = TaskRequest.create(command, args, context)
        analysis = self._analyze(request)
        decision = self.determine_route(analysis)

        self.logger.info(
            f"Routing '{request.command}' → {decision.route_type.value} "
            f"({', '.join(domains_as_strings(decision.domains))}), complexity={analysis.complexity:.2f}",
            extra={"ctx": {
                "command": request.command,
                "route": decision.route_type.value,
                "complexity": analysis.complexity,
                "executive_need": analysis.executive_need,
                "session_id": request.session_id,
            }},
        )

        result = RoutingResult(
            type=decision.route_type,
            domains=domains_as_strings(decision.domains),
            complexity=analysis.complexity,
            executive_need=analysis.executive_need,
            decision=decision,
            predictions=analysis.predictions,
        )

        for hook_name, hook_context in self._plan(request, decision):
            hook_result = await self.dispatcher.execute(hook_name, hook_context)
            result.dispatcher_results.append(hook_result)

            if not hook_result.allow and hook_name in self.blocking_hooks:
                result.blocked = True
                result.blocked_by = hook_name
                self.logger.warning(
                    f"Route for '{request.command}' blocked by {hook_name}",
                    extra={"ctx": {"hook": hook_name, "details": hook_result.details}},
                )
                break

        self._remember(request, result)
        return result

    def _plan(self, request: TaskRequest, decision: RoutingDecision):
        """Yields (hook_name, context) pairs in execution order"""
        for hook_name in self.settings.get_hook_plan(decision.route_type.value):
            yield hook_name, self.build_hook_context(hook_name, request, decision)

            if hook_name == self.department_hooks_after:
                for domain in decision.engaged_domains:
                    department_hook = f"{self.department_prefix}{domain.value}"
                    if self.dispatcher.has_handler(department_hook):
                        yield department_hook, self.build_department_context(request, decision, domain)

    def build_hook_context(
        self,
        hook_name: str,
        request: TaskRequest,
        decision: RoutingDecision,
    ) -> Dict[str, Any]:
        """Context handed to one of the plan's hooks"""
        ctx = request.context

        if hook_name == "pre-execution":
            return {
                "command": request.description,
                "args": list(request.args),
                "paths": ensure_list(ctx.get("paths")),
                "content": ctx.get("content") or "",
                "permissions": ensure_list(ctx.get("permissions")),
            }
        if hook_name == "post-execution":
            return {
                "command": request.command,
                "code": ctx.get("code") or "",
                "assets": ensure_list(ctx.get("assets")),
                "docs": ctx.get("docs") or "",
            }
        if hook_name == "consciousness-check":
            return {
                "task": request.description,
                "purpose": ctx.get("purpose"),
                "beneficiaries": ctx.get("beneficiaries"),
                "harm_mitigation": ctx.get("harm_mitigation"),
            }
        if hook_name == "resource-monitor":
            return {"route": decision.route_type.value}
        if hook_name == "completion":
            return {"message": f"Command {request.command} completed successfully"}

        # Хуки, добавленные в план через конфиг
        return {
            "command": request.command,
            "args": list(request.args),
            "route": decision.route_type.value,
        }

    @staticmethod
    def build_department_context(
        request: TaskRequest,
        decision: RoutingDecision,
        domain: Domain,
    ) -> Dict[str, Any]:
        return {
            "command": request.command,
            "args": list(request.args),
            "domain": domain.value,
            "specialists": list(decision.specialists.get(domain, [])),
            "route": decision.route_type.value,
        }

    def _remember(self, request: TaskRequest, result: RoutingResult) -> None:
        """Pattern + trace bookkeeping; never fails the route"""
        try:
            self.predictive_engine.record(
                request.command,
                list(request.args),
                {"blocked": result.blocked, "type": result.type.value},
            )
        except Exception as e:
            self.logger.error(f"Failed to record routing pattern: {e}", exc_info=True)

        if self.trace_storage is not None:
            self.trace_storage.record(
                session_id=request.session_id,
                command=request.command,
                args=list(request.args),
                route_type=result.type.value,
                domains=result.domains,
                complexity=result.complexity,
                blocked=result.blocked,
            )
