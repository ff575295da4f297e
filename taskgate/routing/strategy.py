# taskgate/routing/strategy.py
"""
Routing Strategy Selector.

FOUR-TIER ROUTING (first match wins):
1. executive_need or complexity > enterprise → executive (all detected domains)
2. complexity > complex                      → multi-domain, peer-to-peer
3. complexity > moderate                     → domain-with-helpers
4. otherwise                                 → single-domain

decide() is a pure function of (complexity, domains, executive_need).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, Iterable, List, Mapping, Optional

from config.settings import cfg
from taskgate.errors import InvalidArgumentError
from taskgate.routing.domains import Domain, order_domains
from taskgate.routing.request import TaskRequest


# ============================================================================
# DATA STRUCTURES
# ============================================================================

class RouteType(str, Enum):
    """Routing shapes, declared from least to most coordination"""
    SINGLE_DOMAIN = "single-domain"
    DOMAIN_WITH_HELPERS = "domain-with-helpers"
    MULTI_DOMAIN = "multi-domain"
    EXECUTIVE = "executive"

    @property
    def tier(self) -> int:
        return list(RouteType).index(self)


@dataclass
class RoutingDecision:
    """One routing shape plus the domains/roles it engages"""
    route_type: RouteType
    domains: List[Domain]
    primary_domain: Optional[Domain] = None
    helpers: List[str] = field(default_factory=list)
    supporting_domains: List[Domain] = field(default_factory=list)
    coordination: Optional[str] = None
    mode: Optional[str] = None
    specialists: Dict[Domain, List[str]] = field(default_factory=dict)

    @property
    def engaged_domains(self) -> List[Domain]:
        """Domains whose department handlers take part, lead domain first"""
        if self.route_type == RouteType.SINGLE_DOMAIN:
            return [self.primary_domain] if self.primary_domain else []
        if self.route_type == RouteType.DOMAIN_WITH_HELPERS:
            lead = [self.primary_domain] if self.primary_domain else []
            return lead + list(self.supporting_domains)
        return list(self.domains)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.route_type.value,
            "domains": [d.value for d in self.domains],
            "primary_domain": self.primary_domain.value if self.primary_domain else None,
            "helpers": list(self.helpers),
            "supporting_domains": [d.value for d in self.supporting_domains],
            "coordination": self.coordination,
            "mode": self.mode,
            "specialists": {d.value: list(roles) for d, roles in self.specialists.items()},
        }


# ============================================================================
# MAIN FUNCTIONS
# ============================================================================

def assess_executive_need(
    request: TaskRequest,
    complexity: float,
    settings: Any = None,
) -> bool:
    """
    Executive routing is needed when any of these holds:
    - an executive keyword appears in the task text
    - complexity > complex threshold
    - coordination language ("platform", "system", "complete") appears
    """
    settings = settings or cfg
    text = request.text

    has_executive_keywords = any(word in text for word in settings.EXECUTIVE_KEYWORDS)
    high_complexity = complexity > settings.COMPLEXITY_THRESHOLDS["complex"]
    needs_coordination = any(word in text for word in settings.COORDINATION_WORDS)

    return has_executive_keywords or high_complexity or needs_coordination


def decide(
    complexity: float,
    domains: Iterable[Any],
    executive_need: bool,
    thresholds: Optional[Mapping[str, float]] = None,
    specialists: Optional[Mapping[Domain, List[str]]] = None,
) -> RoutingDecision:
    """
    Pick exactly one routing shape.

    Args:
        complexity: score in [0, 1]
        domains: detected domains (Domain or string values); order is ignored
        executive_need: result of assess_executive_need()
        thresholds: simple/moderate/complex/enterprise, defaults from config
        specialists: optional {domain: roles}; only used to fill helpers

    Raises:
        InvalidArgumentError: complexity is not a number or a domain is unknown
    """
    if isinstance(complexity, bool) or not isinstance(complexity, Real):
        raise InvalidArgumentError(
            f"complexity must be a number, got {type(complexity).__name__}"
        )
    limits = dict(thresholds) if thresholds is not None else cfg.get_routing_thresholds()
    ordered = order_domains(domains)
    specialists = {d: list(roles) for d, roles in (specialists or {}).items()}

    if executive_need or complexity > limits["enterprise"]:
        return RoutingDecision(
            route_type=RouteType.EXECUTIVE,
            domains=ordered,
            coordination="executive",
            mode="ceo",
            specialists=specialists,
        )

    if complexity > limits["complex"]:
        return RoutingDecision(
            route_type=RouteType.MULTI_DOMAIN,
            domains=ordered,
            coordination="peer-to-peer",
            specialists=specialists,
        )

    if complexity > limits["moderate"]:
        primary = ordered[0] if ordered else Domain.STRATEGIC
        return RoutingDecision(
            route_type=RouteType.DOMAIN_WITH_HELPERS,
            domains=ordered,
            primary_domain=primary,
            helpers=specialists.get(primary, []),
            supporting_domains=[d for d in ordered if d != primary],
            specialists=specialists,
        )

    primary = ordered[0] if ordered else Domain.STRATEGIC
    return RoutingDecision(
        route_type=RouteType.SINGLE_DOMAIN,
        domains=[primary],
        primary_domain=primary,
        specialists=specialists,
    )
