# taskgate/routing/domains.py
"""
Domain Selector - maps a task onto capability domains ("departments").

A domain is engaged when any of its keywords is a substring of the
lowercased task text. When nothing matches, every domain is engaged.

Sets have no usable order, so anything that needs "the first domain"
goes through order_domains(), which applies DOMAIN_PRIORITY.
"""

from __future__ import annotations
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from config.settings import cfg
from taskgate.errors import InvalidArgumentError
from taskgate.routing.request import TaskRequest


class Domain(str, Enum):
    """Fixed capability categories"""
    STRATEGIC = "strategic"
    EXPERIENCE = "experience"
    TECHNICAL = "technical"


# Canonical tie-break: strategic > experience > technical
DOMAIN_PRIORITY = (Domain.STRATEGIC, Domain.EXPERIENCE, Domain.TECHNICAL)

ALL_DOMAINS: FrozenSet[Domain] = frozenset(DOMAIN_PRIORITY)


def order_domains(domains: Iterable[Any]) -> List[Domain]:
    """Domains in canonical priority order (accepts Domain or its string value)"""
    wanted = {coerce_domain(d) for d in domains}
    return [d for d in DOMAIN_PRIORITY if d in wanted]


def coerce_domain(value: Any) -> Domain:
    try:
        return Domain(value)
    except ValueError:
        raise InvalidArgumentError(f"Unknown domain: {value!r}")


class DomainSelector:
    """Keyword-table domain and specialist matcher"""

    def __init__(self, settings: Any = None):
        settings = settings or cfg
        self.keywords: Dict[Domain, List[str]] = {
            Domain(name): list(words) for name, words in settings.DOMAIN_KEYWORDS.items()
        }
        self.specialist_keywords: Dict[Domain, Dict[str, List[str]]] = {
            Domain(name): {role: list(words) for role, words in table.items()}
            for name, table in settings.SPECIALIST_KEYWORDS.items()
        }

    def select_domains(
        self,
        command: Any,
        args: Optional[Iterable[Any]] = None,
    ) -> FrozenSet[Domain]:
        """
        Domains required by the task. Never empty.

        Raises:
            InvalidArgumentError: command/args are malformed
        """
        return self.select_for_request(TaskRequest.create(command, args))

    def select_for_request(self, request: TaskRequest) -> FrozenSet[Domain]:
        text = request.text
        matched = {
            domain
            for domain, words in self.keywords.items()
            if any(word in text for word in words)
        }
        # When unsure, engage everyone
        if not matched:
            return ALL_DOMAINS
        return frozenset(matched)

    def identify_specialists(
        self,
        command: Any,
        args: Optional[Iterable[Any]] = None,
        domains: Optional[Iterable[Any]] = None,
    ) -> Dict[Domain, List[str]]:
        """
        Specialist roles each domain would bring in for this task.

        Returns:
            {domain: [role, ...]} for every requested domain, roles in table order
        """
        request = TaskRequest.create(command, args)
        if domains is None:
            domains = self.select_for_request(request)
        return self.specialists_for_request(request, domains)

    def specialists_for_request(
        self,
        request: TaskRequest,
        domains: Iterable[Any],
    ) -> Dict[Domain, List[str]]:
        text = request.text
        result: Dict[Domain, List[str]] = {}
        for domain in order_domains(domains):
            table = self.specialist_keywords.get(domain, {})
            result[domain] = [
                role for role, words in table.items()
                if any(word in text for word in words)
            ]
        return result


def select_domains(command: Any, args: Optional[Iterable[Any]] = None) -> FrozenSet[Domain]:
    """Select domains with the default configuration"""
    return DomainSelector().select_domains(command, args)


def domains_as_strings(domains: Iterable[Any]) -> List[str]:
    return [d.value for d in order_domains(domains)]


def specialists_as_strings(specialists: Mapping[Domain, List[str]]) -> Dict[str, List[str]]:
    return {domain.value: list(roles) for domain, roles in specialists.items()}
