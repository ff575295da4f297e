# taskgate/hooks/consciousness.py
"""
Consciousness (policy) hook - the one built-in hook that can deny.

allow = score >= 0.7 and no harmful keyword and sustainability >= 0.6
"""

from __future__ import annotations
import json
from typing import Any, Dict, Mapping

from config.settings import cfg
from taskgate.hooks.base import BaseHook


BASE_SCORE = 0.8
SUSTAINABILITY_INDEX = 0.85


class ConsciousnessHook(BaseHook):
    def __init__(self, settings: Any = None):
        super().__init__("consciousness")
        settings = settings or cfg
        self.harmful_keywords = list(settings.POLICY_HARMFUL_KEYWORDS)
        self.min_score = settings.POLICY_MIN_SCORE
        self.min_sustainability = settings.POLICY_MIN_SUSTAINABILITY

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        score = self.calculate_consciousness_score(context)
        ethical = self.check_ethical_compliance(context)
        sustainability = self.assess_sustainability(context)

        allow = score >= self.min_score and ethical and sustainability >= self.min_sustainability

        return {
            "allow": allow,
            "consciousness_score": score,
            "ethical_compliance": ethical,
            "sustainability_index": sustainability,
            "consciousness_check": True,
            "reason": "Consciousness validation passed" if allow else "Consciousness standards not met",
        }

    def calculate_consciousness_score(self, context: Mapping[str, Any]) -> float:
        score = BASE_SCORE
        for key in ("purpose", "beneficiaries", "harm_mitigation"):
            if context.get(key):
                score += 0.1
        return min(1.0, round(score, 10))

    def check_ethical_compliance(self, context: Mapping[str, Any]) -> bool:
        content = json.dumps(context, default=str, sort_keys=True).lower()
        return not any(keyword in content for keyword in self.harmful_keywords)

    def assess_sustainability(self, context: Mapping[str, Any]) -> float:
        return SUSTAINABILITY_INDEX
