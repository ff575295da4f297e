# taskgate/hooks/quality.py
"""
Quality hook - post-execution advisory check. Never blocks.

quality_score = max(0, 100 - 10 * total_issues)
"""

from __future__ import annotations
import asyncio
from typing import Any, Dict, Iterable, List, Mapping

from taskgate.hooks.base import BaseHook


MAX_CODE_LENGTH = 10000

# (marker, issue description)
CODE_MARKERS = [
    ("console.log", "Debug statements present"),
    ("TODO", "TODO comments found"),
]


class QualityHook(BaseHook):
    def __init__(self):
        super().__init__("quality")

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        checks = await asyncio.gather(
            self.check_code_quality(context.get("code") or ""),
            self.check_asset_optimization(context.get("assets") or []),
            self.check_documentation(context.get("docs") or ""),
        )

        issues = [check for check in checks if check["issues"] > 0]

        return {
            "allow": True,
            "quality_score": self.calculate_quality_score(checks),
            "issues": issues,
            "recommendations": self.generate_recommendations(issues),
            "quality_check": True,
        }

    async def check_code_quality(self, code: str) -> Dict[str, Any]:
        if not code:
            return {"issues": 0, "type": "code_quality", "details": []}

        code = str(code)
        found = [description for marker, description in CODE_MARKERS if marker in code]
        if len(code) > MAX_CODE_LENGTH:
            found.append("File too large")

        return {"issues": len(found), "type": "code_quality", "details": found}

    async def check_asset_optimization(self, assets: Iterable[Any]) -> Dict[str, Any]:
        # Assets carry no size metadata; always a pass
        return {"issues": 0, "type": "asset_optimization", "details": "Assets checked"}

    async def check_documentation(self, docs: str) -> Dict[str, Any]:
        missing = len(docs) == 0
        return {
            "issues": 1 if missing else 0,
            "type": "documentation",
            "details": "No documentation provided" if missing else "Documentation present",
        }

    @staticmethod
    def calculate_quality_score(checks: Iterable[Mapping[str, Any]]) -> int:
        total_issues = sum(check["issues"] for check in checks)
        return max(0, 100 - total_issues * 10)

    @staticmethod
    def generate_recommendations(issues: Iterable[Mapping[str, Any]]) -> List[str]:
        return [f"Consider addressing: {issue['type']}" for issue in issues]
