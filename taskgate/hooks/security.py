# taskgate/hooks/security.py
"""
Security hook - pre-execution gate.

Runs four independent checks and allows only when none reports a violation:
- command_validation: suspicious shell/code patterns in the command
- path_validation: paths under system directories
- secret_scan: credential-looking words in content
- permission_check: elevated permissions requested
"""

from __future__ import annotations
import asyncio
import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

from config.settings import cfg
from taskgate.hooks.base import BaseHook, ensure_list


SECRET_PATTERNS = [
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
    re.compile(r"auth", re.IGNORECASE),
]

SUSPICIOUS_PATTERNS = [
    re.compile(r"rm\s+-rf"),
    re.compile(r"sudo"),
    re.compile(r"eval\("),
    re.compile(r"exec\("),
    re.compile(r"system\("),
]


class SecurityHook(BaseHook):
    def __init__(self, settings: Any = None):
        super().__init__("security")
        settings = settings or cfg
        self.dangerous_paths: List[str] = list(settings.SECURITY_DANGEROUS_PATHS)
        self.elevated_permissions: List[str] = list(settings.SECURITY_ELEVATED_PERMISSIONS)

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        validations = await asyncio.gather(
            self.validate_command(context.get("command")),
            self.validate_paths(ensure_list(context.get("paths"))),
            self.scan_for_secrets(context.get("content") or ""),
            self.check_permissions(ensure_list(context.get("permissions"))),
        )

        violations = [v for v in validations if not v["safe"]]

        return {
            "allow": not violations,
            "violations": violations,
            "security_check": True,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def validate_command(self, command: Any) -> Dict[str, Any]:
        if not command:
            return {"safe": True, "type": "command_validation", "details": "No command given"}

        suspicious = any(p.search(str(command)) for p in SUSPICIOUS_PATTERNS)
        return {
            "safe": not suspicious,
            "type": "command_validation",
            "details": "Contains suspicious patterns" if suspicious else "Command appears safe",
        }

    async def validate_paths(self, paths: Iterable[Any]) -> Dict[str, Any]:
        dangerous = any(
            str(path).startswith(prefix)
            for path in paths
            for prefix in self.dangerous_paths
        )
        return {
            "safe": not dangerous,
            "type": "path_validation",
            "details": "Accessing system directories" if dangerous else "Paths appear safe",
        }

    async def scan_for_secrets(self, content: Any) -> Dict[str, Any]:
        has_secrets = any(p.search(str(content)) for p in SECRET_PATTERNS)
        return {
            "safe": not has_secrets,
            "type": "secret_scan",
            "details": "Potential secrets detected" if has_secrets else "No secrets found",
        }

    async def check_permissions(self, permissions: Iterable[Any]) -> Dict[str, Any]:
        requested = list(permissions)
        dangerous = any(p in requested for p in self.elevated_permissions)
        return {
            "safe": not dangerous,
            "type": "permission_check",
            "details": "Elevated permissions requested" if dangerous else "Normal permissions",
        }
