# taskgate/services/notifier.py
"""
Console notifier - default "play achievement" collaborator.

Real audio playback belongs to the host; this prints a short line with
rich, or stays silent when notifications are switched off.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Optional, Protocol

from rich.console import Console

from config.settings import cfg


class AchievementPlayer(Protocol):
    async def play(self, event_name: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        ...


EVENT_ICONS = {
    "MILESTONE_REACHED": "🏁",
    "TASK_BLOCKED": "⛔",
}


class ConsoleNotifier:
    """Prints achievement events to the terminal"""

    def __init__(self, console: Optional[Console] = None, enabled: Optional[bool] = None):
        self.console = console or Console(stderr=True)
        self.enabled = cfg.AUDIO_ENABLED if enabled is None else enabled

    async def play(self, event_name: str, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
        if not self.enabled:
            return {"success": True, "method": "silent"}

        message = (options or {}).get("message") or event_name.replace("_", " ").lower()
        icon = EVENT_ICONS.get(event_name, "•")
        self.console.print(f"{icon} [bold green]{message}[/]")
        return {"success": True, "method": "console"}
