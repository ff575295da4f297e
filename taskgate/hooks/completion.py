# taskgate/hooks/completion.py
"""
Completion hook - best-effort notification. Always allows.

The notifier is optional; a missing notifier or one that raises only
changes the audio_played/audio_error fields of the result.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Mapping, Optional

from config.settings import cfg
from taskgate.hooks.base import BaseHook
from taskgate.services.notifier import AchievementPlayer


DEFAULT_MESSAGE = "Operation completed successfully"


class CompletionHook(BaseHook):
    def __init__(
        self,
        notifier: Optional[AchievementPlayer] = None,
        settings: Any = None,
        logger: Optional[Any] = None,
    ):
        super().__init__("completion")
        settings = settings or cfg
        self.notifier = notifier
        self.event_name = settings.COMPLETION_EVENT
        self.logger = logger or logging.getLogger(__name__)

    async def execute(self, context: Mapping[str, Any]) -> Dict[str, Any]:
        message = context.get("message") or DEFAULT_MESSAGE

        if self.notifier is None:
            self.logger.info(message)
            return {
                "allow": True,
                "notification_sent": True,
                "audio_played": False,
                "audio_error": "No notifier configured",
                "completion_hook": True,
            }

        try:
            outcome = await self.notifier.play(self.event_name, {"message": message})
            outcome = outcome or {}
            return {
                "allow": True,
                "notification_sent": True,
                "audio_played": bool(outcome.get("success")),
                "method": outcome.get("method"),
                "completion_hook": True,
            }
        except Exception as e:
            # Уведомление не критично
            self.logger.info(message)
            return {
                "allow": True,
                "notification_sent": True,
                "audio_played": False,
                "audio_error": str(e) or type(e).__name__,
                "completion_hook": True,
            }
