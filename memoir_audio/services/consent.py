"""AI-processing consent checks run before any provider work."""

from __future__ import annotations

import logging
from typing import Iterable

from memoir_audio.errors import ConsentError

logger = logging.getLogger(__name__)

CONSENT_DENIED_MESSAGE = (
    "AI processing is disabled for this account. Enable it in your privacy settings to use this feature."
)


class ConsentGate:
    """Combine the caller's own flag with an operator-maintained deny-list."""

    def __init__(self, denied_user_ids: Iterable[str] = ()) -> None:
        self._denied = frozenset(str(user_id) for user_id in denied_user_ids)

    def is_allowed(self, user_id: str, ai_processing_enabled: bool = True) -> bool:
        return ai_processing_enabled and str(user_id) not in self._denied

    def ensure_allowed(self, user_id: str, ai_processing_enabled: bool = True) -> None:
        if not self.is_allowed(user_id, ai_processing_enabled):
            logger.warning("AI consent denied for user %s", user_id)
            raise ConsentError(CONSENT_DENIED_MESSAGE)


__all__ = ["CONSENT_DENIED_MESSAGE", "ConsentGate"]
