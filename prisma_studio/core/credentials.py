"""
PRISMA Studio Credential Configuration
Explicit API key holder with a set/clear API and change subscriptions.
"""

from enum import Enum
from typing import Callable, List, Optional

from prisma_studio.core.config import get_settings
from prisma_studio.core.errors import AuthenticationError
from prisma_studio.core.logging import get_logger

logger = get_logger(__name__)


class CredentialEvent(str, Enum):
    """Notifications emitted by ApiKeyConfig."""
    CHANGED = "changed"
    CLEARED = "cleared"
    INVALID = "invalid"


CredentialListener = Callable[[CredentialEvent, "ApiKeyConfig"], None]


class ApiKeyConfig:
    """Holds the provider API key and notifies subscribers when it changes."""

    def __init__(self, api_key: Optional[str] = None):
        self._api_key = (api_key or "").strip() or None
        self._listeners: List[CredentialListener] = []
        self.last_invalid_reason: Optional[str] = None

    @property
    def api_key(self) -> Optional[str]:
        return self._api_key

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    def set(self, api_key: str) -> None:
        """Store a new key and notify subscribers."""
        cleaned = (api_key or "").strip()
        if not cleaned:
            self.clear()
            return
        self._api_key = cleaned
        self.last_invalid_reason = None
        logger.info("api_key_updated", key_suffix=cleaned[-4:])
        self._notify(CredentialEvent.CHANGED)

    def clear(self) -> None:
        """Remove the key and notify subscribers."""
        self._api_key = None
        self.last_invalid_reason = None
        logger.info("api_key_cleared")
        self._notify(CredentialEvent.CLEARED)

    def mark_invalid(self, reason: str) -> None:
        """Report that the provider rejected the current key."""
        self.last_invalid_reason = reason
        logger.warning("api_key_rejected", reason=reason)
        self._notify(CredentialEvent.INVALID)

    def require_key(self) -> str:
        if not self._api_key:
            raise AuthenticationError(
                message="API Key not found. Configure a valid Gemini API key.",
                details={"configured": False}
            )
        return self._api_key

    def subscribe(self, listener: CredentialListener) -> Callable[[], None]:
        """Register a listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: CredentialEvent) -> None:
        for listener in list(self._listeners):
            listener(event, self)


# Singleton instance
_api_key_config: Optional[ApiKeyConfig] = None


def get_api_key_config() -> ApiKeyConfig:
    """Get or create the credential holder seeded from settings."""
    global _api_key_config
    if _api_key_config is None:
        _api_key_config = ApiKeyConfig(get_settings().gemini_api_key)
    return _api_key_config
