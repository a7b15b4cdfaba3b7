import logging
from typing import Callable, Dict, List, Optional

from storefront.cache import LocalCache, TOKEN_KEY
from storefront.errors import SessionExpiredError
from storefront.notify import Notifier

logger = logging.getLogger(__name__)


class SessionManager:
    """Holds the bearer token and tears the session down when it goes stale.

    Each login starts a new generation. A 401 only ends the session it was
    issued under, so a burst of failing calls tears down once, and a late
    401 from before a re-login leaves the new session alone.
    """

    def __init__(self, cache: LocalCache, notifier: Notifier):
        self.cache = cache
        self.notifier = notifier
        self._token: Optional[str] = None
        self._generation = 0
        self._listeners: List[Callable[[], None]] = []

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def on_teardown(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def restore(self) -> bool:
        token = self.cache.get_raw(TOKEN_KEY)
        if token:
            self._token = token
            self._generation += 1
        return self.is_authenticated

    def login(self, token: str) -> None:
        self._token = token
        self._generation += 1
        self.cache.set_raw(TOKEN_KEY, token)

    def auth_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"} if self._token else {}

    def expire(self, generation: Optional[int] = None) -> bool:
        """React to an authentication-invalid answer. Returns True if this call tore the session down."""
        if generation is not None and generation != self._generation:
            return False
        if not self._teardown():
            return False
        logger.warning("Session expired, credential cleared")
        self.notifier.error(SessionExpiredError.message)
        return True

    def logout(self) -> bool:
        if not self._teardown():
            return False
        self.notifier.success("Logged out successfully!")
        return True

    def _teardown(self) -> bool:
        if not self._token:
            return False
        self._token = None
        self._generation += 1
        self.cache.remove(TOKEN_KEY)
        for callback in list(self._listeners):
            callback()
        return True
