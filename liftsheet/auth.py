"""Access-token providers for the Sheets API."""

import logging
from abc import ABC, abstractmethod

from .storage import KeyValueStore

logger = logging.getLogger(__name__)

TOKEN_KEY = "access_token"


class TokenProvider(ABC):
    """Source of the bearer token used for Sheets requests."""

    @abstractmethod
    def get_token(self) -> str | None:
        """Current token, or None when signed out."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Forget the current token (expired or signed out)."""
        pass


class StoredTokenProvider(TokenProvider):
    """Keeps the last token obtained by the sign-in flow in the local store."""

    def __init__(self, store: KeyValueStore, key: str = TOKEN_KEY):
        self._store = store
        self._key = key

    def set_token(self, token: str) -> None:
        self._store.set(self._key, token)
        logger.info("Access token stored")

    def get_token(self) -> str | None:
        return self._store.get(self._key) or None

    def invalidate(self) -> None:
        self._store.remove(self._key)
        logger.info("Access token invalidated")
