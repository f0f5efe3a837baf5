"""
Session Store
Holds the authenticated user and bearer token for one process.

Lifecycle:
    store = JsonFileStore(config.DATA_DIR)
    api = ApiClient()
    session = Session(store, api)
    api.token_provider = session.get_token
    session.restore()             # init: pick up a previous login
    ...
    session.logout()              # teardown: forget it everywhere
"""

import json
import logging
from typing import Optional

from obani.api.client import ApiClient
from obani.models import AuthState, User
from obani.storage.local_store import AUTH_KEY, KeyValueStore

logger = logging.getLogger(__name__)


class Session:
    """Explicitly constructed auth state, injected wherever a token is needed."""

    def __init__(self, store: KeyValueStore, api: ApiClient):
        self.store = store
        self.api = api
        self._state = AuthState()

    # -------------------------------------------------------------------------
    # state
    # -------------------------------------------------------------------------

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    @property
    def user(self) -> Optional[User]:
        return self._state.user

    @property
    def is_authenticated(self) -> bool:
        return bool(self._state.token)

    def get_token(self) -> Optional[str]:
        """Token provider for ApiClient."""
        return self._state.token

    # -------------------------------------------------------------------------
    # lifecycle
    # -------------------------------------------------------------------------

    def restore(self) -> bool:
        """
        Load a previously persisted session.
        Malformed data is treated as logged-out rather than raised.
        Returns True if a session with a token was restored.
        """
        raw = self.store.get(AUTH_KEY)
        if not raw:
            self._state = AuthState()
            return False

        try:
            state = AuthState.from_dict(json.loads(raw))
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable stored session: {type(e).__name__}: {e}")
            self._state = AuthState()
            return False

        if not isinstance(state.token, str) or not state.token:
            logger.warning("Stored session has no token, treating as logged out")
            self._state = AuthState()
            return False

        self._state = state
        logger.debug(f"Restored session for {state.user.email if state.user else 'unknown user'}")
        return True

    def logout(self) -> None:
        """Clear memory and the persisted entry. No network call."""
        self._state = AuthState()
        self.store.remove(AUTH_KEY)
        logger.info("Logged out")

    # -------------------------------------------------------------------------
    # auth operations
    # -------------------------------------------------------------------------

    def login(self, email: str, password: str) -> Optional[str]:
        """
        Log in and persist the session.
        Returns None on success, else a user-facing error message.
        """
        if not email or not password:
            return 'Please enter email and password'

        result = self.api.login(email, password)
        return self._adopt(result, fallback='Login failed')

    def register(self, email: str, password: str, name: str) -> Optional[str]:
        """
        Create an account and persist the session.
        Returns None on success, else a user-facing error message.
        """
        if not email or not password:
            return 'Please enter email and password'
        if not name:
            return 'Please enter your name'

        result = self.api.register(email, password, name)
        return self._adopt(result, fallback='Registration failed')

    def _adopt(self, result, fallback: str) -> Optional[str]:
        if not result.success or result.data is None or not result.data.token:
            logger.warning(f"Authentication rejected: {result.error or fallback}")
            return result.error_or(fallback)

        state: AuthState = result.data
        self.store.set(AUTH_KEY, json.dumps(state.to_dict()))
        self._state = state
        logger.info(f"Authenticated as {state.user.email if state.user else 'unknown user'}")
        return None
