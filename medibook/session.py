"""Session store: authenticated user plus bearer token.

Constructed once at startup and injected into every page that needs it.
"""
import json
from typing import Optional, Dict, Any

from pydantic import ValidationError

from medibook.logging_config import get_logger
from medibook.models import User
from medibook.storage import LocalStorage

logger = get_logger(__name__)

TOKEN_KEY = "token"
USER_KEY = "user"


class SessionStore:
    """
    Holds {user, token} in memory and mirrors it to local storage.

    Responsibilities:
    - Single mutation entry point (set_credentials)
    - Synchronous reads for page gating and header injection
    - Restore on startup, clear on logout

    No expiry tracking: a token the server rejects stays stored until logout.
    """

    def __init__(self, storage: LocalStorage):
        self.storage = storage
        self._user: Optional[User] = None
        self._token: Optional[str] = None

    def set_credentials(self, user: User | Dict[str, Any], token: str):
        """
        Store user and token in memory and in persistent storage.

        Args:
            user: User model or raw user payload from the API
            token: Bearer token
        """
        if not isinstance(user, User):
            user = User.model_validate(user)
        self._user = user
        self._token = token
        self.storage.set_item(TOKEN_KEY, token)
        self.storage.set_item(USER_KEY, user.model_dump_json())
        logger.info("session_stored", user_id=user.id, role=user.role.value)

    def get_user(self) -> Optional[User]:
        return self._user

    def get_token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None and bool(self._token)

    def auth_headers(self) -> Dict[str, str]:
        """Authorization header for the current token, if any."""
        if not self._token:
            return {}
        return {"Authorization": f"Bearer {self._token}"}

    def restore(self) -> bool:
        """
        Load a previously stored session.

        Returns:
            True if a complete session was restored
        """
        token = self.storage.get_item(TOKEN_KEY)
        raw_user = self.storage.get_item(USER_KEY)
        if not token or not raw_user:
            return False

        try:
            user = User.model_validate(json.loads(raw_user))
        except (json.JSONDecodeError, ValidationError):
            logger.warning("stored_user_unreadable")
            return False

        self._user = user
        self._token = token
        return True

    def logout(self):
        """Forget the session in memory and in storage."""
        self._user = None
        self._token = None
        self.storage.remove_item(TOKEN_KEY)
        self.storage.remove_item(USER_KEY)
        logger.info("session_cleared")
