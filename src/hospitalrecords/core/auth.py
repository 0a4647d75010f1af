"""
Authentication service.

Sessions are the evidence of a completed login. Login trades an API key for
a user id, which is kept in the signed session cookie and read back on every
request.
"""

import logging
from typing import Any, Mapping, MutableMapping, Optional

from fastapi import HTTPException

from .config import get_settings

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user_id"


class AuthService:
    """Authentication service for validating API keys and session identities"""

    def __init__(self, api_keys: Optional[str] = None):
        """Initialize authentication service with API keys from settings"""
        self.api_keys: dict[str, str] = {}
        self._load_api_keys(api_keys)

    def _load_api_keys(self, api_keys: Optional[str]) -> None:
        """Load API keys from the given string or from settings"""
        if api_keys is None:
            api_keys = get_settings().api_keys
        if api_keys:
            self._parse_api_keys(api_keys)
            logger.info(f"Loaded {len(self.api_keys)} API key(s)")
        else:
            logger.warning("No API keys configured. Session login will fail for all requests.")

    def _parse_api_keys(self, api_keys_str: str) -> None:
        """
        Parse API keys string.
        Format: "key1:user1,key2:user2" (comma-separated key:user pairs)
        """
        if not api_keys_str or not api_keys_str.strip():
            return

        for pair in api_keys_str.split(","):
            pair = pair.strip()
            if not pair:
                continue

            if ":" in pair:
                parts = pair.split(":", 1)
                key = parts[0].strip()
                user_id = parts[1].strip()
                if key and user_id:
                    self.api_keys[key] = user_id
            else:
                # If no colon, use the key itself as user identifier
                self.api_keys[pair] = pair

    def validate_api_key(self, api_key: Optional[str]) -> str:
        """
        Validate API key and return user ID.

        Raises:
            HTTPException: If API key is invalid or missing
        """
        if not api_key:
            raise HTTPException(status_code=401, detail="API key required")

        # Remove "Bearer " prefix if present
        if api_key.startswith("Bearer "):
            api_key = api_key[7:].strip()

        if api_key in self.api_keys:
            user_id = self.api_keys[api_key]
            logger.debug(f"API key validated for user: {user_id}")
            return user_id

        logger.warning(f"Invalid API key attempted: {api_key[:4]}...")
        raise HTTPException(status_code=401, detail="Invalid API key")

    def open_session(self, session: MutableMapping[str, Any], api_key: Optional[str]) -> str:
        """Validate ``api_key`` and record the user in ``session``."""
        user_id = self.validate_api_key(api_key)
        session.clear()
        session[SESSION_USER_KEY] = user_id
        return user_id

    @staticmethod
    def close_session(session: MutableMapping[str, Any]) -> None:
        session.clear()

    @staticmethod
    def identity_from_session(session: Mapping[str, Any]) -> Optional[str]:
        """The user id recorded by a previous login, if any."""
        user_id = session.get(SESSION_USER_KEY)
        if isinstance(user_id, str) and user_id:
            return user_id
        return None


# Global instance
_auth_service: Optional[AuthService] = None


def get_auth_service() -> AuthService:
    """Get global authentication service instance (singleton)"""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService()
    return _auth_service


def reset_auth_service() -> None:
    global _auth_service
    _auth_service = None
