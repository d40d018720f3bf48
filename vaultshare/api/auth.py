import secrets
from typing import Callable

from fastapi import HTTPException, Request, status

from vaultshare.session import VaultSession

SESSION_KEY = "vault_session"


class SessionRegistry:
    """Keeps one VaultSession per browser session, keyed by a random token."""

    def __init__(self, session_factory: Callable[[], VaultSession]) -> None:
        self._session_factory = session_factory
        self._sessions: dict[str, VaultSession] = {}

    def get_or_create(self, token: str | None) -> tuple[str, VaultSession]:
        if token and token in self._sessions:
            return token, self._sessions[token]
        token = secrets.token_urlsafe(16)
        self._sessions[token] = self._session_factory()
        return token, self._sessions[token]

    def get(self, token: str | None) -> VaultSession | None:
        if not token:
            return None
        return self._sessions.get(token)

    def discard(self, token: str | None) -> None:
        if token:
            self._sessions.pop(token, None)

    def __len__(self) -> int:
        return len(self._sessions)


def verify_session(request: Request) -> VaultSession:
    """Resolve the logged-in VaultSession of the request."""
    registry: SessionRegistry = request.app.state.sessions
    vault_session = registry.get(request.session.get(SESSION_KEY))
    if vault_session is None or not vault_session.is_logged_in:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not logged in",
        )
    return vault_session


def is_authenticated(request: Request) -> bool:
    """Check if the request belongs to a logged-in session."""
    registry: SessionRegistry = request.app.state.sessions
    vault_session = registry.get(request.session.get(SESSION_KEY))
    return vault_session is not None and vault_session.is_logged_in
