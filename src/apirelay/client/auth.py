"""
In-memory holder for the dynamically acquired bearer token.

States:
    Unauthenticated  no token; requests carry no Authorization header
    Authenticated    token held; requests carry "Authorization: Bearer <token>"

Transitions happen only through set()/clear(). Writes are serialized by a
lock; concurrent logins resolve last-write-wins.
"""

import threading


class AuthState:
    """
    Zero-or-one bearer token, owned by exactly one ApiClient.

    Example:
        state = AuthState()
        state.set("abc")
        state.header()  # {"Authorization": "Bearer abc"}
        state.clear()
        state.header()  # {}
    """

    def __init__(self, token: str | None = None) -> None:
        self._lock = threading.Lock()
        self._token: str | None = token or None

    @property
    def token(self) -> str | None:
        """The current token, or None."""
        return self._token

    @property
    def is_authenticated(self) -> bool:
        """Whether a token is held."""
        return self._token is not None

    def set(self, token: str | None) -> None:
        """Store a token; a falsy value clears the state instead."""
        with self._lock:
            self._token = token or None

    def clear(self) -> None:
        """Drop the stored token."""
        with self._lock:
            self._token = None

    def header(self) -> dict[str, str]:
        """The Authorization header derived from the current token, if any."""
        token = self._token
        if token is None:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def __repr__(self) -> str:
        state = "authenticated" if self.is_authenticated else "unauthenticated"
        return f"<AuthState: {state}>"
