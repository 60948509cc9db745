from __future__ import annotations

import hmac
import threading
from typing import Optional

from ..common.trace import new_token


class SessionRegistry:
    """In-memory record of signed-in users and pending OAuth states.

    Why the lock:
    - TestClient and sync routes run in worker threads
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: dict[str, str] = {}
        self._states: set[str] = set()

    def add(self, user: str, token: str) -> None:
        with self._lock:
            self._tokens[user] = token

    def issue(self, user: str) -> str:
        """Mint a new session token for ``user``, replacing any previous one."""
        token = new_token()
        self.add(user, token)
        return token

    def check(self, user: str, token: str) -> bool:
        with self._lock:
            expected: Optional[str] = self._tokens.get(user)
        if expected is None:
            return False
        return hmac.compare_digest(expected.encode("utf-8"), token.encode("utf-8"))

    def remove(self, user: str) -> None:
        with self._lock:
            self._tokens.pop(user, None)

    def new_state(self) -> str:
        state = new_token()
        with self._lock:
            self._states.add(state)
        return state

    def consume_state(self, state: Optional[str]) -> bool:
        """True once for each state handed out by ``new_state``."""
        if not state:
            return False
        with self._lock:
            if state not in self._states:
                return False
            self._states.discard(state)
            return True
