from __future__ import annotations

from typing import AsyncIterator, Protocol


class Transport(Protocol):
    """Connection primitives the client session depends on.

    Reconnects, backpressure and framing belong to the implementation; the
    session only sees complete text frames, in the order the server sent
    them.
    """

    async def send(self, url: str, frame: str) -> None:
        ...

    def listen(self, url: str) -> AsyncIterator[str]:
        ...
