from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar

from ..protocol.commands import Commands
from ..protocol.dispatch import Handler, dispatch
from ..protocol.envelope import EnvelopeError, decode_envelope, encode_envelope
from .transport import Transport

logger = logging.getLogger(__name__)

S = TypeVar("S")


class Session:
    """One client connection: inbound dispatch plus bound outbound commands.

    Frames are handled strictly one at a time; the next frame is not read
    until the handler has returned the new state.
    """

    def __init__(self, transport: Transport, *, url: str, connection_id: str, token: str) -> None:
        self.transport = transport
        self.url = url
        self.connection_id = connection_id
        self.token = token
        self.commands = Commands(self.send)

    async def send(self, op: str, data: Any) -> None:
        frame = encode_envelope(op, data, connection_id=self.connection_id, token=self.token)
        await self.transport.send(self.url, frame)

    async def run(
        self,
        state: S,
        handler: Handler[S],
        *,
        on_envelope_error: Optional[Callable[[EnvelopeError], None]] = None,
    ) -> S:
        """Consume frames until the transport stops; return the final state."""
        async for raw in self.transport.listen(self.url):
            try:
                envelope = decode_envelope(raw)
            except EnvelopeError as e:
                # tolerate garbage and keep the connection going
                logger.warning("unparseable frame on %s: %s", self.url, e)
                if on_envelope_error is not None:
                    on_envelope_error(e)
                continue
            state = dispatch(envelope, state, handler)
        return state
