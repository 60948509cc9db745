"""Wire protocol between retro board clients and the broadcasting server."""

from .commands import Commands, OutboundFrame
from .dispatch import OPERATIONS, decode_event, dispatch, handle_frame
from .envelope import Envelope, EnvelopeError, decode_envelope, encode_envelope
from .events import DomainEvent, ErrorEvent, Event
from .ids import CardId, ColumnId, ContentId, RetroId

__all__ = [
    "OPERATIONS",
    "CardId",
    "ColumnId",
    "Commands",
    "ContentId",
    "DomainEvent",
    "Envelope",
    "EnvelopeError",
    "ErrorEvent",
    "Event",
    "OutboundFrame",
    "RetroId",
    "decode_envelope",
    "decode_event",
    "dispatch",
    "encode_envelope",
    "handle_frame",
]
