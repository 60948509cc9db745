from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Callable, Mapping, NamedTuple, Optional, TypeVar, Union

from pydantic import ValidationError

from . import payloads as p
from .envelope import Envelope, decode_envelope
from .events import (
    CardEvent,
    ColumnEvent,
    ContentEvent,
    DeleteEvent,
    DomainEvent,
    ErrorEvent,
    GroupEvent,
    MoveEvent,
    RetroEvent,
    RevealEvent,
    StageEvent,
    UnvoteEvent,
    UserEvent,
    VoteEvent,
)

logger = logging.getLogger(__name__)

S = TypeVar("S")
Handler = Callable[[DomainEvent, S], S]


class Operation(NamedTuple):
    payload: type[p.Payload]
    event: type


# Closed operation set, built once at import time.
OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {
        "stage": Operation(p.Stage, StageEvent),
        "column": Operation(p.Column, ColumnEvent),
        "card": Operation(p.Card, CardEvent),
        "content": Operation(p.Content, ContentEvent),
        "move": Operation(p.Move, MoveEvent),
        "reveal": Operation(p.CardRef, RevealEvent),
        "group": Operation(p.Group, GroupEvent),
        "vote": Operation(p.Vote, VoteEvent),
        "unvote": Operation(p.Vote, UnvoteEvent),
        "delete": Operation(p.CardRef, DeleteEvent),
        "user": Operation(p.User, UserEvent),
        "retro": Operation(p.Retro, RetroEvent),
        "error": Operation(p.ErrorMessage, ErrorEvent),
    }
)


def decode_event(envelope: Envelope) -> Optional[DomainEvent]:
    """Turn an envelope into a typed event.

    Returns None for operations outside the registry (the frame is dropped).
    A payload that does not match its schema becomes an ErrorEvent carrying
    the decoder's message; nothing raises from here.
    """
    operation = OPERATIONS.get(envelope.op)
    if operation is None:
        # TODO: decide whether unknown ops should surface as ErrorEvents once
        # the protocol is versioned; for now they are ignored.
        logger.debug("dropping frame with unknown op %r", envelope.op)
        return None

    try:
        # strict: no string-to-int or int-to-bool coercion, camelCase keys only
        payload = operation.payload.model_validate_json(envelope.data, strict=True, by_name=False)
    except ValidationError as e:
        logger.warning("undecodable %r payload on %s: %s", envelope.op, envelope.connection_id, e)
        return ErrorEvent(connection_id=envelope.connection_id, payload=p.ErrorMessage(error=str(e)))

    return operation.event(connection_id=envelope.connection_id, payload=payload)


def dispatch(envelope: Envelope, state: S, handler: Handler[S]) -> S:
    """Decode one envelope and feed the resulting event to ``handler``.

    ``handler(event, state)`` must return the new state. Dropped frames return
    ``state`` untouched without calling the handler.
    """
    event = decode_event(envelope)
    if event is None:
        return state
    return handler(event, state)


def handle_frame(raw: Union[str, bytes], state: S, handler: Handler[S]) -> S:
    """Parse a raw frame and dispatch it.

    Raises EnvelopeError when the outer frame itself is malformed.
    """
    return dispatch(decode_envelope(raw), state, handler)
