from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .payloads import (
    Card,
    CardRef,
    Column,
    Content,
    ErrorMessage,
    Group,
    Move,
    Retro,
    Stage,
    User,
    Vote,
)


@dataclass(frozen=True)
class Event:
    """Domain event decoded from an inbound frame.

    ``connection_id`` is the envelope's ``id``: the connection/session that
    delivered the frame, not the command that caused it.
    """

    connection_id: str


@dataclass(frozen=True)
class StageEvent(Event):
    payload: Stage


@dataclass(frozen=True)
class ColumnEvent(Event):
    payload: Column


@dataclass(frozen=True)
class CardEvent(Event):
    payload: Card


@dataclass(frozen=True)
class ContentEvent(Event):
    payload: Content


@dataclass(frozen=True)
class MoveEvent(Event):
    payload: Move


@dataclass(frozen=True)
class RevealEvent(Event):
    payload: CardRef


@dataclass(frozen=True)
class GroupEvent(Event):
    payload: Group


@dataclass(frozen=True)
class VoteEvent(Event):
    payload: Vote


@dataclass(frozen=True)
class UnvoteEvent(Event):
    payload: Vote


@dataclass(frozen=True)
class DeleteEvent(Event):
    payload: CardRef


@dataclass(frozen=True)
class UserEvent(Event):
    payload: User


@dataclass(frozen=True)
class RetroEvent(Event):
    payload: Retro


@dataclass(frozen=True)
class ErrorEvent(Event):
    """Server-reported error, or a payload that failed to decode."""

    payload: ErrorMessage

    @property
    def message(self) -> str:
        return self.payload.error


DomainEvent = Union[
    StageEvent,
    ColumnEvent,
    CardEvent,
    ContentEvent,
    MoveEvent,
    RevealEvent,
    GroupEvent,
    VoteEvent,
    UnvoteEvent,
    DeleteEvent,
    UserEvent,
    RetroEvent,
    ErrorEvent,
]
