from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Iterable

from . import payloads as p
from .envelope import encode_envelope
from .ids import CardId, ColumnId, ContentId, RetroId


@dataclass(frozen=True)
class OutboundFrame:
    """A command ready to send: the op name plus its JSON-ready payload."""

    op: str
    data: Any

    def to_json(self, *, connection_id: str | None = None, token: str | None = None) -> str:
        return encode_envelope(self.op, self.data, connection_id=connection_id, token=token)


def _frame(op: str, payload: p.Payload) -> OutboundFrame:
    return OutboundFrame(op=op, data=payload.to_data())


# Builders are pure and do no validation of their own: empty text, unknown
# ids etc. are passed through and left for the server to reject.

def add(column_id: ColumnId, card_text: str) -> OutboundFrame:
    return _frame("add", p.AddCard(column_id=column_id, card_text=card_text))


def move(column_from: ColumnId, column_to: ColumnId, card_id: CardId) -> OutboundFrame:
    return _frame("move", p.Move(column_from=column_from, column_to=column_to, card_id=card_id))


def stage(stage: str) -> OutboundFrame:
    return _frame("stage", p.Stage(stage=stage))


def reveal(column_id: ColumnId, card_id: CardId) -> OutboundFrame:
    return _frame("reveal", p.CardRef(column_id=column_id, card_id=card_id))


def group(column_from: ColumnId, card_from: CardId, column_to: ColumnId, card_to: CardId) -> OutboundFrame:
    return _frame(
        "group",
        p.Group(column_from=column_from, card_from=card_from, column_to=column_to, card_to=card_to),
    )


def vote(column_id: ColumnId, card_id: CardId) -> OutboundFrame:
    # the server attributes the vote to the user behind the session token
    return _frame("vote", p.CardRef(column_id=column_id, card_id=card_id))


def unvote(column_id: ColumnId, card_id: CardId) -> OutboundFrame:
    return _frame("unvote", p.CardRef(column_id=column_id, card_id=card_id))


def delete(column_id: ColumnId, card_id: CardId) -> OutboundFrame:
    return _frame("delete", p.CardRef(column_id=column_id, card_id=card_id))


def edit(content_id: ContentId, column_id: ColumnId, card_id: CardId, card_text: str) -> OutboundFrame:
    return _frame(
        "edit",
        p.EditContent(column_id=column_id, content_id=content_id, card_id=card_id, card_text=card_text),
    )


def menu() -> OutboundFrame:
    return OutboundFrame(op="menu", data="")


def join_retro(retro_id: RetroId) -> OutboundFrame:
    return _frame("joinRetro", p.JoinRetro(retro_id=retro_id))


def create_retro(name: str, users: Iterable[str]) -> OutboundFrame:
    return _frame("createRetro", p.CreateRetro(name=name, users=list(users)))


SendFn = Callable[[str, Any], Awaitable[None]]


class Commands:
    """Command builders bound to one connection's sending capability.

    ``send(op, data)`` is created once per connection (it already knows the
    url, connection id and session token); every method here is
    fire-and-forget.
    """

    def __init__(self, send: SendFn) -> None:
        self._send = send

    async def _emit(self, frame: OutboundFrame) -> None:
        await self._send(frame.op, frame.data)

    async def add(self, column_id: ColumnId, card_text: str) -> None:
        await self._emit(add(column_id, card_text))

    async def move(self, column_from: ColumnId, column_to: ColumnId, card_id: CardId) -> None:
        await self._emit(move(column_from, column_to, card_id))

    async def stage(self, stage_name: str) -> None:
        await self._emit(stage(stage_name))

    async def reveal(self, column_id: ColumnId, card_id: CardId) -> None:
        await self._emit(reveal(column_id, card_id))

    async def group(self, column_from: ColumnId, card_from: CardId, column_to: ColumnId, card_to: CardId) -> None:
        await self._emit(group(column_from, card_from, column_to, card_to))

    async def vote(self, column_id: ColumnId, card_id: CardId) -> None:
        """No userId is sent; the server attributes the vote to the session token's user."""
        await self._emit(vote(column_id, card_id))

    async def unvote(self, column_id: ColumnId, card_id: CardId) -> None:
        await self._emit(unvote(column_id, card_id))

    async def delete(self, column_id: ColumnId, card_id: CardId) -> None:
        await self._emit(delete(column_id, card_id))

    async def edit(self, content_id: ContentId, column_id: ColumnId, card_id: CardId, card_text: str) -> None:
        await self._emit(edit(content_id, column_id, card_id, card_text))

    async def menu(self) -> None:
        await self._emit(menu())

    async def join_retro(self, retro_id: RetroId) -> None:
        await self._emit(join_retro(retro_id))

    async def create_retro(self, name: str, users: Iterable[str]) -> None:
        await self._emit(create_retro(name, users))
