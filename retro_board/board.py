from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, Optional, Tuple

from .protocol.events import (
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
from .protocol.ids import CardId, ColumnId, ContentId, RetroId


@dataclass(frozen=True)
class BoardCard:
    card_id: CardId
    revealed: bool = False
    votes: int = 0
    total_votes: int = 0
    contents: Dict[ContentId, str] = field(default_factory=dict)


@dataclass(frozen=True)
class BoardColumn:
    column_id: ColumnId
    name: str = ""
    order: int = 0
    cards: Dict[CardId, BoardCard] = field(default_factory=dict)


@dataclass(frozen=True)
class RetroSummary:
    retro_id: RetroId
    name: str
    created_at: datetime
    participants: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Board:
    """Client-side board state accumulated from broadcast events.

    Instances are never mutated; ``apply_event`` always returns a new Board
    (or the same one when the event changes nothing).
    """

    user: Optional[str] = None
    stage: Optional[str] = None
    columns: Dict[ColumnId, BoardColumn] = field(default_factory=dict)
    retros: Dict[RetroId, RetroSummary] = field(default_factory=dict)
    participants: Tuple[str, ...] = ()
    errors: Tuple[str, ...] = ()

    def ordered_columns(self) -> list[BoardColumn]:
        return sorted(self.columns.values(), key=lambda c: c.order)

    def card(self, column_id: ColumnId, card_id: CardId) -> Optional[BoardCard]:
        column = self.columns.get(column_id)
        if column is None:
            return None
        return column.cards.get(card_id)


def _with_column(board: Board, column: BoardColumn) -> Board:
    columns = dict(board.columns)
    columns[column.column_id] = column
    return replace(board, columns=columns)


def _with_card(column: BoardColumn, card: BoardCard) -> BoardColumn:
    cards = dict(column.cards)
    cards[card.card_id] = card
    return replace(column, cards=cards)


def _without_card(column: BoardColumn, card_id: CardId) -> BoardColumn:
    cards = dict(column.cards)
    cards.pop(card_id, None)
    return replace(column, cards=cards)


def _update_card(board: Board, column_id: ColumnId, card_id: CardId, fn: Callable[[BoardCard], BoardCard]) -> Board:
    column = board.columns.get(column_id)
    if column is None or card_id not in column.cards:
        return board
    return _with_column(board, _with_card(column, fn(column.cards[card_id])))


def _on_stage(event: StageEvent, board: Board) -> Board:
    return replace(board, stage=event.payload.stage)


def _on_column(event: ColumnEvent, board: Board) -> Board:
    pl = event.payload
    existing = board.columns.get(pl.column_id)
    cards = existing.cards if existing else {}
    return _with_column(
        board,
        BoardColumn(column_id=pl.column_id, name=pl.column_name, order=pl.column_order, cards=cards),
    )


def _on_card(event: CardEvent, board: Board) -> Board:
    # replace-by-id: the event carries the full counters
    pl = event.payload
    column = board.columns.get(pl.column_id) or BoardColumn(column_id=pl.column_id)
    existing = column.cards.get(pl.card_id)
    card = BoardCard(
        card_id=pl.card_id,
        revealed=pl.revealed,
        votes=pl.votes,
        total_votes=pl.total_votes,
        contents=existing.contents if existing else {},
    )
    return _with_column(board, _with_card(column, card))


def _on_content(event: ContentEvent, board: Board) -> Board:
    pl = event.payload

    def put(card: BoardCard) -> BoardCard:
        contents = dict(card.contents)
        contents[pl.content_id] = pl.card_text
        return replace(card, contents=contents)

    return _update_card(board, pl.column_id, pl.card_id, put)


def _on_move(event: MoveEvent, board: Board) -> Board:
    pl = event.payload
    src = board.columns.get(pl.column_from)
    dst = board.columns.get(pl.column_to)
    if src is None or dst is None or pl.card_id not in src.cards or src is dst:
        return board
    card = src.cards[pl.card_id]
    board = _with_column(board, _without_card(src, pl.card_id))
    return _with_column(board, _with_card(dst, card))


def _on_group(event: GroupEvent, board: Board) -> Board:
    pl = event.payload
    source = board.card(pl.column_from, pl.card_from)
    target = board.card(pl.column_to, pl.card_to)
    if source is None or target is None:
        return board
    if (pl.column_from, pl.card_from) == (pl.column_to, pl.card_to):
        return board
    contents = dict(target.contents)
    contents.update(source.contents)
    board = _with_column(board, _without_card(board.columns[pl.column_from], pl.card_from))
    return _update_card(board, pl.column_to, pl.card_to, lambda c: replace(c, contents=contents))


def _on_reveal(event: RevealEvent, board: Board) -> Board:
    pl = event.payload
    return _update_card(board, pl.column_id, pl.card_id, lambda c: replace(c, revealed=True))


def _on_delete(event: DeleteEvent, board: Board) -> Board:
    pl = event.payload
    column = board.columns.get(pl.column_id)
    if column is None or pl.card_id not in column.cards:
        return board
    return _with_column(board, _without_card(column, pl.card_id))


def _vote_delta(board: Board, user_id: str, column_id: ColumnId, card_id: CardId, delta: int) -> Board:
    mine = board.user is not None and user_id == board.user

    def adjust(card: BoardCard) -> BoardCard:
        total = max(0, card.total_votes + delta)
        votes = max(0, card.votes + delta) if mine else card.votes
        return replace(card, votes=min(votes, total), total_votes=total)

    return _update_card(board, column_id, card_id, adjust)


def _on_vote(event: VoteEvent, board: Board) -> Board:
    pl = event.payload
    return _vote_delta(board, pl.user_id, pl.column_id, pl.card_id, 1)


def _on_unvote(event: UnvoteEvent, board: Board) -> Board:
    pl = event.payload
    return _vote_delta(board, pl.user_id, pl.column_id, pl.card_id, -1)


def _on_user(event: UserEvent, board: Board) -> Board:
    name = event.payload.username
    if name in board.participants:
        return board
    return replace(board, participants=board.participants + (name,))


def _on_retro(event: RetroEvent, board: Board) -> Board:
    pl = event.payload
    retros = dict(board.retros)
    retros[pl.id] = RetroSummary(
        retro_id=pl.id,
        name=pl.name,
        created_at=pl.created_at,
        participants=tuple(pl.participants),
    )
    return replace(board, retros=retros)


def _on_error(event: ErrorEvent, board: Board) -> Board:
    return replace(board, errors=board.errors + (event.message,))


_REDUCERS: Dict[type, Callable[..., Board]] = {
    StageEvent: _on_stage,
    ColumnEvent: _on_column,
    CardEvent: _on_card,
    ContentEvent: _on_content,
    MoveEvent: _on_move,
    GroupEvent: _on_group,
    RevealEvent: _on_reveal,
    DeleteEvent: _on_delete,
    VoteEvent: _on_vote,
    UnvoteEvent: _on_unvote,
    UserEvent: _on_user,
    RetroEvent: _on_retro,
    ErrorEvent: _on_error,
}


def apply_event(event: DomainEvent, board: Board) -> Board:
    """Reducer: fold one event into the board.

    Events that reference columns or cards the board does not know about
    leave it unchanged.
    """
    reducer = _REDUCERS.get(type(event))
    if reducer is None:
        raise TypeError(f"unhandled event type: {type(event).__name__}")
    return reducer(event, board)
