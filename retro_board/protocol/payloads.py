from __future__ import annotations

from datetime import datetime
from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .ids import CardId, ColumnId, ContentId, RetroId


class Payload(BaseModel):
    """Base for every payload carried in an envelope's ``data`` string.

    Field names are snake_case in Python and camelCase on the wire. Unknown
    keys are ignored so that a newer server can add fields without breaking
    older clients.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_data(self) -> dict:
        """The wire representation (camelCase keys, JSON-ready values)."""
        return self.model_dump(mode="json", by_alias=True)


# -------------------------
# Inbound (server -> client)
# -------------------------

class Stage(Payload):
    stage: str


class Column(Payload):
    column_id: ColumnId
    column_name: str
    column_order: int


class Card(Payload):
    column_id: ColumnId
    card_id: CardId
    revealed: bool
    votes: int
    total_votes: int

    @model_validator(mode="after")
    def _votes_within_total(self) -> "Card":
        if self.votes > self.total_votes:
            raise ValueError(f"votes ({self.votes}) exceed totalVotes ({self.total_votes})")
        return self


class Content(Payload):
    column_id: ColumnId
    card_id: CardId
    content_id: ContentId
    card_text: str


class Move(Payload):
    column_from: ColumnId
    column_to: ColumnId
    card_id: CardId


class CardRef(Payload):
    """A card addressed by its owning column (reveal, delete)."""

    column_id: ColumnId
    card_id: CardId


class Group(Payload):
    column_from: ColumnId
    card_from: CardId
    column_to: ColumnId
    card_to: CardId


class Vote(Payload):
    """Shared by ``vote`` and ``unvote``; only the op tells them apart."""

    user_id: str
    column_id: ColumnId
    card_id: CardId


class User(Payload):
    username: str


class Retro(Payload):
    id: RetroId
    name: str
    created_at: datetime
    participants: List[str]

    @field_validator("participants", mode="before")
    @classmethod
    def _null_participants(cls, v):
        # the server marshals an empty participant list as null
        return [] if v is None else v


class ErrorMessage(Payload):
    error: str


# -------------------------
# Outbound (client -> server)
# -------------------------

class AddCard(Payload):
    column_id: ColumnId
    card_text: str


class EditContent(Payload):
    column_id: ColumnId
    content_id: ContentId
    card_id: CardId
    card_text: str


class JoinRetro(Payload):
    retro_id: RetroId


class CreateRetro(Payload):
    name: str
    users: List[str] = Field(default_factory=list)
