from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .payloads import Payload


@dataclass
class EnvelopeError(Exception):
    """The outer frame could not be parsed.

    Raised to whoever called ``decode_envelope``; the dispatcher never sees
    these frames.
    """

    message: str
    raw: Optional[str] = None

    def __str__(self) -> str:
        return self.message


class Envelope(BaseModel):
    """Outer wire frame: ``{"id": ..., "op": ..., "data": "<payload JSON>"}``.

    ``id`` identifies the connection/session the frame belongs to, it is not
    a per-message correlation id.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    connection_id: str = Field(alias="id")
    op: str
    data: str


def decode_envelope(raw: Union[str, bytes]) -> Envelope:
    try:
        return Envelope.model_validate_json(raw)
    except ValidationError as e:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        raise EnvelopeError(message=str(e), raw=text) from e


def encode_data(payload: Any) -> str:
    """Serialize a payload value to the JSON text carried in ``data``."""
    if isinstance(payload, Payload):
        payload = payload.to_data()
    return json.dumps(payload, ensure_ascii=False)


def encode_envelope(
    op: str,
    payload: Any,
    *,
    connection_id: Optional[str] = None,
    token: Optional[str] = None,
) -> str:
    """Wrap a payload as ``{op, data}``.

    ``connection_id`` and ``token`` are delivery metadata; they are only set by
    the transport side (or by a server broadcasting to clients).
    """
    frame: dict[str, Any] = {}
    if connection_id is not None:
        frame["id"] = connection_id
    frame["op"] = op
    frame["data"] = encode_data(payload)
    if token is not None:
        frame["token"] = token
    return json.dumps(frame, ensure_ascii=False)
