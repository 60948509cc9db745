from __future__ import annotations

import secrets

import ulid


def new_trace_id() -> str:
    """Sortable id attached to HTTP responses (ULID, 26 chars)."""
    return str(ulid.new())


def new_token() -> str:
    """Opaque, unguessable value for session tokens and OAuth state."""
    return secrets.token_urlsafe(24)
