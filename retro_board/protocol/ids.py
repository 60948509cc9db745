from __future__ import annotations

from typing import NewType

# Entity-scoped identifiers. All of them are plain strings on the wire, but a
# ColumnId is never accepted where a CardId is expected (and so on).
RetroId = NewType("RetroId", str)
ColumnId = NewType("ColumnId", str)
CardId = NewType("CardId", str)
ContentId = NewType("ContentId", str)
