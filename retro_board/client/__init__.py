from .session import Session
from .transport import Transport

__all__ = ["Session", "Transport"]
