from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

@dataclass
class ApiError(Exception):
    """统一的 HTTP 业务错误，由 app 的异常处理器转换成错误响应结构。"""
    code: str
    message: str
    http_status: int = 400
    data: Optional[dict[str, Any]] = None

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"
