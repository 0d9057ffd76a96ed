"""Response envelope shared by every JSON endpoint"""
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """``{"success": ..., "message": ..., "data": ...}``"""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


def error_body(message: str, code: Optional[str] = None, errors: Any = None) -> Dict[str, Any]:
    """Body for failed requests"""
    body: Dict[str, Any] = {"success": False, "message": message}
    if code:
        body["code"] = code
    if errors is not None:
        body["errors"] = errors
    return body
