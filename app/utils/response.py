# app/utils/response.py

from typing import TypeVar, Generic, Optional, Dict, Any
from pydantic import BaseModel

T = TypeVar("T")


def success_response(data: Optional[T] = None) -> Dict[str, Any]:
    return {
        "ok": True,
        "data": data,
    }


class APIResponse(BaseModel, Generic[T]):
    ok: bool = True
    data: Optional[T] = None
