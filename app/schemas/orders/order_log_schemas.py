from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class OrderLogOutSchema(BaseModel):
    id: int
    order_id: int
    action: str
    from_status: Optional[str]
    to_status: Optional[str]
    note: Optional[str]
    actor_user_id: Optional[int]
    actor_email: Optional[str]
    actor_name: Optional[str]
    created_at: datetime
