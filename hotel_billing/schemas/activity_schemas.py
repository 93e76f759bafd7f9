from pydantic import BaseModel
from datetime import datetime
from typing import Optional, List

class ActivityLogOut(BaseModel):
    id: int
    action: str
    entity_type: str
    entity_id: Optional[str]
    entity_name: Optional[str]
    message: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True

class ActivityLogListResponse(BaseModel):
    message: str
    total: int
    data: List[ActivityLogOut]
