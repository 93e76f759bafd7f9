from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class OfferCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: int = 0

class OfferUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    display_order: Optional[int] = None

class OfferOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    display_order: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
