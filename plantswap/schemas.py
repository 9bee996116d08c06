"""
Pydantic schemas for API request/response models
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# ===== TRADE SCHEMAS =====

class TradeBase(BaseModel):
    """Base trade schema"""
    owner_name: str
    offered_item: str
    requested_item: str
    location_zip: str

    class Config:
        from_attributes = True


class TradeCreate(BaseModel):
    """Body for creating a trade"""
    owner_name: str = Field(min_length=1)
    offered_item: str = Field(min_length=1)
    requested_item: str = Field(min_length=1)
    location_zip: str = Field(min_length=1)


class Trade(TradeBase):
    """Trade response with ID, location and status"""
    id: int
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    status: str
    created_at: datetime


class TradeWithDistance(Trade):
    """Trade in a nearby search, distance in miles (1 decimal)"""
    distance: Optional[float] = None


class TradeSearchResponse(BaseModel):
    """Nearby / latest trades with the search context used"""
    trades: List[TradeWithDistance]
    count: int
    location_known: bool
    center: Optional[dict] = None
    radius: Optional[float] = None


class FixCoordinatesResponse(BaseModel):
    """Outcome of re-geocoding active trades"""
    message: str
    updated: int
    failed: int
    skipped: int
    errors: List[str]
