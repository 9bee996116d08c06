"""
Database models for PlantSwap
SQLAlchemy ORM model for location-based trade listings
"""
from datetime import datetime
from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from sqlalchemy.orm import declarative_base

Base = declarative_base()

TRADE_STATUS_ACTIVE = "active"
TRADE_STATUS_CLOSED = "closed"


class Trade(Base):
    """
    Trade listing - one plant offered in exchange for another
    Coordinates come from geocoding location_zip and may be missing
    """
    __tablename__ = "trades"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_name = Column(String, nullable=False)
    offered_item = Column(String, nullable=False)
    requested_item = Column(String, nullable=False)
    location_zip = Column(String, nullable=False)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    status = Column(String, nullable=False, default=TRADE_STATUS_ACTIVE, index=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Bounding-box lookups filter on both columns
    __table_args__ = (
        Index("ix_trades_lat_lng", "latitude", "longitude"),
    )

    def __repr__(self):
        return f"<Trade(id={self.id}, zip='{self.location_zip}', status='{self.status}')>"
