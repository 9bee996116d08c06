"""
CRUD operations (Create, Read, Update, Delete)
Database query functions for trade listings and nearby search
"""
from sqlalchemy.orm import Session
from sqlalchemy import desc
from plantswap.models import Trade, TRADE_STATUS_ACTIVE
from plantswap.geo import Coordinate, WithDistance, bounding_box, candidate_cap, filter_by_distance
from typing import Optional, List


def get_active_trades(db: Session, skip: int = 0, limit: Optional[int] = 100) -> List[Trade]:
    """
    Get active trades, newest first (limit=None returns all)
    """
    return (
        db.query(Trade)
        .filter(Trade.status == TRADE_STATUS_ACTIVE)
        .order_by(desc(Trade.created_at), desc(Trade.id))
        .offset(skip)
        .limit(limit)
        .all()
    )


def get_trade_by_id(db: Session, trade_id: int) -> Optional[Trade]:
    """
    Get a specific trade by ID
    """
    return db.query(Trade).filter(Trade.id == trade_id).first()


def get_trades_in_box(
    db: Session,
    center: Coordinate,
    radius_miles: float,
    limit: int,
) -> List[Trade]:
    """
    Phase 1 of nearby search: active trades inside the bounding box
    Rows without coordinates never match; result size is capped
    """
    box = bounding_box(center.lat, center.lng, radius_miles)
    return (
        db.query(Trade)
        .filter(
            Trade.status == TRADE_STATUS_ACTIVE,
            Trade.latitude.isnot(None),
            Trade.longitude.isnot(None),
            Trade.latitude.between(box.min_lat, box.max_lat),
            Trade.longitude.between(box.min_lng, box.max_lng),
        )
        .limit(candidate_cap(limit))
        .all()
    )


def get_nearby_trades(
    db: Session,
    center: Coordinate,
    radius_miles: float,
    limit: int = 20,
) -> List[WithDistance[Trade]]:
    """
    Active trades within radius_miles of center, nearest first
    """
    candidates = get_trades_in_box(db, center, radius_miles, limit)
    return filter_by_distance(
        center,
        candidates,
        radius_miles,
        limit,
        get_coordinates=lambda trade: (trade.latitude, trade.longitude),
    )


def create_trade(
    db: Session,
    owner_name: str,
    offered_item: str,
    requested_item: str,
    location_zip: str,
    coordinate: Coordinate,
) -> Trade:
    """
    Create an active trade at a geocoded location
    """
    trade = Trade(
        owner_name=owner_name,
        offered_item=offered_item,
        requested_item=requested_item,
        location_zip=location_zip,
        latitude=coordinate.lat,
        longitude=coordinate.lng,
        status=TRADE_STATUS_ACTIVE,
    )
    db.add(trade)
    db.commit()
    db.refresh(trade)
    return trade


def update_trade_coordinates(db: Session, trade: Trade, coordinate: Coordinate) -> Trade:
    """
    Replace a trade's stored coordinates
    """
    trade.latitude = coordinate.lat
    trade.longitude = coordinate.lng
    db.commit()
    db.refresh(trade)
    return trade
