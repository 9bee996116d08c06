"""
PlantSwap - Main FastAPI Application
Location-based trade listings backed by an in-process response cache
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from plantswap import crud, schemas
from plantswap.cache import TTLCacheStore, CacheSweeper, cached_json, invalidate_cache
from plantswap.db import get_db, init_db
from plantswap.dependencies import get_api_cache, get_geocoder
from plantswap.geo import Coordinate, Found, Geocoder, build_default_providers
from config.settings import settings

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("plantswap.trades")

APP_VERSION = "v0.1.0"
APP_NAME = "PlantSwap"

TRADES_PATH = "/api/trades"
MAX_FIX_ERRORS = 10


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Build the cache, geocoder and sweeper for the lifetime of the process."""
    init_db()

    api_cache = TTLCacheStore(name="api") if settings.cache_enabled else None
    geocode_cache = TTLCacheStore(name="geocode")

    app.state.api_cache = api_cache
    app.state.geocoder = Geocoder(
        providers=build_default_providers(
            google_api_key=settings.google_maps_api_key,
            google_url=settings.google_geocode_url,
            nominatim_url=settings.nominatim_base_url,
            user_agent=settings.geocoder_user_agent,
            timeout=settings.geocoding_timeout_seconds,
        ),
        cache=geocode_cache,
        cache_ttl_ms=settings.geocode_cache_ttl_ms,
    )

    sweeper = CacheSweeper(
        [store for store in (api_cache, geocode_cache) if store is not None],
        interval_seconds=settings.cache_sweep_interval_seconds,
    )
    sweeper.start()
    try:
        yield
    finally:
        sweeper.stop()


app = FastAPI(
    title=APP_NAME,
    description="Plant trade listings with zip code geocoding and nearby search",
    version=APP_VERSION,
    lifespan=lifespan,
)


def _trade_payload(trade, distance: Optional[float] = None) -> dict:
    """Serialize a Trade row (plus optional distance) to a JSON-ready dict."""
    payload = schemas.TradeWithDistance.model_validate(trade).model_dump(mode="json")
    payload["distance"] = distance
    return payload


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/version")
def version_info():
    """Version information endpoint."""
    return {"name": APP_NAME, "version": APP_VERSION}


@app.get("/cache/stats")
def cache_stats(
    cache: Optional[TTLCacheStore] = Depends(get_api_cache),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Get cache statistics."""
    return {
        "api": cache.get_stats() if cache is not None else None,
        "geocode": geocoder.cache.get_stats(),
        "geocode_providers": geocoder.provider_names,
    }


# =============================================================================
# GEOCODING
# =============================================================================

@app.get("/api/geocode/{zip_code}")
def geocode_zip(zip_code: str, geocoder: Geocoder = Depends(get_geocoder)):
    """Resolve a zip code to coordinates."""
    return geocoder.get_coordinates_from_zip(zip_code).to_dict()


# =============================================================================
# TRADES
# =============================================================================

@app.get(TRADES_PATH, response_model=schemas.TradeSearchResponse)
def list_trades(
    request: Request,
    response: Response,
    zip_code: Optional[str] = Query(None, alias="zip", description="Zip code to search around"),
    lat: Optional[float] = Query(None, ge=-90, le=90),
    lng: Optional[float] = Query(None, ge=-180, le=180),
    radius: float = Query(default=settings.default_search_radius_miles, gt=0, le=500, description="Miles"),
    limit: int = Query(default=settings.default_search_limit, ge=1, le=100),
    db: Session = Depends(get_db),
    cache: Optional[TTLCacheStore] = Depends(get_api_cache),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """
    List active trades.

    With a location (lat/lng, or a zip that geocodes), returns trades within
    radius miles, nearest first, each with a distance. Without one, returns
    the newest active trades and location_known is false.
    """
    def build():
        center: Optional[Coordinate] = None
        if lat is not None and lng is not None:
            center = Coordinate(lat=lat, lng=lng)
        elif zip_code:
            result = geocoder.get_coordinates_from_zip(zip_code)
            if isinstance(result, Found):
                center = result.coordinate
            else:
                # Unknown location: fall back to an unfiltered listing
                logger.info(f"Trade search without location (zip={zip_code!r}: {result.reason.value})")

        if center is None:
            trades = crud.get_active_trades(db, limit=limit)
            items = [_trade_payload(trade) for trade in trades]
            return {
                "trades": items,
                "count": len(items),
                "location_known": False,
                "center": None,
                "radius": None,
            }

        nearby = crud.get_nearby_trades(db, center, radius, limit)
        items = [_trade_payload(match.item, match.distance) for match in nearby]
        return {
            "trades": items,
            "count": len(items),
            "location_known": True,
            "center": center.to_dict(),
            "radius": radius,
        }

    return cached_json(request, response, cache, build)


@app.post(TRADES_PATH, status_code=201, response_model=schemas.TradeWithDistance)
def create_trade(
    body: schemas.TradeCreate,
    db: Session = Depends(get_db),
    cache: Optional[TTLCacheStore] = Depends(get_api_cache),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """Create a trade. The zip code must geocode, otherwise 400."""
    result = geocoder.get_coordinates_from_zip(body.location_zip)
    if not isinstance(result, Found):
        raise HTTPException(status_code=400, detail="Invalid zip code")

    trade = crud.create_trade(
        db,
        owner_name=body.owner_name,
        offered_item=body.offered_item,
        requested_item=body.requested_item,
        location_zip=body.location_zip,
        coordinate=result.coordinate,
    )
    invalidate_cache(cache, TRADES_PATH)
    logger.info(f"Created trade {trade.id} at {body.location_zip} (via {result.source})")
    return _trade_payload(trade)


@app.get(TRADES_PATH + "/{trade_id}", response_model=schemas.Trade)
def get_trade(trade_id: int, db: Session = Depends(get_db)):
    """Get a single trade."""
    trade = crud.get_trade_by_id(db, trade_id)
    if trade is None:
        raise HTTPException(status_code=404, detail="Trade not found")
    return trade


@app.post(TRADES_PATH + "/fix-coordinates", response_model=schemas.FixCoordinatesResponse)
def fix_coordinates(
    db: Session = Depends(get_db),
    cache: Optional[TTLCacheStore] = Depends(get_api_cache),
    geocoder: Geocoder = Depends(get_geocoder),
):
    """
    Re-geocode every active trade and store the resulting coordinates.

    An approximate result never replaces coordinates a trade already has.
    """
    updated = 0
    failed = 0
    skipped = 0
    errors = []

    for trade in crud.get_active_trades(db, limit=None):
        result = geocoder.get_coordinates_from_zip(trade.location_zip)
        if not isinstance(result, Found):
            failed += 1
            errors.append(f"Failed to geocode zip {trade.location_zip} for trade {trade.id}")
            continue

        # Be polite to the free geocoding service
        if result.source != "cache" and settings.geocode_batch_delay_seconds > 0:
            time.sleep(settings.geocode_batch_delay_seconds)

        if result.approximate and trade.latitude is not None and trade.longitude is not None:
            skipped += 1
            logger.info(
                f"Kept stored coordinates for trade {trade.id}: "
                f"only an approximate location for {trade.location_zip}"
            )
            continue

        try:
            crud.update_trade_coordinates(db, trade, result.coordinate)
            updated += 1
        except SQLAlchemyError as e:
            db.rollback()
            failed += 1
            errors.append(f"Error updating trade {trade.id}: {e}")

    if updated:
        invalidate_cache(cache, TRADES_PATH)

    logger.info(f"Fixed coordinates: {updated} updated, {failed} failed, {skipped} skipped")
    return {
        "message": f"Updated {updated} trades, {failed} failed",
        "updated": updated,
        "failed": failed,
        "skipped": skipped,
        "errors": errors[:MAX_FIX_ERRORS],
    }
