"""
Read-only dashboard rollups.

Order dashboards count completed orders, windowed on ``completed_at``.
Listing dashboards count picked-up listings, windowed on ``updated_at``
(the moment the seller accepted the match). Totals are zero-filled, never
null.
"""
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models, pricing
from .orders import check_side
from .errors import ValidationError

PERIODS = ("all", "today", "week", "month")


def window_start(period: str, now: Optional[datetime] = None) -> Optional[datetime]:
    """Start of the reporting window, or None for all time."""
    if period not in PERIODS:
        raise ValidationError(f"period must be one of: {', '.join(PERIODS)}")
    now = now or models.utcnow()
    if period == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if period == "week":
        return now - timedelta(days=7)
    if period == "month":
        return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return None


def _totals(amount, weight, emissions, count) -> dict:
    return {
        "total_amount": float(amount or 0),
        "total_weight": float(weight or 0),
        "total_emissions": float(emissions or 0),
        "total_transactions": int(count or 0),
    }


def order_totals(db: Session, user_id: int, side: str, period: str = "all", now: Optional[datetime] = None) -> dict:
    Order = models.Order
    start = window_start(period, now)
    column = Order.seller_id if check_side(side) == "seller" else Order.buyer_id
    query = db.query(
        func.coalesce(func.sum(Order.amount_paid), 0),
        func.coalesce(func.sum(Order.weight_kg), 0),
        func.coalesce(func.sum(Order.emissions_prevented_kg), 0),
        func.count(Order.id),
    ).filter(column == user_id, Order.status == models.OrderStatus.completed)
    if start is not None:
        query = query.filter(Order.completed_at >= start)
    return _totals(*query.one())


def listing_totals(db: Session, user_id: int, side: str, period: str = "all", now: Optional[datetime] = None) -> dict:
    Listing = models.Listing
    check_side(side)
    start = window_start(period, now)
    query = db.query(
        func.coalesce(func.sum(Listing.expected_price), 0),
        func.coalesce(func.sum(Listing.quantity_kg), 0),
        func.count(Listing.id),
    ).filter(Listing.status == models.ListingStatus.picked_up)
    if side == "seller":
        query = query.filter(Listing.seller_id == user_id)
    else:
        query = query.join(models.Match, models.Match.listing_id == Listing.id).filter(
            models.Match.buyer_id == user_id,
            models.Match.status == models.MatchStatus.accepted,
        )
    if start is not None:
        query = query.filter(Listing.updated_at >= start)
    amount, weight, count = query.one()
    return _totals(amount, weight, pricing.emissions_prevented(float(weight or 0)), count)


def impact(totals: dict) -> dict:
    return {"trees_equivalent": pricing.trees_equivalent(totals["total_emissions"])}
