"""
Listing lifecycle.

    listed --request_match--> matched --accept--> picked_up
                                      --decline--> listed

A listing and its pending match always change together, in one transaction.
"""
import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session

from . import models, schemas
from .database import atomic
from .errors import NotFoundError

logger = logging.getLogger(__name__)

ListingStatus = models.ListingStatus
MatchStatus = models.MatchStatus


def create_listing(db: Session, seller_id: int, data: schemas.ListingCreate) -> models.Listing:
    listing = models.Listing(
        seller_id=seller_id,
        waste_type=data.waste_type,
        quantity_kg=data.quantity_kg,
        location=data.location,
        expected_price=data.expected_price,
        status=ListingStatus.listed,
    )
    with atomic(db):
        db.add(listing)
    db.refresh(listing)
    logger.info("Seller %s listed %s kg of %s (listing %s)", seller_id, listing.quantity_kg, listing.waste_type, listing.id)
    return listing


def get_listing(db: Session, listing_id: int) -> Optional[models.Listing]:
    return db.query(models.Listing).filter(models.Listing.id == listing_id).first()


def list_seller_listings(db: Session, seller_id: int) -> List[models.Listing]:
    return (
        db.query(models.Listing)
        .filter(models.Listing.seller_id == seller_id)
        .order_by(models.Listing.created_at.desc(), models.Listing.id.desc())
        .all()
    )


def list_available_listings(db: Session, skip: int = 0, limit: int = 100) -> List[models.Listing]:
    return (
        db.query(models.Listing)
        .filter(models.Listing.status == ListingStatus.listed)
        .order_by(models.Listing.created_at.desc(), models.Listing.id.desc())
        .offset(skip)
        .limit(limit)
        .all()
    )


def _pending_match(db: Session, listing_id: int) -> Optional[models.Match]:
    return (
        db.query(models.Match)
        .filter(models.Match.listing_id == listing_id, models.Match.status == MatchStatus.pending)
        .order_by(models.Match.updated_at.desc(), models.Match.id.desc())
        .with_for_update()
        .first()
    )


def request_match(db: Session, buyer_id: int, listing_id: int) -> Tuple[models.Listing, models.Match]:
    """Buyer asks for a listed listing; it becomes matched with a pending match."""
    with atomic(db):
        listing = (
            db.query(models.Listing)
            .filter(models.Listing.id == listing_id, models.Listing.status == ListingStatus.listed)
            .with_for_update()
            .first()
        )
        if listing is None:
            raise NotFoundError("Listing not found or not available")
        match = models.Match(listing_id=listing.id, buyer_id=buyer_id, status=MatchStatus.pending)
        db.add(match)
        listing.status = ListingStatus.matched
    db.refresh(listing)
    db.refresh(match)
    logger.info("Buyer %s requested listing %s (match %s)", buyer_id, listing.id, match.id)
    return listing, match


def _resolve_match(db: Session, seller_id: int, listing_id: int,
                   listing_status: ListingStatus, match_status: MatchStatus):
    with atomic(db):
        listing = (
            db.query(models.Listing)
            .filter(models.Listing.id == listing_id, models.Listing.seller_id == seller_id)
            .with_for_update()
            .first()
        )
        if listing is None:
            raise NotFoundError("Listing not found or not yours")
        match = _pending_match(db, listing.id)
        if match is None:
            raise NotFoundError("No pending match for this listing")
        listing.status = listing_status
        match.status = match_status
    db.refresh(listing)
    db.refresh(match)
    logger.info("Seller %s %s match %s on listing %s", seller_id, match_status.value, match.id, listing.id)
    return listing, match


def accept_match(db: Session, seller_id: int, listing_id: int):
    return _resolve_match(db, seller_id, listing_id, ListingStatus.picked_up, MatchStatus.accepted)


def decline_match(db: Session, seller_id: int, listing_id: int):
    return _resolve_match(db, seller_id, listing_id, ListingStatus.listed, MatchStatus.declined)
