from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import listings, models, schemas
from ..deps import get_db, require_buyer, require_seller

router = APIRouter(prefix="/api", tags=["listings"])


@router.post("/seller/listings", response_model=schemas.ListingOut, status_code=201)
def create_listing(data: schemas.ListingCreate, seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return listings.create_listing(db, seller.id, data)


@router.get("/seller/listings", response_model=list[schemas.ListingOut])
def my_listings(seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return listings.list_seller_listings(db, seller.id)


@router.put("/seller/listings/{listing_id}/accept", response_model=schemas.TransitionOut)
def accept_match(listing_id: int, seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    listing, match = listings.accept_match(db, seller.id, listing_id)
    return {"message": "Match accepted", "listing": listing, "match": match}


@router.put("/seller/listings/{listing_id}/decline", response_model=schemas.TransitionOut)
def decline_match(listing_id: int, seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    listing, match = listings.decline_match(db, seller.id, listing_id)
    return {"message": "Match declined", "listing": listing, "match": match}


@router.get("/listings", response_model=list[schemas.ListingOut])
def available_listings(skip: int = 0, limit: int = 100, _buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    return listings.list_available_listings(db, skip=skip, limit=limit)


@router.post("/listings/{listing_id}/match", response_model=schemas.TransitionOut, status_code=201)
def request_match(listing_id: int, buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    listing, match = listings.request_match(db, buyer.id, listing_id)
    return {"message": "Match requested", "listing": listing, "match": match}
