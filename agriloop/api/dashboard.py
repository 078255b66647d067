from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import dashboard, models, orders, schemas
from ..deps import get_db, require_buyer, require_seller

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])


def _order_dashboard(db: Session, user: models.User, side: str, period: str) -> dict:
    totals = dashboard.order_totals(db, user.id, side, period)
    return {
        "period": period,
        "totals": totals,
        "impact": dashboard.impact(totals),
        "history": orders.list_orders(db, user.id, side),
    }


def _listing_dashboard(db: Session, user: models.User, side: str, period: str) -> dict:
    totals = dashboard.listing_totals(db, user.id, side, period)
    return {"period": period, "totals": totals, "impact": dashboard.impact(totals)}


@router.get("/seller", response_model=schemas.OrderDashboardOut)
def seller_dashboard(period: str = "all", seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return _order_dashboard(db, seller, "seller", period)


@router.get("/buyer", response_model=schemas.OrderDashboardOut)
def buyer_dashboard(period: str = "all", buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    return _order_dashboard(db, buyer, "buyer", period)


@router.get("/seller/listings", response_model=schemas.ListingDashboardOut)
def seller_listing_dashboard(period: str = "all", seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return _listing_dashboard(db, seller, "seller", period)


@router.get("/buyer/listings", response_model=schemas.ListingDashboardOut)
def buyer_listing_dashboard(period: str = "all", buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    return _listing_dashboard(db, buyer, "buyer", period)
