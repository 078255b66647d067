from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from .. import models, orders, schemas
from ..deps import get_db, get_current_user, require_buyer, require_seller

router = APIRouter(prefix="/api", tags=["items", "orders"])


@router.post("/items", response_model=schemas.ItemOut, status_code=201)
def create_item(data: schemas.ItemCreate, seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return orders.create_item(db, seller.id, data)


@router.get("/items", response_model=list[schemas.ItemOut])
def list_my_items(seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return orders.list_seller_items(db, seller.id)


@router.get("/marketplace/items", response_model=list[schemas.ItemOut])
def list_marketplace_items(skip: int = 0, limit: int = 100, _user: models.User = Depends(get_current_user), db: Session = Depends(get_db)):
    return orders.list_available_items(db, skip=skip, limit=limit)


@router.post("/orders", response_model=schemas.OrderOut, status_code=201)
def place_order(data: schemas.OrderCreate, buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    return orders.place_order(db, buyer.id, data.item_id, data.weight_kg)


@router.put("/orders/{order_id}/complete", response_model=schemas.OrderOut)
def complete_order(order_id: int, seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return orders.complete_order(db, seller.id, order_id)


@router.delete("/orders/{order_id}")
def cancel_order(order_id: int, buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    orders.cancel_order(db, buyer.id, order_id)
    return {"message": "Order cancelled successfully"}


@router.get("/orders/seller", response_model=list[schemas.OrderRow])
def seller_orders(seller: models.User = Depends(require_seller), db: Session = Depends(get_db)):
    return orders.list_orders(db, seller.id, "seller")


@router.get("/orders/buyer", response_model=list[schemas.OrderRow])
def buyer_orders(buyer: models.User = Depends(require_buyer), db: Session = Depends(get_db)):
    return orders.list_orders(db, buyer.id, "buyer")
