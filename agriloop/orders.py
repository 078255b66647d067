import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from . import models, schemas, pricing
from .database import atomic
from .errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

OrderStatus = models.OrderStatus

SIDES = ("seller", "buyer")
# float weights that differ by less than this are equal
WEIGHT_TOLERANCE = 1e-9


def check_side(side: str) -> str:
    if side not in SIDES:
        raise ValidationError(f"side must be one of: {', '.join(SIDES)}")
    return side


def create_item(db: Session, seller_id: int, data: schemas.ItemCreate) -> models.Item:
    item = models.Item(
        seller_id=seller_id,
        name=data.name,
        waste_type=data.waste_type,
        weight_kg=data.weight_kg,
        price=data.price,
    )
    with atomic(db):
        db.add(item)
    db.refresh(item)
    return item


def get_item(db: Session, item_id: int) -> Optional[models.Item]:
    return db.query(models.Item).filter(models.Item.id == item_id).first()


def list_seller_items(db: Session, seller_id: int) -> List[models.Item]:
    return (
        db.query(models.Item)
        .filter(models.Item.seller_id == seller_id)
        .order_by(models.Item.created_at.desc(), models.Item.id.desc())
        .all()
    )


def list_available_items(db: Session, skip: int = 0, limit: int = 100) -> List[models.Item]:
    return db.query(models.Item).order_by(models.Item.created_at.desc(), models.Item.id.desc()).offset(skip).limit(limit).all()


def ordered_weight(db: Session, item_id: int) -> float:
    """Weight already committed to orders (pending or completed) on an item."""
    total = db.query(func.coalesce(func.sum(models.Order.weight_kg), 0)).filter(models.Order.item_id == item_id).scalar()
    return float(total or 0)


def place_order(db: Session, buyer_id: int, item_id: int, weight_kg: float) -> models.Order:
    if weight_kg is None or weight_kg <= 0:
        raise ValidationError("weight_kg must be a positive number")
    with atomic(db):
        item = db.query(models.Item).filter(models.Item.id == item_id).with_for_update().first()
        if item is None:
            raise NotFoundError("Item not found")
        remaining = item.weight_kg - ordered_weight(db, item.id)
        if weight_kg - remaining > WEIGHT_TOLERANCE:
            raise ValidationError(f"Only {max(remaining, 0):g} kg of this item is still available")
        order = models.Order(
            item_id=item.id,
            buyer_id=buyer_id,
            seller_id=item.seller_id,
            weight_kg=weight_kg,
            amount_paid=pricing.amount_paid(item.price, item.weight_kg, weight_kg),
            emissions_prevented_kg=pricing.emissions_prevented(weight_kg),
            status=OrderStatus.pending,
        )
        db.add(order)
    db.refresh(order)
    logger.info("Buyer %s ordered %s kg of item %s (order %s)", buyer_id, weight_kg, item_id, order.id)
    return order


def complete_order(db: Session, seller_id: int, order_id: int) -> models.Order:
    with atomic(db):
        order = (
            db.query(models.Order)
            .filter(
                models.Order.id == order_id,
                models.Order.seller_id == seller_id,
                models.Order.status == OrderStatus.pending,
            )
            .with_for_update()
            .first()
        )
        if order is None:
            raise NotFoundError("Order not found or not yours")
        order.status = OrderStatus.completed
        order.completed_at = models.utcnow()
    db.refresh(order)
    logger.info("Seller %s completed order %s", seller_id, order.id)
    return order


def cancel_order(db: Session, buyer_id: int, order_id: int) -> None:
    with atomic(db):
        order = (
            db.query(models.Order)
            .filter(
                models.Order.id == order_id,
                models.Order.buyer_id == buyer_id,
                models.Order.status == OrderStatus.pending,
            )
            .with_for_update()
            .first()
        )
        if order is None:
            raise NotFoundError("Order not found or already completed")
        db.delete(order)
    logger.info("Buyer %s cancelled order %s", buyer_id, order_id)


def _order_rows(query) -> List[dict]:
    rows = []
    for order, name, waste_type in query.all():
        row = schemas.OrderRow.model_validate(order).model_dump()
        row["name"] = name
        row["waste_type"] = waste_type
        rows.append(row)
    return rows


def list_orders(db: Session, user_id: int, side: str) -> List[dict]:
    """Orders where ``user_id`` is the seller or the buyer, with item name and type."""
    column = models.Order.seller_id if check_side(side) == "seller" else models.Order.buyer_id
    query = (
        db.query(models.Order, models.Item.name, models.Item.waste_type)
        .join(models.Item, models.Item.id == models.Order.item_id)
        .filter(column == user_id)
        .order_by(models.Order.created_at.desc(), models.Order.id.desc())
    )
    return _order_rows(query)
