from datetime import datetime, timezone
import enum

from sqlalchemy import Column, Integer, String, Float, DateTime, Date, Boolean, Enum, ForeignKey

from .database import Base


"""Database models for the AgriLoop marketplace."""


def utcnow() -> datetime:
    # stored naive, always UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class RoleEnum(str, enum.Enum):
    seller = "Seller"
    buyer = "Buyer"


class GenderEnum(str, enum.Enum):
    male = "Male"
    female = "Female"
    other = "Other"


class ListingStatus(str, enum.Enum):
    listed = "listed"
    matched = "matched"
    picked_up = "picked_up"


class MatchStatus(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    declined = "declined"


class OrderStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(Enum(RoleEnum, values_callable=lambda e: [m.value for m in e]), nullable=False)
    verified = Column(Boolean, default=False, nullable=False)
    gender = Column(Enum(GenderEnum, values_callable=lambda e: [m.value for m in e]), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    city = Column(String, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Item(Base):
    __tablename__ = "items"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    waste_type = Column(String, nullable=False)
    weight_kg = Column(Float, nullable=False)
    price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)


class Listing(Base):
    __tablename__ = "listings"

    id = Column(Integer, primary_key=True, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    waste_type = Column(String, nullable=False)
    quantity_kg = Column(Float, nullable=False)
    location = Column(String, nullable=False)
    expected_price = Column(Float, nullable=False)
    status = Column(Enum(ListingStatus), default=ListingStatus.listed, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Match(Base):
    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    status = Column(Enum(MatchStatus), default=MatchStatus.pending, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True, index=True)
    item_id = Column(Integer, ForeignKey("items.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    weight_kg = Column(Float, nullable=False)
    # derived once at creation, never recomputed
    amount_paid = Column(Float, nullable=False)
    emissions_prevented_kg = Column(Float, nullable=False)
    status = Column(Enum(OrderStatus), default=OrderStatus.pending, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    completed_at = Column(DateTime, nullable=True)
