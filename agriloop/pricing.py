"""Pricing and environmental-impact derivations for orders."""
from typing import Optional

from . import config
from .errors import ValidationError


def unit_price(item_price: float, item_weight_kg: float) -> float:
    if not item_weight_kg or item_weight_kg <= 0:
        raise ValidationError("Item weight must be a positive number")
    return item_price / item_weight_kg


def amount_paid(item_price: float, item_weight_kg: float, order_weight_kg: float) -> float:
    """Price of ``order_weight_kg`` at the item's unit price."""
    return unit_price(item_price, item_weight_kg) * order_weight_kg


def emissions_prevented(weight_kg: float, factor: Optional[float] = None) -> float:
    if factor is None:
        factor = config.EMISSION_FACTOR
    return weight_kg * factor


def trees_equivalent(emissions_kg: float, divisor: Optional[float] = None) -> float:
    """Number of trees absorbing ``emissions_kg`` of CO2 in a year."""
    if divisor is None:
        divisor = config.TREES_DIVISOR
    return round(emissions_kg / divisor, 2) if divisor else 0.0
