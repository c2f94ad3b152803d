"""Cake pricing.

Prices are a product of a size base price and three multipliers, rounded to
whole currency units. The same tables are used while a customer designs a cake
and again when the order is submitted, so the result must be reproducible:
no state, no clock, no randomness.

Layers and tiers are step multipliers: any count above one costs the same
extra (a 3-layer cake is priced like a 2-layer cake).
"""
import math
from typing import Any, Dict, Mapping, Union

from ..schemas.order_models import CakeConfiguration, PriceBreakdown

BASE_PRICES = {'4"': 45, '6"': 65, '8"': 85, '10"': 120}
DEFAULT_BASE_PRICE = BASE_PRICES['6"']

FLAVOR_MULTIPLIERS = {
    "Vanilla": 1.0,
    "Strawberry": 1.1,
    "Chocolate": 1.1,
    "Choco-mint": 1.2,
    "Mint": 1.1,
    "Banana": 1.1,
    "Fruit": 1.3,
}
DEFAULT_FLAVOR_MULTIPLIER = 1.0

LAYER_MULTIPLIER = 1.2
TIER_MULTIPLIER = 1.3

ConfigLike = Union[CakeConfiguration, Mapping[str, Any]]


def _field(config: ConfigLike, name: str):
    if isinstance(config, Mapping):
        value = config.get(name)
    else:
        value = getattr(config, name, None)
    # enum members price by their value
    return getattr(value, "value", value)


def _lookup(table: Mapping[str, Any], value, default):
    return table.get(value, default) if isinstance(value, str) else default


def _count(value) -> int:
    try:
        return int(value) if value is not None else 1
    except (TypeError, ValueError, OverflowError):
        return 1


def _round_half_up(amount: float) -> int:
    return int(math.floor(amount + 0.5))


def price_breakdown(config: ConfigLike) -> PriceBreakdown:
    """Return every factor that went into the price, plus the rounded total."""
    base_price = _lookup(BASE_PRICES, _field(config, "size"), DEFAULT_BASE_PRICE)
    flavor_multiplier = _lookup(FLAVOR_MULTIPLIERS, _field(config, "flavor"), DEFAULT_FLAVOR_MULTIPLIER)
    layer_multiplier = LAYER_MULTIPLIER if _count(_field(config, "layers")) > 1 else 1.0
    tier_multiplier = TIER_MULTIPLIER if _count(_field(config, "tiers")) > 1 else 1.0

    total = _round_half_up(base_price * flavor_multiplier * layer_multiplier * tier_multiplier)
    return PriceBreakdown(
        base_price=base_price,
        flavor_multiplier=flavor_multiplier,
        layer_multiplier=layer_multiplier,
        tier_multiplier=tier_multiplier,
        total=max(total, 0),
    )


def compute_price(config: ConfigLike) -> int:
    return price_breakdown(config).total


def describe_price(config: ConfigLike, currency: str = "K") -> Dict[str, str]:
    """Human-readable lines the design assistant shows next to a quote."""
    b = price_breakdown(config)

    def pct(multiplier: float) -> str:
        return f"+{_round_half_up((multiplier - 1) * 100)}%"

    return {
        "base": f"{currency}{b.base_price}",
        "flavor": pct(b.flavor_multiplier),
        "layers": pct(b.layer_multiplier),
        "tiers": pct(b.tier_multiplier),
        "total": f"{currency}{b.total}",
    }
