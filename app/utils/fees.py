from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

CENT = Decimal("0.01")

Money = Union[Decimal, int, float, str]


@dataclass(frozen=True)
class FeeSplit:
    platform_fee: Decimal
    provider_earning: Decimal


def to_money(value: Money) -> Decimal:
    # str() first so floats like 0.1 keep their decimal spelling
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def split_price(client_price: Money, commission_percent: Money) -> FeeSplit:
    """Split a client price into platform fee and provider earning.

    The fee is rounded to the cent and the earning takes the remainder, so
    ``platform_fee + provider_earning == client_price`` holds exactly.
    """
    percent = Decimal(str(commission_percent))
    if not Decimal(0) <= percent <= Decimal(100):
        raise ValueError(f"Commission must be between 0 and 100, got {percent}")

    price = to_money(client_price)
    platform_fee = (price * percent / Decimal(100)).quantize(CENT, rounding=ROUND_HALF_UP)
    return FeeSplit(platform_fee=platform_fee, provider_earning=price - platform_fee)


def to_minor_units(amount: Money) -> int:
    return int((to_money(amount) * 100).to_integral_value(rounding=ROUND_HALF_UP))
