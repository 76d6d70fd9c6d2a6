"""Charging cost estimator — energy delta → time, price, discount, points.

Deterministic: no clock, no randomness.  Identical inputs always give
identical estimates.
"""

from __future__ import annotations

import math

from ev_planner.config.pricing import ChargerKind, PricingConfig, UserTier
from ev_planner.errors import ValidationError
from ev_planner.models.results import CostEstimate


def _check_percent(name: str, value: float) -> None:
    if not 0.0 <= value <= 100.0:
        raise ValidationError(name, f"must be within [0, 100], got {value}")


def estimate_charging_cost(
    from_percent: float,
    to_percent: float,
    battery_capacity_kwh: float,
    charger_kind: ChargerKind = "fast",
    tier: UserTier = "individual",
    pricing: PricingConfig | None = None,
    charger_power_kw: float | None = None,
) -> CostEstimate:
    """Estimate one charging session.

    Raises ``ValidationError`` when either percentage is outside [0, 100],
    when ``to_percent`` ≤ ``from_percent`` or on a non-positive capacity.

    ``charger_power_kw`` overrides the nominal power of ``charger_kind``
    (use the actual charger's rating when it is known).
    """
    pricing = pricing or PricingConfig()

    _check_percent("from_percent", from_percent)
    _check_percent("to_percent", to_percent)
    if to_percent <= from_percent:
        raise ValidationError("to_percent", "must be greater than from_percent")
    if battery_capacity_kwh <= 0:
        raise ValidationError("battery_capacity_kwh", "must be positive")
    if charger_kind not in ("fast", "slow"):
        raise ValidationError("charger_kind", f"unknown charger kind {charger_kind!r}")
    if tier not in pricing.tier_discounts:
        raise ValidationError("tier", f"unknown tier {tier!r}")

    power = charger_power_kw if charger_power_kw is not None else pricing.power_kw(charger_kind)
    if power <= 0:
        raise ValidationError("charger_power_kw", "must be positive")

    # (Δ% × capacity) / 100 keeps whole-number inputs exact
    energy_kwh = (to_percent - from_percent) * battery_capacity_kwh / 100.0
    price = pricing.price_per_kwh(charger_kind)
    base_cost = energy_kwh * price
    fraction = pricing.discount_for(tier)
    discount = base_cost * fraction
    # points accrue on the amount actually charged, to the cent
    final_cost = round(base_cost - discount, 2)

    return CostEstimate(
        from_percent=from_percent,
        to_percent=to_percent,
        energy_kwh=round(energy_kwh, 4),
        charger_kind=charger_kind,
        charger_power_kw=power,
        price_per_kwh=price,
        time_minutes=round(energy_kwh / power * 60),
        base_cost=round(base_cost, 2),
        tier=tier,
        discount_fraction=fraction,
        discount=round(discount, 2),
        final_cost=final_cost,
        points_earned=math.floor(final_cost / pricing.currency_per_point),
        currency=pricing.currency,
    )
