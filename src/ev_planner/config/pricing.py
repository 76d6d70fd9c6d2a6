"""Tariffs, tier discounts and nominal charger power."""

from typing import Literal

from pydantic import BaseModel, Field

ChargerKind = Literal["fast", "slow"]
UserTier = Literal["individual", "premium", "fleet", "business"]


class PricingConfig(BaseModel):
    """Price table used by the cost estimator.

    Amounts are in ``currency`` units (CLP by default, so no decimals are
    shown to users, but the engine keeps two).
    """

    currency: str = Field(default="CLP", description="ISO currency code")
    fast_price_per_kwh: float = Field(default=250.0, gt=0, description="DC fast tariff per kWh")
    slow_price_per_kwh: float = Field(default=180.0, gt=0, description="AC slow tariff per kWh")
    fast_power_kw: float = Field(default=150.0, gt=0, description="Nominal DC charger power (kW)")
    slow_power_kw: float = Field(default=50.0, gt=0, description="Nominal AC charger power (kW)")
    tier_discounts: dict[UserTier, float] = Field(
        default_factory=lambda: {
            "individual": 0.0,
            "premium": 0.10,
            "fleet": 0.15,
            "business": 0.20,
        },
        description="Fraction taken off the base cost per account tier",
    )
    currency_per_point: float = Field(
        default=100.0, gt=0,
        description="Loyalty accrual: one point per this much spent (post-discount)",
    )

    def price_per_kwh(self, kind: ChargerKind) -> float:
        return self.fast_price_per_kwh if kind == "fast" else self.slow_price_per_kwh

    def power_kw(self, kind: ChargerKind) -> float:
        return self.fast_power_kw if kind == "fast" else self.slow_power_kw

    def discount_for(self, tier: UserTier) -> float:
        return self.tier_discounts.get(tier, 0.0)
