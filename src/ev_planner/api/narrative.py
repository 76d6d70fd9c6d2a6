"""Narrative generator — plain-English rendering of plans and recommendations.

Deterministic text built from the structured records.  This is the
fallback prose shown when no conversational layer is attached; it never
reports the planner's internal fallback logic as an error.
"""

from __future__ import annotations

from ev_planner.models.results import Recommendation, TripPlan


def format_duration(minutes: int) -> str:
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    return f"{hours}h" if mins == 0 else f"{hours}h {mins}min"


def format_currency(amount: float, currency: str = "CLP") -> str:
    if currency == "CLP":
        # pesos have no minor unit; Chilean grouping uses dots
        return f"${round(amount):,} CLP".replace(",", ".")
    return f"{amount:,.2f} {currency}"


def summarize_trip(plan: TripPlan) -> str:
    """One-sentence summary of a trip plan."""
    km = f"{plan.total_distance_km:.0f} km"
    if not plan.needs_charging:
        return f"You can complete the {km} trip without charging and arrive with enough battery."
    if not plan.stops:
        return (
            f"The {km} trip needs a charge, but no station with a free charger is available right now. "
            f"Check availability again before leaving."
        )
    cost = format_currency(plan.total_cost, plan.currency)
    if len(plan.stops) == 1:
        return f"{km} trip with 1 charging stop at {plan.stops[0].station_name}. Total cost: {cost}."
    return f"{km} trip with {len(plan.stops)} charging stops. Total cost: {cost}."


def generate_trip_narrative(plan: TripPlan) -> str:
    """Multi-line itinerary: summary, each stop, and totals."""
    lines = [summarize_trip(plan), ""]

    for n, stop in enumerate(plan.stops, start=1):
        lines.append(
            f"Stop {n}: {stop.station_name} ({stop.address}), "
            f"{stop.distance_from_origin_km:.0f} km from the start."
        )
        lines.append(
            f"  Charge {stop.battery_in_percent:.0f}% → {stop.battery_out_percent:.0f}% "
            f"on a {stop.charger_kind} charger ({stop.charger_power_kw:.0f} kW): "
            f"{format_duration(stop.time_minutes)}, {format_currency(stop.cost, plan.currency)}."
        )
        if stop.amenities:
            lines.append(f"  While you wait: {', '.join(stop.amenities[:3])}.")

    lines.append("")
    lines.append(
        f"Driving: {format_duration(plan.driving_time_minutes)}"
        + (f" (traffic ×{plan.traffic_multiplier:g})" if plan.traffic_multiplier != 1.0 else "")
    )
    if plan.stops:
        lines.append(f"Charging: {format_duration(plan.total_charging_minutes)}")
    lines.append(f"Total: {format_duration(plan.total_time_minutes)}")
    lines.append(f"Expected battery on arrival: {plan.arrival_battery_percent:.0f}%")
    return "\n".join(lines).strip()


def generate_recommendation_narrative(recommendations: list[Recommendation]) -> str:
    """Numbered list of the recommended stations with their reasoning."""
    if not recommendations:
        return "No charging stations match your search."
    lines = []
    for n, rec in enumerate(recommendations, start=1):
        cost = format_currency(rec.estimated_cost, rec.currency) if rec.currency else "n/a"
        lines.append(
            f"{n}. {rec.station_name} (score {rec.score}/100): {rec.reasoning} "
            f"ETA {format_duration(rec.eta_minutes)}, charging {format_duration(rec.charging_time_minutes)}, "
            f"about {cost}."
        )
    return "\n".join(lines)
