"""
Construction cost and network economy formulas.

This module is the only authoritative source of prices. All currency amounts
are integer euros; intermediate products stay as floats and are rounded once
per reported field.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
import math
from typing import Iterable, Mapping, Optional, Protocol, Sequence

from trainbuilder.economy.geometry import route_length_km
from trainbuilder.errors import ValidationError
from trainbuilder.schemas.core import (
    CROSSOVER_TYPES,
    STATION_TYPES,
    TRACK_TYPES,
    Coordinates,
    Facilities,
)


STATION_BASE_COSTS: Mapping[str, int] = {
    "local": 5_000_000,
    "regional": 20_000_000,
    "intercity": 50_000_000,
    "hub": 150_000_000,
}

PLATFORM_RANGES: Mapping[str, tuple[int, int]] = {
    "local": (1, 4),
    "regional": (5, 10),
    "intercity": (11, 20),
    "hub": (21, 30),
}
MIN_PLATFORMS = 1
MAX_PLATFORMS = 30

FACILITY_SURCHARGES: Mapping[str, float] = {
    "parking": 0.05,
    "shops": 0.05,
    "bike_rental": 0.02,
}

TRACK_COSTS_PER_KM: Mapping[str, int] = {
    "hst": 10_000_000,
    "ic": 5_000_000,
    "non_electrified": 2_000_000,
}

MAINTENANCE_COSTS_PER_KM: Mapping[str, int] = {
    "hst": 50_000,
    "ic": 30_000,
    "non_electrified": 15_000,
}

TRACK_SPEED_LIMITS: Mapping[str, int] = {
    "hst": 300,
    "ic": 200,
    "non_electrified": 120,
}

CROSSOVER_COSTS: Mapping[str, int] = {
    "simple": 500_000,
    "junction": 2_000_000,
    "flying_junction": 10_000_000,
}

MIN_TRACK_LENGTH_KM = 0.5
DOUBLE_TRACK_MULTIPLIER = 1.5

STATION_REFUND_RATIO = 0.5
TRACK_REFUND_RATIO = 0.3
CROSSOVER_REFUND_RATIO = 0.4

# Placeholder terrain heuristic; swap for an elevation/land-use lookup later.
MOUNTAIN_MODIFIER = 1.8
URBAN_MODIFIER = 1.5
FLAT_MODIFIER = 1.0
ALPINE_BOX = (45.0, 48.0, 6.0, 11.0)  # lat_min, lat_max, lon_min, lon_max (exclusive)
URBAN_RADIUS_DEG = 0.2
URBAN_CENTERS: Sequence[tuple[str, float, float]] = (
    ("Amsterdam", 52.37, 4.90),
    ("Rotterdam", 51.92, 4.47),
    ("Paris", 48.86, 2.35),
    ("Brussels", 50.85, 4.35),
    ("London", 51.51, -0.13),
)

TERRAIN_BANDS: Sequence[tuple[float, str]] = (
    (1.1, "flat"),
    (1.3, "hilly"),
    (1.6, "urban"),
)

STATION_REVENUE: Mapping[str, int] = {
    "local": 500_000,
    "regional": 2_000_000,
    "intercity": 5_000_000,
    "hub": 15_000_000,
}
TRACK_REVENUE_PER_KM: Mapping[str, int] = {
    "hst": 100_000,
    "ic": 50_000,
    "non_electrified": 20_000,
}
NETWORK_EFFECT_EXPONENT = 1.2
NETWORK_EFFECT_DIVISOR = 10


class _Costed(Protocol):
    cost: int


class _Maintained(Protocol):
    maintenance_cost: int


class _RevenueStation(Protocol):
    station_type: str
    platforms: int


class _RevenueTrack(Protocol):
    track_type: str
    length_km: float


@dataclass(frozen=True)
class StationCostBreakdown:
    base_cost: int
    platform_cost: int
    facilities_cost: int
    terrain_cost: int
    total_cost: int


@dataclass(frozen=True)
class TrackCostBreakdown:
    length_km: float
    cost_per_km: int
    base_cost: int
    double_track_cost: int
    terrain_cost: int
    total_cost: int
    maintenance_cost_per_year: int
    speed_limit: int


@dataclass(frozen=True)
class NetworkStats:
    total_value: int
    annual_maintenance: int
    estimated_revenue: int
    net_income: int
    station_count: int
    track_count: int
    crossover_count: int
    total_track_length: float

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


def round_half_up(value: float) -> int:
    """Round halves towards +inf, matching the browser client's `Math.round`."""
    return int(math.floor(value + 0.5))


def refund_amount(cost: int, ratio: float) -> int:
    return int(math.floor(cost * ratio))


def _check_terrain_modifier(terrain_modifier: float) -> float:
    value = float(terrain_modifier)
    if not math.isfinite(value) or value < 1.0:
        raise ValidationError(f"terrainModifier must be a finite number >= 1.0, got {terrain_modifier}")
    return value


def validate_platform_count(platforms: int, station_type: str) -> None:
    if station_type not in STATION_TYPES:
        raise ValidationError(f"Unknown station type: {station_type}")
    if isinstance(platforms, bool) or not isinstance(platforms, int):
        raise ValidationError("Platform count must be an integer")
    if platforms < MIN_PLATFORMS or platforms > MAX_PLATFORMS:
        raise ValidationError(f"Platform count must be between {MIN_PLATFORMS} and {MAX_PLATFORMS}")

    low, high = PLATFORM_RANGES[station_type]
    if platforms < low or platforms > high:
        raise ValidationError(f"{station_type} stations must have {low}-{high} platforms")


def station_cost(
    platforms: int,
    station_type: str,
    facilities: Optional[Facilities] = None,
    terrain_modifier: float = 1.0,
) -> StationCostBreakdown:
    validate_platform_count(platforms, station_type)
    terrain_modifier = _check_terrain_modifier(terrain_modifier)
    facilities = facilities or Facilities()

    base_cost = STATION_BASE_COSTS[station_type]
    platform_cost = base_cost * (1 + platforms / 10)

    facilities_multiplier = 1.0
    if facilities.parking:
        facilities_multiplier += FACILITY_SURCHARGES["parking"]
    if facilities.shops:
        facilities_multiplier += FACILITY_SURCHARGES["shops"]
    if facilities.bike_rental:
        facilities_multiplier += FACILITY_SURCHARGES["bike_rental"]

    # Breakdown fields are rounded independently and need not sum to the total.
    return StationCostBreakdown(
        base_cost=base_cost,
        platform_cost=round_half_up(platform_cost),
        facilities_cost=round_half_up(platform_cost * (facilities_multiplier - 1)),
        terrain_cost=round_half_up(platform_cost * (terrain_modifier - 1)),
        total_cost=round_half_up(platform_cost * facilities_multiplier * terrain_modifier),
    )


def speed_limit(track_type: str) -> int:
    if track_type not in TRACK_TYPES:
        raise ValidationError(f"Unknown track type: {track_type}")
    return TRACK_SPEED_LIMITS[track_type]


def track_cost(
    track_type: str,
    waypoints: Sequence[Coordinates],
    is_double_track: bool,
    terrain_modifier: float = 1.0,
) -> TrackCostBreakdown:
    limit = speed_limit(track_type)
    terrain_modifier = _check_terrain_modifier(terrain_modifier)

    length_km = route_length_km(waypoints)
    if length_km < MIN_TRACK_LENGTH_KM:
        raise ValidationError(f"Track too short. Minimum length: {MIN_TRACK_LENGTH_KM} km")

    cost_per_km = TRACK_COSTS_PER_KM[track_type]
    base_cost = cost_per_km * length_km
    double_multiplier = DOUBLE_TRACK_MULTIPLIER if is_double_track else 1.0

    return TrackCostBreakdown(
        length_km=round(length_km, 2),
        cost_per_km=cost_per_km,
        base_cost=round_half_up(base_cost),
        double_track_cost=round_half_up(base_cost * (double_multiplier - 1)),
        terrain_cost=round_half_up(base_cost * (terrain_modifier - 1)),
        total_cost=round_half_up(base_cost * double_multiplier * terrain_modifier),
        # Maintenance ignores terrain: only length and the double-track factor count.
        maintenance_cost_per_year=round_half_up(
            MAINTENANCE_COSTS_PER_KM[track_type] * length_km * double_multiplier
        ),
        speed_limit=limit,
    )


def crossover_cost(crossover_type: str, terrain_modifier: float = 1.0) -> int:
    if crossover_type not in CROSSOVER_TYPES:
        raise ValidationError(f"Unknown crossover type: {crossover_type}")
    return round_half_up(CROSSOVER_COSTS[crossover_type] * _check_terrain_modifier(terrain_modifier))


def estimate_terrain_modifier(waypoints: Sequence[Coordinates]) -> float:
    """
    Guess a construction difficulty multiplier from where a route lies.

    Uses the mean of the waypoints: inside the Alpine box is mountainous,
    within `URBAN_RADIUS_DEG` of a listed city centre is urban, anything else is flat.
    """

    if not waypoints:
        raise ValidationError("At least one waypoint is required")

    avg_lat = sum(p.lat for p in waypoints) / len(waypoints)
    avg_lon = sum(p.lon for p in waypoints) / len(waypoints)

    lat_min, lat_max, lon_min, lon_max = ALPINE_BOX
    if lat_min < avg_lat < lat_max and lon_min < avg_lon < lon_max:
        return MOUNTAIN_MODIFIER

    for _name, lat, lon in URBAN_CENTERS:
        if math.hypot(avg_lat - lat, avg_lon - lon) < URBAN_RADIUS_DEG:
            return URBAN_MODIFIER

    return FLAT_MODIFIER


def terrain_band(terrain_modifier: float) -> str:
    for upper, label in TERRAIN_BANDS:
        if terrain_modifier < upper:
            return label
    return "mountainous"


def network_value(
    stations: Iterable[_Costed],
    tracks: Iterable[_Costed],
    crossovers: Iterable[_Costed],
) -> int:
    return (
        sum(s.cost for s in stations)
        + sum(t.cost for t in tracks)
        + sum(c.cost for c in crossovers)
    )


def annual_maintenance(tracks: Iterable[_Maintained]) -> int:
    return sum(t.maintenance_cost for t in tracks)


def network_effect_bonus(station_count: int) -> float:
    if station_count <= 1:
        return 0.0
    return station_count**NETWORK_EFFECT_EXPONENT / NETWORK_EFFECT_DIVISOR


def estimate_annual_revenue(
    stations: Sequence[_RevenueStation],
    tracks: Sequence[_RevenueTrack],
) -> int:
    station_revenue = sum(
        STATION_REVENUE.get(s.station_type, 0) * (1 + s.platforms / 10) for s in stations
    )
    track_revenue = sum(TRACK_REVENUE_PER_KM.get(t.track_type, 0) * t.length_km for t in tracks)
    bonus = network_effect_bonus(len(stations))
    return round_half_up((station_revenue + track_revenue) * (1 + bonus))


def network_stats(
    stations: Sequence[_RevenueStation],
    tracks: Sequence[_RevenueTrack],
    crossovers: Sequence[_Costed] = (),
) -> NetworkStats:
    maintenance = annual_maintenance(tracks)  # type: ignore[arg-type]
    revenue = estimate_annual_revenue(stations, tracks)
    return NetworkStats(
        total_value=network_value(stations, tracks, crossovers),  # type: ignore[arg-type]
        annual_maintenance=maintenance,
        estimated_revenue=revenue,
        net_income=revenue - maintenance,
        station_count=len(stations),
        track_count=len(tracks),
        crossover_count=len(crossovers),
        total_track_length=round(sum(t.length_km for t in tracks), 2),
    )
