__all__ = [
    "crossover_cost",
    "distance_km",
    "estimate_annual_revenue",
    "estimate_terrain_modifier",
    "network_stats",
    "route_length_km",
    "station_cost",
    "track_cost",
]

from trainbuilder.economy.cost import (
    crossover_cost,
    estimate_annual_revenue,
    estimate_terrain_modifier,
    network_stats,
    station_cost,
    track_cost,
)
from trainbuilder.economy.geometry import distance_km, route_length_km
