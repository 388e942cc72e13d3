from __future__ import annotations

from dataclasses import asdict
import logging

from fastapi import APIRouter

from trainbuilder.api.schemas import (
    BearingOut,
    CrossoverCostIn,
    CrossoverCostOut,
    DistanceIn,
    DistanceOut,
    ErrorOut,
    NetworkStatsIn,
    NetworkStatsOut,
    RouteIn,
    RouteLengthOut,
    StationCostIn,
    StationCostOut,
    TerrainIn,
    TerrainOut,
    TrackCostIn,
    TrackCostOut,
)
from trainbuilder.economy import cost as cost_model
from trainbuilder.economy import geometry


logger = logging.getLogger(__name__)

KM_TO_MILES = 0.621371

# Stateless previews: nothing here reads or writes a stored network.
router = APIRouter(prefix="/compute", tags=["compute"], responses={400: {"model": ErrorOut}})


@router.post("/distance", response_model=DistanceOut)
def compute_distance(payload: DistanceIn) -> DistanceOut:
    km = geometry.distance_km(payload.from_.to_domain(), payload.to.to_domain())
    return DistanceOut(distance_km=round(km, 2), distance_miles=round(km * KM_TO_MILES, 2))


@router.post("/route-length", response_model=RouteLengthOut)
def compute_route_length(payload: RouteIn) -> RouteLengthOut:
    points = [p.to_domain() for p in payload.waypoints]
    return RouteLengthOut(length_km=round(geometry.route_length_km(points), 2), waypoints=len(points))


@router.post("/bearing", response_model=BearingOut)
def compute_bearing(payload: DistanceIn) -> BearingOut:
    bearing = geometry.bearing_deg(payload.from_.to_domain(), payload.to.to_domain())
    return BearingOut(bearing=round(bearing, 2))


@router.post("/station-cost", response_model=StationCostOut)
def compute_station_cost(payload: StationCostIn) -> StationCostOut:
    breakdown = cost_model.station_cost(
        payload.platforms,
        payload.station_type,
        payload.facilities.to_domain() if payload.facilities else None,
        payload.terrain_modifier,
    )
    return StationCostOut(**asdict(breakdown))


@router.post("/track-cost", response_model=TrackCostOut)
def compute_track_cost(payload: TrackCostIn) -> TrackCostOut:
    breakdown = cost_model.track_cost(
        payload.track_type,
        [p.to_domain() for p in payload.waypoints],
        payload.is_double_track,
        payload.terrain_modifier,
    )
    return TrackCostOut(**asdict(breakdown))


@router.post("/crossover-cost", response_model=CrossoverCostOut)
def compute_crossover_cost(payload: CrossoverCostIn) -> CrossoverCostOut:
    price = cost_model.crossover_cost(payload.type, payload.terrain_modifier)
    return CrossoverCostOut(type=payload.type, cost=price, terrain_modifier=payload.terrain_modifier)


@router.post("/terrain-modifier", response_model=TerrainOut)
def compute_terrain_modifier(payload: TerrainIn) -> TerrainOut:
    modifier = cost_model.estimate_terrain_modifier([p.to_domain() for p in payload.waypoints])
    return TerrainOut(terrain_modifier=modifier, terrain=cost_model.terrain_band(modifier))


@router.post("/network-stats", response_model=NetworkStatsOut)
def compute_network_stats(payload: NetworkStatsIn) -> NetworkStatsOut:
    stats = cost_model.network_stats(payload.stations, payload.tracks, payload.crossovers)
    logger.debug(
        "network-stats preview: %d stations, %d tracks, value %s",
        stats.station_count,
        stats.track_count,
        stats.total_value,
    )
    return NetworkStatsOut.model_validate(stats.to_dict())
