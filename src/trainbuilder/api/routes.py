from __future__ import annotations

from typing import Optional

# FastAPI primitives:
# - `APIRouter` groups the network endpoints so the app factory can include them under one prefix.
# - `Depends` performs per-request dependency injection (the service lives on `app.state`).
# - `Request` gives access to `app.state`.
from fastapi import APIRouter, Depends, Request

from trainbuilder.api.schemas import (
    CrossoverCreatedOut,
    CrossoverIn,
    CrossoverOut,
    ErrorOut,
    NetworkInitIn,
    NetworkInitOut,
    NetworkOut,
    NetworkStatsOut,
    RemovalOut,
    StationCreatedOut,
    StationIn,
    StationOut,
    StationRemovalOut,
    TrackCreatedOut,
    TrackIn,
    TrackOut,
)
# Dataflow: HTTP request -> pydantic model -> NetworkService -> NetworkStore (JSON on disk)
# -> domain dataclass -> dict -> response model -> JSON.
from trainbuilder.api.service import NetworkService


router = APIRouter(prefix="/network", tags=["network"])

# Error shapes every mutating endpoint can produce; documented once for OpenAPI.
_MUTATION_ERRORS = {
    400: {"model": ErrorOut},
    403: {"model": ErrorOut},
    404: {"model": ErrorOut},
}


def get_network_service(request: Request) -> NetworkService:
    # Constructed once in `create_app`; a missing attribute means the factory was bypassed.
    return request.app.state.network_service  # type: ignore[attr-defined]


@router.post("/init", response_model=NetworkInitOut, status_code=201)
def init_network(
    payload: Optional[NetworkInitIn] = None,
    service: NetworkService = Depends(get_network_service),
) -> NetworkInitOut:
    payload = payload or NetworkInitIn()
    network = service.create_network(name=payload.name, region_id=payload.region_id)
    return NetworkInitOut(
        network=NetworkOut.model_validate(network.to_dict()),
        region_id=payload.region_id,
    )


@router.get("/{network_id}", response_model=NetworkOut, responses={404: {"model": ErrorOut}})
def get_network(network_id: str, service: NetworkService = Depends(get_network_service)) -> NetworkOut:
    return NetworkOut.model_validate(service.get_network(network_id).to_dict())


@router.get("/{network_id}/stats", response_model=NetworkStatsOut, responses={404: {"model": ErrorOut}})
def get_network_stats(
    network_id: str, service: NetworkService = Depends(get_network_service)
) -> NetworkStatsOut:
    return NetworkStatsOut.model_validate(service.network_stats(network_id).to_dict())


@router.post(
    "/{network_id}/stations",
    response_model=StationCreatedOut,
    status_code=201,
    responses=_MUTATION_ERRORS,
)
def add_station(
    network_id: str,
    payload: StationIn,
    service: NetworkService = Depends(get_network_service),
) -> StationCreatedOut:
    # Any client-side cost estimate in the body is ignored; the service prices the station itself.
    station, budget = service.add_station(
        network_id,
        name=payload.name,
        location=payload.location.to_domain(),
        platforms=payload.platforms,
        station_type=payload.station_type,
        facilities=payload.facilities.to_domain() if payload.facilities else None,
        terrain_modifier=payload.terrain_modifier,
    )
    return StationCreatedOut(station=StationOut.model_validate(station.to_dict()), budget=budget)


@router.post(
    "/{network_id}/tracks",
    response_model=TrackCreatedOut,
    status_code=201,
    responses=_MUTATION_ERRORS,
)
def add_track(
    network_id: str,
    payload: TrackIn,
    service: NetworkService = Depends(get_network_service),
) -> TrackCreatedOut:
    track, budget = service.add_track(
        network_id,
        track_type=payload.track_type,
        from_node_id=payload.from_node_id,
        to_node_id=payload.to_node_id,
        waypoints=[p.to_domain() for p in payload.waypoints],
        is_double_track=payload.is_double_track,
        terrain_modifier=payload.terrain_modifier,
    )
    return TrackCreatedOut(track=TrackOut.model_validate(track.to_dict()), budget=budget)


@router.post(
    "/{network_id}/crossovers",
    response_model=CrossoverCreatedOut,
    status_code=201,
    responses=_MUTATION_ERRORS,
)
def add_crossover(
    network_id: str,
    payload: CrossoverIn,
    service: NetworkService = Depends(get_network_service),
) -> CrossoverCreatedOut:
    crossover, budget = service.add_crossover(
        network_id,
        name=payload.name,
        location=payload.location.to_domain(),
        crossover_type=payload.crossover_type,
        terrain_modifier=payload.terrain_modifier,
    )
    return CrossoverCreatedOut(crossover=CrossoverOut.model_validate(crossover.to_dict()), budget=budget)


@router.delete(
    "/{network_id}/stations/{station_id}",
    response_model=StationRemovalOut,
    responses={404: {"model": ErrorOut}},
)
def remove_station(
    network_id: str,
    station_id: str,
    service: NetworkService = Depends(get_network_service),
) -> StationRemovalOut:
    removal = service.remove_station(network_id, station_id)
    return StationRemovalOut(
        budget=removal.budget,
        refund=removal.refund,
        removed_track_ids=list(removal.removed_track_ids),
    )


@router.delete(
    "/{network_id}/tracks/{track_id}",
    response_model=RemovalOut,
    responses={404: {"model": ErrorOut}},
)
def remove_track(
    network_id: str,
    track_id: str,
    service: NetworkService = Depends(get_network_service),
) -> RemovalOut:
    removal = service.remove_track(network_id, track_id)
    return RemovalOut(budget=removal.budget, refund=removal.refund)


@router.delete(
    "/{network_id}/crossovers/{crossover_id}",
    response_model=RemovalOut,
    responses={404: {"model": ErrorOut}},
)
def remove_crossover(
    network_id: str,
    crossover_id: str,
    service: NetworkService = Depends(get_network_service),
) -> RemovalOut:
    removal = service.remove_crossover(network_id, crossover_id)
    return RemovalOut(budget=removal.budget, refund=removal.refund)
