from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Optional, Sequence
import uuid

from trainbuilder.config.models import AppConfig
from trainbuilder.economy import cost as cost_model
from trainbuilder.errors import InsufficientBudgetError, NotFoundError, ValidationError
from trainbuilder.repository.network_store import NetworkStore
from trainbuilder.schemas.core import (
    Coordinates,
    Crossover,
    Facilities,
    Network,
    Station,
    Track,
)


logger = logging.getLogger(__name__)

DEFAULT_NETWORK_NAME = "My Railway Network"


@dataclass(frozen=True)
class Removal:
    budget: int
    refund: int
    removed_track_ids: tuple[str, ...] = ()


def _new_id() -> str:
    return str(uuid.uuid4())


def _require_budget(network: Network, amount: int) -> None:
    if network.budget < amount:
        raise InsufficientBudgetError(required=amount, available=network.budget)


# `NetworkService` owns every budget-changing operation on a stored network.
# Each mutation runs load -> validate -> mutate -> persist under the network's lock,
# and nothing is written unless every check has passed.
class NetworkService:
    def __init__(self, config: AppConfig, store: Optional[NetworkStore] = None) -> None:
        self._config = config
        self._store = store or NetworkStore(config.storage.networks_dir)

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def store(self) -> NetworkStore:
        return self._store

    def create_network(self, *, name: Optional[str] = None, region_id: Optional[str] = None) -> Network:
        economy = self._config.economy
        network = Network(
            id=_new_id(),
            name=name or DEFAULT_NETWORK_NAME,
            budget=economy.starting_budget,
            game_year=economy.start_year,
            game_month=economy.start_month,
            region_id=region_id,
        )
        self._store.put(network)
        logger.info("Created network %s (region=%s, budget=%s)", network.id, region_id, network.budget)
        return network

    def get_network(self, network_id: str) -> Network:
        return self._store.get(network_id)

    def network_stats(self, network_id: str) -> cost_model.NetworkStats:
        network = self._store.get(network_id)
        return cost_model.network_stats(network.stations, network.tracks, network.crossovers)

    def add_station(
        self,
        network_id: str,
        *,
        name: str,
        location: Coordinates,
        platforms: int,
        station_type: str,
        facilities: Optional[Facilities] = None,
        terrain_modifier: float = 1.0,
    ) -> tuple[Station, int]:
        if not name or not name.strip():
            raise ValidationError("Station name is required")
        facilities = facilities or Facilities()

        with self._store.lock(network_id):
            network = self._store.get(network_id)
            breakdown = cost_model.station_cost(platforms, station_type, facilities, terrain_modifier)
            _require_budget(network, breakdown.total_cost)

            station = Station(
                id=_new_id(),
                name=name,
                location=location,
                platforms=platforms,
                station_type=station_type,  # type: ignore[arg-type]
                cost=breakdown.total_cost,
                facilities=facilities,
            )
            network.budget -= station.cost
            network.stations.append(station)
            self._store.put(network)

        logger.info(
            "Network %s: built %s station %s for %s (budget %s)",
            network_id,
            station_type,
            station.id,
            station.cost,
            network.budget,
        )
        return station, network.budget

    def add_track(
        self,
        network_id: str,
        *,
        track_type: str,
        from_node_id: str,
        to_node_id: str,
        waypoints: Sequence[Coordinates],
        is_double_track: bool = False,
        terrain_modifier: float = 1.0,
    ) -> tuple[Track, int]:
        if len(waypoints) < 2:
            raise ValidationError("A track needs at least 2 waypoints")

        with self._store.lock(network_id):
            network = self._store.get(network_id)
            for node_id in (from_node_id, to_node_id):
                if network.find_station(node_id) is None:
                    raise ValidationError(f"Unknown station reference: {node_id}")

            breakdown = cost_model.track_cost(track_type, waypoints, is_double_track, terrain_modifier)
            _require_budget(network, breakdown.total_cost)

            track = Track(
                id=_new_id(),
                track_type=track_type,  # type: ignore[arg-type]
                from_node_id=from_node_id,
                to_node_id=to_node_id,
                waypoints=tuple(waypoints),
                length_km=breakdown.length_km,
                speed_limit=breakdown.speed_limit,
                is_double_track=bool(is_double_track),
                cost=breakdown.total_cost,
                maintenance_cost=breakdown.maintenance_cost_per_year,
            )
            network.budget -= track.cost
            network.tracks.append(track)
            self._store.put(network)

        logger.info(
            "Network %s: built %s track %s (%s km) for %s (budget %s)",
            network_id,
            track_type,
            track.id,
            track.length_km,
            track.cost,
            network.budget,
        )
        return track, network.budget

    def add_crossover(
        self,
        network_id: str,
        *,
        location: Coordinates,
        crossover_type: str,
        name: Optional[str] = None,
        terrain_modifier: float = 1.0,
    ) -> tuple[Crossover, int]:
        with self._store.lock(network_id):
            network = self._store.get(network_id)
            price = cost_model.crossover_cost(crossover_type, terrain_modifier)
            _require_budget(network, price)

            crossover = Crossover(
                id=_new_id(),
                name=name,
                location=location,
                crossover_type=crossover_type,  # type: ignore[arg-type]
                cost=price,
            )
            network.budget -= crossover.cost
            network.crossovers.append(crossover)
            self._store.put(network)

        logger.info(
            "Network %s: built %s crossover %s for %s (budget %s)",
            network_id,
            crossover_type,
            crossover.id,
            crossover.cost,
            network.budget,
        )
        return crossover, network.budget

    def remove_station(self, network_id: str, station_id: str) -> Removal:
        """
        Demolish a station and every track that ends at it.

        The station refunds 50% of its cost; each cascaded track refunds its own
        30%, exactly as if it had been removed on its own first.
        """

        with self._store.lock(network_id):
            network = self._store.get(network_id)
            station = network.find_station(station_id)
            if station is None:
                raise NotFoundError("Station not found")

            cascaded = [t for t in network.tracks if t.touches(station_id)]
            refund = cost_model.refund_amount(station.cost, cost_model.STATION_REFUND_RATIO)
            refund += sum(
                cost_model.refund_amount(t.cost, cost_model.TRACK_REFUND_RATIO) for t in cascaded
            )

            network.stations = [s for s in network.stations if s.id != station_id]
            network.tracks = [t for t in network.tracks if not t.touches(station_id)]
            network.budget += refund
            self._store.put(network)

        removed = tuple(t.id for t in cascaded)
        logger.info(
            "Network %s: demolished station %s (+%d tracks), refund %s (budget %s)",
            network_id,
            station_id,
            len(removed),
            refund,
            network.budget,
        )
        return Removal(budget=network.budget, refund=refund, removed_track_ids=removed)

    def remove_track(self, network_id: str, track_id: str) -> Removal:
        with self._store.lock(network_id):
            network = self._store.get(network_id)
            track = network.find_track(track_id)
            if track is None:
                raise NotFoundError("Track not found")

            refund = cost_model.refund_amount(track.cost, cost_model.TRACK_REFUND_RATIO)
            network.tracks = [t for t in network.tracks if t.id != track_id]
            network.budget += refund
            self._store.put(network)

        logger.info("Network %s: removed track %s, refund %s (budget %s)", network_id, track_id, refund, network.budget)
        return Removal(budget=network.budget, refund=refund)

    def remove_crossover(self, network_id: str, crossover_id: str) -> Removal:
        with self._store.lock(network_id):
            network = self._store.get(network_id)
            crossover = network.find_crossover(crossover_id)
            if crossover is None:
                raise NotFoundError("Crossover not found")

            refund = cost_model.refund_amount(crossover.cost, cost_model.CROSSOVER_REFUND_RATIO)
            network.crossovers = [c for c in network.crossovers if c.id != crossover_id]
            network.budget += refund
            self._store.put(network)

        logger.info(
            "Network %s: removed crossover %s, refund %s (budget %s)",
            network_id,
            crossover_id,
            refund,
            network.budget,
        )
        return Removal(budget=network.budget, refund=refund)
