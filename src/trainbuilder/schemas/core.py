from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Any, Literal, Mapping, Optional

from trainbuilder.errors import ValidationError


StationType = Literal["local", "regional", "intercity", "hub"]
TrackType = Literal["hst", "ic", "non_electrified"]
CrossoverType = Literal["simple", "junction", "flying_junction"]

STATION_TYPES: tuple[str, ...] = ("local", "regional", "intercity", "hub")
TRACK_TYPES: tuple[str, ...] = ("hst", "ic", "non_electrified")
CROSSOVER_TYPES: tuple[str, ...] = ("simple", "junction", "flying_junction")

# Bump when the persisted network layout changes shape.
SCHEMA_VERSION = 1

# Valid coordinate ranges, shared by the persisted-document parser and the request schemas.
MIN_LAT, MAX_LAT = -90.0, 90.0
MIN_LON, MAX_LON = -180.0, 180.0


def _as_float(value: Any, *, field_name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{field_name} must be a number")
    out = float(value)
    if not math.isfinite(out):
        raise ValidationError(f"{field_name} must be finite")
    return out


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lon: float

    @staticmethod
    def from_dict(raw: Any) -> "Coordinates":
        if not isinstance(raw, Mapping):
            raise ValidationError("Coordinates must be an object with lat and lon")
        if "lat" not in raw or "lon" not in raw:
            raise ValidationError("Coordinates require both lat and lon")
        lat = _as_float(raw["lat"], field_name="lat")
        lon = _as_float(raw["lon"], field_name="lon")
        if not MIN_LAT <= lat <= MAX_LAT:
            raise ValidationError(f"lat out of range [{MIN_LAT:g}, {MAX_LAT:g}]: {lat}")
        if not MIN_LON <= lon <= MAX_LON:
            raise ValidationError(f"lon out of range [{MIN_LON:g}, {MAX_LON:g}]: {lon}")
        return Coordinates(lat=lat, lon=lon)

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class Facilities:
    parking: bool = False
    shops: bool = False
    bike_rental: bool = False

    @staticmethod
    def from_dict(raw: Optional[Mapping[str, Any]]) -> "Facilities":
        raw = raw or {}
        return Facilities(
            parking=bool(raw.get("parking", False)),
            shops=bool(raw.get("shops", False)),
            bike_rental=bool(raw.get("bikeRental", False)),
        )

    def to_dict(self) -> dict[str, bool]:
        return {"parking": self.parking, "shops": self.shops, "bikeRental": self.bike_rental}


@dataclass(frozen=True)
class Station:
    id: str
    name: str
    location: Coordinates
    platforms: int
    station_type: StationType
    cost: int
    facilities: Facilities = Facilities()

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Station":
        return Station(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            location=Coordinates.from_dict(raw["location"]),
            platforms=int(raw["platforms"]),
            station_type=raw["stationType"],
            cost=int(raw["cost"]),
            facilities=Facilities.from_dict(raw.get("facilities")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location.to_dict(),
            "platforms": self.platforms,
            "stationType": self.station_type,
            "cost": self.cost,
            "facilities": self.facilities.to_dict(),
        }


@dataclass(frozen=True)
class Track:
    id: str
    track_type: TrackType
    from_node_id: str
    to_node_id: str
    waypoints: tuple[Coordinates, ...]
    length_km: float
    speed_limit: int
    is_double_track: bool
    cost: int
    maintenance_cost: int

    def touches(self, station_id: str) -> bool:
        return self.from_node_id == station_id or self.to_node_id == station_id

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Track":
        return Track(
            id=str(raw["id"]),
            track_type=raw["trackType"],
            from_node_id=str(raw["fromNodeId"]),
            to_node_id=str(raw["toNodeId"]),
            waypoints=tuple(Coordinates.from_dict(p) for p in raw.get("waypoints", [])),
            length_km=float(raw["lengthKm"]),
            speed_limit=int(raw["speedLimit"]),
            is_double_track=bool(raw.get("isDoubleTrack", False)),
            cost=int(raw["cost"]),
            maintenance_cost=int(raw.get("maintenanceCost", 0)),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "trackType": self.track_type,
            "fromNodeId": self.from_node_id,
            "toNodeId": self.to_node_id,
            "waypoints": [p.to_dict() for p in self.waypoints],
            "lengthKm": self.length_km,
            "speedLimit": self.speed_limit,
            "isDoubleTrack": self.is_double_track,
            "cost": self.cost,
            "maintenanceCost": self.maintenance_cost,
        }


@dataclass(frozen=True)
class Crossover:
    id: str
    location: Coordinates
    crossover_type: CrossoverType
    cost: int
    name: Optional[str] = None

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Crossover":
        return Crossover(
            id=str(raw["id"]),
            location=Coordinates.from_dict(raw["location"]),
            crossover_type=raw["crossoverType"],
            cost=int(raw["cost"]),
            name=raw.get("name"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "location": self.location.to_dict(),
            "crossoverType": self.crossover_type,
            "cost": self.cost,
        }


@dataclass
class Network:
    """
    One game session: budget, calendar and the three built collections.

    This is the unit of persistence; it is always loaded and saved whole.
    """

    id: str
    name: str
    budget: int
    income: int = 0
    expenses: int = 0
    game_year: int = 2024
    game_month: int = 1
    region_id: Optional[str] = None
    stations: list[Station] = field(default_factory=list)
    tracks: list[Track] = field(default_factory=list)
    crossovers: list[Crossover] = field(default_factory=list)
    schema_version: int = SCHEMA_VERSION

    def find_station(self, station_id: str) -> Optional[Station]:
        return next((s for s in self.stations if s.id == station_id), None)

    def find_track(self, track_id: str) -> Optional[Track]:
        return next((t for t in self.tracks if t.id == track_id), None)

    def find_crossover(self, crossover_id: str) -> Optional[Crossover]:
        return next((c for c in self.crossovers if c.id == crossover_id), None)

    @staticmethod
    def from_dict(raw: Mapping[str, Any]) -> "Network":
        version = int(raw.get("schemaVersion", 1))
        if version > SCHEMA_VERSION:
            raise ValueError(f"Unsupported network schemaVersion: {version}")
        return Network(
            id=str(raw["id"]),
            name=str(raw.get("name", "")),
            budget=int(raw["budget"]),
            income=int(raw.get("income", 0)),
            expenses=int(raw.get("expenses", 0)),
            game_year=int(raw.get("gameYear", 2024)),
            game_month=int(raw.get("gameMonth", 1)),
            region_id=raw.get("regionId"),
            stations=[Station.from_dict(s) for s in raw.get("stations", [])],
            tracks=[Track.from_dict(t) for t in raw.get("tracks", [])],
            crossovers=[Crossover.from_dict(c) for c in raw.get("crossovers", [])],
            schema_version=SCHEMA_VERSION,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "id": self.id,
            "name": self.name,
            "budget": self.budget,
            "income": self.income,
            "expenses": self.expenses,
            "gameYear": self.game_year,
            "gameMonth": self.game_month,
            "regionId": self.region_id,
            "stations": [s.to_dict() for s in self.stations],
            "tracks": [t.to_dict() for t in self.tracks],
            "crossovers": [c.to_dict() for c in self.crossovers],
        }
