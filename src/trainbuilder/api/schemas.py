from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from trainbuilder.schemas.core import MAX_LAT, MAX_LON, MIN_LAT, MIN_LON, Coordinates, Facilities


StationTypeIn = Literal["local", "regional", "intercity", "hub"]
TrackTypeIn = Literal["hst", "ic", "non_electrified"]
CrossoverTypeIn = Literal["simple", "junction", "flying_junction"]


class CamelModel(BaseModel):
    """Wire models speak camelCase JSON; Python code uses the snake_case attributes."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CoordinatesIn(CamelModel):
    lat: float = Field(..., ge=MIN_LAT, le=MAX_LAT, allow_inf_nan=False)
    lon: float = Field(..., ge=MIN_LON, le=MAX_LON, allow_inf_nan=False)

    def to_domain(self) -> Coordinates:
        return Coordinates(lat=self.lat, lon=self.lon)


class FacilitiesIn(CamelModel):
    parking: bool = False
    shops: bool = False
    bike_rental: bool = False

    def to_domain(self) -> Facilities:
        return Facilities(parking=self.parking, shops=self.shops, bike_rental=self.bike_rental)


TerrainModifier = Annotated[float, Field(ge=1.0, allow_inf_nan=False)]


# --- network mutation requests ---


class NetworkInitIn(CamelModel):
    name: Optional[str] = None
    region_id: Optional[str] = None


class StationIn(CamelModel):
    name: str = Field(..., min_length=1)
    location: CoordinatesIn
    platforms: int = Field(..., ge=1, le=30)
    station_type: StationTypeIn
    facilities: Optional[FacilitiesIn] = None
    terrain_modifier: TerrainModifier = 1.0


class TrackIn(CamelModel):
    track_type: TrackTypeIn
    from_node_id: str = Field(..., min_length=1)
    to_node_id: str = Field(..., min_length=1)
    waypoints: list[CoordinatesIn] = Field(..., min_length=2)
    is_double_track: bool = False
    terrain_modifier: TerrainModifier = 1.0


class CrossoverIn(CamelModel):
    name: Optional[str] = None
    location: CoordinatesIn
    crossover_type: CrossoverTypeIn
    terrain_modifier: TerrainModifier = 1.0


# --- network responses ---


class StationOut(CamelModel):
    id: str
    name: str
    location: CoordinatesIn
    platforms: int
    station_type: str
    cost: int
    facilities: FacilitiesIn


class TrackOut(CamelModel):
    id: str
    track_type: str
    from_node_id: str
    to_node_id: str
    waypoints: list[CoordinatesIn]
    length_km: float
    speed_limit: int
    is_double_track: bool
    cost: int
    maintenance_cost: int


class CrossoverOut(CamelModel):
    id: str
    name: Optional[str] = None
    location: CoordinatesIn
    crossover_type: str
    cost: int


class NetworkOut(CamelModel):
    schema_version: int
    id: str
    name: str
    budget: int
    income: int
    expenses: int
    game_year: int
    game_month: int
    region_id: Optional[str] = None
    stations: list[StationOut] = Field(default_factory=list)
    tracks: list[TrackOut] = Field(default_factory=list)
    crossovers: list[CrossoverOut] = Field(default_factory=list)


class NetworkInitOut(CamelModel):
    network: NetworkOut
    region_id: Optional[str] = None


class StationCreatedOut(CamelModel):
    station: StationOut
    budget: int


class TrackCreatedOut(CamelModel):
    track: TrackOut
    budget: int


class CrossoverCreatedOut(CamelModel):
    crossover: CrossoverOut
    budget: int


class RemovalOut(CamelModel):
    budget: int
    refund: int


class StationRemovalOut(RemovalOut):
    removed_track_ids: list[str] = Field(default_factory=list)


class ErrorOut(CamelModel):
    error: str
    message: Optional[str] = None
    required: Optional[int] = None
    available: Optional[int] = None


# --- computation requests ---


class DistanceIn(CamelModel):
    from_: CoordinatesIn = Field(..., alias="from")
    to: CoordinatesIn


class RouteIn(CamelModel):
    waypoints: list[CoordinatesIn] = Field(..., min_length=2)


class TerrainIn(CamelModel):
    waypoints: list[CoordinatesIn] = Field(..., min_length=1)


class StationCostIn(CamelModel):
    platforms: int = Field(..., ge=1, le=30)
    station_type: StationTypeIn
    facilities: Optional[FacilitiesIn] = None
    terrain_modifier: TerrainModifier = 1.0


class TrackCostIn(CamelModel):
    track_type: TrackTypeIn
    waypoints: list[CoordinatesIn]
    is_double_track: bool = False
    terrain_modifier: TerrainModifier = 1.0


class CrossoverCostIn(CamelModel):
    type: CrossoverTypeIn
    terrain_modifier: TerrainModifier = 1.0


class StatsStationIn(CamelModel):
    station_type: str
    platforms: int = Field(..., ge=0)
    cost: int = 0


class StatsTrackIn(CamelModel):
    track_type: str
    length_km: float = Field(..., ge=0, allow_inf_nan=False)
    cost: int = 0
    maintenance_cost: int = 0


class StatsCrossoverIn(CamelModel):
    cost: int = 0


class NetworkStatsIn(CamelModel):
    stations: list[StatsStationIn]
    tracks: list[StatsTrackIn]
    crossovers: list[StatsCrossoverIn] = Field(default_factory=list)


# --- computation responses ---


class DistanceOut(CamelModel):
    distance_km: float
    distance_miles: float


class RouteLengthOut(CamelModel):
    length_km: float
    waypoints: int


class BearingOut(CamelModel):
    bearing: float


class StationCostOut(CamelModel):
    base_cost: int
    platform_cost: int
    facilities_cost: int
    terrain_cost: int
    total_cost: int


class TrackCostOut(CamelModel):
    length_km: float
    cost_per_km: int
    base_cost: int
    double_track_cost: int
    terrain_cost: int
    total_cost: int
    maintenance_cost_per_year: int
    speed_limit: int


class CrossoverCostOut(CamelModel):
    type: str
    cost: int
    terrain_modifier: float


class TerrainOut(CamelModel):
    terrain_modifier: float
    terrain: str


class NetworkStatsOut(CamelModel):
    total_value: int
    annual_maintenance: int
    estimated_revenue: int
    net_income: int
    station_count: int
    track_count: int
    crossover_count: int
    total_track_length: float


class HealthOut(CamelModel):
    status: str
    timestamp: datetime
    uptime: float
    environment: str
