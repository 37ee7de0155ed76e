from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

COORDINATE_DECIMALS = 6
DEFAULT_FILL_VALUE = -999.0

# Archive parameter -> ClimateRecord attribute, in request order.
REQUIRED_FIELDS: dict[str, str] = {
    "T2M": "temperature",
    "T2M_MAX": "temperature_max",
    "T2M_MIN": "temperature_min",
    "T2MWET": "wet_bulb",
    "T2MDEW": "dew_point",
    "RH2M": "humidity",
    "PRECTOTCORR": "precipitation",
    "WS2M": "windspeed_2m",
    "WS10M": "windspeed_10m",
    "WS50M": "windspeed_50m",
    "WD50M": "wind_direction_50m",
    "ALLSKY_SFC_SW_DWN": "solar_radiation",
    "ALLSKY_SFC_PAR_TOT": "par_total",
    "ALLSKY_SFC_UV_INDEX": "uv_index",
    "CLOUD_AMT": "cloud_amount",
    "PS": "surface_pressure",
    "QV2M": "absolute_humidity",
    "TS": "surface_temperature",
    "T2M_RANGE": "temperature_range",
    "WS2M_RANGE": "windspeed_range_2m",
}


class DegenerateAreaError(ValueError):
    """Raised when two corners do not span a box with positive extent."""


class Origin(str, Enum):
    DIRECT = "direct"
    SAMPLED = "sampled"


class PointState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not PointState.PENDING


class AreaState(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"


@dataclass(frozen=True)
class Coordinate:
    lat: float
    lng: float

    @classmethod
    def create(cls, lat: float, lng: float) -> Coordinate:
        lat = float(lat)
        lng = float(lng)
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude out of range: {lat}")
        if not -180.0 <= lng <= 180.0:
            raise ValueError(f"Longitude out of range: {lng}")
        return cls(
            lat=round(lat, COORDINATE_DECIMALS),
            lng=round(lng, COORDINATE_DECIMALS),
        )


@dataclass(frozen=True)
class BoundingBox:
    north: float
    south: float
    east: float
    west: float

    @classmethod
    def from_corners(cls, a: Coordinate, b: Coordinate) -> BoundingBox:
        box = cls(
            north=max(a.lat, b.lat),
            south=min(a.lat, b.lat),
            east=max(a.lng, b.lng),
            west=min(a.lng, b.lng),
        )
        if box.north == box.south or box.east == box.west:
            raise DegenerateAreaError("Area corners must differ in both latitude and longitude")
        return box

    @property
    def centroid(self) -> Coordinate:
        return Coordinate(
            lat=(self.north + self.south) / 2,
            lng=(self.east + self.west) / 2,
        )

    def contains(self, coordinate: Coordinate) -> bool:
        return (
            self.south <= coordinate.lat <= self.north
            and self.west <= coordinate.lng <= self.east
        )


@dataclass(frozen=True, order=True)
class Period:
    year: int
    month: int

    @property
    def label(self) -> str:
        return f"{self.year:04d}{self.month:02d}"

    def previous(self) -> Period:
        if self.month == 1:
            return Period(self.year - 1, 12)
        return Period(self.year, self.month - 1)

    @classmethod
    def preceding(cls, now: datetime) -> Period:
        return cls(now.year, now.month).previous()

    @classmethod
    def from_label(cls, label: str) -> Period:
        if len(label) != 6 or not label.isdigit():
            raise ValueError(f"Invalid period label: {label!r}")
        month = int(label[4:])
        if not 1 <= month <= 12:
            raise ValueError(f"Invalid period label: {label!r}")
        return cls(int(label[:4]), month)


@dataclass(frozen=True)
class ArchiveResponse:
    parameters: dict[str, dict[str, float]]
    fill_value: float = DEFAULT_FILL_VALUE


@dataclass
class FieldTable:
    """Sparse per-field mapping of period label to value, built from one or
    more archive responses.

    Values equal to the fill value of any merged response count as missing.
    """

    values: dict[str, dict[str, float]] = field(default_factory=dict)
    fill_values: set[float] = field(default_factory=set)

    @classmethod
    def from_response(cls, response: ArchiveResponse) -> FieldTable:
        table = cls()
        table.merge(response)
        return table

    def merge(self, response: ArchiveResponse) -> None:
        """First writer wins: existing (field, period) values are kept."""
        self.fill_values.add(response.fill_value)
        for name, series in response.parameters.items():
            current = self.values.setdefault(name, {})
            for label, value in series.items():
                current.setdefault(label, value)

    def value(self, name: str, label: str) -> float | None:
        value = self.values.get(name, {}).get(label)
        if value is None or value in self.fill_values:
            return None
        return value

    def is_complete(self, label: str, fields: list[str]) -> bool:
        return all(self.value(name, label) is not None for name in fields)


@dataclass(frozen=True)
class ClimateRecord:
    period: str

    temperature: float | None = None
    temperature_max: float | None = None
    temperature_min: float | None = None
    wet_bulb: float | None = None
    dew_point: float | None = None
    surface_temperature: float | None = None
    temperature_range: float | None = None
    humidity: float | None = None
    precipitation: float | None = None
    absolute_humidity: float | None = None
    windspeed_2m: float | None = None
    windspeed_10m: float | None = None
    windspeed_50m: float | None = None
    wind_direction_50m: float | None = None
    windspeed_range_2m: float | None = None
    solar_radiation: float | None = None
    par_total: float | None = None
    uv_index: float | None = None
    cloud_amount: float | None = None
    surface_pressure: float | None = None

    @classmethod
    def project(cls, table: FieldTable, label: str) -> ClimateRecord:
        return cls(
            period=label,
            **{attr: table.value(name, label) for name, attr in REQUIRED_FIELDS.items()},
        )


@dataclass(frozen=True)
class Point:
    id: int
    coordinate: Coordinate
    glyph: str
    origin: Origin
    area_id: int | None = None
    state: PointState = PointState.PENDING
    record: ClimateRecord | None = None


@dataclass(frozen=True)
class Area:
    id: int
    box: BoundingBox
    corner_a: Coordinate
    corner_b: Coordinate
    state: AreaState = AreaState.PENDING
    glyph: str | None = None

    @property
    def centroid(self) -> Coordinate:
        return self.box.centroid


@dataclass(frozen=True)
class AreaSummary:
    area_id: int
    point_count: int
    resolved_count: int
    failed_count: int
    pending_count: int
    avg_temperature: float | None
    avg_humidity: float | None
    avg_precipitation: float | None
