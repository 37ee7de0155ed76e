from __future__ import annotations

from pydantic import BaseModel, Field

from pointclimate.models.climate import Area, AreaSummary, Point


class CoordinateIn(BaseModel):
    lat: float = Field(ge=-90.0, le=90.0)
    lng: float = Field(ge=-180.0, le=180.0)


class CoordinateOut(BaseModel):
    lat: float
    lng: float


class BoundingBoxOut(BaseModel):
    north: float
    south: float
    east: float
    west: float


class ClimateRecordOut(BaseModel):
    period: str = Field(pattern=r"^\d{6}$")

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


class PointOut(BaseModel):
    id: int = Field(ge=1)
    coordinate: CoordinateOut
    glyph: str
    origin: str
    area_id: int | None = None
    state: str
    record: ClimateRecordOut | None = None

    @classmethod
    def from_point(cls, point: Point) -> PointOut:
        return cls(
            id=point.id,
            coordinate=CoordinateOut(lat=point.coordinate.lat, lng=point.coordinate.lng),
            glyph=point.glyph,
            origin=point.origin.value,
            area_id=point.area_id,
            state=point.state.value,
            record=(
                ClimateRecordOut.model_validate(point.record.__dict__)
                if point.record is not None
                else None
            ),
        )


class AreaCreate(BaseModel):
    corner_a: CoordinateIn
    corner_b: CoordinateIn


class AreaOut(BaseModel):
    id: int = Field(ge=1)
    box: BoundingBoxOut
    centroid: CoordinateOut
    state: str
    glyph: str | None = None

    @classmethod
    def from_area(cls, area: Area) -> AreaOut:
        centroid = area.centroid
        return cls(
            id=area.id,
            box=BoundingBoxOut.model_validate(area.box.__dict__),
            centroid=CoordinateOut(lat=centroid.lat, lng=centroid.lng),
            state=area.state.value,
            glyph=area.glyph,
        )


class AreaSummaryOut(BaseModel):
    area_id: int = Field(ge=1)
    point_count: int = Field(ge=0)
    resolved_count: int = Field(ge=0)
    failed_count: int = Field(ge=0)
    pending_count: int = Field(ge=0)
    avg_temperature: float | None = None
    avg_humidity: float | None = None
    avg_precipitation: float | None = None

    @classmethod
    def from_summary(cls, summary: AreaSummary) -> AreaSummaryOut:
        return cls.model_validate(summary.__dict__)


class GestureCreate(BaseModel):
    start: CoordinateIn
    end: CoordinateIn


class GestureOut(BaseModel):
    kind: str
    point: PointOut | None = None
    area: AreaOut | None = None
