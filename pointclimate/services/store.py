from __future__ import annotations

import logging
from dataclasses import replace

from pointclimate.models.climate import (
    Area,
    AreaState,
    AreaSummary,
    BoundingBox,
    ClimateRecord,
    Coordinate,
    Origin,
    Point,
    PointState,
)

logger = logging.getLogger(__name__)


class IdAllocator:
    """Monotonic id counter. Ids are never handed out twice, even after deletes."""

    def __init__(self, start: int = 0) -> None:
        self._last = int(start)

    @property
    def last(self) -> int:
        return self._last

    def allocate(self) -> int:
        self._last += 1
        return self._last

    def allocate_block(self, count: int) -> range:
        if count < 1:
            raise ValueError("Block size must be at least 1")
        first = self._last + 1
        self._last += count
        return range(first, self._last + 1)


class PointStore:
    """In-memory state for direct points, sampled points and areas.

    Both point tables draw ids from one allocator. Completions are applied
    only if their target still exists, so late results for deleted points or
    areas are dropped.
    """

    def __init__(self) -> None:
        self._point_ids = IdAllocator()
        self._area_ids = IdAllocator()
        self._direct: dict[int, Point] = {}
        self._sampled: dict[int, Point] = {}
        self._areas: dict[int, Area] = {}

    def create_direct_point(self, coordinate: Coordinate, *, glyph: str) -> Point:
        point = Point(
            id=self._point_ids.allocate(),
            coordinate=coordinate,
            glyph=glyph,
            origin=Origin.DIRECT,
        )
        self._direct[point.id] = point
        return point

    def create_area(self, corner_a: Coordinate, corner_b: Coordinate) -> Area:
        box = BoundingBox.from_corners(corner_a, corner_b)
        area = Area(id=self._area_ids.allocate(), box=box, corner_a=corner_a, corner_b=corner_b)
        self._areas[area.id] = area
        return area

    def register_sampled_batch(
        self, area_id: int, coordinates: list[Coordinate], glyphs: list[str]
    ) -> list[Point]:
        if area_id not in self._areas:
            raise KeyError(f"Unknown area: {area_id}")
        if len(coordinates) != len(glyphs):
            raise ValueError("Each sampled coordinate needs exactly one glyph")
        if not coordinates:
            return []
        ids = self._point_ids.allocate_block(len(coordinates))
        points = [
            Point(
                id=point_id,
                coordinate=coordinate,
                glyph=glyph,
                origin=Origin.SAMPLED,
                area_id=area_id,
            )
            for point_id, coordinate, glyph in zip(ids, coordinates, glyphs)
        ]
        for point in points:
            self._sampled[point.id] = point
        return points

    def complete_point(self, point_id: int, record: ClimateRecord | None) -> Point | None:
        """Attach a resolution outcome. Returns the updated point, or None when
        the point is gone or already terminal."""
        table = self._table_for(point_id)
        if table is None:
            logger.debug("event=stale_completion point_id=%s", point_id)
            return None
        current = table[point_id]
        if current.state.is_terminal:
            return None
        state = PointState.RESOLVED if record is not None else PointState.FAILED
        updated = replace(current, state=state, record=record)
        table[point_id] = updated
        return updated

    def complete_area(self, area_id: int, *, glyph: str) -> Area | None:
        current = self._areas.get(area_id)
        if current is None:
            logger.debug("event=stale_completion area_id=%s", area_id)
            return None
        if current.state is AreaState.RESOLVED:
            return None
        updated = replace(current, state=AreaState.RESOLVED, glyph=glyph)
        self._areas[area_id] = updated
        return updated

    def delete_point(self, point_id: int) -> bool:
        table = self._table_for(point_id)
        if table is None:
            return False
        del table[point_id]
        return True

    def delete_area(self, area_id: int) -> bool:
        if self._areas.pop(area_id, None) is None:
            return False
        for point_id in [p.id for p in self._sampled.values() if p.area_id == area_id]:
            del self._sampled[point_id]
        return True

    def get_point(self, point_id: int) -> Point | None:
        table = self._table_for(point_id)
        return table[point_id] if table is not None else None

    def get_area(self, area_id: int) -> Area | None:
        return self._areas.get(area_id)

    def direct_points(self) -> list[Point]:
        return sorted(self._direct.values(), key=lambda p: p.id)

    def sampled_points(self, *, area_id: int | None = None) -> list[Point]:
        rows = [
            p for p in self._sampled.values() if area_id is None or p.area_id == area_id
        ]
        rows.sort(key=lambda p: p.id)
        return rows

    def areas(self) -> list[Area]:
        return sorted(self._areas.values(), key=lambda a: a.id)

    def summarize_area(self, area_id: int) -> AreaSummary | None:
        if area_id not in self._areas:
            return None
        points = self.sampled_points(area_id=area_id)
        records = [p.record for p in points if p.record is not None]
        return AreaSummary(
            area_id=area_id,
            point_count=len(points),
            resolved_count=sum(1 for p in points if p.state is PointState.RESOLVED),
            failed_count=sum(1 for p in points if p.state is PointState.FAILED),
            pending_count=sum(1 for p in points if p.state is PointState.PENDING),
            avg_temperature=_mean([r.temperature for r in records]),
            avg_humidity=_mean([r.humidity for r in records]),
            avg_precipitation=_mean([r.precipitation for r in records]),
        )

    def _table_for(self, point_id: int) -> dict[int, Point] | None:
        if point_id in self._direct:
            return self._direct
        if point_id in self._sampled:
            return self._sampled
        return None


def _mean(values: list[float | None]) -> float | None:
    present = [v for v in values if v is not None]
    if not present:
        return None
    return sum(present) / len(present)
