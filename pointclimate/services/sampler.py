from __future__ import annotations

import asyncio
import logging
import random

from pointclimate.models.climate import Area, BoundingBox, Coordinate, Point
from pointclimate.models.glyphs import pick_glyph
from pointclimate.services.completion import resolve_and_apply
from pointclimate.services.resolver import TemporalResolver
from pointclimate.services.store import PointStore

logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 10


class AreaSampler:
    """Scatter a fixed batch of points over an area and resolve them together.

    Coordinates are uniform in latitude and longitude independently, not
    uniform over the sphere's surface.
    """

    def __init__(
        self,
        *,
        store: PointStore,
        resolver: TemporalResolver,
        batch_size: int = DEFAULT_BATCH_SIZE,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._batch_size = max(int(batch_size), 1)
        self._rng = rng or random.Random()

    @property
    def batch_size(self) -> int:
        return self._batch_size

    def draw_coordinates(self, box: BoundingBox) -> list[Coordinate]:
        return [
            Coordinate.create(
                self._rng.uniform(box.south, box.north),
                self._rng.uniform(box.west, box.east),
            )
            for _ in range(self._batch_size)
        ]

    def register_batch(self, area: Area) -> list[Point]:
        coordinates = self.draw_coordinates(area.box)
        glyphs = [pick_glyph(self._rng) for _ in coordinates]
        return self._store.register_sampled_batch(area.id, coordinates, glyphs)

    async def resolve_batch(self, area_id: int, points: list[Point]) -> Area | None:
        await asyncio.gather(
            *(
                resolve_and_apply(store=self._store, resolver=self._resolver, point=p)
                for p in points
            )
        )
        area = self._store.complete_area(area_id, glyph=pick_glyph(self._rng))
        if area is not None:
            summary = self._store.summarize_area(area_id)
            logger.info(
                "event=area_completed area_id=%s points=%s resolved=%s failed=%s",
                area_id,
                summary.point_count if summary else 0,
                summary.resolved_count if summary else 0,
                summary.failed_count if summary else 0,
            )
        return area

    async def sample_area(self, area: Area) -> list[Point]:
        points = self.register_batch(area)
        await self.resolve_batch(area.id, points)
        return points
