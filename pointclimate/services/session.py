from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Coroutine
from dataclasses import dataclass
from typing import Any

from pointclimate.models.climate import Area, AreaSummary, Coordinate, Point
from pointclimate.models.glyphs import pick_glyph
from pointclimate.services.completion import resolve_and_apply
from pointclimate.services.resolver import TemporalResolver
from pointclimate.services.sampler import AreaSampler
from pointclimate.services.store import PointStore

logger = logging.getLogger(__name__)

DEFAULT_CLICK_TOLERANCE = 0.0001


@dataclass(frozen=True)
class GestureResult:
    point: Point | None = None
    area: Area | None = None

    @property
    def kind(self) -> str:
        return "point" if self.point is not None else "area"


class MapSession:
    """Entry points for the map collaborator.

    Every mutation happens on the event loop that calls these methods;
    resolutions run as background tasks owned by the session.
    """

    def __init__(
        self,
        *,
        store: PointStore,
        resolver: TemporalResolver,
        sampler: AreaSampler,
        click_tolerance: float = DEFAULT_CLICK_TOLERANCE,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._resolver = resolver
        self._sampler = sampler
        self._click_tolerance = click_tolerance
        self._rng = rng or random.Random()
        self._tasks: set[asyncio.Task[Any]] = set()
        self._area_tasks: dict[int, asyncio.Task[Any]] = {}
        self._point_tasks: dict[int, asyncio.Task[Any]] = {}

    @property
    def store(self) -> PointStore:
        return self._store

    def on_point_requested(self, coordinate: Coordinate) -> Point:
        point = self._store.create_direct_point(coordinate, glyph=pick_glyph(self._rng))
        logger.info(
            "event=point_requested point_id=%s lat=%s lng=%s",
            point.id,
            coordinate.lat,
            coordinate.lng,
        )
        self._point_tasks[point.id] = self._spawn(
            resolve_and_apply(store=self._store, resolver=self._resolver, point=point),
            name=f"resolve-point-{point.id}",
        )
        return point

    def on_area_requested(self, corner_a: Coordinate, corner_b: Coordinate) -> Area:
        area = self._store.create_area(corner_a, corner_b)
        points = self._sampler.register_batch(area)
        logger.info(
            "event=area_requested area_id=%s north=%s south=%s east=%s west=%s points=%s",
            area.id,
            area.box.north,
            area.box.south,
            area.box.east,
            area.box.west,
            len(points),
        )
        self._area_tasks[area.id] = self._spawn(
            self._sampler.resolve_batch(area.id, points),
            name=f"sample-area-{area.id}",
        )
        return area

    def on_gesture_completed(self, start: Coordinate, end: Coordinate) -> GestureResult:
        if self.is_click(start, end):
            return GestureResult(point=self.on_point_requested(start))
        return GestureResult(area=self.on_area_requested(start, end))

    def is_click(self, start: Coordinate, end: Coordinate) -> bool:
        return (
            abs(start.lat - end.lat) < self._click_tolerance
            and abs(start.lng - end.lng) < self._click_tolerance
        )

    def on_point_delete_requested(self, point_id: int) -> bool:
        deleted = self._store.delete_point(point_id)
        if deleted:
            logger.info("event=point_deleted point_id=%s", point_id)
        return deleted

    def on_area_delete_requested(self, area_id: int) -> bool:
        deleted = self._store.delete_area(area_id)
        if deleted:
            logger.info("event=area_deleted area_id=%s", area_id)
        return deleted

    async def wait_for_point(self, point_id: int) -> Point | None:
        task = self._point_tasks.get(point_id)
        if task is not None:
            await asyncio.shield(task)
        return self._store.get_point(point_id)

    async def wait_for_area(self, area_id: int) -> Area | None:
        task = self._area_tasks.get(area_id)
        if task is not None:
            await asyncio.shield(task)
        return self._store.get_area(area_id)

    def direct_points(self) -> list[Point]:
        return self._store.direct_points()

    def sampled_points(self, *, area_id: int | None = None) -> list[Point]:
        return self._store.sampled_points(area_id=area_id)

    def areas(self) -> list[Area]:
        return self._store.areas()

    def get_point(self, point_id: int) -> Point | None:
        return self._store.get_point(point_id)

    def get_area(self, area_id: int) -> Area | None:
        return self._store.get_area(area_id)

    def summarize_area(self, area_id: int) -> AreaSummary | None:
        return self._store.summarize_area(area_id)

    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _spawn(self, coro: Coroutine[Any, Any, Any], *, name: str) -> asyncio.Task[Any]:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        for registry in (self._point_tasks, self._area_tasks):
            for key in [k for k, t in registry.items() if t is task]:
                del registry[key]
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "event=task_failed task=%s error=%r", task.get_name(), exc, exc_info=exc
            )
