from __future__ import annotations

import logging

from pointclimate.models.climate import Point
from pointclimate.services.resolver import TemporalResolver
from pointclimate.services.store import PointStore

logger = logging.getLogger(__name__)


async def resolve_and_apply(
    *, store: PointStore, resolver: TemporalResolver, point: Point
) -> Point | None:
    """Resolve one point and write the outcome back, if the point still exists."""
    try:
        record = await resolver.resolve(point.coordinate)
    except Exception:  # noqa: BLE001 - a broken resolution fails this point only
        logger.exception("event=resolution_error point_id=%s", point.id)
        record = None

    updated = store.complete_point(point.id, record)
    if updated is not None:
        logger.info(
            "event=point_completed point_id=%s origin=%s area_id=%s state=%s period=%s",
            updated.id,
            updated.origin.value,
            updated.area_id,
            updated.state.value,
            record.period if record is not None else None,
        )
    return updated
