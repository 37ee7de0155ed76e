from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from pointclimate.clients.base import ArchiveGateway
from pointclimate.models.climate import (
    REQUIRED_FIELDS,
    ClimateRecord,
    Coordinate,
    FieldTable,
    Period,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 24


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class TemporalResolver:
    """Find the most recent month with every required field populated.

    Starts at the month before the current one and steps back one month at a
    time, examining at most ``max_attempts`` months. Each archive year is
    fetched once and merged into the working table the first time the search
    enters it.
    """

    def __init__(
        self,
        *,
        gateway: ArchiveGateway,
        fields: list[str] | None = None,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._gateway = gateway
        self._fields = list(fields) if fields is not None else list(REQUIRED_FIELDS)
        self._max_attempts = max(int(max_attempts), 1)
        self._clock = clock

    @property
    def fields(self) -> list[str]:
        return list(self._fields)

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    def first_candidate(self) -> Period:
        return Period.preceding(self._clock())

    async def resolve(self, coordinate: Coordinate) -> ClimateRecord | None:
        period = self.first_candidate()
        response = await self._gateway.fetch_year_data(coordinate, self._fields, period.year)
        if response is None:
            return None

        table = FieldTable.from_response(response)
        fetched_years = {period.year}

        for attempt in range(self._max_attempts):
            if attempt:
                period = period.previous()
                if period.year not in fetched_years:
                    extra = await self._gateway.fetch_year_data(
                        coordinate, self._fields, period.year
                    )
                    if extra is None:
                        return None
                    table.merge(extra)
                    fetched_years.add(period.year)

            if table.is_complete(period.label, self._fields):
                logger.info(
                    "event=resolved lat=%s lng=%s period=%s steps=%s",
                    coordinate.lat,
                    coordinate.lng,
                    period.label,
                    attempt,
                )
                return ClimateRecord.project(table, period.label)

        logger.warning(
            "event=no_valid_period lat=%s lng=%s attempts=%s",
            coordinate.lat,
            coordinate.lng,
            self._max_attempts,
        )
        return None
