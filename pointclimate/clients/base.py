from __future__ import annotations

from typing import Protocol

from pointclimate.models.climate import ArchiveResponse, Coordinate


class ArchiveGateway(Protocol):
    async def fetch_year_data(
        self, coordinate: Coordinate, fields: list[str], year: int
    ) -> ArchiveResponse | None: ...

    async def aclose(self) -> None: ...
