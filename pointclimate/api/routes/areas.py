from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status

from pointclimate.api.deps import get_map_session
from pointclimate.models.climate import Area, Coordinate
from pointclimate.schemas.points import AreaCreate, AreaOut, AreaSummaryOut, PointOut
from pointclimate.services.session import MapSession

router = APIRouter(prefix="/areas")

Session = Annotated[MapSession, Depends(get_map_session)]


def _require_area(session: MapSession, area_id: int) -> Area:
    area = session.get_area(area_id)
    if area is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Area not found")
    return area


@router.post("", response_model=AreaOut, status_code=status.HTTP_201_CREATED)
async def create_area(
    payload: AreaCreate,
    session: Session,
    wait: bool = False,
) -> AreaOut:
    try:
        area = session.on_area_requested(
            Coordinate.create(payload.corner_a.lat, payload.corner_a.lng),
            Coordinate.create(payload.corner_b.lat, payload.corner_b.lng),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=422, detail=str(e)
        ) from e
    if wait:
        area = await session.wait_for_area(area.id) or area
    return AreaOut.from_area(area)


@router.get("", response_model=list[AreaOut])
async def list_areas(session: Session) -> list[AreaOut]:
    return [AreaOut.from_area(a) for a in session.areas()]


@router.get("/{area_id}", response_model=AreaOut)
async def get_area(area_id: int, session: Session) -> AreaOut:
    return AreaOut.from_area(_require_area(session, area_id))


@router.get("/{area_id}/points", response_model=list[PointOut])
async def list_area_points(area_id: int, session: Session) -> list[PointOut]:
    _require_area(session, area_id)
    return [PointOut.from_point(p) for p in session.sampled_points(area_id=area_id)]


@router.get("/{area_id}/summary", response_model=AreaSummaryOut)
async def area_summary(area_id: int, session: Session) -> AreaSummaryOut:
    summary = session.summarize_area(area_id)
    if summary is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Area not found")
    return AreaSummaryOut.from_summary(summary)


@router.delete("/{area_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_area(area_id: int, session: Session) -> Response:
    if not session.on_area_delete_requested(area_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Area not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
