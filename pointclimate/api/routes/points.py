from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status

from pointclimate.api.deps import get_map_session
from pointclimate.models.climate import Coordinate
from pointclimate.schemas.points import CoordinateIn, PointOut
from pointclimate.services.session import MapSession

router = APIRouter()

Session = Annotated[MapSession, Depends(get_map_session)]


@router.post("/points", response_model=PointOut, status_code=status.HTTP_201_CREATED)
async def create_point(
    payload: CoordinateIn,
    session: Session,
    wait: bool = False,
) -> PointOut:
    try:
        coordinate = Coordinate.create(payload.lat, payload.lng)
    except ValueError as e:
        raise HTTPException(
            status_code=422, detail=str(e)
        ) from e
    point = session.on_point_requested(coordinate)
    if wait:
        point = await session.wait_for_point(point.id) or point
    return PointOut.from_point(point)


@router.get("/points", response_model=list[PointOut])
async def list_points(session: Session) -> list[PointOut]:
    return [PointOut.from_point(p) for p in session.direct_points()]


@router.get("/points/{point_id}", response_model=PointOut)
async def get_point(point_id: int, session: Session) -> PointOut:
    point = session.get_point(point_id)
    if point is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Point not found")
    return PointOut.from_point(point)


@router.delete("/points/{point_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_point(point_id: int, session: Session) -> Response:
    if not session.on_point_delete_requested(point_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Point not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/sampled-points", response_model=list[PointOut])
async def list_sampled_points(
    session: Session,
    area_id: Annotated[int | None, Query(ge=1)] = None,
) -> list[PointOut]:
    return [PointOut.from_point(p) for p in session.sampled_points(area_id=area_id)]
