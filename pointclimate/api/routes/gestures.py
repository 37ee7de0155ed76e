from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from pointclimate.api.deps import get_map_session
from pointclimate.models.climate import Coordinate
from pointclimate.schemas.points import AreaOut, GestureCreate, GestureOut, PointOut
from pointclimate.services.session import MapSession

router = APIRouter(prefix="/gestures")


@router.post("", response_model=GestureOut, status_code=status.HTTP_201_CREATED)
async def complete_gesture(
    payload: GestureCreate,
    session: Annotated[MapSession, Depends(get_map_session)],
) -> GestureOut:
    try:
        result = session.on_gesture_completed(
            Coordinate.create(payload.start.lat, payload.start.lng),
            Coordinate.create(payload.end.lat, payload.end.lng),
        )
    except ValueError as e:
        raise HTTPException(
            status_code=422, detail=str(e)
        ) from e
    return GestureOut(
        kind=result.kind,
        point=PointOut.from_point(result.point) if result.point is not None else None,
        area=AreaOut.from_area(result.area) if result.area is not None else None,
    )
