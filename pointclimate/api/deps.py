from __future__ import annotations

from fastapi import Request

from pointclimate.core.config import Settings
from pointclimate.services.session import MapSession


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_map_session(request: Request) -> MapSession:
    return request.app.state.map_session
